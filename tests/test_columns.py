import logging

import pandas as pd

from wle_ml.common.config import PipelineConfig
from wle_ml.preprocessing.columns import ColumnFilter, feature_columns


def default_filter():
    return ColumnFilter.from_config(PipelineConfig())


def test_filter_retains_sensor_columns(sensor_table):
    assert sensor_table.shape[1] == 160
    filtered, selection = default_filter().apply(sensor_table)

    assert filtered.shape[1] == 54
    assert "user_name" in selection.retained
    assert "classe" in selection.retained
    assert len(feature_columns(filtered, exclude=["user_name", "classe"])) == 52
    assert len(selection.retained) + len(selection.dropped) == 160


def test_filter_drops_bookkeeping_columns(sensor_table):
    selection = default_filter().select(list(sensor_table.columns))
    for col in ["X", "raw_timestamp_part_1", "cvtd_timestamp", "new_window", "num_window", "max_picth_belt"]:
        assert col in selection.dropped
    assert "magnet_dumbbell_y" in selection.retained
    assert "total_accel_belt" in selection.retained


def test_filter_is_idempotent(sensor_table):
    column_filter = default_filter()
    once = column_filter.select(list(sensor_table.columns))
    twice = column_filter.select(once.retained)
    assert twice.retained == once.retained
    assert twice.dropped == []


def test_filter_preserves_column_order(sensor_table):
    selection = default_filter().select(list(sensor_table.columns))
    positions = [list(sensor_table.columns).index(c) for c in selection.retained]
    assert positions == sorted(positions)


def test_unmatched_pattern_is_reported(caplog):
    column_filter = ColumnFilter(prefixes=["min", "nothing_like_this"], exact=["X"])
    with caplog.at_level(logging.WARNING):
        selection = column_filter.select(["X", "min_a", "a"])

    assert selection.retained == ["a"]
    assert selection.unmatched_patterns == ["^nothing_like_this"]
    assert selection.summary()["matches"] == {"^min": 1, "^nothing_like_this": 0, "=X": 1}
    assert "matched no columns" in caplog.text


def test_exact_match_does_not_drop_prefixed_columns():
    selection = ColumnFilter(exact=["X"]).select(["X", "X_axis", "accel_x"])
    assert selection.retained == ["X_axis", "accel_x"]


def test_feature_columns_keeps_every_retained_predictor():
    df = pd.DataFrame({"a": [1.0, 2.0], "b": ["x", "y"], "label": ["A", "B"]})
    assert feature_columns(df, exclude=["label"]) == ["a", "b"]
