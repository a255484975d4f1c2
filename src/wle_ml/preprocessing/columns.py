"""Column filtering by name pattern.

The filter drops summary statistics, timestamps, the row index and the window
indicator from the raw sensor table. Which columns were retained and dropped,
and which pattern caught each dropped column, is returned as an explicit
:class:`ColumnSelection` so it can be logged, reported and tested.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import pandas as pd

logger = logging.getLogger(__name__)


@dataclass
class ColumnSelection:
    retained: List[str]
    dropped: List[str]
    matches: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def unmatched_patterns(self) -> List[str]:
        return [p for p, cols in self.matches.items() if not cols]

    def summary(self) -> dict:
        return {
            "n_retained": len(self.retained),
            "n_dropped": len(self.dropped),
            "matches": {p: len(cols) for p, cols in self.matches.items()},
        }


class ColumnFilter:
    """Drops columns whose name starts with, equals, or ends with a pattern."""

    def __init__(self, prefixes: Sequence[str] = (), exact: Sequence[str] = (), suffixes: Sequence[str] = ()):
        self.prefixes = list(prefixes)
        self.exact = list(exact)
        self.suffixes = list(suffixes)

    @classmethod
    def from_config(cls, config) -> "ColumnFilter":
        return cls(config.drop_prefixes, config.drop_exact, config.drop_suffixes)

    def _rules(self):
        for p in self.prefixes:
            yield f"^{p}", lambda name, p=p: name.startswith(p)
        for e in self.exact:
            yield f"={e}", lambda name, e=e: name == e
        for s in self.suffixes:
            yield f"{s}$", lambda name, s=s: name.endswith(s)

    def select(self, columns: Sequence[str]) -> ColumnSelection:
        matches = {}
        dropped = set()
        for label, rule in self._rules():
            hit = [c for c in columns if rule(c)]
            matches[label] = hit
            dropped.update(hit)

        selection = ColumnSelection(
            retained=[c for c in columns if c not in dropped],
            dropped=[c for c in columns if c in dropped],
            matches=matches,
        )
        for pattern in selection.unmatched_patterns:
            logger.warning(f"Column pattern '{pattern}' matched no columns")
        logger.info(f"Column filter retained {len(selection.retained)} and dropped {len(selection.dropped)} columns")
        logger.debug(f"Retained columns: {selection.retained}")
        return selection

    def apply(self, df: pd.DataFrame) -> tuple[pd.DataFrame, ColumnSelection]:
        selection = self.select(list(df.columns))
        return df[selection.retained].copy(), selection


def feature_columns(df: pd.DataFrame, exclude: Sequence[str]) -> List[str]:
    """Every retained column not listed in ``exclude``, in table order.

    Dtypes are not inspected here; a non-numeric predictor is rejected by
    ``validate_sensor_schema`` rather than silently left out.
    """
    return [c for c in df.columns if c not in exclude]
