import click
from pathlib import Path

from wle_ml import __version__
from wle_ml.common.config import PipelineConfig
from wle_ml.common.exceptions import WleMLError
from wle_ml.common.logging import setup_logger
from wle_ml.dataio.readers import read_sensor_table
from wle_ml.pipeline import AnalysisPipeline
from wle_ml.preprocessing.columns import ColumnFilter, feature_columns
from wle_ml.preprocessing.variance import near_zero_variance
from wle_ml.training.partition import stratified_partition


def _load_config(config, **overrides) -> PipelineConfig:
    try:
        data = PipelineConfig.from_yaml(config).to_dict() if config else PipelineConfig().to_dict()
        for key, value in overrides.items():
            if value is not None:
                data[key] = value
        cfg = PipelineConfig.from_dict(data)
    except WleMLError as e:
        raise click.ClickException(str(e))
    setup_logger("wle_ml", cfg.log_level)
    return cfg


@click.group()
@click.version_option(version=__version__)
def main():
    """Weight lifting exercise classification pipeline CLI"""
    pass


@main.command()
@click.option("--config", type=click.Path(exists=True), help="Config YAML path")
@click.option("--data-path", type=click.Path(), help="Input CSV (overrides config)")
@click.option("--output-dir", type=click.Path(), help="Report output dir (overrides config)")
@click.option("--n-jobs", type=int, help="Parallel workers for cross-validation")
@click.option("--no-plots", is_flag=True, help="Skip figure generation")
@click.option("--save-model", type=click.Path(), help="Save the fitted model to this path")
def run(config, data_path, output_dir, n_jobs, no_plots, save_model):
    """Run the full analysis and render the report"""
    cfg = _load_config(config, data_path=data_path, output_dir=output_dir, make_plots=False if no_plots else None)
    if n_jobs is not None:
        cfg.training.n_jobs = n_jobs
    try:
        result = AnalysisPipeline(cfg).run(save_model=save_model)
    except WleMLError as e:
        raise click.ClickException(str(e))
    click.echo(f"Test accuracy: {result.evaluation.accuracy:.4f}")
    click.echo(f"Report: {result.report_path}")


@main.command()
@click.option("--config", type=click.Path(exists=True), required=True, help="Config YAML path")
@click.option("--model-path", type=click.Path(exists=True), required=True, help="Saved model path")
@click.option("--output-dir", type=click.Path(), help="Report output dir (overrides config)")
def evaluate(config, model_path, output_dir):
    """Evaluate a saved model on the seeded test partition"""
    cfg = _load_config(config, output_dir=output_dir)
    try:
        result = AnalysisPipeline(cfg).run_evaluation(model_path)
    except WleMLError as e:
        raise click.ClickException(str(e))
    click.echo(result.evaluation.confusion.to_string())
    click.echo(result.evaluation.auc.to_string())
    click.echo(f"Test accuracy: {result.evaluation.accuracy:.4f}")


@main.command("filter-columns")
@click.option("--config", type=click.Path(exists=True), help="Config YAML path")
@click.option("--data-path", type=click.Path(exists=True), required=True, help="Input CSV")
def filter_columns(config, data_path):
    """Show which columns the filter retains and drops"""
    cfg = _load_config(config)
    df = read_sensor_table(Path(data_path))
    selection = ColumnFilter.from_config(cfg).select(list(df.columns))
    click.echo(f"Retained ({len(selection.retained)}): {', '.join(selection.retained)}")
    click.echo(f"Dropped ({len(selection.dropped)}): {', '.join(selection.dropped)}")
    for pattern in selection.unmatched_patterns:
        click.echo(f"Pattern matched nothing: {pattern}")


@main.command("screen-variance")
@click.option("--config", type=click.Path(exists=True), help="Config YAML path")
@click.option("--data-path", type=click.Path(exists=True), required=True, help="Input CSV")
def screen_variance(config, data_path):
    """Near-zero-variance diagnostic on the training partition"""
    cfg = _load_config(config)
    df, _ = ColumnFilter.from_config(cfg).apply(read_sensor_table(Path(data_path)))
    features = feature_columns(df, exclude=[cfg.outcome_column, cfg.subject_column])
    partition = stratified_partition(df[cfg.outcome_column], cfg.train_fraction, cfg.seed)
    click.echo(near_zero_variance(partition.train(df)[features]).to_string())


if __name__ == "__main__":
    main()
