class WleMLError(Exception):
    """Base exception for the wle_ml pipeline."""


class ConfigError(WleMLError):
    """Raised when a configuration file or value is invalid."""


class SchemaValidationError(WleMLError, ValueError):
    """Raised when the sensor table does not have the expected shape."""


class PipelineStageError(WleMLError):
    """Raised by the pipeline orchestrator when a stage fails.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, stage: str, message: str):
        self.stage = stage
        super().__init__(f"Stage '{stage}' failed: {message}")
