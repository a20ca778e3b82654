"""Errors raised by the pipeline stages. All of them abort the run."""


class PipelineError(Exception):
    """Base error carrying the name of the stage that failed."""

    stage = "pipeline"

    def __init__(self, message: str, stage: str | None = None):
        if stage is not None:
            self.stage = stage
        super().__init__(f"[{self.stage}] {message}")


class DataIntegrityError(PipelineError):
    """Wrong row count, unparseable numeric text or nothing to impute from."""

    stage = "cleaning"


class ConfigurationError(PipelineError):
    """Invalid setting or hyperparameter outside its valid range."""

    stage = "configuration"


class FitError(PipelineError):
    """A model failed to fit or a fold is degenerate."""

    stage = "fitting"


class GridSearchError(FitError):
    """No candidate configuration completed cross-validation."""

    stage = "tuning"
