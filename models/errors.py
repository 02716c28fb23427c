"""Error taxonomy for the cardiovascular risk calculator."""

from __future__ import annotations


class RiskCalculatorError(Exception):
    """Base class for every error raised by the risk pipeline."""

    kind = "error"


class DataLoadError(RiskCalculatorError):
    """A reference table could not be fetched or parsed at startup."""

    kind = "data_load"


class InputValidationError(RiskCalculatorError, ValueError):
    """A required form value is missing or not numeric."""

    kind = "input_validation"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class PercentileLookupError(RiskCalculatorError, LookupError):
    """A percentile rank or (disease, score) pair could not be resolved."""

    kind = "lookup"

    def __init__(self, message: str, score_name: str, disease: str, rank: str | None = None):
        super().__init__(message)
        self.score_name = score_name
        self.disease = disease
        self.rank = rank


class ConfigError(RiskCalculatorError):
    """Scaler parameters are missing for a continuous feature."""

    kind = "config"

    def __init__(self, message: str, feature: str):
        super().__init__(message)
        self.feature = feature


class DegenerateScaleError(RiskCalculatorError):
    """Scaler variance is not strictly positive for a continuous feature."""

    kind = "degenerate_scale"

    def __init__(self, message: str, feature: str):
        super().__init__(message)
        self.feature = feature
