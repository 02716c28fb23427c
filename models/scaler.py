"""Z-score standardization of continuous biomarkers."""

from __future__ import annotations

import math
from typing import Mapping

from models.errors import ConfigError, DegenerateScaleError
from models.reference_data import ReferenceData
from utils.logging_config import get_logger

logger = get_logger()


class FeatureStandardizer:
    """Standardizes panel features with the training-set mean and variance."""

    def __init__(self, reference: ReferenceData):
        self.params = reference.scaler_params

    def standardize(self, feature: str, raw_value: float) -> float:
        """
        Return ``(raw_value - mean) / sqrt(variance)`` for ``feature``.

        Raises
        ------
        ConfigError
            No scaler parameters exist for ``feature``.
        DegenerateScaleError
            The variance is zero (or negative), checked before any arithmetic.
        """
        params = self.params.get(feature)
        if params is None:
            logger.error(
                "Could not find scaling parameters for variable: '%s'. "
                "Please check 'PANEL_scaler_params.csv'.",
                feature,
            )
            raise ConfigError(
                f"Error: Scaling parameters for '{feature}' are missing. "
                "The calculation cannot proceed.",
                feature=feature,
            )

        if params.variance <= 0:
            logger.error("Standard deviation is zero for variable: '%s'. Cannot scale.", feature)
            raise DegenerateScaleError(
                f"Error: Scaling parameter for '{feature}' is invalid "
                "(Standard Deviation is 0).",
                feature=feature,
            )

        return (float(raw_value) - params.mean) / math.sqrt(params.variance)

    def standardize_all(self, values: Mapping[str, float]) -> dict[str, float]:
        """Standardize every feature in ``values``; no partial result on failure."""
        return {feature: self.standardize(feature, value) for feature, value in values.items()}
