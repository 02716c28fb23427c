"""
Cox Proportional Hazards Risk Evaluation
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence

import numpy as np

from models.constants import DISEASE_NAMES, RISK_HORIZON_YEARS
from models.reference_data import ReferenceData, SurvivalPoint
from utils.logging_config import get_logger

logger = get_logger()


@dataclass(frozen=True)
class RiskEstimate:
    """Result of one risk evaluation for a single disease."""

    disease: str
    linear_predictor: float
    hazard_ratio: float
    baseline_survival: float
    predicted_survival: float
    risk: float

    @property
    def disease_name(self) -> str:
        return DISEASE_NAMES.get(self.disease, self.disease)

    @property
    def risk_percent(self) -> str:
        """Risk as a percentage string with one decimal place."""
        return f"{self.risk * 100:.1f}%"


def baseline_survival_at(
    curve: Sequence[SurvivalPoint],
    horizon: float = RISK_HORIZON_YEARS,
    disease_label: str = "disease",
) -> float:
    """
    Select baseline survival S₀(t) at the prediction horizon.

    Picks the curve point with the greatest time not exceeding ``horizon``
    (the first such point if several share that time). When no point lies at
    or before the horizon, survival is assumed to be 1.0 and a warning is
    logged.
    """
    candidates = [point for point in curve if point.time <= horizon]
    if not candidates:
        logger.warning(
            'No baseline survival data found for "%s" at or before %s years. '
            "Assuming 100%% survival.",
            disease_label,
            f"{horizon:g}",
        )
        return 1.0
    return max(candidates, key=lambda point: point.time).survival


class CoxModel:
    """
    Cox proportional hazards model evaluated from precomputed coefficients.

    Coefficients and baseline survival curves come from the shared
    ``ReferenceData`` context; nothing is fitted at runtime.
    """

    def __init__(self, reference: ReferenceData, horizon: float = RISK_HORIZON_YEARS):
        self.coefficients = reference.coefficients
        self.baseline_survivals = reference.baseline_survivals
        self.horizon = horizon

    def calculate_linear_predictor(
        self,
        disease: str,
        standardized: Mapping[str, float],
        raw: Mapping[str, float],
    ) -> float:
        """
        Calculate the Cox linear predictor for one disease.

        Computes LP = β₁X₁ + β₂X₂ + ... + βₖXₖ over the features that carry a
        numeric coefficient for ``disease``.

        Parameters
        ----------
        disease : str
            Disease code (e.g. ``'cad'``).
        standardized : Mapping[str, float]
            Z-scored continuous biomarkers. Takes precedence over ``raw``.
        raw : Mapping[str, float]
            Resolved percentile scores plus 0/1 sex, ethnicity one-hot and
            lifestyle/history indicators.

        Returns
        -------
        float
            Linear predictor. Non-finite coefficients yield a non-finite value,
            which is returned unchanged.

        Notes
        -----
        Features without a numeric coefficient for ``disease`` are absent from
        the coefficient table and contribute nothing. Coefficient features
        missing from both inputs are skipped.
        """
        lp = 0.0
        for feature, coefficient in self.coefficients.get(disease, {}).items():
            if feature in standardized:
                lp += coefficient * standardized[feature]
            elif feature in raw:
                lp += coefficient * raw[feature]
            else:
                logger.debug("No input value for feature '%s'; skipped for %s", feature, disease)
        return lp

    def baseline_survival(self, disease: str) -> float:
        """Baseline survival for ``disease`` at the configured horizon."""
        curve = self.baseline_survivals.get(disease, ())
        return baseline_survival_at(curve, self.horizon, DISEASE_NAMES.get(disease, disease))

    @staticmethod
    def risk_from_linear_predictor(
        linear_predictor: float, baseline_survival: float
    ) -> tuple[float, float, float]:
        """
        Convert an LP into (hazard ratio, predicted survival, risk).

        Uses S(t|X) = S₀(t)^{exp(LP)} and risk = 1 - S(t|X). ``exp`` overflow
        gives ``inf`` rather than raising.
        """
        with np.errstate(over="ignore"):
            hazard_ratio = float(np.exp(linear_predictor))
        predicted_survival = baseline_survival**hazard_ratio
        return hazard_ratio, predicted_survival, 1.0 - predicted_survival

    def evaluate(
        self,
        disease: str,
        standardized: Mapping[str, float],
        raw: Mapping[str, float],
    ) -> RiskEstimate:
        """
        Compute the 10-year risk for ``disease``.

        Parameters
        ----------
        disease : str
            Disease code.
        standardized : Mapping[str, float]
            Z-scored continuous biomarkers.
        raw : Mapping[str, float]
            Categorical, binary and resolved percentile features.

        Returns
        -------
        RiskEstimate
            Intermediate quantities and the risk probability. The risk is not
            clamped to [0, 1].

        See Also
        --------
        calculate_linear_predictor : LP computation.
        baseline_survival_at : Horizon lookup on the survival curve.
        """
        lp = self.calculate_linear_predictor(disease, standardized, raw)
        s0 = self.baseline_survival(disease)
        hazard_ratio, predicted_survival, risk = self.risk_from_linear_predictor(lp, s0)
        return RiskEstimate(
            disease=disease,
            linear_predictor=lp,
            hazard_ratio=hazard_ratio,
            baseline_survival=s0,
            predicted_survival=predicted_survival,
            risk=risk,
        )
