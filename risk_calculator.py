"""
Cardiovascular Disease Risk Calculator
Purpose: 10-year risk for six cardiovascular outcomes from Cox models with
clinical, genomic, metabolomic and proteomic predictors, plus c-index
comparison of the model variants.
"""

from __future__ import annotations

import argparse
import copy
import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

BASE_DIR = Path(__file__).resolve().parent
# Ensure Matplotlib cache uses a writable path (containers may block ~/.config).
mplt_config_dir = Path(os.environ.setdefault("MPLCONFIGDIR", str(BASE_DIR / ".matplotlib")))
mplt_config_dir.mkdir(parents=True, exist_ok=True)

from models.combinations import (  # noqa: E402
    ComparisonRecord,
    filter_performance_records,
    order_for_display,
)
from models.constants import (  # noqa: E402
    BASE_MODELS,
    DISEASE_NAMES,
    OMICS_ORDER,
    RISK_PLACEHOLDER,
)
from models.cox_model import CoxModel, RiskEstimate  # noqa: E402
from models.errors import DataLoadError, RiskCalculatorError  # noqa: E402
from models.form_input import FormInput, parse_form  # noqa: E402
from models.percentiles import PercentileResolver  # noqa: E402
from models.reference_data import ReferenceData, load_reference_data  # noqa: E402
from models.scaler import FeatureStandardizer  # noqa: E402
from utils.logging_config import get_logger, setup_logging  # noqa: E402
from utils.visualization import build_results_table, plot_performance_comparison  # noqa: E402

DEFAULT_DATA_DIR = BASE_DIR / "data"
DEFAULT_OUTPUT_DIR = BASE_DIR
DEFAULT_DISEASE = "cad"

logger = get_logger()

DEFAULT_PATIENT_PAYLOAD = {
    "name": "Reference profile",
    "age": 55,
    "sbp": 130,
    "dbp": 80,
    "height": 170,
    "weight": 75,
    "waist_cir": 90,
    "waist_hip_ratio": 0.9,
    "bmi": 26.0,
    "baso": 0.03,
    "eos": 0.15,
    "hct": 42,
    "hb": 14,
    "lc": 1.9,
    "mc": 0.5,
    "nc": 4.2,
    "plt": 250,
    "wbc": 6.8,
    "townsend": 50,
    "prs": 50,
    "metscore": 50,
    "proscore": 50,
    "sex": "Male",
    "ethnicity": 0,
    "flags": {},
}


@dataclass(frozen=True)
class CalculationOutcome:
    """Either a risk estimate or the error that aborted the calculation."""

    disease: str
    estimate: RiskEstimate | None = None
    error: RiskCalculatorError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def display(self) -> str:
        """Risk percentage, or the neutral placeholder after a failure."""
        if self.estimate is None:
            return RISK_PLACEHOLDER
        return self.estimate.risk_percent

    @property
    def message(self) -> str | None:
        return str(self.error) if self.error is not None else None


class CardiovascularRiskCalculator:
    """Runs the full risk pipeline against one loaded ``ReferenceData`` context."""

    def __init__(self, reference: ReferenceData):
        self.reference = reference
        self.resolver = PercentileResolver(reference)
        self.standardizer = FeatureStandardizer(reference)
        self.model = CoxModel(reference)

    def calculate_risk(self, form: FormInput, disease: str) -> RiskEstimate:
        """
        Calculate 10-year risk of ``disease`` for one filled-in form.

        Parameters
        ----------
        form : FormInput
            Raw form values.
        disease : str
            Disease code, one of ``DISEASE_NAMES``.

        Returns
        -------
        RiskEstimate
            Linear predictor, hazard ratio, baseline and predicted survival,
            and the risk probability.

        Raises
        ------
        InputValidationError
            A numeric entry is missing or malformed.
        PercentileLookupError
            A percentile rank cannot be mapped for ``disease``.
        ConfigError, DegenerateScaleError
            Scaler parameters are missing or have zero variance.

        Examples
        --------
        >>> calculator = CardiovascularRiskCalculator(load_reference_data("data"))
        >>> estimate = calculator.calculate_risk(FormInput.from_dict(profile), "cad")
        >>> estimate.risk_percent
        '7.4%'
        """
        parsed = parse_form(form)
        scores = self.resolver.resolve_all(disease, parsed.percentile_ranks)
        standardized = self.standardizer.standardize_all(parsed.continuous)
        raw = {**parsed.categorical, **scores}
        estimate = self.model.evaluate(disease, standardized, raw)
        logger.debug(
            "%s: LP=%.4f HR=%.4f S0=%.4f risk=%s",
            disease,
            estimate.linear_predictor,
            estimate.hazard_ratio,
            estimate.baseline_survival,
            estimate.risk_percent,
        )
        return estimate

    def run_calculation(self, form: FormInput, disease: str) -> CalculationOutcome:
        """Run ``calculate_risk`` and report failures as an outcome, not an exception."""
        try:
            estimate = self.calculate_risk(form, disease)
        except RiskCalculatorError as exc:
            logger.error("Risk calculation aborted (%s): %s", exc.kind, exc)
            return CalculationOutcome(disease=disease, error=exc)
        return CalculationOutcome(disease=disease, estimate=estimate)

    def compare_models(
        self, base_model: str | None, omics: Sequence[str], outcomes: Sequence[str]
    ) -> list[ComparisonRecord]:
        """C-index records for the selected diseases and model combinations, display-ordered."""
        records = filter_performance_records(
            self.reference.concordance, base_model, omics, outcomes
        )
        return order_for_display(records)


def load_patient_profile(profile_path: Path | None = None) -> dict[str, Any]:
    """
    Load a patient profile from a JSON file.

    Falls back to ``DEFAULT_PATIENT_PAYLOAD`` when no path is given or the
    file is missing or malformed.
    """
    payload: dict[str, Any] = copy.deepcopy(DEFAULT_PATIENT_PAYLOAD)
    if profile_path is None:
        return payload

    if not profile_path.exists():
        logger.warning("Patient profile not found at %s. Using bundled profile.", profile_path)
        return payload

    try:
        with profile_path.open("r", encoding="utf-8") as stream:
            loaded = json.load(stream)
    except json.JSONDecodeError as exc:
        logger.warning("Unable to parse %s: %s. Using bundled profile.", profile_path, exc)
        return payload
    except OSError as exc:
        logger.warning("Unable to read %s: %s. Using bundled profile.", profile_path, exc)
        return payload

    if not isinstance(loaded, dict):
        logger.warning(
            "Unable to parse %s: expected a JSON object, got %s. Using bundled profile.",
            profile_path,
            type(loaded).__name__,
        )
        return payload
    return loaded


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Estimate 10-year cardiovascular risk and compare model c-indices."
    )
    parser.add_argument(
        "--data-dir",
        default=str(DEFAULT_DATA_DIR),
        help="Directory or URL prefix holding the reference CSV files (default: %(default)s).",
    )
    parser.add_argument(
        "--patient",
        type=Path,
        default=None,
        help="JSON patient profile (default: bundled reference profile).",
    )
    parser.add_argument(
        "--disease",
        choices=list(DISEASE_NAMES),
        default=DEFAULT_DISEASE,
        help="Outcome to estimate risk for (default: %(default)s).",
    )
    parser.add_argument(
        "--outcomes",
        nargs="+",
        choices=list(DISEASE_NAMES),
        default=list(DISEASE_NAMES),
        help="Outcomes to include in the c-index comparison (default: all).",
    )
    parser.add_argument(
        "--base-model",
        choices=BASE_MODELS,
        default="Clin",
        help="Base predictor set for the comparison (default: %(default)s).",
    )
    parser.add_argument(
        "--omics",
        nargs="*",
        choices=OMICS_ORDER,
        default=list(OMICS_ORDER),
        help="Omics add-ons to combine with the base model (default: all).",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help="Directory to store generated figures and tables (default: project root).",
    )
    parser.add_argument(
        "--show-plots",
        action="store_true",
        help="Display matplotlib figures after saving them.",
    )
    parser.add_argument(
        "--skip-comparison",
        action="store_true",
        help="Only compute the individual risk (no c-index table or chart).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging output.",
    )
    parser.add_argument(
        "--log-timestamps",
        action="store_true",
        help="Include timestamps in log output (disabled by default for reproducible logs).",
    )
    return parser.parse_args(argv)


def report_comparison(
    calculator: CardiovascularRiskCalculator, args: argparse.Namespace
) -> list[Path]:
    """Write the c-index table and chart for the selected comparison."""

    try:
        records = calculator.compare_models(args.base_model, args.omics, args.outcomes)
    except RiskCalculatorError as exc:
        logger.error("%s", exc)
        return []

    table = build_results_table(records)
    logger.info("")
    logger.info("=" * 60)
    logger.info("POPULATIONAL PREDICTIVE PERFORMANCE (C-index)")
    logger.info("-" * 60)
    if table.empty:
        logger.info("No data available for the selected criteria.")
    for row in table.itertuples(index=False):
        logger.info("  %-28s %-26s %s (%s)", row[0], row[1], row[2], row[3])

    args.output_dir.mkdir(parents=True, exist_ok=True)
    table_path = args.output_dir / "cindex_comparison.csv"
    table.to_csv(table_path, index=False)
    figure_path = plot_performance_comparison(records, args.output_dir, args.show_plots)
    return [table_path, figure_path]


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)

    logger = setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        include_timestamp=args.log_timestamps,
    )

    logger.info("Cardiovascular Disease Risk Calculator")
    logger.info("=" * 60)
    logger.info("Data source: %s", args.data_dir)

    try:
        reference = load_reference_data(args.data_dir)
    except DataLoadError as exc:
        logger.error("%s", exc)
        logger.error("Critical data files could not be loaded. The calculator is disabled.")
        return 1

    calculator = CardiovascularRiskCalculator(reference)
    profile = load_patient_profile(args.patient)
    outcome = calculator.run_calculation(FormInput.from_dict(profile), args.disease)

    logger.info("")
    logger.info("%s", profile.get("name", "Patient"))
    logger.info("  Outcome: %s", DISEASE_NAMES[args.disease])
    logger.info("  10-Year Risk: %s", outcome.display)
    if not outcome.ok:
        logger.info("  Calculation failed: %s", outcome.message)

    generated: list[Path] = []
    if not args.skip_comparison:
        generated.extend(report_comparison(calculator, args))

    if generated:
        logger.info("")
        logger.info("Generated files:")
        for path in generated:
            logger.info("  - %s", path)

    return 0 if outcome.ok else 2


if __name__ == "__main__":
    sys.exit(main())
