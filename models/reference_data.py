"""
Reference Data Store

Parses the five reference CSV tables once into typed, read-only records and
bundles them into a single ``ReferenceData`` context that is passed into
every pipeline call.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import pandas as pd

from models.constants import C_INDEX_METRIC, DISEASE_NAMES
from models.errors import DataLoadError
from utils.logging_config import get_logger

logger = get_logger()

BASELINE_SURVIVALS_FILE = "baseline_survivals.csv"
CINDEX_FILE = "cindex_final.csv"
COEFFICIENTS_FILE = "coefficients.csv"
SCALER_PARAMS_FILE = "PANEL_scaler_params.csv"
PERCENTILES_FILE = "percentiles.csv"


@dataclass(frozen=True)
class SurvivalPoint:
    time: float
    survival: float


@dataclass(frozen=True)
class ScalerParameter:
    feature: str
    mean: float
    variance: float


@dataclass(frozen=True)
class ConcordanceRow:
    outcome: str
    comparison_model: str
    point_estimate: float
    ci_lower: float
    ci_upper: float


@dataclass(frozen=True)
class ReferenceData:
    """Immutable bundle of every table the calculator consults.

    Attributes
    ----------
    coefficients : Mapping[str, Mapping[str, float]]
        ``disease -> feature -> coefficient``. Only numeric entries are kept,
        in the row order of the source table.
    baseline_survivals : Mapping[str, tuple[SurvivalPoint, ...]]
        ``disease -> survival curve`` in source order.
    scaler_params : Mapping[str, ScalerParameter]
        ``feature -> (mean, variance)``.
    percentiles : Mapping[str, Mapping[str, Mapping[str, float]]]
        ``disease -> score -> rank key -> absolute score``.
    concordance : tuple[ConcordanceRow, ...]
        C-index benchmark rows only.
    """

    coefficients: Mapping[str, Mapping[str, float]]
    baseline_survivals: Mapping[str, tuple[SurvivalPoint, ...]]
    scaler_params: Mapping[str, ScalerParameter]
    percentiles: Mapping[str, Mapping[str, Mapping[str, float]]]
    concordance: tuple[ConcordanceRow, ...]

    @property
    def diseases(self) -> list[str]:
        """Disease codes with coefficients, in canonical order where known."""
        known = [code for code in DISEASE_NAMES if code in self.coefficients]
        extra = [code for code in self.coefficients if code not in DISEASE_NAMES]
        return known + extra


def normalize_rank_key(rank: object) -> str:
    """Return the lookup key for a percentile rank (``"p05"``, ``5`` and ``"5.0"`` -> ``"5"``)."""

    text = str(rank).strip()
    if text[:1] in ("p", "P"):
        text = text[1:]
    try:
        value = float(text)
    except ValueError:
        return text
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return repr(value)


def _join(source: str | Path, filename: str) -> str | Path:
    if isinstance(source, Path):
        return source / filename
    if "://" in source:
        return source.rstrip("/") + "/" + filename
    return Path(source) / filename


def read_table(source: str | Path, filename: str) -> pd.DataFrame:
    """Read one CSV table as trimmed strings, wrapping any failure in ``DataLoadError``."""

    location = _join(source, filename)
    try:
        frame = pd.read_csv(location, dtype=str, keep_default_na=False, skipinitialspace=True)
    except (OSError, ValueError, pd.errors.ParserError) as exc:
        raise DataLoadError(f"Error loading or parsing CSV file {location}: {exc}") from exc

    frame.columns = [str(column).strip() for column in frame.columns]
    for column in frame.columns:
        frame[column] = frame[column].astype(str).str.strip()
    logger.info("Successfully loaded %s", location)
    return frame


def _require_columns(frame: pd.DataFrame, columns: list[str], filename: str) -> None:
    missing = [column for column in columns if column not in frame.columns]
    if missing:
        raise DataLoadError(f"{filename} is missing required column(s): {', '.join(missing)}")


def _numeric(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce")


def parse_coefficients(frame: pd.DataFrame) -> Mapping[str, Mapping[str, float]]:
    """Build ``disease -> feature -> coefficient``, skipping non-numeric cells."""

    feature_column = frame.columns[0]
    features = frame[feature_column]
    duplicated = features[features.duplicated()].unique().tolist()
    if duplicated:
        raise DataLoadError(
            f"{COEFFICIENTS_FILE} lists feature(s) more than once: {', '.join(duplicated)}"
        )

    table: dict[str, Mapping[str, float]] = {}
    for disease in frame.columns[1:]:
        values = _numeric(frame[disease])
        used = {
            feature: float(value)
            for feature, value in zip(features, values)
            if not pd.isna(value)
        }
        table[disease] = MappingProxyType(used)
    return MappingProxyType(table)


def parse_baseline_survivals(frame: pd.DataFrame) -> Mapping[str, tuple[SurvivalPoint, ...]]:
    _require_columns(frame, ["Time"], BASELINE_SURVIVALS_FILE)
    times = _numeric(frame["Time"])

    curves: dict[str, tuple[SurvivalPoint, ...]] = {}
    for disease in frame.columns:
        if disease == "Time":
            continue
        survivals = _numeric(frame[disease])
        curves[disease] = tuple(
            SurvivalPoint(time=float(time), survival=float(survival))
            for time, survival in zip(times, survivals)
            if not pd.isna(time) and not pd.isna(survival)
        )
    return MappingProxyType(curves)


def parse_scaler_params(frame: pd.DataFrame) -> Mapping[str, ScalerParameter]:
    _require_columns(frame, ["feature", "mean", "variance"], SCALER_PARAMS_FILE)
    means = _numeric(frame["mean"])
    variances = _numeric(frame["variance"])

    params: dict[str, ScalerParameter] = {}
    for feature, mean, variance in zip(frame["feature"], means, variances):
        if pd.isna(mean) or pd.isna(variance):
            raise DataLoadError(
                f"{SCALER_PARAMS_FILE} has a non-numeric mean or variance for '{feature}'"
            )
        # The first row for a feature wins.
        params.setdefault(feature, ScalerParameter(feature, float(mean), float(variance)))
    return MappingProxyType(params)


def parse_percentiles(frame: pd.DataFrame) -> Mapping[str, Mapping[str, Mapping[str, float]]]:
    """Build the nested ``disease -> score -> rank -> value`` lookup once."""

    _require_columns(frame, ["outcome", "score"], PERCENTILES_FILE)
    rank_columns = [column for column in frame.columns if column.startswith("p")]

    nested: dict[str, dict[str, dict[str, float]]] = {}
    for _, row in frame.iterrows():
        by_score = nested.setdefault(row["outcome"], {})
        ranks = by_score.setdefault(row["score"], {})
        for column in rank_columns:
            value = pd.to_numeric(row[column], errors="coerce")
            if pd.isna(value):
                continue
            ranks[normalize_rank_key(column)] = float(value)

    logger.info("Percentile data has been processed for efficient lookup.")
    return MappingProxyType(
        {
            outcome: MappingProxyType(
                {score: MappingProxyType(ranks) for score, ranks in by_score.items()}
            )
            for outcome, by_score in nested.items()
        }
    )


def parse_concordance(frame: pd.DataFrame) -> tuple[ConcordanceRow, ...]:
    required = ["metric", "outcome", "comparison_model", "point_estimate", "ci_lower", "ci_upper"]
    _require_columns(frame, required, CINDEX_FILE)

    c_index = frame[frame["metric"] == C_INDEX_METRIC]
    estimates = _numeric(c_index["point_estimate"])
    if estimates.isna().any():
        bad = c_index.loc[estimates.isna(), "comparison_model"].tolist()
        raise DataLoadError(
            f"{CINDEX_FILE} has non-numeric point estimates for: {', '.join(bad)}"
        )

    rows = tuple(
        ConcordanceRow(
            outcome=outcome,
            comparison_model=model,
            point_estimate=float(estimate),
            ci_lower=float(lower),
            ci_upper=float(upper),
        )
        for outcome, model, estimate, lower, upper in zip(
            c_index["outcome"],
            c_index["comparison_model"],
            estimates,
            _numeric(c_index["ci_lower"]),
            _numeric(c_index["ci_upper"]),
        )
    )
    logger.info("Filtered cIndex data to %d rows with metric='%s'", len(rows), C_INDEX_METRIC)
    return rows


def load_reference_data(source: str | Path) -> ReferenceData:
    """
    Load and validate every reference table.

    Parameters
    ----------
    source : str or Path
        Directory (or URL prefix) containing the five CSV files.

    Returns
    -------
    ReferenceData
        Fully parsed, read-only reference context.

    Raises
    ------
    DataLoadError
        If any table is missing, unreadable, or malformed. Loading is
        all-or-nothing; no partially initialized context is ever returned.
    """
    try:
        baseline = parse_baseline_survivals(read_table(source, BASELINE_SURVIVALS_FILE))
        concordance = parse_concordance(read_table(source, CINDEX_FILE))
        coefficients = parse_coefficients(read_table(source, COEFFICIENTS_FILE))
        scaler = parse_scaler_params(read_table(source, SCALER_PARAMS_FILE))
        percentiles = parse_percentiles(read_table(source, PERCENTILES_FILE))
    except DataLoadError:
        logger.error("One or more data files failed to load. Application cannot proceed.")
        raise

    logger.info("All data loaded successfully.")
    return ReferenceData(
        coefficients=coefficients,
        baseline_survivals=baseline,
        scaler_params=scaler,
        percentiles=percentiles,
        concordance=concordance,
    )
