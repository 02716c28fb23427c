"""
Form input parsing for the risk calculator.

Validates the raw values captured from the calculator form and encodes them
into the numeric feature groups the pipeline consumes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

from models.constants import (
    BINARY_FLAG_LABELS,
    CONTINUOUS_VARIABLES,
    ETHNICITY_FEATURES,
    ETHNICITY_LEVELS,
    FRIENDLY_VARIABLE_NAMES,
    PERCENTILE_VARIABLES,
    SEX_FEATURE,
)
from models.errors import InputValidationError


@dataclass
class FormInput:
    """
    Raw values for one calculation request.

    Attributes
    ----------
    continuous : dict[str, Any]
        Raw entries for the 17 panel biomarkers, keyed by variable id.
    percentiles : dict[str, Any]
        Percentile ranks (0-100) for townsend, prs, metscore and proscore.
    sex : str
        ``'Male'`` or ``'Female'``.
    ethnicity : int
        One of the four ethnicity levels (0 is the reference level).
    flags : dict[str, int]
        Binary lifestyle/history answers keyed by form label; missing
        labels count as 0.
    """

    continuous: dict[str, Any] = field(default_factory=dict)
    percentiles: dict[str, Any] = field(default_factory=dict)
    sex: str = "Male"
    ethnicity: int = 0
    flags: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> FormInput:
        """Build a form from a flat profile such as a JSON patient file."""
        return cls(
            continuous={name: payload.get(name) for name in CONTINUOUS_VARIABLES},
            percentiles={name: payload.get(name) for name in PERCENTILE_VARIABLES},
            sex=str(payload.get("sex", "Male")),
            ethnicity=payload.get("ethnicity", 0),
            flags=dict(payload.get("flags", {})),
        )


@dataclass(frozen=True)
class ParsedInput:
    """Numeric features after validation and encoding."""

    continuous: dict[str, float]
    percentile_ranks: dict[str, float]
    categorical: dict[str, float]


def parse_number(value: Any, name: str) -> float:
    """Parse a numeric form value, naming the field in the error message."""

    try:
        number = float(str(value).strip())
    except ValueError:
        number = math.nan
    if math.isnan(number):
        friendly = FRIENDLY_VARIABLE_NAMES.get(name, name)
        raise InputValidationError(f"Please enter a valid number for: {friendly}", field=name)
    return number


def encode_ethnicity(ethnicity: Any) -> dict[str, float]:
    """One-hot encode ethnicity; level 0 is the all-zero reference."""

    number = parse_number(ethnicity, "ethnicity")
    if not (math.isfinite(number) and number.is_integer() and int(number) in ETHNICITY_LEVELS):
        raise InputValidationError(
            f"Ethnicity must be one of {sorted(ETHNICITY_LEVELS)}, got {ethnicity}",
            field="ethnicity",
        )
    level = int(number)
    return {feature: 1.0 if level == code else 0.0 for code, feature in ETHNICITY_FEATURES.items()}


def encode_flags(flags: Mapping[str, Any]) -> dict[str, float]:
    """Encode yes/no answers as 0/1 indicators; blank or missing answers are 0."""

    encoded = {}
    for label, feature in BINARY_FLAG_LABELS.items():
        value = flags.get(label)
        if value is None or str(value).strip() == "":
            encoded[feature] = 0.0
            continue
        number = parse_number(value, label)
        if number not in (0.0, 1.0):
            raise InputValidationError(f"Please answer 0 or 1 for: {label}", field=label)
        encoded[feature] = number
    return encoded


def parse_form(form: FormInput) -> ParsedInput:
    """
    Validate every numeric entry and encode the categorical answers.

    Raises
    ------
    InputValidationError
        On the first non-numeric continuous or percentile entry.
    """
    continuous = {
        name: parse_number(form.continuous.get(name), name) for name in CONTINUOUS_VARIABLES
    }
    ranks = {
        name: parse_number(form.percentiles.get(name), name) for name in PERCENTILE_VARIABLES
    }

    categorical = {SEX_FEATURE: 1.0 if str(form.sex).strip().lower() == "male" else 0.0}
    categorical.update(encode_ethnicity(form.ethnicity))
    categorical.update(encode_flags(form.flags))
    return ParsedInput(continuous=continuous, percentile_ranks=ranks, categorical=categorical)


def calculate_bmi(height_cm: Any, weight_kg: Any) -> float | None:
    """BMI rounded to one decimal, or None unless both measurements are positive."""

    try:
        height = float(height_cm)
        weight = float(weight_kg)
    except (TypeError, ValueError):
        return None
    if not (height > 0 and weight > 0):
        return None
    height_m = height / 100
    return round(weight / (height_m * height_m), 1)
