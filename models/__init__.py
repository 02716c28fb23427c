"""Models for cardiovascular disease risk prediction."""

from __future__ import annotations

from models.combinations import (
    ComparisonRecord,
    canonicalize_model_name,
    filter_performance_records,
    generate_model_combinations,
    group_performance_data,
    map_model_name,
    sort_model_names,
)
from models.cox_model import CoxModel, RiskEstimate, baseline_survival_at
from models.errors import (
    ConfigError,
    DataLoadError,
    DegenerateScaleError,
    InputValidationError,
    PercentileLookupError,
    RiskCalculatorError,
)
from models.form_input import FormInput, ParsedInput, calculate_bmi, parse_form
from models.percentiles import PercentileResolver
from models.reference_data import ReferenceData, load_reference_data
from models.scaler import FeatureStandardizer

__all__ = [
    "ComparisonRecord",
    "ConfigError",
    "CoxModel",
    "DataLoadError",
    "DegenerateScaleError",
    "FeatureStandardizer",
    "FormInput",
    "InputValidationError",
    "ParsedInput",
    "PercentileLookupError",
    "PercentileResolver",
    "ReferenceData",
    "RiskCalculatorError",
    "RiskEstimate",
    "baseline_survival_at",
    "calculate_bmi",
    "canonicalize_model_name",
    "filter_performance_records",
    "generate_model_combinations",
    "group_performance_data",
    "load_reference_data",
    "map_model_name",
    "parse_form",
    "sort_model_names",
]
