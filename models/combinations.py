"""
Model combination and comparison-record handling.

Enumerates base-model + omics add-on combinations, normalizes the model names
found in the c-index table, and filters/orders those records for the
performance comparison table and chart.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import Iterable, Sequence

from models.constants import DISEASE_NAMES, DISEASE_ORDER, MODEL_NAME_ABBREVIATIONS, OMICS_ORDER
from models.errors import InputValidationError
from models.reference_data import ConcordanceRow

SEPARATOR = "+"


@dataclass(frozen=True)
class ComparisonRecord:
    """A c-index row ready for table and chart rendering."""

    outcome: str
    comparison_model: str
    mapped_model_name: str
    canonical_model_name: str
    disease_name: str
    point_estimate: float
    ci_lower: float
    ci_upper: float

    @classmethod
    def from_row(cls, row: ConcordanceRow) -> ComparisonRecord:
        mapped = map_model_name(row.comparison_model)
        return cls(
            outcome=row.outcome,
            comparison_model=row.comparison_model,
            mapped_model_name=mapped,
            canonical_model_name=canonicalize_model_name(mapped),
            disease_name=DISEASE_NAMES.get(row.outcome, row.outcome),
            point_estimate=row.point_estimate,
            ci_lower=row.ci_lower,
            ci_upper=row.ci_upper,
        )


def map_model_name(model_name: str | None) -> str:
    """Shorten long-form labels, e.g. ``Clinical_Genomics`` -> ``Clin+PRS``."""

    if not model_name:
        return ""
    for long_form, short_form in MODEL_NAME_ABBREVIATIONS:
        model_name = model_name.replace(long_form, short_form)
    return model_name


def _omics_rank(component: str) -> int:
    # Unrecognized components sort ahead of the known add-ons.
    return OMICS_ORDER.index(component) if component in OMICS_ORDER else -1


def canonicalize_model_name(model_name: str) -> str:
    """
    Reorder the add-on components of a composite model name.

    The first component (the base model) stays in place; the rest follow the
    fixed PRS, MetScore, ProScore order, so ``Clin+ProScore+PRS`` and
    ``Clin+PRS+ProScore`` both become ``Clin+PRS+ProScore``.
    """
    if not model_name or SEPARATOR not in model_name:
        return model_name
    base, *omics = model_name.split(SEPARATOR)
    return SEPARATOR.join([base, *sorted(omics, key=_omics_rank)])


def generate_model_combinations(base_model: str | None, omics: Sequence[str]) -> list[str]:
    """
    Canonical names for the base model with every subset of ``omics``.

    Yields 2^n distinct names for n distinct add-ons, smallest subsets first,
    including the base model on its own.
    """
    if not base_model:
        return []

    unique_omics = list(dict.fromkeys(omics))
    names: list[str] = []
    for size in range(len(unique_omics) + 1):
        for subset in combinations(unique_omics, size):
            name = canonicalize_model_name(SEPARATOR.join([base_model, *subset]))
            if name not in names:
                names.append(name)
    return names


def filter_performance_records(
    rows: Iterable[ConcordanceRow],
    base_model: str | None,
    omics: Sequence[str],
    outcomes: Sequence[str],
) -> list[ComparisonRecord]:
    """
    Select the c-index records for the chosen diseases and model combinations.

    Raises
    ------
    InputValidationError
        If no disease or no base model is selected.
    """
    if not outcomes:
        raise InputValidationError(
            "Please select at least one cardiovascular disease.", field="outcomes"
        )
    if not base_model:
        raise InputValidationError(
            "Please select one base predictor (AgeSex, Clin, or PANEL).", field="base_model"
        )

    required = set(generate_model_combinations(base_model, omics))
    selected = set(outcomes)
    records = (ComparisonRecord.from_row(row) for row in rows if row.outcome in selected)
    return [record for record in records if record.canonical_model_name in required]


def model_sort_key(model_name: str) -> tuple[int, str]:
    return len(model_name.split(SEPARATOR)), model_name


def sort_model_names(model_names: Iterable[str]) -> list[str]:
    """Distinct model names ordered by component count, then alphabetically."""
    return sorted(set(model_names), key=model_sort_key)


def disease_rank(disease_name: str) -> int:
    return DISEASE_ORDER.index(disease_name) if disease_name in DISEASE_ORDER else -1


def order_by_disease(records: Iterable[ComparisonRecord]) -> list[ComparisonRecord]:
    """Stable sort by the canonical disease sequence."""
    return sorted(records, key=lambda record: disease_rank(record.disease_name))


def order_for_display(records: Iterable[ComparisonRecord]) -> list[ComparisonRecord]:
    """Order records by model (see ``sort_model_names``), then disease."""
    return sorted(
        records,
        key=lambda record: (
            model_sort_key(record.canonical_model_name),
            disease_rank(record.disease_name),
        ),
    )


def group_performance_data(
    records: Iterable[ComparisonRecord],
) -> tuple[dict[str, list[ComparisonRecord]], dict[str, list[ComparisonRecord]]]:
    """
    Group records by canonical model and by disease.

    Returns
    -------
    tuple[dict, dict]
        ``(by_model, by_disease)``. Models are keyed in ``sort_model_names``
        order and each model's records follow the canonical disease order;
        disease groups are keyed in canonical disease order.
    """
    records = list(records)
    by_model: dict[str, list[ComparisonRecord]] = {
        name: [] for name in sort_model_names(r.canonical_model_name for r in records)
    }
    by_disease: dict[str, list[ComparisonRecord]] = {}

    for record in order_by_disease(records):
        by_model[record.canonical_model_name].append(record)

    for record in records:
        by_disease.setdefault(record.disease_name, []).append(record)
    by_disease = dict(sorted(by_disease.items(), key=lambda item: disease_rank(item[0])))
    return by_model, by_disease
