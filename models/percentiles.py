"""Percentile rank to absolute score resolution."""

from __future__ import annotations

from typing import Mapping

from models.errors import PercentileLookupError
from models.reference_data import ReferenceData, normalize_rank_key
from utils.logging_config import get_logger

logger = get_logger()


class PercentileResolver:
    """Maps ``(disease, score, percentile rank)`` to the absolute score value."""

    def __init__(self, reference: ReferenceData):
        self.table = reference.percentiles

    def resolve(self, disease: str, score_name: str, rank: object) -> float:
        """
        Return the absolute score at ``rank`` for ``score_name`` under ``disease``.

        Raises
        ------
        PercentileLookupError
            If the disease/score pair is not tabulated, or the pair exists but
            has no entry for the requested rank. Nothing is defaulted.
        """
        ranks = self.table.get(disease, {}).get(score_name)
        if ranks is None:
            logger.error("No percentile table for score '%s' and disease '%s'", score_name, disease)
            raise PercentileLookupError(
                f'Could not find percentile mapping for "{score_name}" for the selected disease.',
                score_name=score_name,
                disease=disease,
            )

        key = normalize_rank_key(rank)
        if key not in ranks:
            logger.error("Value not found for p%s (score '%s', disease '%s')", key, score_name, disease)
            raise PercentileLookupError(
                f'Could not find percentile p{key} for "{score_name}" for the selected disease.',
                score_name=score_name,
                disease=disease,
                rank=key,
            )
        return ranks[key]

    def resolve_all(self, disease: str, ranks: Mapping[str, object]) -> dict[str, float]:
        """Resolve every score in ``ranks``; the first miss aborts the whole batch."""
        return {score: self.resolve(disease, score, rank) for score, rank in ranks.items()}
