"""Result selection: dedup, quality floor, adaptive count, organization diversity."""

from collections.abc import Mapping, Sequence

from src.config.logging_config import get_logger
from src.domain.models import ExtractedFacets, QueryMode, ScoredCandidate
from src.domain.scoring_constants import (
    DATE_ACTIVITY_MAX_RESULTS,
    DIVERSITY_FREE_SLOTS,
    DIVERSITY_MIN_COUNT,
    PURE_DATE_MAX_RESULTS,
    QUALITY_THRESHOLDS,
    SEMANTIC_COUNT_TIERS,
)

logger = get_logger(__name__)


def deduplicate(scored: Sequence[ScoredCandidate]) -> list[ScoredCandidate]:
    """Keep the first occurrence of each candidate id, preserving order."""
    seen: set[str] = set()
    unique: list[ScoredCandidate] = []
    for item in scored:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


def adaptive_count(mode: QueryMode, pool: Sequence[ScoredCandidate]) -> int:
    """Decide how many results to show.

    Example:
        Semantic pool with top score 0.82 and 6 candidates → 5
        Semantic pool with top score 0.82 and 3 candidates → 3 (0.6 tier)
    """
    if not pool:
        return 0
    if mode is QueryMode.PURE_DATE:
        return min(PURE_DATE_MAX_RESULTS, len(pool))
    if mode is QueryMode.DATE_ACTIVITY:
        return min(DATE_ACTIVITY_MAX_RESULTS, len(pool))

    top_score = pool[0].enhanced_score
    for min_score, count in SEMANTIC_COUNT_TIERS:
        if top_score > min_score and len(pool) >= count:
            return count
    return 1


def apply_diversity(pool: Sequence[ScoredCandidate], count: int) -> list[ScoredCandidate]:
    """Prefer one result per organization, then backfill by rank.

    The first DIVERSITY_FREE_SLOTS picks are taken as ranked; after that a
    candidate whose organization is already shown is skipped until the
    backfill pass.
    """
    chosen: list[ScoredCandidate] = []
    seen_organizations: set[str] = set()

    for item in pool:
        if len(chosen) >= count:
            break
        organization = item.candidate.organization_name.strip().lower()
        if (
            len(chosen) >= DIVERSITY_FREE_SLOTS
            and organization
            and organization in seen_organizations
        ):
            continue
        chosen.append(item)
        if organization:
            seen_organizations.add(organization)

    if len(chosen) < count:
        chosen_ids = {item.id for item in chosen}
        for item in pool:
            if len(chosen) >= count:
                break
            if item.id not in chosen_ids:
                chosen.append(item)
                chosen_ids.add(item.id)
        # Backfill appends out of rank order; restore it
        rank = {item.id: index for index, item in enumerate(pool)}
        chosen.sort(key=lambda item: rank[item.id])

    return chosen


class ResultSelector:
    """Turns a ranked pool into the final, ordered result list."""

    def __init__(self, thresholds: Mapping[QueryMode, float] | None = None) -> None:
        """Initialize selector.

        Args:
            thresholds: Quality floor per query mode (default: QUALITY_THRESHOLDS)
        """
        self._thresholds = dict(thresholds or QUALITY_THRESHOLDS)

    def select(
        self, scored: Sequence[ScoredCandidate], facets: ExtractedFacets
    ) -> list[ScoredCandidate]:
        """Select the results to show, in ranker order.

        Args:
            scored: Ranked candidates
            facets: Facets of the query (decide the mode)

        Returns:
            Final results; empty when nothing clears the quality floor
        """
        mode = facets.mode
        threshold = self._thresholds.get(mode, QUALITY_THRESHOLDS[mode])

        unique = deduplicate(scored)
        pool = [item for item in unique if item.enhanced_score >= threshold]
        count = adaptive_count(mode, pool)

        if count >= DIVERSITY_MIN_COUNT and len(pool) > count:
            selected = apply_diversity(pool, count)
        else:
            selected = pool[:count]

        logger.info(
            "results_selected",
            mode=mode.value,
            threshold=threshold,
            received=len(scored),
            duplicates=len(scored) - len(unique),
            above_threshold=len(pool),
            selected=len(selected),
        )
        return selected
