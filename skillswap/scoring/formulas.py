"""Pure arithmetic shared by the skill score calculator and the
credibility aggregator.

Nothing here touches the database, so every formula can be tested with
plain values.
"""

import math
from collections.abc import Iterable, Sequence

from skillswap.scoring.config import ScoringConfig

RATING_SCALE = 20  # 1-5 rating -> 0-100
MAX_SCORE = 100
MIN_SCORE = 0


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties away from zero for positives."""
    return math.floor(value + 0.5)


def clamp(value: float, low: float = MIN_SCORE, high: float = MAX_SCORE) -> float:
    return max(low, min(high, value))


def rescale_rating(value: float) -> float:
    """Map a 1-5 grade or rating onto 0-100."""
    return value * RATING_SCALE


def mean_rescaled(values: Iterable[float]) -> float:
    """Mean of 1-5 values rescaled to 0-100, or 0 for no values."""
    values = list(values)
    if not values:
        return 0.0
    return rescale_rating(sum(values) / len(values))


def session_consistency(session_count: int, step: int = 10) -> int:
    """Consistency term: ``step`` points per completed session, capped at 100."""
    return min(session_count * step, MAX_SCORE)


def skill_final_score(
    assignment_avg: float,
    feedback_avg: float,
    session_count: int,
    config: ScoringConfig | None = None,
) -> int:
    """Weighted blend of the three skill components, integer 0-100.

    >>> skill_final_score(80, 100, 12)
    88
    """
    config = config or ScoringConfig()
    consistency = session_consistency(session_count, config.session_consistency_step)
    blended = (
        assignment_avg * config.assignment_weight
        + feedback_avg * config.feedback_weight
        + consistency * config.consistency_weight
    )
    return int(clamp(round_half_up(blended)))


def consistency_bonus(
    session_count: int,
    tiers: Sequence[tuple[int, int]] = ((30, 10), (15, 5), (5, 2)),
) -> int:
    """Step bonus for the highest tier whose threshold is reached."""
    for threshold, bonus in sorted(tiers, key=lambda tier: tier[0], reverse=True):
        if session_count >= threshold:
            return bonus
    return 0


def top_average(scores: Sequence[float], limit: int = 3) -> float | None:
    """Mean of the ``limit`` highest scores, or None when there are none."""
    if not scores:
        return None
    best = sorted(scores, reverse=True)[:limit]
    return sum(best) / len(best)


def blend_credibility(
    avg_skill_score: float | None,
    avg_teaching_rating: float | None,
) -> float:
    """Combine the two credibility components.

    An absent component (None) is skipped instead of counted as zero,
    so a user with skill scores but no teaching feedback is not halved.
    """
    present = [v for v in (avg_skill_score, avg_teaching_rating) if v is not None]
    if not present:
        return 0.0
    return sum(present) / len(present)


def credibility_final_score(base: float, bonus: int) -> int:
    """Add the bonus, round, and clamp to 0-100."""
    return int(clamp(round_half_up(base + bonus)))


def legacy_running_average(old_score: float, sessions: int, sample: float) -> float:
    """Fold one sample into a running mean, rounded to 2 decimals."""
    return round((old_score * sessions + sample) / (sessions + 1), 2)
