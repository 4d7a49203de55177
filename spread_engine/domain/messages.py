"""Human-readable summaries of a split for the preview and thank-you screens"""

from spread_engine.domain.models import SplitResult


def _plural(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def split_summary(result: SplitResult) -> str:
    """One-line description, e.g. '$30.00 spread across 2 people, completing 1 goal'"""
    if not result.allocations:
        return "No eligible needs found for this spread."

    parts = [f"${result.total_amount:.2f} spread across {_plural(result.total_people, 'person', 'people')}"]
    if result.goals_completed > 0:
        parts.append(f"completing {_plural(result.goals_completed, 'goal', 'goals')}")
    return ", ".join(parts)


def impact_message(result: SplitResult) -> str:
    """
    Emotional message tiered by impact.

    Completed goals outrank reach: three or more goals, two goals, one goal,
    then four or more people, two or more people, then the fallback.
    """
    if result.goals_completed >= 3:
        return "You're changing lives today. Three or more goals completed in one act of kindness."
    if result.goals_completed == 2:
        return "Two goals completed! Your generosity just made two people's day."
    if result.goals_completed == 1:
        return "You just helped someone reach their goal. That's the power of community."
    if result.total_people >= 4:
        return "Your love is spreading far and wide. Multiple people feel your kindness today."
    if result.total_people >= 2:
        return "You're making a difference for multiple people at once. That's beautiful."
    return "Every dollar counts. You're part of something bigger."
