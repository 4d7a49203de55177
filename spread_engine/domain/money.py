"""Minor-unit arithmetic: parsing, banker's rounding and residual placement"""

from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import List, Sequence

MINOR_UNIT = Decimal("0.01")

# 0.005 of a cent. Absorbs float noise from upstream aggregation; shared by the
# goal-completion check, the redistribution loop and the whole-cents check.
COMPLETION_TOLERANCE = Decimal("0.00005")
TOLERANCE_CENTS = COMPLETION_TOLERANCE / MINOR_UNIT


def to_decimal(value: object) -> Decimal:
    """
    Convert a caller-supplied monetary value to Decimal.

    Floats go through repr() so 0.1 becomes Decimal("0.1") rather than its
    binary expansion. Booleans, NaN and infinities are rejected.

    Raises:
        ValueError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a monetary value: {value!r}")
    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, float):
            result = Decimal(repr(value))
        elif isinstance(value, (int, str)):
            result = Decimal(str(value).strip())
        else:
            raise ValueError(f"Not a monetary value: {value!r}")
    except InvalidOperation as e:
        raise ValueError(f"Not a monetary value: {value!r}") from e

    if not result.is_finite():
        raise ValueError(f"Not a finite monetary value: {value!r}")
    return result


def round_half_even(amount_cents: Decimal) -> int:
    """Round a fractional cent amount to whole cents, ties to even"""
    return int(amount_cents.quantize(Decimal(1), rounding=ROUND_HALF_EVEN))


def to_cents(value: object) -> int:
    """Convert a monetary value to integer cents using banker's rounding"""
    return round_half_even(to_decimal(value) / MINOR_UNIT)


def from_cents(cents: int) -> Decimal:
    """Integer cents to a two-place Decimal: 1500 -> Decimal("15.00")"""
    return Decimal(cents) * MINOR_UNIT


def is_whole_minor_units(value: Decimal) -> bool:
    """True if value sits on a cent boundary, within COMPLETION_TOLERANCE"""
    return abs(value - value.quantize(MINOR_UNIT, rounding=ROUND_HALF_EVEN)) <= COMPLETION_TOLERANCE


def reaches_goal(raised: Decimal, goal: Decimal) -> bool:
    """Goal completion check shared by every policy"""
    return raised + COMPLETION_TOLERANCE >= goal


def assign_residual(amounts: Sequence[int], capacities: Sequence[int], target: int) -> List[int]:
    """
    Reconcile rounded shares with the amount that must be placed.

    The residual (target minus the sum of rounded shares) goes to the first
    entry in order. When that entry is already at its capacity the remainder
    moves to the next entry with headroom, so no share ever exceeds its
    capacity. An entry that rounded to zero still counts as having headroom
    and can be funded this way; give it a capacity of 0 to exclude it.

    A negative residual is taken from the first entries still below capacity,
    then from filled ones; an entry only drops to zero if nothing else can
    give.

    Example:
        10 cents over 3 equal shares -> rounded [3, 3, 3], residual 1
        -> [4, 3, 3]
    """
    result = list(amounts)
    residual = target - sum(result)

    if residual > 0:
        for i, capacity in enumerate(capacities):
            if residual == 0:
                break
            take = min(capacity - result[i], residual)
            if take > 0:
                result[i] += take
                residual -= take

    elif residual < 0:
        # Entries still below capacity give first so filled gaps stay complete.
        below = [i for i in range(len(result)) if result[i] < capacities[i]]
        at_capacity = [i for i in range(len(result)) if result[i] >= capacities[i]]
        for indices, floor in ((below, 1), (at_capacity, 1), (range(len(result)), 0)):
            for i in indices:
                if residual == 0:
                    break
                give = min(result[i] - floor, -residual)
                if give > 0:
                    result[i] -= give
                    residual += give

    return result
