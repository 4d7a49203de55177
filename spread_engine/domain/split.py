"""Split engine - allocates one contribution across many open needs"""

import logging
import random
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from spread_engine.config import Settings, settings
from spread_engine.domain.exceptions import InvalidAmountError, InvalidOptionsError
from spread_engine.domain.models import (
    Need,
    RejectedNeed,
    SplitAllocation,
    SplitOptions,
    SplitResult,
    SpreadMode,
)
from spread_engine.domain.money import (
    TOLERANCE_CENTS,
    assign_residual,
    from_cents,
    is_whole_minor_units,
    reaches_goal,
    round_half_even,
    to_cents,
    to_decimal,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Candidate:
    """Need with its validated amounts, plus the same amounts in integer cents"""

    need: Need
    goal: Decimal
    raised: Decimal
    goal_cents: int
    raised_cents: int

    @property
    def gap_cents(self) -> int:
        return max(self.goal_cents - self.raised_cents, 0)


Plan = List[Tuple[_Candidate, int]]


def parse_contribution(amount: object, max_contribution: Optional[Decimal] = None) -> int:
    """
    Validate a contribution amount and return it in cents.

    Raises:
        InvalidAmountError: If the amount is non-numeric, not positive, not a
            whole number of cents or above max_contribution
    """
    try:
        value = to_decimal(amount)
    except ValueError as e:
        raise InvalidAmountError(f"Contribution amount is not numeric: {amount!r}") from e

    if value <= 0:
        raise InvalidAmountError(f"Contribution amount must be positive, got {value}")
    if not is_whole_minor_units(value):
        raise InvalidAmountError(f"Contribution amount {value} is not a whole number of cents")
    if max_contribution is not None and value > max_contribution:
        raise InvalidAmountError(f"Contribution amount {value} exceeds the maximum of {max_contribution}")

    cents = to_cents(value)
    if cents <= 0:
        raise InvalidAmountError(f"Contribution amount must be positive, got {value}")
    return cents


def _coerce_mode(mode: SpreadMode | str) -> SpreadMode:
    try:
        return SpreadMode(mode)
    except ValueError as e:
        allowed = ", ".join(m.value for m in SpreadMode)
        raise InvalidOptionsError(f"Unknown spread mode {mode!r}; expected one of: {allowed}") from e


def _resolve_fee_rate(options: SplitOptions, config: Settings) -> Decimal:
    raw = options.fee_rate if options.fee_rate is not None else config.fee_rate
    try:
        rate = to_decimal(raw)
    except ValueError as e:
        raise InvalidOptionsError(f"Fee rate is not numeric: {raw!r}") from e
    if not (0 <= rate < 1):
        raise InvalidOptionsError(f"Fee rate must be in [0, 1), got {rate}")
    return rate


def _validate_options(options: SplitOptions) -> None:
    if options.max_recipients is not None and options.max_recipients < 1:
        raise InvalidOptionsError("max_recipients must be at least 1")
    if options.category_weights is not None:
        try:
            weights = [to_decimal(w) for w in options.category_weights.values()]
        except ValueError as e:
            raise InvalidOptionsError("Category weights must be numeric") from e
        if any(w < 0 for w in weights):
            raise InvalidOptionsError("Category weights must be non-negative")
        if weights and not any(w > 0 for w in weights):
            raise InvalidOptionsError("At least one category weight must be positive")


def _prepare_candidates(
    needs: Iterable[Need], options: SplitOptions
) -> Tuple[List[_Candidate], List[RejectedNeed]]:
    """
    Apply the caller filters and structural checks.

    Needs outside category_filter / need_ids are skipped silently. Needs with
    a non-positive goal, negative raised amount, non-numeric or fractional-cent
    amounts or a repeated id are rejected and reported, never fatal.
    """
    wanted = set(options.need_ids) if options.need_ids else None
    candidates: List[_Candidate] = []
    rejected: List[RejectedNeed] = []
    seen: set[str] = set()

    for need in needs:
        if options.category_filter is not None and need.category != options.category_filter:
            continue
        if wanted is not None and need.id not in wanted:
            continue

        reason = None
        try:
            goal = to_decimal(need.goal_amount)
            raised = to_decimal(need.raised_amount)
        except ValueError:
            reason = "amounts must be numeric"
        else:
            if goal <= 0:
                reason = "goal_amount must be positive"
            elif raised < 0:
                reason = "raised_amount must not be negative"
            elif not (is_whole_minor_units(goal) and is_whole_minor_units(raised)):
                reason = "amounts must be whole cents"
            elif need.id in seen:
                reason = "duplicate need id"

        if reason is not None:
            logger.warning("Rejected need %s: %s", need.id, reason, extra={"need_id": need.id, "reason": reason})
            rejected.append(RejectedNeed(need_id=need.id, reason=reason))
            continue

        seen.add(need.id)
        candidates.append(
            _Candidate(need=need, goal=goal, raised=raised, goal_cents=to_cents(goal), raised_cents=to_cents(raised))
        )

    return candidates, rejected


def _most_underfunded(candidates: List[_Candidate], limit: Optional[int]) -> List[_Candidate]:
    """Keep the `limit` largest gaps (ties by id), preserving caller order"""
    if limit is None or len(candidates) <= limit:
        return candidates
    chosen = sorted(candidates, key=lambda c: (-c.gap_cents, c.need.id))[:limit]
    chosen_ids = {c.need.id for c in chosen}
    return [c for c in candidates if c.need.id in chosen_ids]


def water_fill(pool: Decimal, capacities: Sequence[Decimal], weights: Sequence[Decimal]) -> List[Decimal]:
    """
    Spread `pool` in proportion to `weights` without exceeding `capacities`.

    Each pass hands every open slot its weighted share of what is left. Slots
    whose remaining capacity is covered by that share are filled to capacity
    and closed; the amount they did not need stays in the pool for the next
    pass. Stops when the pool is exhausted (within TOLERANCE_CENTS) or every
    slot is closed, so at most len(capacities) + 1 passes run.

    Example:
        pool=100, capacities=[10, 90], weights=[1, 1]
        pass 1: share 50 each, slot 0 capped at 10 -> 40 freed
        pass 2: slot 1 takes the remaining 90 -> [10, 90]
    """
    shares = [Decimal(0)] * len(capacities)
    active = [i for i in range(len(capacities)) if capacities[i] > 0 and weights[i] > 0]
    remaining = pool
    passes = 0

    while active and remaining > TOLERANCE_CENTS:
        passes += 1
        total_weight = sum(weights[i] for i in active)
        capped = [
            i for i in active
            if capacities[i] - shares[i] <= remaining * weights[i] / total_weight + TOLERANCE_CENTS
        ]

        if not capped:
            for i in active:
                shares[i] += remaining * weights[i] / total_weight
            remaining = Decimal(0)
            break

        for i in capped:
            remaining -= capacities[i] - shares[i]
            shares[i] = capacities[i]
        active = [i for i in active if i not in capped]

    logger.debug("Water fill finished after %d passes", passes)
    return shares


def _placeable_cents(pool_cents: int, capacities: Sequence[int], weights: Sequence[Decimal]) -> int:
    """Cents that can actually be placed: the pool, or less if every open slot fills"""
    room = sum(c for c, w in zip(capacities, weights) if w > 0)
    return min(pool_cents, room)


def _weighted_cents(pool_cents: int, capacities: List[int], weights: List[Decimal]) -> List[int]:
    """Water-fill in exact Decimal cents, then round half-even and place the residual"""
    shares = water_fill(Decimal(pool_cents), [Decimal(c) for c in capacities], weights)
    rounded = [min(round_half_even(s), c) for s, c in zip(shares, capacities)]
    # zero-weight slots take no share of the residual either
    open_capacities = [c if w > 0 else 0 for c, w in zip(capacities, weights)]
    return assign_residual(rounded, open_capacities, _placeable_cents(pool_cents, capacities, weights))


def _even_spread(pool_cents: int, candidates: List[_Candidate]) -> Plan:
    """Equal shares clipped to each gap, freed money redistributed"""
    capacities = [c.gap_cents for c in candidates]
    amounts = _weighted_cents(pool_cents, capacities, [Decimal(1)] * len(candidates))
    return list(zip(candidates, amounts))


def _priority_spread(pool_cents: int, candidates: List[_Candidate], max_recipients: Optional[int]) -> Plan:
    """Closest to goal first: fill smallest gaps until the money runs out"""
    ordered = sorted(candidates, key=lambda c: (c.gap_cents, c.need.id))
    plan: Plan = []
    remaining = pool_cents

    for candidate in ordered:
        if remaining <= 0:
            break
        if max_recipients is not None and len(plan) >= max_recipients:
            break
        amount = min(candidate.gap_cents, remaining)
        plan.append((candidate, amount))
        remaining -= amount

    return plan


def _category_spread(
    pool_cents: int,
    candidates: List[_Candidate],
    category_weights: Optional[Dict[str, Decimal]],
) -> Plan:
    """Split across categories by weight, then spread evenly inside each"""
    groups: Dict[str, List[_Candidate]] = {}
    for candidate in candidates:
        groups.setdefault(candidate.need.category, []).append(candidate)

    categories = list(groups)
    if category_weights is not None:
        weights = [to_decimal(category_weights.get(cat, 0)) for cat in categories]
        if not any(w > 0 for w in weights):
            logger.warning(
                "No configured category weight matches the eligible needs; weighting by need count",
                extra={"categories": categories},
            )
            weights = [Decimal(len(groups[cat])) for cat in categories]
    else:
        weights = [Decimal(len(groups[cat])) for cat in categories]

    capacities = [sum(c.gap_cents for c in groups[cat]) for cat in categories]
    category_cents = _weighted_cents(pool_cents, capacities, weights)

    plan: Plan = []
    for cat, cents in zip(categories, category_cents):
        if cents > 0:
            plan.extend(_even_spread(cents, groups[cat]))
    return plan


def _random_spread(pool_cents: int, candidates: List[_Candidate], limit: int, seed: int) -> Plan:
    """Seeded shuffle, keep the first `limit` needs, spread evenly"""
    shuffled = list(candidates)
    random.Random(seed).shuffle(shuffled)
    return _even_spread(pool_cents, shuffled[:limit])


def calculate_fee(total_cents: int, fee_rate: Decimal) -> int:
    """Platform fee in cents, banker's rounding"""
    return round_half_even(Decimal(total_cents) * fee_rate)


def _to_allocation(candidate: _Candidate, cents: int) -> SplitAllocation:
    need = candidate.need
    amount = from_cents(cents)
    raised_after = candidate.raised + amount

    return SplitAllocation(
        need_id=need.id,
        amount=amount,
        raised_before=candidate.raised,
        raised_after=raised_after,
        goal_amount=candidate.goal,
        remaining_before=max(candidate.goal - candidate.raised, Decimal(0)),
        will_complete=reaches_goal(raised_after, candidate.goal),
        category=need.category,
        title=need.title,
        owner_user_id=need.owner_user_id,
        owner_name=need.owner_name,
        owner_avatar_url=need.owner_avatar_url,
        owner_city=need.owner_city,
    )


def _build_result(
    mode: SpreadMode,
    requested_cents: int,
    plan: Plan,
    fee_rate: Decimal,
    rejected: List[RejectedNeed],
) -> SplitResult:
    funded = [(c, cents) for c, cents in plan if cents > 0]
    allocations = tuple(_to_allocation(c, cents) for c, cents in funded)
    total_cents = sum(cents for _, cents in funded)
    fee_cents = calculate_fee(total_cents, fee_rate)

    return SplitResult(
        mode=mode,
        requested_amount=from_cents(requested_cents),
        allocations=allocations,
        total_amount=from_cents(total_cents),
        total_people=len(allocations),
        goals_completed=sum(1 for a in allocations if a.will_complete),
        fee=from_cents(fee_cents),
        net_amount=from_cents(total_cents - fee_cents),
        unallocated_amount=from_cents(requested_cents - total_cents),
        rejected=tuple(rejected),
    )


def compute_split(
    contribution_amount: object,
    eligible_needs: Iterable[Need],
    mode: SpreadMode | str = SpreadMode.PRIORITY,
    options: Optional[SplitOptions] = None,
    config: Optional[Settings] = None,
) -> SplitResult:
    """
    Main entry point: allocate a contribution across open needs.

    Flow:
    1. Validate the amount, mode and options
    2. Drop needs outside the caller filters, reject malformed ones
    3. Skip needs already at goal
    4. Run the selected policy in integer cents
    5. Build allocations, fee and aggregate counts

    When every remaining gap is smaller than the contribution the total is
    capped at the sum of gaps and the rest is reported as unallocated_amount.
    An empty eligible set yields an empty result rather than an error.

    Raises:
        InvalidAmountError: Non-positive, non-numeric or fractional-cent amount
        InvalidOptionsError: Unknown mode or out-of-range options
    """
    config = config or settings
    options = options or SplitOptions()

    spread_mode = _coerce_mode(mode)
    requested_cents = parse_contribution(contribution_amount, config.max_contribution)
    _validate_options(options)
    fee_rate = _resolve_fee_rate(options, config)

    candidates, rejected = _prepare_candidates(eligible_needs, options)
    open_candidates = [c for c in candidates if c.gap_cents > 0]

    if not open_candidates:
        logger.info("No eligible needs for split", extra={"mode": spread_mode.value, "rejected": len(rejected)})
        return _build_result(spread_mode, requested_cents, [], fee_rate, rejected)

    if spread_mode is SpreadMode.EVEN:
        selected = _most_underfunded(open_candidates, options.max_recipients)
        plan = _even_spread(requested_cents, selected)
    elif spread_mode is SpreadMode.PRIORITY:
        plan = _priority_spread(requested_cents, open_candidates, options.max_recipients)
    elif spread_mode is SpreadMode.CATEGORY:
        selected = _most_underfunded(open_candidates, options.max_recipients)
        plan = _category_spread(requested_cents, selected, options.category_weights)
    else:
        limit = options.max_recipients or config.random_max_recipients
        plan = _random_spread(requested_cents, open_candidates, limit, options.seed)

    return _build_result(spread_mode, requested_cents, plan, fee_rate, rejected)
