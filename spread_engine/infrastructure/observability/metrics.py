"""Prometheus metrics for spread volume, goal completion and rejected input"""

from prometheus_client import Counter, Histogram

from spread_engine.domain.models import SplitResult
from spread_engine.domain.money import to_cents

split_counter = Counter(
    "spread_split_total",
    "Total splits computed",
    ["mode", "outcome"],  # outcome: allocated | empty
)

goals_completed_counter = Counter(
    "spread_goals_completed_total",
    "Needs a split would carry to their goal",
    ["mode"],
)

rejected_needs_counter = Counter(
    "spread_rejected_needs_total",
    "Needs dropped as structurally invalid",
)

unallocated_counter = Counter(
    "spread_unallocated_cents_total",
    "Contribution cents left over because every gap was filled",
)

recipients_histogram = Histogram(
    "spread_recipients_per_split",
    "Number of needs funded by one split",
    buckets=[0, 1, 2, 3, 4, 6, 10, 20, 50],
)


def record_split(result: SplitResult) -> None:
    """Record split metrics for monitoring spread reach and leftovers"""
    mode = result.mode.value
    outcome = "allocated" if result.allocations else "empty"
    split_counter.labels(mode=mode, outcome=outcome).inc()

    if result.goals_completed:
        goals_completed_counter.labels(mode=mode).inc(result.goals_completed)
    if result.rejected:
        rejected_needs_counter.inc(len(result.rejected))

    unallocated_cents = to_cents(result.unallocated_amount)
    if unallocated_cents > 0:
        unallocated_counter.inc(unallocated_cents)

    recipients_histogram.observe(result.total_people)
