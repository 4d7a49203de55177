"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional, Tuple


class SpreadMode(str, Enum):
    """Distribution policy used to spread one contribution over many needs"""

    EVEN = "even"
    PRIORITY = "priority"  # "Closest to goal" in the app
    CATEGORY = "category"
    RANDOM = "random"


@dataclass(frozen=True)
class Need:
    """Open funding request supplied by the need data source"""

    id: str
    category: str
    goal_amount: Decimal
    raised_amount: Decimal
    title: str = ""
    owner_user_id: Optional[str] = None
    owner_name: Optional[str] = None
    owner_avatar_url: Optional[str] = None
    owner_city: Optional[str] = None


@dataclass(frozen=True)
class SplitOptions:
    """Caller-tunable knobs for a single split"""

    category_filter: Optional[str] = None
    max_recipients: Optional[int] = None
    need_ids: Optional[Tuple[str, ...]] = None  # "Choose specific people"
    category_weights: Optional[Dict[str, Decimal]] = None
    seed: int = 0  # Random mode only
    fee_rate: Optional[Decimal] = None  # Falls back to settings.fee_rate


@dataclass(frozen=True)
class SplitAllocation:
    """Portion of one contribution assigned to one need"""

    need_id: str
    amount: Decimal
    raised_before: Decimal
    raised_after: Decimal
    goal_amount: Decimal
    remaining_before: Decimal
    will_complete: bool
    category: str
    title: str = ""
    owner_user_id: Optional[str] = None
    owner_name: Optional[str] = None
    owner_avatar_url: Optional[str] = None
    owner_city: Optional[str] = None


@dataclass(frozen=True)
class RejectedNeed:
    """Need dropped from the eligible set because it is structurally invalid"""

    need_id: str
    reason: str


@dataclass(frozen=True)
class SplitResult:
    """Allocation plan and fee breakdown for one contribution"""

    mode: SpreadMode
    requested_amount: Decimal
    allocations: Tuple[SplitAllocation, ...]
    total_amount: Decimal
    total_people: int
    goals_completed: int
    fee: Decimal
    net_amount: Decimal
    unallocated_amount: Decimal
    rejected: Tuple[RejectedNeed, ...] = field(default_factory=tuple)
