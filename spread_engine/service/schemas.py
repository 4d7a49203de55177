"""Pydantic schemas for planning request/response validation"""

from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from spread_engine.domain.messages import impact_message, split_summary
from spread_engine.domain.models import Need, SplitAllocation, SplitResult, SpreadMode
from spread_engine.domain.money import MINOR_UNIT

COLLECTING = "Collecting"


class NeedRecord(BaseModel):
    """Need row as delivered by the need data source"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    category: str = "Other"
    goal_amount: Decimal = Field(..., alias="goalAmount")
    raised_amount: Decimal = Field(Decimal("0"), alias="raisedAmount")
    title: str = ""
    status: Optional[str] = None
    user_id: Optional[str] = Field(None, alias="userId")
    user_name: Optional[str] = Field(None, alias="userName")
    user_avatar: Optional[str] = Field(None, alias="userAvatar")
    user_city: Optional[str] = Field(None, alias="userCity")

    @property
    def is_collecting(self) -> bool:
        return self.status is None or self.status == COLLECTING

    def to_need(self) -> Need:
        return Need(
            id=self.id,
            category=self.category,
            goal_amount=self.goal_amount,
            raised_amount=self.raised_amount,
            title=self.title,
            owner_user_id=self.user_id,
            owner_name=self.user_name,
            owner_avatar_url=self.user_avatar,
            owner_city=self.user_city,
        )


class SplitRequest(BaseModel):
    """Request body for SplitPlanner.plan"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    amount: Decimal
    mode: SpreadMode = SpreadMode.PRIORITY
    needs: List[Dict[str, Any]] = Field(default_factory=list)
    category_filter: Optional[str] = Field(None, alias="categoryFilter")
    max_recipients: Optional[int] = Field(None, alias="maxRecipients")
    need_ids: Optional[List[str]] = Field(None, alias="needIds")
    category_weights: Optional[Dict[str, Decimal]] = Field(None, alias="categoryWeights")
    seed: int = 0
    fee_rate: Optional[Decimal] = Field(None, alias="feeRate")


class AllocationSchema(BaseModel):
    """Single allocation card in the preview"""

    model_config = ConfigDict(populate_by_name=True)

    need_id: str = Field(..., alias="needId")
    need_title: str = Field(..., alias="needTitle")
    user_name: Optional[str] = Field(None, alias="userName")
    user_avatar: Optional[str] = Field(None, alias="userAvatar")
    user_city: Optional[str] = Field(None, alias="userCity")
    category: str
    amount: Decimal
    goal_amount: Decimal = Field(..., alias="goalAmount")
    raised_before: Decimal = Field(..., alias="raisedBefore")
    raised_after: Decimal = Field(..., alias="raisedAfter")
    will_complete: bool = Field(..., alias="willComplete")
    remaining: Decimal

    @classmethod
    def from_allocation(cls, allocation: SplitAllocation) -> "AllocationSchema":
        """Need snapshots keep caller precision; the card shows them in cents"""
        return cls(
            need_id=allocation.need_id,
            need_title=allocation.title,
            user_name=allocation.owner_name,
            user_avatar=allocation.owner_avatar_url,
            user_city=allocation.owner_city,
            category=allocation.category,
            amount=allocation.amount,
            goal_amount=allocation.goal_amount.quantize(MINOR_UNIT),
            raised_before=allocation.raised_before.quantize(MINOR_UNIT),
            raised_after=allocation.raised_after.quantize(MINOR_UNIT),
            will_complete=allocation.will_complete,
            remaining=allocation.remaining_before.quantize(MINOR_UNIT),
        )


class RejectedSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    need_id: str = Field(..., alias="needId")
    reason: str


class SplitResponse(BaseModel):
    """Response for SplitPlanner.plan"""

    model_config = ConfigDict(populate_by_name=True)

    mode: SpreadMode
    requested_amount: Decimal = Field(..., alias="requestedAmount")
    allocations: List[AllocationSchema]
    total_amount: Decimal = Field(..., alias="totalAmount")
    total_people: int = Field(..., alias="totalPeople")
    goals_completed: int = Field(..., alias="goalsCompleted")
    fee: Decimal
    net_amount: Decimal = Field(..., alias="netAmount")
    unallocated_amount: Decimal = Field(..., alias="unallocatedAmount")
    rejected: List[RejectedSchema]
    summary: str
    impact_message: str = Field(..., alias="impactMessage")

    @classmethod
    def from_result(cls, result: SplitResult) -> "SplitResponse":
        return cls(
            mode=result.mode,
            requested_amount=result.requested_amount,
            allocations=[AllocationSchema.from_allocation(a) for a in result.allocations],
            total_amount=result.total_amount,
            total_people=result.total_people,
            goals_completed=result.goals_completed,
            fee=result.fee,
            net_amount=result.net_amount,
            unallocated_amount=result.unallocated_amount,
            rejected=[RejectedSchema(need_id=r.need_id, reason=r.reason) for r in result.rejected],
            summary=split_summary(result),
            impact_message=impact_message(result),
        )
