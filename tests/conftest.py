"""Pytest fixtures for testing"""

from decimal import Decimal
from typing import Callable

import pytest

from spread_engine.config import Settings
from spread_engine.domain.models import Need
from spread_engine.service.planner import SplitPlanner


@pytest.fixture
def make_need() -> Callable[..., Need]:
    """Factory for needs with sensible defaults"""

    def _make(need_id: str, goal, raised=0, category: str = "Bills", **kwargs) -> Need:
        return Need(
            id=need_id,
            category=category,
            goal_amount=Decimal(str(goal)),
            raised_amount=Decimal(str(raised)),
            title=kwargs.pop("title", f"Need {need_id}"),
            **kwargs,
        )

    return _make


@pytest.fixture
def config() -> Settings:
    """Settings isolated from the environment"""
    return Settings(_env_file=None, fee_rate=Decimal("0"), max_contribution=None, random_max_recipients=6)


@pytest.fixture
def planner(config: Settings) -> SplitPlanner:
    return SplitPlanner(config=config)


@pytest.fixture
def community_needs() -> list[dict]:
    """Need rows as the app's data source delivers them, open and closed"""
    return [
        {"id": "n1", "userId": "u1", "userName": "Sarah Mitchell", "userCity": "Austin, TX",
         "title": "Electric bill is due Friday", "category": "Bills",
         "goalAmount": 85, "raisedAmount": 62, "status": "Collecting"},
        {"id": "n2", "userId": "u2", "userName": "Marcus Johnson", "userCity": "Chicago, IL",
         "title": "Textbooks for spring semester", "category": "Other",
         "goalAmount": 120, "raisedAmount": 45, "status": "Collecting"},
        {"id": "n3", "userId": "u5", "userName": "Aisha Williams", "userCity": "Atlanta, GA",
         "title": "Groceries for the kids this week", "category": "Groceries",
         "goalAmount": 75, "raisedAmount": 75, "status": "Goal Met"},
        {"id": "n4", "userId": "u3", "userName": "Elena Rodriguez", "userCity": "Denver, CO",
         "title": "New tires before the snow", "category": "Transportation",
         "goalAmount": 200, "raisedAmount": 134, "status": "Collecting"},
        {"id": "n5", "userId": "u7", "userName": "Priya Sharma", "userCity": "Boston, MA",
         "title": "Gym membership renewal", "category": "Health/Fitness",
         "goalAmount": 45, "raisedAmount": 30, "status": "Collecting"},
        {"id": "n6", "userId": "u8", "userName": "Tyler Brooks", "userCity": "Nashville, TN",
         "title": "Bus pass for the month", "category": "Transportation",
         "goalAmount": 65, "raisedAmount": 65, "status": "Payout Requested"},
        {"id": "n7", "userId": "u1", "userName": "Sarah Mitchell", "userCity": "Austin, TX",
         "title": "School supplies for my daughter", "category": "Kids",
         "goalAmount": 40, "raisedAmount": 28, "status": "Collecting"},
        {"id": "n8", "userId": "u4", "userName": "James Park", "userCity": "Seattle, WA",
         "title": "Prescription co-pay this month", "category": "Health/Fitness",
         "goalAmount": 55, "raisedAmount": 55, "status": "Paid"},
        {"id": "n9", "userId": "u6", "userName": "David Chen", "userCity": "Portland, OR",
         "title": "Internet bill for the month", "category": "Bills",
         "goalAmount": 60, "raisedAmount": 18, "status": "Collecting"},
        {"id": "n10", "userId": "u5", "userName": "Aisha Williams", "userCity": "Atlanta, GA",
         "title": "Soccer cleats for my son", "category": "Kids",
         "goalAmount": 50, "raisedAmount": 35, "status": "Collecting"},
        {"id": "mr1", "userId": "u1", "userName": "Sarah Mitchell", "userCity": "Austin, TX",
         "title": "Pilates class pass for the month", "category": "Self-Care",
         "goalAmount": 60, "raisedAmount": 42, "status": "Collecting"},
        {"id": "mr2", "userId": "u5", "userName": "Aisha Williams", "userCity": "Atlanta, GA",
         "title": "Hair touch-up before my birthday", "category": "Self-Care",
         "goalAmount": 75, "raisedAmount": 55, "status": "Collecting"},
        {"id": "mr4", "userId": "u7", "userName": "Priya Sharma", "userCity": "Boston, MA",
         "title": "Pottery class this spring", "category": "Self-Care",
         "goalAmount": 55, "raisedAmount": 18, "status": "Collecting"},
    ]
