"""
Shared fixtures for Tripmate tests.

No real API calls and nothing written outside tmp_path.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from tripmate.audit import AuditLogger
from tripmate.config import AppSettings
from tripmate.models.trip import (
    Contribution,
    Expense,
    ExpenseCategory,
    LuggageCategory,
    LuggageItem,
    Member,
    Trip,
)
from tripmate.services.storage import InMemoryAuditStorage, InMemoryTripStorage
from tripmate.state import TripStore
from tripmate.validation import TripInputValidator

ALICE = Member(id="m_alice", name="Alice")
BOB = Member(id="m_bob", name="Bob")
CAROL = Member(id="m_carol", name="Carol")


def make_expense(
    expense_id: str,
    amount: str,
    paid_by: str = ALICE.id,
    category: ExpenseCategory = ExpenseCategory.MISC,
    day: int = 1,
    title: str = "Expense",
) -> Expense:
    return Expense(
        id=expense_id,
        title=title,
        amount=Decimal(amount),
        category=category,
        date=datetime(2024, 6, day, 12, 0, tzinfo=timezone.utc),
        paid_by=paid_by,
    )


def make_contribution(contribution_id: str, member_id: str, amount: str) -> Contribution:
    return Contribution(id=contribution_id, member_id=member_id, amount=Decimal(amount))


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(
        default_trip_name="My Awesome Trip",
        seed_member_name="Me",
        seed_contribution=Decimal("500"),
        currency_symbol="$",
        max_expense_amount=Decimal("100000"),
        future_date_tolerance_days=1,
    )


@pytest.fixture
def trip() -> Trip:
    """Two members, one contribution, one expense, one luggage item."""
    return Trip(
        id="trip_1",
        name="Lisbon",
        members=(ALICE, BOB),
        luggage=(
            LuggageItem(
                id="lug_1",
                name="Passport",
                category=LuggageCategory.DOCUMENTS,
                added_by=ALICE.id,
            ),
        ),
        expenses=(make_expense("exp_1", "300", category=ExpenseCategory.FOOD),),
        contributions=(make_contribution("contr_1", ALICE.id, "500"),),
    )


@pytest.fixture
def audit_storage() -> InMemoryAuditStorage:
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage) -> AuditLogger:
    return AuditLogger(audit_storage)


@pytest.fixture
def trip_storage() -> InMemoryTripStorage:
    return InMemoryTripStorage()


@pytest.fixture
def store(trip_storage, audit_logger, trip) -> TripStore:
    return TripStore(trip_storage, audit_logger, initial_trip=trip)


@pytest.fixture
def validator(app_settings) -> TripInputValidator:
    return TripInputValidator(app_settings)
