"""
Integration tests for a full session: form input to dashboard.
"""

import pytest
from datetime import date
from decimal import Decimal

from budget_core.errors import DuplicateBudget, ValidationError
from budget_core.models import AuditEventType, BudgetHealth
from budget_core.orchestrator import create_session
from budget_core.queries import PeriodFilter
from budget_core.services.remote import InMemoryAuditStorage, InMemoryBackend
from budget_core.store import SequentialIdGenerator


TODAY = date(2024, 5, 10)


@pytest.fixture
def backend():
    return InMemoryBackend(seed={
        "categories": [{"id": "food", "name": "Food", "color": "#F59E0B", "icon": "🍔"}],
    })


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def session(backend, audit_storage):
    return create_session(
        backend=backend,
        audit_storage=audit_storage,
        id_generator=SequentialIdGenerator(),
    )


def lunch(amount="50"):
    return {
        "amount": amount,
        "category": "food",
        "description": "Lunch",
        "paymentMethod": "Cash",
        "date": "2024-05-01",
    }


class TestFinanceSession:
    """End-to-end flows through FinanceSession."""

    @pytest.mark.asyncio
    async def test_start_loads_backend(self, session):
        snapshot = await session.start()
        assert [c.id for c in snapshot.categories] == ["food"]

    @pytest.mark.asyncio
    async def test_budget_tracking_flow(self, session, backend):
        """Create a budget, spend against it, and see it on the dashboard."""
        await session.start()
        budget_record, _ = await session.add_budget(
            {"categoryId": "food", "amount": "100", "period": "monthly"}, wait=True
        )
        await session.add_expense(lunch("85"), today=TODAY, wait=True)

        view = session.dashboard(today=TODAY)
        assert view.summary.total_expenses == Decimal("85")
        assert view.budgets.statuses[0].status == BudgetHealth.WARNING
        assert [a.category_name for a in view.alerts] == ["Food"]

        stored = backend.get("budgets", budget_record.entity_id)
        assert Decimal(stored["spent"]) == Decimal("85")

    @pytest.mark.asyncio
    async def test_monthly_report(self, session):
        await session.start()
        await session.add_expense(lunch(), today=TODAY)
        await session.add_income({
            "amount": "1000",
            "source": "Acme",
            "description": "Salary",
            "type": "salary",
            "date": "2024-05-01",
        }, today=TODAY)
        await session.wait_for_sync()

        report = session.report(PeriodFilter.monthly(2024, 5), today=TODAY)
        assert report.total_expenses == Decimal("50")
        assert report.total_income == Decimal("1000")
        assert report.category_breakdown[0].name == "Food"
        assert report.savings_rate == pytest.approx(95.0)

    @pytest.mark.asyncio
    async def test_default_report_is_current_month(self, session):
        await session.start()
        report = session.report(today=TODAY)
        assert (report.year, report.month) == (2024, 5)

    @pytest.mark.asyncio
    async def test_invalid_input_changes_nothing(self, session, audit_storage):
        await session.start()
        before = session.snapshot

        with pytest.raises(ValidationError):
            await session.add_expense(lunch("-10"), today=TODAY)

        assert session.snapshot is before
        assert audit_storage.events[-1].event_type == AuditEventType.VALIDATION_FAILED

    @pytest.mark.asyncio
    async def test_duplicate_budget(self, session):
        await session.start()
        form = {"categoryId": "food", "amount": "100", "period": "monthly"}
        await session.add_budget(form, wait=True)

        with pytest.raises(DuplicateBudget):
            await session.add_budget(form, wait=True)
        assert len(session.snapshot.budgets) == 1

    @pytest.mark.asyncio
    async def test_warnings_are_returned(self, session):
        await session.start()
        _, result = await session.add_expense(
            {**lunch(), "category": "travel"}, today=TODAY, wait=True
        )
        assert result.is_valid
        assert result.warnings

    @pytest.mark.asyncio
    async def test_category_lifecycle(self, session, backend):
        await session.start()
        record, _ = await session.add_category({"name": "Eating Out", "color": "#EF4444"}, wait=True)
        assert record.entity_id == "eating-out"

        await session.update_category("eating-out", {"name": "Dining"}, wait=True)
        assert session.snapshot.categories[-1].name == "Dining"
        assert backend.get("categories", "eating-out")["name"] == "Dining"

        await session.update_category("eating-out", {"color": "#000000"}, wait=True)
        assert session.snapshot.categories[-1].color == "#000000"
        assert session.snapshot.categories[-1].name == "Dining"
        assert backend.get("categories", "eating-out")["color"] == "#000000"

        await session.delete_category("eating-out", wait=True)
        assert backend.get("categories", "eating-out") is None

    @pytest.mark.asyncio
    async def test_delete_expense(self, session):
        await session.start()
        record, _ = await session.add_expense(lunch(), today=TODAY, wait=True)
        await session.delete_expense(record.entity_id, wait=True)
        assert session.snapshot.expenses == ()

    @pytest.mark.asyncio
    async def test_close_drops_state(self, session):
        await session.start()
        await session.add_expense(lunch(), today=TODAY)
        await session.close()
        assert session.snapshot.is_empty
