"""
Session Orchestrator for Budget Tracker Core

This module ties together all the components and defines the
end-to-end flows for:
1. Session start (fetch every collection → load the store)
2. User actions (raw input → validate → intent → apply → sync)
3. Views (snapshot → dashboard / period report)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches the store without passing validation
- The store is the only writer of state; views only read snapshots
- Every step is audited

There is no global state. A FinanceSession is created at session start,
passed to whoever needs it, and closed at session end.
"""

from datetime import date
from typing import Any, Optional
from uuid import UUID

from budget_core.audit import AuditLogger, create_correlation_id
from budget_core.config import Settings, get_settings
from budget_core.models.entities import Snapshot
from budget_core.models.intents import (
    DeleteBudget,
    DeleteCategory,
    DeleteExpense,
    DeleteIncome,
    IntentBase,
)
from budget_core.models.reports import DashboardView, PeriodReport
from budget_core.models.sync import SyncRecord
from budget_core.models.validation import ValidationResult
from budget_core.queries import PeriodFilter, ReportBuilder, ReportPeriod
from budget_core.services.remote import (
    AuditStorageInterface,
    InMemoryBackend,
    RemoteBackend,
)
from budget_core.store import EntityStore, IdGenerator
from budget_core.sync import SyncCoordinator
from budget_core.validation import IntentValidator


class FinanceSession:
    """
    One user's budgeting session.

    Flow for every user action:
    1. Validate → Two-stage validation of the raw form input
    2. Intent → Built by the validator, never by hand
    3. Apply → Store swaps in the next snapshot
    4. Sync → Coordinator mirrors the change to the backend

    Invalid input raises ValidationError (with the issues) and
    changes nothing.
    """

    def __init__(
        self,
        store: EntityStore,
        coordinator: SyncCoordinator,
        validator: Optional[IntentValidator] = None,
        report_builder: Optional[ReportBuilder] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._coordinator = coordinator
        self._validator = validator or IntentValidator()
        self._report_builder = report_builder or ReportBuilder()
        self._audit_logger = audit_logger

    @property
    def snapshot(self) -> Snapshot:
        return self._store.get_snapshot()

    @property
    def notices(self) -> list:
        """Remote failures reported so far (optimistic policy)."""
        return self._coordinator.notices

    @property
    def validator(self) -> IntentValidator:
        return self._validator

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> Snapshot:
        """Load every collection from the backend."""
        return await self._coordinator.load_all()

    async def close(self) -> None:
        """Wait for outstanding remote calls, then drop all state."""
        await self._coordinator.drain()
        self._store.reset()

    async def wait_for_sync(self) -> None:
        await self._coordinator.drain()

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    async def _run(
        self,
        result: ValidationResult,
        wait: bool,
        correlation_id: Optional[UUID],
    ) -> tuple[SyncRecord, ValidationResult]:
        correlation_id = correlation_id or create_correlation_id()

        if not result.is_valid and self._audit_logger:
            await self._audit_logger.log_validation_failed(
                result.action,
                [issue.model_dump() for issue in result.issues],
                correlation_id,
            )

        intent = self._validator.require_valid(result)
        record = await self._send(intent, wait, correlation_id)
        return record, result

    async def _send(
        self,
        intent: IntentBase,
        wait: bool,
        correlation_id: Optional[UUID] = None,
    ) -> SyncRecord:
        if wait:
            return await self._coordinator.submit(intent, correlation_id)
        return await self._coordinator.dispatch(intent, correlation_id)

    async def add_expense(
        self,
        data: dict[str, Any],
        today: Optional[date] = None,
        wait: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[SyncRecord, ValidationResult]:
        """
        Record an expense from form input.

        Returns:
            (sync_record, validation_result). Warnings are on the result.
        """
        result = self._validator.validate_expense(data, self.snapshot, today)
        return await self._run(result, wait, correlation_id)

    async def add_income(
        self,
        data: dict[str, Any],
        today: Optional[date] = None,
        wait: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[SyncRecord, ValidationResult]:
        result = self._validator.validate_income(data, self.snapshot, today)
        return await self._run(result, wait, correlation_id)

    async def add_category(
        self,
        data: dict[str, Any],
        wait: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[SyncRecord, ValidationResult]:
        result = self._validator.validate_category(data, self.snapshot)
        return await self._run(result, wait, correlation_id)

    async def update_category(
        self,
        category_id: str,
        data: dict[str, Any],
        wait: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[SyncRecord, ValidationResult]:
        """Rename, recolor or re-icon a category. Its id never changes."""
        result = self._validator.validate_category(data, self.snapshot, editing_id=category_id)
        return await self._run(result, wait, correlation_id)

    async def add_budget(
        self,
        data: dict[str, Any],
        wait: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[SyncRecord, ValidationResult]:
        result = self._validator.validate_budget(data, self.snapshot)
        return await self._run(result, wait, correlation_id)

    async def update_budget(
        self,
        budget_id: str,
        data: dict[str, Any],
        wait: bool = False,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[SyncRecord, ValidationResult]:
        result = self._validator.validate_budget(data, self.snapshot, editing_id=budget_id)
        return await self._run(result, wait, correlation_id)

    async def delete_expense(self, expense_id: str, wait: bool = False) -> SyncRecord:
        return await self._send(DeleteExpense(id=expense_id), wait)

    async def delete_income(self, income_id: str, wait: bool = False) -> SyncRecord:
        return await self._send(DeleteIncome(id=income_id), wait)

    async def delete_category(self, category_id: str, wait: bool = False) -> SyncRecord:
        """Budgets and expenses referencing the category are kept."""
        return await self._send(DeleteCategory(id=category_id), wait)

    async def delete_budget(self, budget_id: str, wait: bool = False) -> SyncRecord:
        return await self._send(DeleteBudget(id=budget_id), wait)

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def dashboard(self, today: Optional[date] = None) -> DashboardView:
        return self._report_builder.dashboard(self.snapshot, today)

    def report(
        self,
        period_filter: Optional[PeriodFilter] = None,
        today: Optional[date] = None,
    ) -> PeriodReport:
        """Period report; defaults to the current month."""
        period_filter = period_filter or PeriodFilter.current(ReportPeriod.MONTHLY, today)
        return self._report_builder.period_report(self.snapshot, period_filter, today)


def create_session(
    backend: Optional[RemoteBackend] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
    id_generator: Optional[IdGenerator] = None,
    settings: Optional[Settings] = None,
) -> FinanceSession:
    """
    Factory function to wire a session.

    Args:
        backend: Remote backend. Defaults to an empty in-memory backend.
        audit_storage: Where audit events are persisted.
                    If None, audit events are only logged locally.
        id_generator: Id strategy for new entities (uuid4 by default).
        settings: Settings to use instead of the environment.

    Returns:
        A session ready for `await session.start()`
    """
    settings = settings or get_settings()
    audit_logger = AuditLogger(audit_storage)
    store = EntityStore(id_generator=id_generator)

    coordinator = SyncCoordinator(
        store,
        backend or InMemoryBackend(),
        audit_logger=audit_logger,
        settings=settings.sync,
    )

    return FinanceSession(
        store=store,
        coordinator=coordinator,
        validator=IntentValidator(settings.app),
        report_builder=ReportBuilder(settings.analytics),
        audit_logger=audit_logger,
    )
