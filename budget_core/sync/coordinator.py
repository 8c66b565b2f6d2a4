"""
Sync Coordinator

DESIGN DECISION: The local store and the remote backend are sequenced
by ONE component under an explicit policy.

OPTIMISTIC (default):
- The mutation is applied locally first, unconditionally
- Remote calls run afterwards as background tasks
- A failed call is reported (audit log, notices, record) and the local
  change is kept. There is no rollback.

STRICT:
- The remote calls run first
- The mutation is applied locally only once every call is confirmed
- A failed call leaves the store unchanged and raises SyncError

In both modes transient transport failures are retried with tenacity,
and mutations are applied in submission order. Optimistic remote calls
are also sent in submission order: each background sync waits for the
one queued before it, so a retry never lets a later intent overtake.
"""

import asyncio
from typing import Any, Optional
from uuid import UUID

import structlog
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from budget_core.audit import AuditLogger, create_correlation_id
from budget_core.config import SyncPolicy, SyncSettings, get_settings
from budget_core.errors import (
    NotFoundError,
    RemoteUnavailableError,
    SyncError,
    TransportError,
    ValidationError,
)
from budget_core.models.entities import Collection, Snapshot
from budget_core.models.intents import AddExpense, IntentBase
from budget_core.models.sync import LocalState, RemoteCall, RemoteState, SyncRecord
from budget_core.services.remote import RemoteBackend
from budget_core.store import EntityStore, apply_intent, assign_id


logger = structlog.get_logger(__name__)

# Failures a remote call can end with; anything else is a bug and propagates
REMOTE_FAILURES = (TransportError, NotFoundError)


def plan_remote_calls(
    intent: IntentBase,
    before: Snapshot,
    after: Snapshot,
) -> list[RemoteCall]:
    """
    Backend requests that mirror one local mutation.

    - add    -> create(resource, entity)
    - update -> update(resource, id, patch)
    - delete -> delete(resource, id)

    An expense that raised a budget's `spent` also updates that budget.
    A no-op mutation needs no calls.
    """
    if after is before:
        return []

    resource = intent.collection.value

    if intent.is_add:
        entity = next(
            item for item in after.collection(intent.collection) if item.id == intent.id
        )
        calls = [RemoteCall(
            operation="create",
            resource=resource,
            entity_id=intent.id,
            payload=entity.to_payload(),
        )]

        if isinstance(intent, AddExpense):
            previous = {budget.id: budget.spent for budget in before.budgets}
            for budget in after.budgets:
                if budget.spent != previous.get(budget.id):
                    calls.append(RemoteCall(
                        operation="update",
                        resource=Collection.BUDGETS.value,
                        entity_id=budget.id,
                        payload={"spent": budget.to_payload()["spent"]},
                    ))
        return calls

    if intent.kind.startswith("update_"):
        patch = intent.patch.model_dump(
            by_alias=True,
            mode="json",
            exclude_unset=True,
            exclude_none=True,
        )
        return [RemoteCall(
            operation="update",
            resource=resource,
            entity_id=intent.id,
            payload=patch,
        )]

    return [RemoteCall(operation="delete", resource=resource, entity_id=intent.id)]


class SyncCoordinator:
    """
    Applies intents to the store and mirrors them to the backend.

    Usage:
        coordinator = SyncCoordinator(store, backend, audit_logger)
        await coordinator.load_all()
        record = await coordinator.dispatch(AddExpense(expense=draft))
        await coordinator.drain()
    """

    def __init__(
        self,
        store: EntityStore,
        backend: RemoteBackend,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[SyncSettings] = None,
    ):
        self._store = store
        self._backend = backend
        self._audit_logger = audit_logger
        self._settings = settings or get_settings().sync

        self._tasks: set[asyncio.Task] = set()
        self._tail: Optional[asyncio.Task] = None
        self.records: list[SyncRecord] = []
        self.notices: list[SyncError] = []

    @property
    def policy(self) -> SyncPolicy:
        return self._settings.policy

    @property
    def pending_count(self) -> int:
        """Remote tasks still in flight."""
        return len(self._tasks)

    # -------------------------------------------------------------------------
    # Remote calls
    # -------------------------------------------------------------------------

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self._settings.max_attempts),
            wait=wait_exponential(
                multiplier=self._settings.backoff_multiplier,
                min=self._settings.backoff_min_seconds,
                max=self._settings.backoff_max_seconds,
            ),
            retry=retry_if_exception_type(RemoteUnavailableError),
            reraise=True,
        )

    async def _send(self, call: RemoteCall) -> Any:
        """Perform one backend request, retrying transient failures."""
        async for attempt in self._retrying():
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info(
                        "remote_call_retry",
                        operation=call.operation,
                        resource=call.resource,
                        attempt=attempt.retry_state.attempt_number,
                    )
                if call.operation == "create":
                    return await self._backend.create(call.resource, call.payload)
                if call.operation == "update":
                    return await self._backend.update(call.resource, call.entity_id, call.payload)
                return await self._backend.delete(call.resource, call.entity_id)

    async def _fetch(self, resource: str) -> list[dict]:
        async for attempt in self._retrying():
            with attempt:
                return await self._backend.fetch_all(resource)

    async def _send_all(self, record: SyncRecord) -> None:
        """
        Send the record's calls in order, stopping at the first failure.

        Raises:
            SyncError: wrapping the transport failure
        """
        for call in record.calls:
            try:
                await self._send(call)
            except REMOTE_FAILURES as e:
                record.remote_state = RemoteState.FAILED
                record.error = str(e)
                raise SyncError(
                    f"{call.operation} {call.resource}/{call.entity_id} failed: {e}",
                    intent_kind=record.intent_kind,
                    resource=call.resource,
                    cause=e,
                ) from e
        record.remote_state = RemoteState.CONFIRMED

    # -------------------------------------------------------------------------
    # Session start
    # -------------------------------------------------------------------------

    async def load_all(self) -> Snapshot:
        """
        Fetch all four collections and load them into the store.

        A collection that cannot be fetched is left empty and reported;
        the others still load.
        """
        correlation_id = create_correlation_id()
        counts: dict[str, int] = {}

        for collection in Collection:
            try:
                items = await self._fetch(collection.value)
                self._store.replace_all(collection.value, items)
                counts[collection.value] = len(items)
            except (*REMOTE_FAILURES, PydanticValidationError) as e:
                self._store.replace_all(collection.value, [])
                counts[collection.value] = 0
                logger.error("collection_load_failed", collection=collection.value, error=str(e))
                self.notices.append(SyncError(
                    f"Could not load {collection.value}: {e}",
                    intent_kind="load_all",
                    resource=collection.value,
                    cause=e,
                ))
                if self._audit_logger:
                    await self._audit_logger.log_load_failed(
                        collection.value, str(e), correlation_id
                    )
                    if isinstance(e, PydanticValidationError):
                        await self._audit_logger.log_error(
                            error_type="malformed_payload",
                            error_message=str(e),
                            details={"collection": collection.value},
                            correlation_id=correlation_id,
                        )

        if self._audit_logger:
            await self._audit_logger.log_snapshot_loaded(counts, correlation_id)

        return self._store.get_snapshot()

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def dispatch(
        self,
        intent: IntentBase,
        correlation_id: Optional[UUID] = None,
    ) -> SyncRecord:
        """
        Apply an intent under the configured policy.

        Optimistic: applies locally and schedules the remote calls in
        the background; returns immediately. Strict: behaves like submit().

        Raises:
            DuplicateCategory / DuplicateBudget: Nothing applied or sent
            SyncError: Strict policy only, when the backend fails
        """
        correlation_id = correlation_id or create_correlation_id()

        if self.policy == SyncPolicy.STRICT:
            return await self._apply_strict(intent, correlation_id)

        record = await self._apply_local(intent, correlation_id)
        if record.calls:
            self._enqueue(record)
        return record

    async def submit(
        self,
        intent: IntentBase,
        correlation_id: Optional[UUID] = None,
    ) -> SyncRecord:
        """
        Apply an intent and wait until the backend has answered.

        Under the optimistic policy a failure is still only reported;
        inspect `record.failed` or `notices`.
        """
        correlation_id = correlation_id or create_correlation_id()

        if self.policy == SyncPolicy.STRICT:
            return await self._apply_strict(intent, correlation_id)

        record = await self._apply_local(intent, correlation_id)
        if record.calls:
            await self._enqueue(record)
        return record

    async def drain(self) -> None:
        """Wait for every queued remote task."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def _enqueue(self, record: SyncRecord) -> asyncio.Task:
        """Schedule a record's remote calls behind everything already queued."""
        task = asyncio.create_task(self._sync_in_order(self._tail, record))
        self._tail = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _sync_in_order(
        self,
        previous: Optional[asyncio.Task],
        record: SyncRecord,
    ) -> None:
        if previous is not None:
            # wait() does not re-raise the previous task's error
            await asyncio.wait([previous])
        await self._sync_optimistic(record)

    async def _reject(
        self,
        intent: IntentBase,
        error: ValidationError,
        correlation_id: UUID,
    ) -> None:
        logger.info("mutation_rejected", kind=intent.kind, error=str(error))
        if self._audit_logger:
            await self._audit_logger.log_mutation_rejected(
                intent.kind, intent.collection.value, str(error), correlation_id
            )

    async def _apply_local(self, intent: IntentBase, correlation_id: UUID) -> SyncRecord:
        try:
            outcome = self._store.apply(intent)
        except ValidationError as e:
            await self._reject(intent, e, correlation_id)
            raise

        record = SyncRecord(
            correlation_id=correlation_id,
            intent_kind=intent.kind,
            collection=intent.collection.value,
            entity_id=outcome.entity_id,
            local_state=LocalState.APPLIED if outcome.changed else LocalState.SKIPPED,
            calls=plan_remote_calls(outcome.intent, outcome.before, outcome.after),
        )
        self.records.append(record)

        if self._audit_logger:
            await self._audit_logger.log_mutation(
                record.intent_kind,
                record.collection,
                record.entity_id,
                outcome.changed,
                correlation_id,
            )

        if record.calls:
            record.remote_state = RemoteState.REQUESTED
            if self._audit_logger:
                await self._audit_logger.log_sync_requested(
                    record.intent_kind,
                    record.collection,
                    record.entity_id,
                    len(record.calls),
                    correlation_id,
                )
        return record

    async def _sync_optimistic(self, record: SyncRecord) -> None:
        try:
            await self._send_all(record)
        except SyncError as e:
            logger.warning(
                "optimistic_sync_failed",
                kind=record.intent_kind,
                entity_id=record.entity_id,
                error=record.error,
            )
            self.notices.append(e)
            if self._audit_logger:
                await self._audit_logger.log_sync_failed(
                    record.intent_kind,
                    record.collection,
                    record.entity_id,
                    record.error,
                    local_change_kept=True,
                    correlation_id=record.correlation_id,
                )
            return

        if self._audit_logger:
            await self._audit_logger.log_sync_confirmed(
                record.intent_kind,
                record.collection,
                record.entity_id,
                record.correlation_id,
            )

    async def _apply_strict(self, intent: IntentBase, correlation_id: UUID) -> SyncRecord:
        intent = assign_id(intent, self._store.id_generator)
        before = self._store.get_snapshot()
        try:
            after = apply_intent(before, intent)
        except ValidationError as e:
            await self._reject(intent, e, correlation_id)
            raise

        record = SyncRecord(
            correlation_id=correlation_id,
            intent_kind=intent.kind,
            collection=intent.collection.value,
            entity_id=intent.id,
            calls=plan_remote_calls(intent, before, after),
        )
        self.records.append(record)

        if not record.calls:
            record.local_state = LocalState.SKIPPED
            logger.debug("mutation_noop", kind=intent.kind, entity_id=intent.id)
            if self._audit_logger:
                await self._audit_logger.log_mutation(
                    record.intent_kind, record.collection, record.entity_id, False, correlation_id
                )
            return record

        record.remote_state = RemoteState.REQUESTED
        if self._audit_logger:
            await self._audit_logger.log_sync_requested(
                record.intent_kind,
                record.collection,
                record.entity_id,
                len(record.calls),
                correlation_id,
            )

        try:
            await self._send_all(record)
        except SyncError:
            if self._audit_logger:
                await self._audit_logger.log_sync_failed(
                    record.intent_kind,
                    record.collection,
                    record.entity_id,
                    record.error,
                    local_change_kept=False,
                    correlation_id=correlation_id,
                )
            raise

        if self._audit_logger:
            await self._audit_logger.log_sync_confirmed(
                record.intent_kind, record.collection, record.entity_id, correlation_id
            )

        outcome = self._store.apply(intent)
        record.local_state = LocalState.APPLIED if outcome.changed else LocalState.SKIPPED
        if self._audit_logger:
            await self._audit_logger.log_mutation(
                record.intent_kind,
                record.collection,
                record.entity_id,
                outcome.changed,
                correlation_id,
            )
        return record
