import time
import uuid
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from threading import Event
from typing import List, Optional

from ingest_hub.domain.errors import (
    CancelledError,
    CommitError,
    DecodeError,
    IngestError,
    LoadAbortedError,
    LoaderStateError,
    RollbackError,
    RowExecutionError,
    TransactionStartError,
)
from ingest_hub.domain.records import InsertStatement, Record, TableTarget
from ingest_hub.infrastructure.schema.resolver import ColumnPlan, resolve, validate_target
from ingest_hub.infrastructure.sql.operations.insert import (
    build_batch_insert,
    rows_per_statement,
)
from ingest_hub.io.connectors.gateway import (
    ConnectionGateway,
    GatewayError,
    TransactionHandle,
)
from ingest_hub.io.loader.models import IngestConfig, IngestionOutcome, RowFailure
from ingest_hub.utils.logging import get_logger

logger = get_logger(__name__)


class LoaderState(str, Enum):
    """Lifecycle of a TransactionalLoader. CLOSED is terminal."""

    IDLE = "idle"
    TRANSACTION_OPEN = "transaction_open"
    COMMITTING = "committing"
    ROLLING_BACK = "rolling_back"
    CLOSED = "closed"


@dataclass
class _Window:
    """Consecutive records pulled from the source, starting at ``start``."""

    start: int
    records: List[Record]


class TransactionalLoader:
    """Single-use loader driving begin, insert loop and commit or rollback.

    The loader owns exactly one transaction handle and is the only component
    that commits or rolls it back. Records are pulled from the source one
    window at a time: a single record when the target's columns are known and
    rows are inserted one per statement, otherwise a bounded window used to
    resolve the column union or to fill a multi-row statement.
    """

    def __init__(
        self,
        gateway: ConnectionGateway,
        target: TableTarget,
        config: Optional[IngestConfig] = None,
        cancel_event: Optional[Event] = None,
    ):
        self.gateway = gateway
        self.target = target
        self.config = config or IngestConfig()
        self.cancel_event = cancel_event
        self.state = LoaderState.IDLE
        self.execution_id = uuid.uuid4().hex
        self._handle: Optional[TransactionHandle] = None
        self._outcome = IngestionOutcome(table=target.name, execution_id=self.execution_id)
        self._started_at = 0.0
        self._logger = logger.bind(table=target.name, execution_id=self.execution_id)

    def run(self, records: Iterable[Record]) -> IngestionOutcome:
        """
        Ingest ``records`` into the target table in one transaction.

        Args:
            records: Lazy sequence of Records (plain mappings are accepted and
                converted)

        Returns:
            IngestionOutcome for the committed transaction

        Raises:
            LoaderStateError: If this loader has already run
            IngestError: Any failure that prevented starting or finalizing the
                batch; see ``ingest_hub.domain.errors``
        """
        if self.state is not LoaderState.IDLE:
            raise LoaderStateError(
                f"Loader is {self.state.value}; create a new loader to ingest again"
            )
        self._started_at = time.perf_counter()
        self._logger.info(
            "ingest.load.started",
            fail_policy=self.config.fail_policy,
            batch_mode=self.config.batch_mode,
            known_columns=self.target.has_known_columns,
        )

        # Validation and the first window happen before any transaction exists,
        # so failures here have nothing to undo.
        try:
            validate_target(self.target)
            windows = self._windows(iter(records))
            first = next(windows, None)
            if first is None:
                self._logger.info("ingest.load.skipped", reason="empty_source")
                self.state = LoaderState.CLOSED
                return self._finish()
            first_plan = resolve(self.target, first.records, first.start)
        except IngestError as exc:
            self.state = LoaderState.CLOSED
            self._logger.error("ingest.load.rejected", **exc.to_dict())
            raise

        self._begin()
        try:
            self._process(first, first_plan)
            for window in windows:
                self._process(window, None)
        except IngestError as exc:
            self._abort(exc)
            raise
        except Exception as exc:
            self._abort(exc)
            raise LoadAbortedError(
                f"Load into {self.target.name!r} aborted and rolled back: {exc!r}"
            ) from exc
        except BaseException as exc:
            # KeyboardInterrupt and friends still roll back, then propagate as-is
            self._abort(exc)
            raise

        self._commit()
        return self._finish()

    def _window_size(self) -> int:
        if self.target.columns is None:
            return self.config.batch_size
        if self.config.batch_mode == "multi_row":
            return rows_per_statement(
                len(self.target.columns),
                self.config.max_rows_per_statement,
                self.config.max_bound_parameters,
            )
        return 1

    def _pull(self, iterator: Iterator, position: int) -> Optional[Record]:
        try:
            item = next(iterator)
        except StopIteration:
            return None
        except IngestError:
            raise
        except Exception as exc:
            raise DecodeError(
                f"Record source failed: {exc}", source_format="records", position=position
            ) from exc

        if isinstance(item, Record):
            return item
        if isinstance(item, Mapping):
            try:
                return Record.from_mapping(item)
            except (TypeError, ValueError) as exc:
                raise DecodeError(str(exc), source_format="records", position=position) from exc
        raise DecodeError(
            f"Expected a Record or mapping, got {type(item).__name__}",
            source_format="records",
            position=position,
        )

    def _windows(self, iterator: Iterator) -> Iterator[_Window]:
        size = self._window_size()
        position = 0
        while True:
            rows: List[Record] = []
            while len(rows) < size:
                record = self._pull(iterator, position + len(rows))
                if record is None:
                    break
                rows.append(record)
            if rows:
                yield _Window(position, rows)
                position += len(rows)
            if len(rows) < size:
                return

    def _begin(self) -> None:
        try:
            self._handle = self.gateway.begin()
        except GatewayError as exc:
            self.state = LoaderState.CLOSED
            self._logger.error("ingest.transaction.start_failed", error=str(exc))
            raise TransactionStartError(
                f"Could not begin transaction for {self.target.name!r}: {exc}"
            ) from exc
        self.state = LoaderState.TRANSACTION_OPEN
        self._logger.debug("ingest.transaction.started", handle=self._handle.id)

    def _process(self, window: _Window, plan: Optional[ColumnPlan]) -> None:
        if plan is None:
            plan = resolve(self.target, window.records, window.start)

        statements = build_batch_insert(
            plan.table,
            plan.columns,
            window.records,
            mode=self.config.batch_mode,
            max_rows_per_statement=self.config.max_rows_per_statement,
            max_bound_parameters=self.config.max_bound_parameters,
            first_index=window.start,
        )
        for statement in statements:
            self._check_cancelled()
            if not self._execute(statement) and statement.row_count > 1:
                self._retry_per_row(statement, window, plan)

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise CancelledError(rows_processed=self._outcome.attempted)

    def _execute(self, statement: InsertStatement) -> bool:
        """Run one statement; False means a best-effort failure still to be attributed."""
        self._outcome.statement_count += 1
        try:
            self.gateway.execute(self._handle, statement.sql, statement.params)
        except GatewayError as exc:
            first_row = statement.row_indices[0] if statement.row_indices else 0
            error = RowExecutionError(
                f"Insert into {self.target.name!r} failed at row {first_row}: {exc}",
                row_index=first_row,
                sql=statement.sql,
            )
            error.__cause__ = exc
            if self.config.fail_policy == "fail_fast":
                raise error from exc
            if statement.row_count > 1:
                self._logger.warning(
                    "ingest.statement.failed",
                    rows=statement.row_count,
                    first_row=first_row,
                    error=str(exc),
                )
                return False
            self._record_failure(first_row, error)
            return True

        self._outcome.attempted += statement.row_count
        self._outcome.committed += statement.row_count
        return True

    def _retry_per_row(
        self, statement: InsertStatement, window: _Window, plan: ColumnPlan
    ) -> None:
        """Re-run a failed multi-row statement one row at a time to isolate bad rows."""
        rows = [window.records[index - window.start] for index in statement.row_indices]
        for single in build_batch_insert(
            plan.table,
            plan.columns,
            rows,
            mode="per_row",
            first_index=statement.row_indices[0],
        ):
            self._check_cancelled()
            self._execute(single)

    def _record_failure(self, row_index: int, error: RowExecutionError) -> None:
        self._outcome.attempted += 1
        self._outcome.failures.append(RowFailure(row_index, error))
        self._logger.warning("ingest.row.failed", row_index=row_index, error=str(error))

    def _abort(self, exc: BaseException) -> None:
        self.state = LoaderState.ROLLING_BACK
        if isinstance(exc, IngestError):
            self._logger.error("ingest.load.failed", **exc.to_dict())
        else:
            self._logger.error("ingest.load.failed", error=repr(exc))

        try:
            self.gateway.rollback(self._handle)
        except GatewayError as rollback_exc:
            self.state = LoaderState.CLOSED
            self._logger.critical(
                "ingest.load.rollback_failed",
                error=str(rollback_exc),
                triggering_error=str(exc),
            )
            raise RollbackError(
                f"Rollback failed for {self.target.name!r}; discard the connection: "
                f"{rollback_exc}",
                original_error=exc,
            ) from rollback_exc

        self.state = LoaderState.CLOSED
        self._logger.warning(
            "ingest.load.rolled_back", rows_discarded=self._outcome.committed
        )

    def _commit(self) -> None:
        self.state = LoaderState.COMMITTING
        try:
            self.gateway.commit(self._handle)
        except GatewayError as exc:
            self.state = LoaderState.CLOSED
            self._logger.error("ingest.load.commit_failed", error=str(exc))
            raise CommitError(
                f"Commit failed for {self.target.name!r}; the table state is "
                f"indeterminate and must be re-queried: {exc}"
            ) from exc
        self.state = LoaderState.CLOSED

    def _finish(self) -> IngestionOutcome:
        outcome = self._outcome
        outcome.duration_ms = (time.perf_counter() - self._started_at) * 1000
        self._logger.info(
            "ingest.load.completed",
            attempted=outcome.attempted,
            committed=outcome.committed,
            failed=outcome.failed,
            statements=outcome.statement_count,
            duration_ms=outcome.duration_ms,
        )
        return outcome
