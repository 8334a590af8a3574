"""Connection gateway contract used by the transactional loader.

The loader never touches a driver directly. It needs four capabilities:
begin a transaction, execute one parameterized statement inside it, and
commit or roll it back. Implementations must guarantee that a failed
``execute`` leaves the surrounding transaction usable.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Protocol, Sequence, runtime_checkable

from ingest_hub.domain.records import Value

_handle_ids = itertools.count(1)


class GatewayError(Exception):
    """Raised by a gateway when the database rejects an operation."""


@dataclass(frozen=True)
class TransactionHandle:
    """Opaque token for one open transaction on a gateway."""

    id: int = field(default_factory=lambda: next(_handle_ids))


@runtime_checkable
class ConnectionGateway(Protocol):
    """Capabilities the loader requires from a database connection."""

    def begin(self) -> TransactionHandle: ...

    def execute(
        self, handle: TransactionHandle, sql: str, params: Sequence[Value]
    ) -> int: ...

    def commit(self, handle: TransactionHandle) -> None: ...

    def rollback(self, handle: TransactionHandle) -> None: ...
