from dataclasses import dataclass, field
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ingest_hub.domain.errors import IngestError

FailPolicy = Literal["fail_fast", "best_effort"]
BatchMode = Literal["per_row", "multi_row"]


class IngestConfig(BaseModel):
    """Per-call ingestion options."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    fail_policy: FailPolicy = "fail_fast"
    batch_mode: BatchMode = "per_row"
    batch_size: int = Field(
        default=1000,
        gt=0,
        description="Records buffered per resolution window when columns are not known",
    )
    max_rows_per_statement: int = Field(
        default=500, gt=0, description="Row bound for one multi-row INSERT"
    )
    max_bound_parameters: int = Field(
        default=32766, gt=0, description="Placeholder bound for one statement"
    )

    @classmethod
    def from_settings(cls, settings=None, **overrides) -> "IngestConfig":
        """Build a config whose defaults come from environment settings."""
        if settings is None:
            from ingest_hub.config import get_settings

            settings = get_settings()
        values = {
            "fail_policy": settings.INGEST_FAIL_POLICY,
            "batch_mode": settings.INGEST_BATCH_MODE,
            "batch_size": settings.DB_BATCH_SIZE,
            "max_rows_per_statement": settings.MAX_ROWS_PER_STATEMENT,
            "max_bound_parameters": settings.MAX_BOUND_PARAMETERS,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass(frozen=True)
class RowFailure:
    """One skipped row under best-effort ingestion."""

    row_index: int
    error: IngestError


@dataclass
class IngestionOutcome:
    """Structured response for one ingestion call."""

    attempted: int = 0
    committed: int = 0
    failures: List[RowFailure] = field(default_factory=list)
    table: Optional[str] = None
    execution_id: str = ""
    duration_ms: float = 0.0
    statement_count: int = 0

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def failed_indices(self) -> List[int]:
        return [failure.row_index for failure in self.failures]

    @property
    def success(self) -> bool:
        return not self.failures
