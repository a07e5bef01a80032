from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

# One order as parsed from the blob. Never inspected, passed through as-is.
Record = Any

BLOB_CREATED = "Microsoft.Storage.BlobCreated"

class Phase(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    FETCHING = "fetching"
    STREAMING = "streaming"
    FLUSHING = "flushing"
    CLOSING = "closing"
    DONE = "done"
    SKIPPED = "skipped"
    ABORTED = "aborted"

@dataclass(frozen=True)
class BlobCreatedEvent:
    event_type: str
    subject: str

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "BlobCreatedEvent":
        """Accepts both the Event Grid wire names and snake_case keys."""
        event_type = raw.get("eventType", raw.get("event_type")) or ""
        subject = raw.get("subject") or ""
        return cls(event_type=str(event_type), subject=str(subject))

    def blob_name(self, container: str) -> Optional[str]:
        """
        Name of the blob inside ``container``, or None when the subject points
        elsewhere. Subjects look like
        ``/blobServices/default/containers/<container>/blobs/<name>``.
        """
        marker = f"/containers/{container}/blobs/"
        if marker not in self.subject:
            return None
        return self.subject.split(marker, 1)[1]

@dataclass
class IngestStats:
    records: int = 0
    batches: int = 0
    inserted_records: int = 0
    failed_batches: int = 0
    failed_records: int = 0
    failed_batch_indexes: List[int] = field(default_factory=list)

@dataclass(frozen=True)
class IngestResult:
    phase: Phase
    blob_name: Optional[str] = None
    reason: Optional[str] = None
    stats: IngestStats = field(default_factory=IngestStats)

    @property
    def status(self) -> str:
        if self.phase is Phase.DONE:
            return "done"
        if self.phase is Phase.SKIPPED:
            return "skipped"
        return "aborted"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "phase": self.phase.value,
            "blob": self.blob_name,
            "reason": self.reason,
            **asdict(self.stats),
        }

@dataclass(frozen=True)
class DropResult:
    status_code: int
    body: str
