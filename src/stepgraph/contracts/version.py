"""Version history contracts.

Versions are immutable once created. Stores only append; there is no
update or delete.
"""

from dataclasses import dataclass
from datetime import datetime

from stepgraph.contracts.graph import GraphDocument
from stepgraph.contracts.types import PipelineID, VersionID


@dataclass(frozen=True, slots=True)
class Version:
    """A timestamped snapshot of a pipeline graph.

    content_hash is the canonical hash of the snapshot at save time and is
    re-checked when the snapshot is read back from storage.
    """

    version_id: VersionID
    pipeline_id: PipelineID
    timestamp: datetime
    snapshot: GraphDocument
    content_hash: str

    def __post_init__(self) -> None:
        if self.timestamp.tzinfo is None:
            raise ValueError("Version.timestamp must be timezone-aware")


@dataclass(frozen=True, slots=True)
class PipelineSummary:
    """Listing entry for a pipeline with saved history."""

    pipeline_id: PipelineID
    version_count: int
    last_modified: datetime
