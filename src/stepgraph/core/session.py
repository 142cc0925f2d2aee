"""Editor session: one open pipeline, its history, and its run gate.

The session ties a GraphEditor to a version store and an execution client
for one pipeline id. Responses from those collaborators may arrive after
the user has moved on (closed the editor, or asked for another version),
so every request is issued with a ticket and a response is applied only if
its ticket is still the newest of its kind and the session is still open.

Single-threaded: callers that await remote responses hand them back
through apply_restored() on the same thread that drives the editor.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from stepgraph.contracts.enums import RequestKind
from stepgraph.contracts.errors import SessionClosedError
from stepgraph.contracts.events import VersionSaved
from stepgraph.contracts.graph import GraphDocument
from stepgraph.contracts.types import JobID, PipelineID
from stepgraph.contracts.version import Version
from stepgraph.core.events import EventBusProtocol, NullEventBus
from stepgraph.core.execution import ExecutionClient, submit_for_execution
from stepgraph.core.graph.editor import GraphEditor
from stepgraph.core.logging import get_logger
from stepgraph.core.versions.store import VersionStore

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RequestTicket:
    """Identifies one outstanding request issued by a session."""

    kind: RequestKind
    generation: int


class EditorSession:
    """Editing session for a single pipeline.

    Example:
        session = EditorSession("pipeline-1", GraphEditor(catalog), store, executor=client)
        session.open()
        ...
        session.save()
        job_id = session.run()
        session.close()
    """

    def __init__(
        self,
        pipeline_id: str,
        editor: GraphEditor,
        store: VersionStore,
        *,
        executor: ExecutionClient | None = None,
        event_bus: EventBusProtocol | None = None,
    ) -> None:
        self.pipeline_id = PipelineID(pipeline_id)
        self.editor = editor
        self._store = store
        self._executor = executor
        self._events: EventBusProtocol = event_bus or NullEventBus()
        self._generation = 0
        self._latest: dict[RequestKind, int] = {}
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    def begin(self, kind: RequestKind) -> RequestTicket:
        """Issue a ticket for a new request, superseding older ones of the same kind.

        Raises:
            SessionClosedError: If the session is closed
        """
        self._require_open()
        self._generation += 1
        self._latest[kind] = self._generation
        return RequestTicket(kind=kind, generation=self._generation)

    def is_current(self, ticket: RequestTicket) -> bool:
        """Whether a response for this ticket may still be applied."""
        return self._open and self._latest.get(ticket.kind) == ticket.generation

    def apply_restored(self, ticket: RequestTicket, document: GraphDocument) -> bool:
        """Adopt a document delivered for a LOAD request.

        Returns:
            True if the document became current, False if the response was
            stale (superseded or session closed) and was discarded

        Raises:
            InvalidConnectionError: If the document breaks a graph invariant
            ValueError: If the document has duplicate ids
        """
        if not self.is_current(ticket):
            logger.info(
                "stale_response_discarded",
                pipeline_id=self.pipeline_id,
                kind=ticket.kind.value,
                generation=ticket.generation,
                session_open=self._open,
            )
            return False
        self.editor.load(document)
        return True

    def open(self) -> GraphDocument:
        """Load the newest saved version, or start from an empty document."""
        ticket = self.begin(RequestKind.LOAD)
        latest = self._store.latest(self.pipeline_id)
        document = latest.snapshot if latest is not None else GraphDocument.empty()
        self.apply_restored(ticket, document)
        logger.info("pipeline_opened", pipeline_id=self.pipeline_id, version_id=latest.version_id if latest else None)
        return self.editor.document

    def restore(self, version_id: str) -> bool:
        """Replace the current document with a saved version.

        Raises:
            NotFoundError: If the version does not exist
            IntegrityError: If the stored snapshot fails its hash check
        """
        ticket = self.begin(RequestKind.LOAD)
        document = self._store.restore(self.pipeline_id, version_id)
        return self.apply_restored(ticket, document)

    def save(self) -> Version:
        """Snapshot the current document as the newest version."""
        self.begin(RequestKind.SAVE)
        version = self._store.save(self.pipeline_id, self.editor.document)
        self._events.emit(VersionSaved(pipeline_id=self.pipeline_id, version_id=version.version_id))
        return version

    def versions(self) -> Sequence[Version]:
        """Saved versions of this pipeline, newest first."""
        return self._store.list(self.pipeline_id)

    def run(self) -> JobID:
        """Validate the current document and submit it.

        Raises:
            SessionClosedError: If the session is closed
            RuntimeError: If the session has no execution client
            PipelineNotRunnableError: If the structural check fails
        """
        self.begin(RequestKind.RUN)
        if self._executor is None:
            raise RuntimeError("EditorSession has no execution client configured")
        return submit_for_execution(
            self.editor.document,
            self.editor.catalog,
            self._executor,
            validation=self.editor.settings.validation,
        )

    def close(self) -> None:
        """End the session. Unsaved edits are discarded and late responses are ignored."""
        if self._open:
            self._open = False
            logger.info("session_closed", pipeline_id=self.pipeline_id)

    def _require_open(self) -> None:
        if not self._open:
            raise SessionClosedError(f"Editor session for pipeline '{self.pipeline_id}' is closed")
