"""Error taxonomy for graph editing and persistence.

Editing operations raise these and leave the document untouched.
Validators never raise; they return result values from contracts.results.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from stepgraph.contracts.enums import ConnectionRejection

if TYPE_CHECKING:
    from stepgraph.contracts.results import StructuralReport


class StepGraphError(Exception):
    """Base class for all stepgraph errors."""

    pass


class NotFoundError(StepGraphError, LookupError):
    """A referenced node, edge, version, pipeline, or step definition does not exist.

    Attributes:
        kind: What was looked up ("node", "edge", "version", ...)
        key: The identifier that was not found
    """

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} '{key}' not found")


class InvalidConnectionError(StepGraphError):
    """A proposed edge was rejected by the connection rules.

    Attributes:
        reason: Reason code from the connection validator
        detail: Human-readable explanation
    """

    def __init__(self, reason: ConnectionRejection, detail: str = "") -> None:
        self.reason = reason
        self.detail = detail
        message = f"Connection rejected: {reason.value}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class InvalidParameterError(StepGraphError, ValueError):
    """A parameter update did not match the step's parameter schema.

    Every offending field is reported, not just the first, so a form can
    mark all of them at once.

    Attributes:
        node_id: Node whose parameters were being updated
        problems: Mapping of parameter name to what is wrong with it
    """

    def __init__(self, node_id: str, problems: Mapping[str, str]) -> None:
        self.node_id = node_id
        self.problems = dict(problems)
        summary = "; ".join(f"{name}: {msg}" for name, msg in self.problems.items())
        super().__init__(f"Invalid parameters for node '{node_id}': {summary}")


class IntegrityError(StepGraphError):
    """Stored snapshot content does not match its recorded hash."""

    pass


class PipelineNotRunnableError(StepGraphError):
    """Submission refused because structural validation failed.

    Attributes:
        report: The full structural report, with every collected reason
    """

    def __init__(self, report: StructuralReport) -> None:
        self.report = report
        reasons = "; ".join(issue.message for issue in report.issues)
        super().__init__(f"Pipeline is not runnable: {reasons}")


class SessionClosedError(StepGraphError):
    """An operation was attempted on a closed editor session."""

    pass


class DataIntegrityWarning(UserWarning):
    """A node references a step definition the catalog does not know.

    Non-fatal: the node stays in the document but is inert for structural
    validation. Surfaced through logs and StructuralReport.warnings.
    """

    pass
