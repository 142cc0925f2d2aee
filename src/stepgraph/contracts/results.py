"""Validator result values.

Validators return these instead of raising, so a drag gesture can poll
"would this be legal" on every pointer move without exception handling.

Use the factory methods to create instances.
"""

from __future__ import annotations

from dataclasses import dataclass

from stepgraph.contracts.enums import ConnectionRejection, StructuralIssueCode
from stepgraph.contracts.types import NodeID


@dataclass(frozen=True, slots=True)
class ConnectionCheck:
    """Outcome of checking a proposed edge.

    Invariant: allowed is True exactly when reason is None.
    """

    allowed: bool
    reason: ConnectionRejection | None = None
    detail: str = ""

    def __post_init__(self) -> None:
        if self.allowed and self.reason is not None:
            raise ValueError("an allowed ConnectionCheck cannot carry a rejection reason")
        if not self.allowed and self.reason is None:
            raise ValueError("a rejected ConnectionCheck must carry a rejection reason")

    @classmethod
    def ok(cls) -> ConnectionCheck:
        return cls(allowed=True)

    @classmethod
    def rejected(cls, reason: ConnectionRejection, detail: str = "") -> ConnectionCheck:
        return cls(allowed=False, reason=reason, detail=detail)


@dataclass(frozen=True, slots=True)
class StructuralIssue:
    """One reason a graph is not runnable.

    node_id is set for per-node issues (dangling, disconnected, missing
    parameter) and None for graph-level issues (no input, no output, cycle).
    """

    code: StructuralIssueCode
    message: str
    node_id: NodeID | None = None
    parameter: str | None = None
    cycle: tuple[NodeID, ...] = ()


@dataclass(frozen=True, slots=True)
class StructuralReport:
    """Result of a pre-execution structural check.

    Every violated rule is collected, in a stable order, so a user sees all
    problems at once.

    Attributes:
        issues: Blocking problems; empty means runnable
        warnings: Non-blocking data integrity notes (e.g., unknown step definitions)
    """

    issues: tuple[StructuralIssue, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def runnable(self) -> bool:
        return not self.issues

    @property
    def codes(self) -> tuple[StructuralIssueCode, ...]:
        """Issue codes in report order."""
        return tuple(issue.code for issue in self.issues)

    def issues_for(self, node_id: str) -> tuple[StructuralIssue, ...]:
        """Issues attached to a single node."""
        return tuple(issue for issue in self.issues if issue.node_id == node_id)

    @classmethod
    def runnable_report(cls, warnings: tuple[str, ...] = ()) -> StructuralReport:
        return cls(issues=(), warnings=warnings)

    @classmethod
    def not_runnable(cls, issues: tuple[StructuralIssue, ...], warnings: tuple[str, ...] = ()) -> StructuralReport:
        if not issues:
            raise ValueError("a not-runnable report needs at least one issue")
        return cls(issues=issues, warnings=warnings)
