"""Tests for validator result values and the error taxonomy."""

import pytest

from stepgraph.contracts.enums import ConnectionRejection, StructuralIssueCode
from stepgraph.contracts.errors import (
    DataIntegrityWarning,
    IntegrityError,
    InvalidConnectionError,
    InvalidParameterError,
    NotFoundError,
    PipelineNotRunnableError,
    SessionClosedError,
    StepGraphError,
)
from stepgraph.contracts.results import ConnectionCheck, StructuralIssue, StructuralReport
from stepgraph.contracts.types import NodeID


class TestConnectionCheck:
    def test_ok(self) -> None:
        check = ConnectionCheck.ok()
        assert check.allowed
        assert check.reason is None

    def test_rejected(self) -> None:
        check = ConnectionCheck.rejected(ConnectionRejection.SELF_CONNECTION, "same node")
        assert not check.allowed
        assert check.reason is ConnectionRejection.SELF_CONNECTION
        assert check.detail == "same node"

    def test_allowed_with_reason_is_invalid(self) -> None:
        with pytest.raises(ValueError):
            ConnectionCheck(allowed=True, reason=ConnectionRejection.UNKNOWN_NODE)

    def test_rejected_without_reason_is_invalid(self) -> None:
        with pytest.raises(ValueError):
            ConnectionCheck(allowed=False)


class TestStructuralReport:
    def test_runnable_report(self) -> None:
        report = StructuralReport.runnable_report(("note",))
        assert report.runnable
        assert report.codes == ()
        assert report.warnings == ("note",)

    def test_not_runnable_needs_issues(self) -> None:
        with pytest.raises(ValueError):
            StructuralReport.not_runnable(())

    def test_codes_and_issues_for(self) -> None:
        issues = (
            StructuralIssue(StructuralIssueCode.NO_OUTPUT_NODE, "no output"),
            StructuralIssue(StructuralIssueCode.DANGLING_INPUT_NODE, "dangling", node_id=NodeID("a")),
        )
        report = StructuralReport.not_runnable(issues)
        assert not report.runnable
        assert report.codes == (StructuralIssueCode.NO_OUTPUT_NODE, StructuralIssueCode.DANGLING_INPUT_NODE)
        assert report.issues_for("a") == (issues[1],)
        assert report.issues_for("b") == ()


class TestErrors:
    @pytest.mark.parametrize(
        "error",
        [
            NotFoundError("node", "n1"),
            InvalidConnectionError(ConnectionRejection.UNKNOWN_PORT),
            InvalidParameterError("n1", {"a": "bad"}),
            IntegrityError("hash mismatch"),
            SessionClosedError("closed"),
        ],
    )
    def test_all_errors_share_base(self, error: Exception) -> None:
        assert isinstance(error, StepGraphError)

    def test_not_found_is_lookup_error(self) -> None:
        error = NotFoundError("edge", "e9")
        assert isinstance(error, LookupError)
        assert str(error) == "edge 'e9' not found"

    def test_invalid_connection_carries_reason(self) -> None:
        error = InvalidConnectionError(ConnectionRejection.TARGET_PORT_OCCUPIED, "busy")
        assert error.reason is ConnectionRejection.TARGET_PORT_OCCUPIED
        assert "TargetPortOccupied" in str(error)
        assert "busy" in str(error)

    def test_invalid_parameter_lists_every_field(self) -> None:
        error = InvalidParameterError("n1", {"a": "expected number, got str", "b": "unknown parameter"})
        assert error.problems == {"a": "expected number, got str", "b": "unknown parameter"}
        assert "a: expected number" in str(error)
        assert "b: unknown parameter" in str(error)

    def test_not_runnable_carries_report(self) -> None:
        report = StructuralReport.not_runnable(
            (
                StructuralIssue(StructuralIssueCode.NO_INPUT_NODE, "Pipeline has no input node"),
                StructuralIssue(StructuralIssueCode.NO_OUTPUT_NODE, "Pipeline has no output node"),
            )
        )
        error = PipelineNotRunnableError(report)
        assert error.report is report
        assert "no input node" in str(error)
        assert "no output node" in str(error)

    def test_data_integrity_warning_is_user_warning(self) -> None:
        assert issubclass(DataIntegrityWarning, UserWarning)
        assert not issubclass(DataIntegrityWarning, StepGraphError)
