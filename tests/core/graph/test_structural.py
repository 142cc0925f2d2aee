"""Tests for the pre-execution structural check."""

import warnings

import pytest

from stepgraph.contracts.enums import StructuralIssueCode
from stepgraph.contracts.errors import DataIntegrityWarning
from stepgraph.contracts.graph import GraphDocument, Viewport
from stepgraph.core.catalog import InMemoryStepCatalog
from stepgraph.core.graph.structural import validate_structure
from tests.fixtures.documents import build_document, runnable_document

Code = StructuralIssueCode


class TestRunnable:
    def test_input_to_output_is_runnable(self, test_catalog: InMemoryStepCatalog) -> None:
        document = build_document([("i", "source"), ("o", "sink")], [("i", "out", "o", "in")])
        report = validate_structure(document, test_catalog)
        assert report.runnable
        assert report.issues == ()
        assert report.warnings == ()

    def test_chain_is_runnable(self, test_catalog: InMemoryStepCatalog) -> None:
        assert validate_structure(runnable_document(), test_catalog).runnable

    def test_utility_with_one_side_wired_on_each_end(self, test_catalog: InMemoryStepCatalog) -> None:
        """A merge with only one of its inputs wired is still fed."""
        document = build_document(
            [("i", "source"), ("m", "merge"), ("o", "sink")],
            [("i", "out", "m", "left"), ("m", "out", "o", "in")],
        )
        assert validate_structure(document, test_catalog).runnable

    def test_viewport_is_ignored(self, test_catalog: InMemoryStepCatalog) -> None:
        document = runnable_document().with_viewport(Viewport(x=-900, y=12, zoom=0.1))
        assert validate_structure(document, test_catalog).runnable


class TestNotRunnable:
    def test_empty_document(self, test_catalog: InMemoryStepCatalog) -> None:
        report = validate_structure(GraphDocument.empty(), test_catalog)
        assert not report.runnable
        assert report.codes == (Code.NO_INPUT_NODE, Code.NO_OUTPUT_NODE)
        assert [issue.message for issue in report.issues] == [
            "Pipeline has no input node",
            "Pipeline has no output node",
        ]

    def test_input_feeding_dead_end_processing(self, test_catalog: InMemoryStepCatalog) -> None:
        document = build_document([("i", "source"), ("p", "proc")], [("i", "out", "p", "in")])

        report = validate_structure(document, test_catalog)

        assert report.codes == (Code.NO_OUTPUT_NODE, Code.DISCONNECTED_PROCESSING_NODE)
        assert report.issues[1].node_id == "p"
        assert report.issues[1].message == "Processing node 'p' must have both an incoming and an outgoing connection"

    def test_dangling_input_and_output(self, test_catalog: InMemoryStepCatalog) -> None:
        document = build_document([("i", "source"), ("o", "sink")])

        report = validate_structure(document, test_catalog)

        assert report.codes == (Code.DANGLING_INPUT_NODE, Code.DANGLING_OUTPUT_NODE)
        assert report.issues[0].message == "Input node 'i' is not connected to anything"
        assert report.issues[1].message == "Output node 'o' receives no connection"

    def test_processing_with_only_output(self, test_catalog: InMemoryStepCatalog) -> None:
        document = build_document(
            [("i", "source"), ("o", "sink"), ("p", "proc"), ("o2", "sink")],
            [("i", "out", "o", "in"), ("p", "out", "o2", "in")],
        )
        report = validate_structure(document, test_catalog)
        assert report.codes == (Code.DISCONNECTED_PROCESSING_NODE,)
        assert report.issues_for("p") == report.issues

    def test_per_node_issues_follow_document_order(self, test_catalog: InMemoryStepCatalog) -> None:
        document = build_document([("z", "sink"), ("a", "proc"), ("m", "source")])
        report = validate_structure(document, test_catalog)
        assert [issue.node_id for issue in report.issues] == ["z", "a", "m"]

    def test_all_issues_reported_together(self, test_catalog: InMemoryStepCatalog) -> None:
        document = build_document([("p1", "proc"), ("p2", "proc")])
        report = validate_structure(document, test_catalog)
        assert report.codes == (
            Code.NO_INPUT_NODE,
            Code.NO_OUTPUT_NODE,
            Code.DISCONNECTED_PROCESSING_NODE,
            Code.DISCONNECTED_PROCESSING_NODE,
        )

    def test_logs_not_runnable(self, test_catalog: InMemoryStepCatalog, captured_logs: list[dict[str, object]]) -> None:
        validate_structure(GraphDocument.empty(), test_catalog)
        events = [entry for entry in captured_logs if entry["event"] == "structure_not_runnable"]
        assert len(events) == 1
        assert events[0]["issue_count"] == 2


class TestRequiredParameters:
    def test_off_by_default(self, test_catalog: InMemoryStepCatalog) -> None:
        document = build_document([("i", "source"), ("o", "sink")], [("i", "out", "o", "in")])
        assert validate_structure(document, test_catalog).runnable

    def test_missing_required_reported(self, test_catalog: InMemoryStepCatalog) -> None:
        document = build_document([("i", "source"), ("o", "sink")], [("i", "out", "o", "in")])

        report = validate_structure(document, test_catalog, check_required_parameters=True)

        assert report.codes == (Code.MISSING_REQUIRED_PARAMETER,)
        issue = report.issues[0]
        assert issue.node_id == "o"
        assert issue.parameter == "target"
        assert issue.message == "Node 'o' is missing required parameter 'target'"

    def test_set_required_passes(self, test_catalog: InMemoryStepCatalog) -> None:
        assert validate_structure(runnable_document(), test_catalog, check_required_parameters=True).runnable


class TestCycles:
    def _cyclic(self) -> GraphDocument:
        return build_document(
            [("i", "source"), ("m", "merge"), ("p", "proc"), ("o", "sink")],
            [
                ("i", "out", "m", "left"),
                ("m", "out", "p", "in"),
                ("p", "out", "m", "right"),
                ("m", "out", "o", "in"),
            ],
        )

    def test_cycle_ignored_by_default(self, test_catalog: InMemoryStepCatalog) -> None:
        assert validate_structure(self._cyclic(), test_catalog).runnable

    def test_cycle_reported_last(self, test_catalog: InMemoryStepCatalog) -> None:
        document = self._cyclic()
        report = validate_structure(document, test_catalog, detect_cycles=True)

        assert report.codes == (Code.CYCLE_DETECTED,)
        issue = report.issues[0]
        assert set(issue.cycle) == {"m", "p"}
        assert issue.node_id is None
        assert issue.message.startswith("Pipeline contains a cycle: ")
        assert issue.message.endswith(f" -> {issue.cycle[0]}")


class TestUnknownDefinitions:
    def test_unknown_definition_warns_and_is_skipped(self, test_catalog: InMemoryStepCatalog) -> None:
        document = build_document(
            [("i", "source"), ("legacy", "retired-step"), ("o", "sink")],
            [("i", "out", "o", "in")],
        )

        with pytest.warns(DataIntegrityWarning, match="unknown step definition 'retired-step'"):
            report = validate_structure(document, test_catalog)

        assert report.runnable
        assert report.warnings == ("node 'legacy' references unknown step definition 'retired-step'",)

    def test_unknown_nodes_do_not_count_as_input(self) -> None:
        document = build_document([("i", "source"), ("o", "sink")], [("i", "out", "o", "in")])

        with warnings.catch_warnings():
            warnings.simplefilter("ignore", DataIntegrityWarning)
            report = validate_structure(document, InMemoryStepCatalog())

        assert report.codes == (Code.NO_INPUT_NODE, Code.NO_OUTPUT_NODE)
        assert len(report.warnings) == 2

    def test_unknown_definition_logged(
        self, test_catalog: InMemoryStepCatalog, captured_logs: list[dict[str, object]]
    ) -> None:
        document = build_document([("x", "retired-step")])
        with pytest.warns(DataIntegrityWarning):
            validate_structure(document, test_catalog)
        assert any(entry["event"] == "unknown_step_definition" and entry["node_id"] == "x" for entry in captured_logs)
