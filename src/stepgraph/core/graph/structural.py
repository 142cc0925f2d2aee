"""Pre-execution structural check.

validate_structure() decides whether a graph document is ready to be sent
to the execution service. It collects every violated rule rather than
stopping at the first, so the user can fix them all in one pass.

Report order is stable: graph-level issues (NoInputNode, NoOutputNode)
first, then per-node issues in document node order, then a cycle if cycle
detection is enabled.
"""

from __future__ import annotations

import warnings

from stepgraph.contracts.catalog import StepDefinition
from stepgraph.contracts.enums import NodeRole, StructuralIssueCode
from stepgraph.contracts.errors import DataIntegrityWarning
from stepgraph.contracts.graph import GraphDocument, Node
from stepgraph.contracts.results import StructuralIssue, StructuralReport
from stepgraph.core.catalog import StepDefinitionCatalog
from stepgraph.core.graph.topology import find_cycle
from stepgraph.core.logging import get_logger
from stepgraph.core.parameters import missing_required

logger = get_logger(__name__)


def validate_structure(
    document: GraphDocument,
    catalog: StepDefinitionCatalog,
    *,
    check_required_parameters: bool = False,
    detect_cycles: bool = False,
) -> StructuralReport:
    """Check that a document forms a runnable pipeline.

    A document is runnable when it has at least one input and one output
    node, every input feeds something, every output is fed, and every
    processing node is both fed and feeding.

    Nodes referencing step definitions the catalog does not know are left
    out of every check; each one produces a DataIntegrityWarning and a
    line in report.warnings.

    Args:
        document: Graph to check
        catalog: Source of step definitions (and therefore node roles)
        check_required_parameters: Also report unset required parameters
        detect_cycles: Also report a directed cycle

    Returns:
        StructuralReport; never raises for graph content
    """
    roles: list[tuple[Node, NodeRole]] = []
    integrity_warnings: list[str] = []
    definitions: dict[str, StepDefinition] = {}
    for node in document.nodes:
        definition = catalog.find(node.step_definition_id)
        if definition is None:
            message = f"node '{node.id}' references unknown step definition '{node.step_definition_id}'"
            logger.warning("unknown_step_definition", node_id=node.id, step_definition_id=node.step_definition_id)
            warnings.warn(message, DataIntegrityWarning, stacklevel=2)
            integrity_warnings.append(message)
            continue
        definitions[node.id] = definition
        roles.append((node, definition.role))

    edge_sources = {edge.source_node_id for edge in document.edges}
    edge_targets = {edge.target_node_id for edge in document.edges}

    issues: list[StructuralIssue] = []
    if not any(role is NodeRole.INPUT for _, role in roles):
        issues.append(StructuralIssue(StructuralIssueCode.NO_INPUT_NODE, "Pipeline has no input node"))
    if not any(role is NodeRole.OUTPUT for _, role in roles):
        issues.append(StructuralIssue(StructuralIssueCode.NO_OUTPUT_NODE, "Pipeline has no output node"))

    for node, role in roles:
        if role is NodeRole.PROCESSING and not (node.id in edge_sources and node.id in edge_targets):
            issues.append(
                StructuralIssue(
                    StructuralIssueCode.DISCONNECTED_PROCESSING_NODE,
                    f"Processing node '{node.id}' must have both an incoming and an outgoing connection",
                    node_id=node.id,
                )
            )
        elif role is NodeRole.INPUT and node.id not in edge_sources:
            issues.append(
                StructuralIssue(
                    StructuralIssueCode.DANGLING_INPUT_NODE,
                    f"Input node '{node.id}' is not connected to anything",
                    node_id=node.id,
                )
            )
        elif role is NodeRole.OUTPUT and node.id not in edge_targets:
            issues.append(
                StructuralIssue(
                    StructuralIssueCode.DANGLING_OUTPUT_NODE,
                    f"Output node '{node.id}' receives no connection",
                    node_id=node.id,
                )
            )
        if check_required_parameters:
            for name in missing_required(definitions[node.id], node.parameters):
                issues.append(
                    StructuralIssue(
                        StructuralIssueCode.MISSING_REQUIRED_PARAMETER,
                        f"Node '{node.id}' is missing required parameter '{name}'",
                        node_id=node.id,
                        parameter=name,
                    )
                )

    if detect_cycles:
        cycle = find_cycle(document)
        if cycle:
            path = " -> ".join((*cycle, cycle[0]))
            issues.append(StructuralIssue(StructuralIssueCode.CYCLE_DETECTED, f"Pipeline contains a cycle: {path}", cycle=cycle))

    if issues:
        logger.info("structure_not_runnable", issue_count=len(issues), codes=[issue.code.value for issue in issues])
        return StructuralReport.not_runnable(tuple(issues), tuple(integrity_warnings))
    return StructuralReport.runnable_report(tuple(integrity_warnings))
