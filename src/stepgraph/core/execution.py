"""Hand-off of a validated graph to the execution service.

The execution service is an external collaborator: it accepts a payload
and returns a job id. This module only guarantees that nothing reaches it
without passing the structural check first.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from stepgraph.contracts.errors import PipelineNotRunnableError
from stepgraph.contracts.graph import GraphDocument
from stepgraph.contracts.types import JobID
from stepgraph.core.catalog import StepDefinitionCatalog
from stepgraph.core.config import ValidationSettings
from stepgraph.core.graph.serialization import execution_payload
from stepgraph.core.graph.structural import validate_structure
from stepgraph.core.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class ExecutionClient(Protocol):
    """Client for the pipeline execution service."""

    def submit(self, payload: dict[str, Any]) -> str:
        """Submit a pipeline payload and return the job id."""
        ...


def submit_for_execution(
    document: GraphDocument,
    catalog: StepDefinitionCatalog,
    executor: ExecutionClient,
    *,
    validation: ValidationSettings | None = None,
) -> JobID:
    """Validate a document and submit it for execution.

    Args:
        document: Graph to run
        catalog: Step definitions for the structural check
        executor: Execution service client
        validation: Which optional checks to apply (defaults if None)

    Returns:
        Job id assigned by the execution service

    Raises:
        PipelineNotRunnableError: If the structural check fails; carries
            the full report. The executor is not called.
    """
    validation = validation or ValidationSettings()
    report = validate_structure(
        document,
        catalog,
        check_required_parameters=validation.check_required_parameters,
        detect_cycles=validation.detect_cycles,
    )
    if not report.runnable:
        logger.warning("run_blocked", codes=[code.value for code in report.codes])
        raise PipelineNotRunnableError(report)
    job_id = JobID(executor.submit(execution_payload(document)))
    logger.info("pipeline_submitted", job_id=job_id, node_count=document.node_count, edge_count=document.edge_count)
    return job_id
