"""Flow service — loads both data sources and builds the session context.

Load sequence (one per page load):
  1. Fetch the process-step and project sources concurrently; join both.
  2. Parse each envelope. A failed or malformed source is logged and
     degrades to an empty entity set.
  3. No steps → FlowLoadError: the caller renders the error placeholder,
     never a partial flowchart. No projects is a valid state.
  4. Build the ProcessModel and ProjectIndex once; both are immutable and
     passed explicitly to every consumer through FlowContext.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from coinnovation.core.exceptions import DataSourceError, DuplicateStepError, FlowLoadError
from coinnovation.integrations.data_source_gateway import DataSourceGateway
from coinnovation.models.process import ProcessModel
from coinnovation.services.project_index import ProjectIndex
from coinnovation.services.record_parser import parse_envelope, parse_project, parse_step

logger = logging.getLogger(__name__)

PROCESS_SOURCE = "process"
PROJECTS_SOURCE = "projects"


@dataclass(frozen=True)
class FlowContext:
    """Everything rendering and interaction code may read. Immutable."""

    model: ProcessModel
    index: ProjectIndex
    loaded_at: datetime

    @property
    def projects(self):
        return self.index.projects


def _load_source(
    gateway: DataSourceGateway,
    location: str,
    parse_record: Callable[[Any], Any],
    name: str,
) -> list:
    """Fetch and parse one source; any failure degrades to ``[]``."""
    result = gateway.fetch(location)
    if not result.ok:
        logger.error("Failed to load %s data from %s: %s", name, location, result.error,
                     extra={"source": location})
        return []
    try:
        return parse_envelope(result.data, parse_record, source=name)
    except DataSourceError as exc:
        logger.error("Failed to load %s data from %s: %s", name, location, exc.reason,
                     extra={"source": location})
        return []


def load_flow_context(
    process_location: str,
    projects_location: str,
    gateway: DataSourceGateway | None = None,
) -> FlowContext:
    """Fetch both sources concurrently and build the immutable context.

    Raises:
        FlowLoadError: If the process source yields no steps or the steps
            contain duplicate ids.
    """
    gateway = gateway or DataSourceGateway()

    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="flow-fetch") as pool:
        steps_future = pool.submit(_load_source, gateway, process_location, parse_step, PROCESS_SOURCE)
        projects_future = pool.submit(_load_source, gateway, projects_location, parse_project, PROJECTS_SOURCE)
        steps = steps_future.result()
        projects = projects_future.result()

    if not steps:
        raise FlowLoadError("Failed to load co-innovation process data.")

    try:
        model = ProcessModel(steps)
    except DuplicateStepError as exc:
        logger.error("Process data rejected: %s", exc)
        raise FlowLoadError(str(exc)) from exc

    index = ProjectIndex(model, projects)
    logger.info("Flow loaded: %d steps, %d projects (%d at known stages)",
                len(model), len(index.projects), index.tracked_total())
    return FlowContext(model=model, index=index, loaded_at=datetime.now(timezone.utc))


def load_from_config(config, gateway: DataSourceGateway | None = None) -> FlowContext:
    """Load using PROCESS_DATA_URL / PROJECTS_DATA_URL from a Flask config."""
    if gateway is None:
        gateway = DataSourceGateway(timeout=config.get("DATA_FETCH_TIMEOUT", 10))
    return load_flow_context(
        config["PROCESS_DATA_URL"],
        config["PROJECTS_DATA_URL"],
        gateway=gateway,
    )
