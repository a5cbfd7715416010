"""
Shared pytest fixtures for the co-innovation flow test suite.

Provides:
    - app: Flask application (session-scoped)
    - client: Flask test client (function-scoped)
    - process_records / project_records: raw envelope records
    - data_files: both envelopes written to tmp_path, app config pointed at them
    - FakeGateway / fake_gateway: in-memory DataSourceGateway stand-in
    - context: FlowContext built from the raw records
"""

import json
from datetime import datetime, timezone

import pytest

from coinnovation import create_app
from coinnovation.integrations.data_source_gateway import DataSourceResult
from coinnovation.models.process import ProcessModel
from coinnovation.services.flow_service import FlowContext
from coinnovation.services.project_index import ProjectIndex
from coinnovation.services.record_parser import parse_project, parse_step

PROCESS_URL = "https://data.example.com/data/co-innovation-process.json"
PROJECTS_URL = "https://data.example.com/data/projects.json"


# ── Raw data builders ────────────────────────────────────────────────────


def make_step_record(n: int, **overrides) -> dict:
    """Step ``s<n>``; odd numbers are steps, even numbers gateways."""
    is_step = n % 2 == 1
    record = {
        "id": f"s{n}",
        "title": f"Step {n}",
        "type": "step" if is_step else "gateway",
        "description": f"Description {n}",
        "details": f"Details {n}",
        "inputs": "Input A | Input B" if is_step else "",
        "outputs": "Output A" if is_step else "",
        "duration": "2 weeks" if is_step else "",
        "owner": "Product" if is_step else "",
        "criteria": "" if is_step else "Criterion A | Criterion B",
        "outcomes": "" if is_step else "Go | No-go",
        "nextSteps": f"s{n + 1}" if n < 8 else "",
    }
    record.update(overrides)
    return record


def make_project_record(pid: str, stage: str, status: str = "on-track", progress="45", **overrides) -> dict:
    record = {
        "id": pid,
        "name": f"Project {pid}",
        "currentStage": stage,
        "status": status,
        "nextSteps": "Customer review",
        "blockingReason": "",
        "progress": progress,
    }
    record.update(overrides)
    return record


def build_context(process_records, project_records) -> FlowContext:
    model = ProcessModel(parse_step(r) for r in process_records)
    index = ProjectIndex(model, [parse_project(r) for r in project_records])
    return FlowContext(model=model, index=index, loaded_at=datetime.now(timezone.utc))


class FakeGateway:
    """DataSourceGateway stand-in keyed by location.

    A value that is an Exception instance produces a failed result.
    """

    def __init__(self, payloads: dict):
        self.payloads = payloads
        self.calls: list[str] = []

    def fetch(self, location: str) -> DataSourceResult:
        self.calls.append(location)
        payload = self.payloads.get(location)
        if isinstance(payload, Exception):
            return DataSourceResult(ok=False, source=location, error=str(payload))
        if location not in self.payloads:
            return DataSourceResult(ok=False, source=location, status_code=404, error="HTTP 404")
        return DataSourceResult(ok=True, source=location, status_code=200, data=payload)


# ── App fixtures ─────────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Data fixtures ────────────────────────────────────────────────────────


@pytest.fixture()
def process_records():
    return [make_step_record(n) for n in range(1, 9)]


@pytest.fixture()
def project_records():
    return [
        make_project_record("p1", "s3", "on-track", "45"),
        make_project_record("p2", "s3", "blocked", "30", blockingReason="Waiting for legal"),
        make_project_record("p3", "s5", "on-track", "120"),
    ]


@pytest.fixture()
def context(process_records, project_records):
    return build_context(process_records, project_records)


@pytest.fixture()
def fake_gateway(process_records, project_records):
    return FakeGateway({
        PROCESS_URL: {"data": process_records},
        PROJECTS_URL: {"data": project_records},
    })


@pytest.fixture()
def data_files(app, tmp_path, process_records, project_records):
    """Write both envelopes to disk and point the app config at them."""
    process_path = tmp_path / "co-innovation-process.json"
    projects_path = tmp_path / "projects.json"
    process_path.write_text(json.dumps({"data": process_records}), encoding="utf-8")
    projects_path.write_text(json.dumps({"data": project_records}), encoding="utf-8")

    saved = {k: app.config[k] for k in ("DATA_DIR", "PROCESS_DATA_URL", "PROJECTS_DATA_URL")}
    app.config.update(
        DATA_DIR=str(tmp_path),
        PROCESS_DATA_URL=str(process_path),
        PROJECTS_DATA_URL=str(projects_path),
    )
    yield {"process": process_path, "projects": projects_path}
    app.config.update(saved)
