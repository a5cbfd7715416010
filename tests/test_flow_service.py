"""Tests for flow_service — concurrent load and failure degradation."""

import logging

import pytest

from conftest import PROCESS_URL, PROJECTS_URL, FakeGateway, make_project_record, make_step_record

from coinnovation.core.exceptions import FlowLoadError
from coinnovation.services.flow_service import load_flow_context, load_from_config


class TestLoadFlowContext:

    def test_loads_both_sources(self, fake_gateway):
        context = load_flow_context(PROCESS_URL, PROJECTS_URL, gateway=fake_gateway)
        assert len(context.model) == 8
        assert len(context.projects) == 3
        assert sorted(fake_gateway.calls) == sorted([PROCESS_URL, PROJECTS_URL])
        assert context.loaded_at.tzinfo is not None

    def test_empty_projects_is_valid(self, process_records):
        gateway = FakeGateway({PROCESS_URL: {"data": process_records}, PROJECTS_URL: {"data": []}})
        context = load_flow_context(PROCESS_URL, PROJECTS_URL, gateway=gateway)
        assert len(context.model) == 8
        assert all(c == 0 for c in context.index.counts().values())

    def test_failed_projects_source_degrades_to_empty(self, process_records, caplog):
        gateway = FakeGateway({
            PROCESS_URL: {"data": process_records},
            PROJECTS_URL: ConnectionError("connection refused"),
        })
        with caplog.at_level(logging.ERROR, logger="coinnovation.services.flow_service"):
            context = load_flow_context(PROCESS_URL, PROJECTS_URL, gateway=gateway)
        assert context.projects == ()
        assert "projects" in caplog.text

    def test_failed_process_source_raises(self, project_records):
        gateway = FakeGateway({
            PROCESS_URL: TimeoutError("timed out"),
            PROJECTS_URL: {"data": project_records},
        })
        with pytest.raises(FlowLoadError, match="Failed to load co-innovation process data."):
            load_flow_context(PROCESS_URL, PROJECTS_URL, gateway=gateway)

    def test_missing_process_source_raises(self, project_records):
        gateway = FakeGateway({PROJECTS_URL: {"data": project_records}})
        with pytest.raises(FlowLoadError):
            load_flow_context(PROCESS_URL, PROJECTS_URL, gateway=gateway)

    def test_empty_process_data_raises(self):
        gateway = FakeGateway({PROCESS_URL: {"data": []}, PROJECTS_URL: {"data": []}})
        with pytest.raises(FlowLoadError):
            load_flow_context(PROCESS_URL, PROJECTS_URL, gateway=gateway)

    @pytest.mark.parametrize("payload", [[], {"rows": []}, "oops", {"data": {}}])
    def test_malformed_process_envelope_raises(self, payload):
        gateway = FakeGateway({PROCESS_URL: payload, PROJECTS_URL: {"data": []}})
        with pytest.raises(FlowLoadError):
            load_flow_context(PROCESS_URL, PROJECTS_URL, gateway=gateway)

    def test_malformed_projects_envelope_degrades(self, process_records):
        gateway = FakeGateway({PROCESS_URL: {"data": process_records}, PROJECTS_URL: {"rows": []}})
        context = load_flow_context(PROCESS_URL, PROJECTS_URL, gateway=gateway)
        assert context.projects == ()

    def test_oversized_progress_does_not_break_load(self, process_records):
        projects = [make_project_record("p1", "s3", progress="9" * 5000)]
        gateway = FakeGateway({PROCESS_URL: {"data": process_records}, PROJECTS_URL: {"data": projects}})
        context = load_flow_context(PROCESS_URL, PROJECTS_URL, gateway=gateway)
        assert context.index.count("s3") == 1
        assert context.projects[0].progress == 0

    def test_duplicate_step_ids_fail_load(self):
        records = [make_step_record(1), make_step_record(2, id="s1")]
        gateway = FakeGateway({PROCESS_URL: {"data": records}, PROJECTS_URL: {"data": []}})
        with pytest.raises(FlowLoadError, match="s1"):
            load_flow_context(PROCESS_URL, PROJECTS_URL, gateway=gateway)


class TestLoadFromConfig:

    def test_reads_locations_from_config(self, fake_gateway):
        config = {"PROCESS_DATA_URL": PROCESS_URL, "PROJECTS_DATA_URL": PROJECTS_URL}
        context = load_from_config(config, gateway=fake_gateway)
        assert len(context.model) == 8

    def test_reads_local_files(self, app, data_files):
        context = load_from_config(app.config)
        assert context.model.ids[0] == "s1"
        assert context.index.count("s3") == 2
