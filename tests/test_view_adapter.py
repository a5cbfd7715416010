"""Tests for the view adapter — flowchart, mobile list, detail panel."""

import pytest

from conftest import build_context, make_project_record

from coinnovation.core.exceptions import NotFoundError
from coinnovation.services.layout_engine import compute_layout
from coinnovation.services.selection_controller import SelectionController
from coinnovation.services.view_adapter import (
    LOAD_ERROR_MESSAGE,
    NO_PROJECTS_MESSAGE,
    SHAPE_DIAMOND,
    SHAPE_RECT,
    build_error_view,
    build_flowchart,
    build_mobile_list,
    build_step_detail,
    build_view,
    count_label,
    project_card,
)
from coinnovation.services.record_parser import parse_project


@pytest.fixture()
def single_project_context(process_records):
    return build_context(process_records, [make_project_record("p1", "s3", "on-track", "45")])


class TestCountLabel:

    @pytest.mark.parametrize("count, expected", [
        (0, None), (1, "1 project"), (2, "2 projects"), (12, "12 projects"),
    ])
    def test_label(self, count, expected):
        assert count_label(count) == expected


class TestFlowchart:

    def test_nodes_follow_layout(self, context):
        chart = build_flowchart(context, compute_layout(1200, 8))
        nodes = chart["nodes"]
        assert [n["id"] for n in nodes] == [f"s{n}" for n in range(1, 9)]
        assert [n["number"] for n in nodes] == list(range(1, 9))
        assert (nodes[0]["x"], nodes[0]["y"]) == (220, 80)
        assert len(chart["connectors"]) == 7

    def test_shapes_by_type(self, context):
        nodes = build_flowchart(context, compute_layout(1200, 8))["nodes"]
        assert nodes[0]["shape"] == SHAPE_RECT
        assert "diamond_points" not in nodes[0]
        assert nodes[1]["shape"] == SHAPE_DIAMOND
        assert nodes[1]["diamond_points"] == "80,0 160,40 80,80 0,40"

    def test_badge_only_for_positive_counts(self, context):
        nodes = {n["id"]: n for n in build_flowchart(context, compute_layout(1200, 8))["nodes"]}
        assert nodes["s3"]["count"] == 2 and nodes["s3"]["show_badge"]
        assert nodes["s1"]["count"] == 0 and not nodes["s1"]["show_badge"]


class TestMobileList:

    def test_items_in_process_order(self, context):
        items = build_mobile_list(context)
        assert [i["number"] for i in items] == list(range(1, 9))
        assert items[2]["count_label"] == "2 projects"
        assert items[0]["count_label"] is None

    def test_duration_only_when_present(self, context):
        items = build_mobile_list(context)
        assert items[0]["duration"] == "2 weeks"
        assert items[1]["duration"] is None


class TestProjectCard:

    @pytest.mark.parametrize("progress, width", [("45", 45), ("150", 100), ("-5", 0), ("abc", 0)])
    def test_progress_bar_capped(self, progress, width):
        card = project_card(parse_project(make_project_record("p1", "s1", progress=progress)))
        assert card["progress_width"] == width

    def test_raw_progress_kept(self):
        card = project_card(parse_project(make_project_record("p1", "s1", progress="150")))
        assert card["progress"] == 150

    def test_blocked_card(self):
        card = project_card(parse_project(
            make_project_record("p2", "s1", "blocked", blockingReason="Legal review")
        ))
        assert card["blocked"] is True
        assert card["status_label"] == "Blocked"
        assert card["blocking_reason"] == "Legal review"

    def test_unknown_status_label(self):
        card = project_card(parse_project(make_project_record("p3", "s1", "at-risk")))
        assert card["status_label"] == "At Risk"
        assert card["blocked"] is False


class TestStepDetail:

    def test_single_project_at_stage(self, single_project_context):
        detail = build_step_detail(single_project_context, "s3")
        assert detail["number"] == 3
        assert detail["summary"] == {"total": 1, "on_track": 1, "blocked": 0}
        assert len(detail["projects"]) == 1
        card = detail["projects"][0]
        assert card["progress"] == 45
        assert card["status_label"] == "On-Track"
        assert detail["empty_message"] is None

    def test_step_sections_and_info_cards(self, context):
        detail = build_step_detail(context, "s1")
        assert [s["heading"] for s in detail["sections"]] == ["Inputs", "Outputs"]
        assert detail["sections"][0]["items"] == ["Input A", "Input B"]
        assert detail["info_cards"] == [
            {"label": "Duration", "value": "2 weeks"},
            {"label": "Owner", "value": "Product"},
        ]

    def test_gateway_sections(self, context):
        detail = build_step_detail(context, "s2")
        assert detail["badge"] == "gateway"
        assert [s["heading"] for s in detail["sections"]] == ["Decision Criteria", "Possible Outcomes"]
        assert detail["sections"][1]["items"] == ["Go", "No-go"]
        assert detail["info_cards"] == []

    def test_empty_stage_message(self, context):
        detail = build_step_detail(context, "s1")
        assert detail["projects"] == []
        assert detail["empty_message"] == NO_PROJECTS_MESSAGE

    def test_next_step_links(self, context):
        assert build_step_detail(context, "s1")["next_steps"] == [{"id": "s2", "title": "Step 2"}]
        assert build_step_detail(context, "s8")["next_steps"] == []

    def test_unknown_step_raises(self, context):
        with pytest.raises(NotFoundError):
            build_step_detail(context, "nope")


class TestBuildView:

    def test_closed_panel(self, context):
        view = build_view(context, compute_layout(1200, 8), SelectionController(context.model))
        assert view["ok"] is True
        assert view["chart"]["subtitle"] == "8-Step Process from Discovery to Delivery"
        assert view["panel"] == {"open": False, "active_step_id": None, "detail": None}
        assert view["totals"] == {"projects": 3, "tracked": 3, "untracked": 0}

    def test_open_panel(self, context):
        controller = SelectionController(context.model)
        controller.select_step("s3")
        view = build_view(context, compute_layout(1200, 8), controller)
        assert view["panel"]["open"] is True
        assert view["panel"]["detail"]["id"] == "s3"

    def test_untracked_totals(self, process_records):
        ctx = build_context(process_records, [
            make_project_record("p1", "s1"),
            make_project_record("p2", "ghost"),
        ])
        view = build_view(ctx, compute_layout(1200, 8), SelectionController(ctx.model))
        assert view["totals"] == {"projects": 2, "tracked": 1, "untracked": 1}

    def test_error_view(self):
        view = build_error_view()
        assert view["ok"] is False
        assert view["error"] == LOAD_ERROR_MESSAGE
        assert "flowchart" not in view
