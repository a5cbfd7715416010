"""
Co-innovation flow blueprint.

Endpoints:
    GET /co-innovation                          — HTML page (flowchart, mobile list, panel)
    GET /api/v1/co-innovation/view              — full page view model (JSON)
    GET /api/v1/co-innovation/steps/<step_id>   — step detail projection
    GET /api/v1/co-innovation/counts            — projects per step
    GET /api/v1/co-innovation/layout            — node positions + connectors
    GET /data/co-innovation-process.json        — bundled process-step source
    GET /data/projects.json                     — bundled project source

Query params (page + view):
    width  — container width in px (default DEFAULT_CONTAINER_WIDTH)
    step   — step to show in the detail panel; unknown ids leave it closed
    from   — step the panel was showing when a next-step link was followed

Each request is one page load: both sources are fetched, the model is
built, and the response is rendered from it.
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, render_template_string, request, send_from_directory

from coinnovation.core.exceptions import FlowLoadError, NotFoundError
from coinnovation.services import flow_service, view_adapter
from coinnovation.services.flow_component import FlowComponent
from coinnovation.services.layout_engine import LayoutPolicy
from coinnovation.utils.errors import E, api_error

logger = logging.getLogger(__name__)

flow_bp = Blueprint("flow", __name__)

DATA_FILES = frozenset({"co-innovation-process.json", "projects.json"})

# Query parameters that carry page state
PAGE_QUERY_PARAMS = ("step", "from", "width")


# ── Error handlers ────────────────────────────────────────────────────────────


@flow_bp.errorhandler(NotFoundError)
def _handle_not_found(error: NotFoundError):
    return api_error(E.NOT_FOUND, str(error))


@flow_bp.errorhandler(FlowLoadError)
def _handle_load_error(error: FlowLoadError):
    if request.path.startswith("/api/"):
        return api_error(E.DATA_SOURCE, view_adapter.LOAD_ERROR_MESSAGE)
    return render_template_string(FLOW_PAGE_HTML, view=view_adapter.build_error_view()), 503


# ── Helpers ───────────────────────────────────────────────────────────────────


def _policy() -> LayoutPolicy:
    cfg = current_app.config
    return LayoutPolicy(
        per_row=cfg.get("LAYOUT_PER_ROW", 4),
        default_width=cfg.get("DEFAULT_CONTAINER_WIDTH", 1200),
    )


def _load_context():
    return flow_service.load_from_config(current_app.config)


def _component_from_request() -> FlowComponent:
    """Build and mount a component, replaying the panel state from the query."""
    component = FlowComponent(
        _load_context(),
        policy=_policy(),
        debounce_ms=current_app.config.get("RESIZE_DEBOUNCE_MS", 250),
    )
    component.mount(request.args.get("width", type=int))

    step_id = request.args.get("step")
    origin = request.args.get("from")
    if step_id:
        if origin and component.select(origin):
            component.navigate(step_id)
        else:
            component.select(step_id)
    return component


# ═════════════════════════════════════════════════════════════════════════
# Page
# ═════════════════════════════════════════════════════════════════════════


@flow_bp.route("/co-innovation", methods=["GET"])
def page():
    """Render the co-innovation process page."""
    component = _component_from_request()
    view = component.render()
    return render_template_string(
        FLOW_PAGE_HTML,
        view=view,
        width=request.args.get("width", type=int),
        debounce_ms=current_app.config.get("RESIZE_DEBOUNCE_MS", 250),
    ), 200


# ═════════════════════════════════════════════════════════════════════════
# JSON API  (/api/v1/co-innovation)
# ═════════════════════════════════════════════════════════════════════════


@flow_bp.route("/api/v1/co-innovation/view", methods=["GET"])
def get_view():
    """Full view model for the current query state."""
    return jsonify(_component_from_request().render()), 200


@flow_bp.route("/api/v1/co-innovation/steps/<step_id>", methods=["GET"])
def get_step(step_id: str):
    """Detail panel projection for one step (404 for unknown ids)."""
    context = _load_context()
    return jsonify(view_adapter.build_step_detail(context, step_id)), 200


@flow_bp.route("/api/v1/co-innovation/counts", methods=["GET"])
def get_counts():
    """Project count per step plus tracked / untracked totals."""
    context = _load_context()
    return jsonify({
        "counts": context.index.counts(),
        "total_projects": len(context.projects),
        "tracked": context.index.tracked_total(),
        "untracked": [p.id for p in context.index.untracked()],
    }), 200


@flow_bp.route("/api/v1/co-innovation/layout", methods=["GET"])
def get_layout():
    """Layout for the given width."""
    component = _component_from_request()
    body = component.layout.to_dict()
    body["policy"] = component.policy.to_dict()
    body["step_ids"] = list(component.context.model.ids)
    return jsonify(body), 200


# ═════════════════════════════════════════════════════════════════════════
# Bundled data sources  (/data)
# ═════════════════════════════════════════════════════════════════════════


@flow_bp.route("/data/<filename>", methods=["GET"])
def data_file(filename: str):
    """Serve one of the two bundled JSON sources."""
    if filename not in DATA_FILES:
        return api_error(E.NOT_FOUND, f"Unknown data source: {filename}")
    return send_from_directory(current_app.config["DATA_DIR"], filename, mimetype="application/json")


# ── Page template ─────────────────────────────────────────────────────────────

FLOW_PAGE_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{{ view.header.title }}</title>
<style>
  *{box-sizing:border-box}
  body{font-family:-apple-system,system-ui,sans-serif;margin:0;background:#f9fafb;color:#111827}
  .co-innovation{position:relative;padding:24px}
  .co-innovation-header{text-align:center;margin-bottom:24px}
  .co-innovation-chart-title{text-align:center}
  .co-innovation-chart svg{width:100%;height:auto}
  .node-shape{fill:#fff;stroke:#6366f1;stroke-width:2}
  .node-gateway .node-shape{stroke:#f59e0b}
  .step-number-circle{fill:#6366f1}
  .step-number-text{fill:#fff;font-weight:700;font-size:14px}
  .node-title{font-size:13px;font-weight:600}
  .count-badge-circle{fill:#ef4444}
  .count-badge-text{fill:#fff;font-size:12px;font-weight:700}
  .co-innovation-mobile-list{display:none}
  .mobile-step{display:flex;gap:12px;padding:12px;border-bottom:1px solid #e5e7eb;color:inherit;text-decoration:none}
  .co-innovation-panel{position:fixed;top:0;right:0;width:420px;max-width:100%;height:100%;
       overflow-y:auto;background:#fff;box-shadow:-4px 0 16px rgba(0,0,0,.15);padding:24px}
  .co-innovation-overlay{position:fixed;inset:0;background:rgba(17,24,39,.35)}
  .progress-bar{background:#e5e7eb;height:8px;border-radius:4px}
  .progress-fill{background:#10b981;height:8px;border-radius:4px}
  .progress-fill.blocked{background:#ef4444}
  .status-badge{font-size:12px;padding:2px 8px;border-radius:10px;background:#e5e7eb}
  .status-badge.on-track{background:#d1fae5}
  .status-badge.blocked{background:#fee2e2}
  .error{color:#b91c1c;text-align:center}
  @media (max-width:768px){
    .co-innovation-chart{display:none}
    .co-innovation-mobile-list{display:block}
  }
</style>
</head>
<body>
<div class="co-innovation{% if view.ok and view.panel.open %} panel-open{% endif %}">
  <div class="co-innovation-header">
    <h1>{{ view.header.title }}</h1>
    <p>{{ view.header.subtitle }}</p>
  </div>
{% if not view.ok %}
  <p class="error">{{ view.error }}</p>
{% else %}
  {% set fc = view.flowchart %}
  <div class="co-innovation-chart-container">
    <div class="co-innovation-chart-title">
      <h2>{{ view.chart.title }}</h2>
      <p class="subtitle">{{ view.chart.subtitle }}</p>
    </div>
    <div class="co-innovation-chart">
      <svg viewBox="0 0 {{ fc.width }} {{ fc.height }}" preserveAspectRatio="xMidYMid meet">
        <defs>
          <marker id="arrowhead" viewBox="0 -5 10 10" refX="8" refY="0"
                  markerWidth="6" markerHeight="6" orient="auto">
            <path d="M0,-5L10,0L0,5" fill="#9CA3AF"></path>
          </marker>
        </defs>
        {% for conn in fc.connectors %}
        <path class="connector connector-{{ conn.direction }}" d="{{ conn.path }}"
              stroke="#9CA3AF" stroke-width="2" fill="none" marker-end="url(#arrowhead)"></path>
        {% endfor %}
        {% for node in fc.nodes %}
        <a href="?step={{ node.id | urlencode }}{% if width %}&amp;width={{ width }}{% endif %}">
          <g class="node node-{{ node.type }}" transform="translate({{ node.x }}, {{ node.y }})">
            {% if node.shape == 'diamond' %}
            <polygon class="node-shape" points="{{ node.diamond_points }}"></polygon>
            {% else %}
            <rect class="node-shape" width="{{ node.width }}" height="{{ node.height }}" rx="8" ry="8"></rect>
            {% endif %}
            <circle class="step-number-circle" cx="{{ node.width / 2 }}" cy="-15" r="18"></circle>
            <text class="step-number-text" x="{{ node.width / 2 }}" y="-10" text-anchor="middle">{{ node.number }}</text>
            <text class="node-title" x="{{ node.width / 2 }}" y="{{ node.height / 2 + 5 }}" text-anchor="middle">{{ node.title }}</text>
            {% if node.show_badge %}
            <g class="count-badge-group" transform="translate({{ node.width - 15 }}, 8)">
              <circle class="count-badge-circle" r="14"></circle>
              <text class="count-badge-text" text-anchor="middle" dy="0.35em">{{ node.count }}</text>
            </g>
            {% endif %}
          </g>
        </a>
        {% endfor %}
      </svg>
    </div>
    <div class="co-innovation-mobile-list">
      {% for item in view.mobile_list %}
      <a class="mobile-step {{ item.type }}" href="?step={{ item.id | urlencode }}">
        <div class="mobile-step-number">{{ item.number }}</div>
        <div class="mobile-step-content">
          <div class="mobile-step-header">
            <h3 class="mobile-step-title">{{ item.title }}</h3>
            <span class="mobile-step-badge">{{ item.type }}</span>
          </div>
          <p class="mobile-step-desc">{{ item.description }}</p>
          <div class="mobile-step-meta">
            {% if item.count_label %}<span class="mobile-step-count">{{ item.count_label }}</span>{% endif %}
            {% if item.duration %}<span class="mobile-step-count">{{ item.duration }}</span>{% endif %}
          </div>
        </div>
        <span class="mobile-step-arrow">&rarr;</span>
      </a>
      {% endfor %}
    </div>
  </div>
  <script>
    (function () {
      var chart = document.querySelector(".co-innovation-chart");
      var rendered = {{ fc.width | tojson }};
      var timer = null;
      function relayout() {
        var width = chart.clientWidth;
        if (!width || Math.abs(width - rendered) < 1) { return; }
        var params = new URLSearchParams(window.location.search);
        params.set("width", Math.round(width));
        window.location.search = params.toString();
      }
      window.addEventListener("resize", function () {
        if (timer) { clearTimeout(timer); }
        timer = setTimeout(relayout, {{ debounce_ms }});
      });
      {% if not width %}relayout();{% endif %}
    })();
  </script>
  {% if view.panel.open %}
  {% set d = view.panel.detail %}
  {% set close_url = "?width=" ~ width if width else "?" %}
  <a class="co-innovation-overlay" id="co-innovation-overlay" href="{{ close_url }}" aria-label="Close panel"></a>
  <div class="co-innovation-panel visible" role="dialog" aria-labelledby="panel-title">
    <div class="co-innovation-panel-header">
      <h2 class="co-innovation-panel-title" id="panel-title">{{ d.title }}</h2>
      <span class="co-innovation-type-badge {{ d.type }}">{{ d.badge }}</span>
      <a class="co-innovation-close-btn" id="co-innovation-close" href="{{ close_url }}" aria-label="Close">&times;</a>
    </div>
    <div class="co-innovation-panel-content">
      <div class="co-innovation-section">
        <h3>Overview</h3>
        <p><strong>{{ d.description }}</strong></p>
        <p>{{ d.details }}</p>
      </div>
      {% for section in d.sections %}
      <div class="co-innovation-section">
        <h3>{{ section.heading }}</h3>
        <ul class="co-innovation-list">
          {% for entry in section["items"] %}<li>{{ entry }}</li>{% endfor %}
        </ul>
      </div>
      {% endfor %}
      {% if d.info_cards %}
      <div class="co-innovation-info-grid">
        {% for card in d.info_cards %}
        <div class="co-innovation-info-card">
          <div class="info-card-label">{{ card.label }}</div>
          <div class="info-card-value">{{ card.value }}</div>
        </div>
        {% endfor %}
      </div>
      {% endif %}
      {% if d.next_steps %}
      <div class="co-innovation-section co-innovation-nav-section">
        <h3>Next Steps in Process</h3>
        <div class="co-innovation-nav-links">
          {% for link in d.next_steps %}
          <a class="nav-link" data-step-id="{{ link.id }}"
             href="?step={{ link.id | urlencode }}&amp;from={{ d.id | urlencode }}{% if width %}&amp;width={{ width }}{% endif %}">{{ link.title }}</a>
          {% endfor %}
        </div>
      </div>
      {% endif %}
      <div class="co-innovation-section">
        <h3>Projects at This Stage</h3>
        {% if d.projects %}
        <div class="co-innovation-projects-summary">
          <div class="projects-summary-item"><strong>Total:</strong> <span>{{ d.summary.total }}</span></div>
          <div class="projects-summary-item"><span class="status-badge on-track">On-Track</span> <strong>{{ d.summary.on_track }}</strong></div>
          <div class="projects-summary-item"><span class="status-badge blocked">Blocked</span> <strong>{{ d.summary.blocked }}</strong></div>
        </div>
        {% for p in d.projects %}
        <div class="co-innovation-project-card{% if p.blocked %} blocked{% endif %}">
          <div class="project-header">
            <p class="project-name">{{ p.name }}</p>
            <span class="status-badge {{ p.status }}">{{ p.status_label }}</span>
          </div>
          <div class="project-progress">
            <div class="progress-bar"><div class="progress-fill {{ p.status }}" style="width: {{ p.progress_width }}%"></div></div>
            <span class="progress-text">{{ p.progress }}%</span>
          </div>
          <div class="project-next-steps"><strong>Next Steps:</strong> {{ p.next_steps }}</div>
          {% if p.blocking_reason %}
          <div class="project-blocking-reason"><strong>Blocking Reason:</strong> {{ p.blocking_reason }}</div>
          {% endif %}
        </div>
        {% endfor %}
        {% else %}
        <p class="no-projects">{{ d.empty_message }}</p>
        {% endif %}
      </div>
    </div>
  </div>
  <script>
    document.addEventListener("keydown", function (e) {
      if (e.key === "Escape") { window.location.href = {{ close_url | tojson }}; }
    });
  </script>
  {% endif %}
{% endif %}
</div>
</body>
</html>"""
