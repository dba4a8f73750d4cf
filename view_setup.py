"""View setup checklist for new GitHub Projects.

Builds the "Configure views for: ..." tracking issue that walks a human
through everything the Projects API cannot do: creating views, setting
grouping, and laying out columns. Field ids and option ids are pulled from
the project's own metadata so the checklist doubles as an id reference.

Usage:
    config = ViewSetupConfig.from_project(project_node)
    issue = build_view_setup_issue(config)
"""

import re
from dataclasses import dataclass, field
from typing import Any

SINGLE_SELECT = "SINGLE_SELECT"
DATE = "DATE"
TEXT = "TEXT"
NUMBER = "NUMBER"

VIEW_TYPES = ("table", "board", "roadmap")

TITLE_PREFIX = "⚙️ Configure views for: "

STATUS_FIELD_NAME = "Status"
PRIORITY_FIELD_NAME = "Priority"

_START_PATTERN = re.compile(r"start", re.IGNORECASE)
_TARGET_PATTERN = re.compile(r"target|end|due", re.IGNORECASE)

_LAYOUT_LABELS = {"board": "Board", "roadmap": "Roadmap"}

DEFAULT_HUMAN_ASSIGNEE = "Mxcks"
DEFAULT_AGENT_ASSIGNEE = "mxcksaiworkspace-art"


# ── Input / output records ──────────────────────────────────


@dataclass(frozen=True)
class FieldOption:
    id: str
    name: str


@dataclass(frozen=True)
class ProjectField:
    """One custom field on a project. ``options`` is only set for single-select fields."""

    id: str
    name: str
    type: str
    options: tuple[FieldOption, ...] | None = None

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> "ProjectField":
        """Build a field from a ``projectV2.fields.nodes`` entry."""
        raw_options = node.get("options")
        options = None
        if raw_options is not None:
            options = tuple(FieldOption(id=o["id"], name=o["name"]) for o in raw_options)
        field_type = node.get("dataType") or (SINGLE_SELECT if raw_options is not None else TEXT)
        return cls(id=node["id"], name=node["name"], type=field_type, options=options)


@dataclass(frozen=True)
class ExtraView:
    """An additional view to document beyond the standard Table/Board/Roadmap."""

    name: str
    type: str
    description: str
    group_by: str | None = None
    filter_by: str | None = None
    sort_by: str | None = None
    show_fields: tuple[str, ...] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExtraView":
        """Accepts both snake_case and the camelCase keys used by tool callers."""
        view_type = data.get("type", "table")
        if view_type not in VIEW_TYPES:
            raise ValueError(f"Unknown view type '{view_type}' — use one of: {', '.join(VIEW_TYPES)}")
        show = data.get("show_fields", data.get("showFields"))
        return cls(
            name=data["name"],
            type=view_type,
            description=data.get("description") or "",
            group_by=data.get("group_by", data.get("groupBy")),
            filter_by=data.get("filter_by", data.get("filterBy")),
            sort_by=data.get("sort_by", data.get("sortBy")),
            show_fields=tuple(show) if show is not None else None,
        )


@dataclass(frozen=True)
class ViewSetupConfig:
    project_title: str
    project_number: int
    project_url: str
    project_id: str
    fields: tuple[ProjectField, ...]
    board_group_field: str | None = None
    roadmap_start_field: str | None = None
    roadmap_target_field: str | None = None
    roadmap_lane_field: str | None = None
    extra_views: tuple[ExtraView, ...] | None = None

    @classmethod
    def from_project(cls, project: dict[str, Any], **overrides: Any) -> "ViewSetupConfig":
        """Build a config from a ``projectV2`` GraphQL node (as returned by get_project).

        Keyword overrides (``board_group_field``, ``extra_views`` etc.) are
        passed through unchanged.
        """
        nodes = (project.get("fields") or {}).get("nodes") or []
        fields = tuple(ProjectField.from_node(n) for n in nodes if n and n.get("id"))
        return cls(
            project_title=project["title"],
            project_number=project["number"],
            project_url=project["url"],
            project_id=project["id"],
            fields=fields,
            **overrides,
        )


@dataclass(frozen=True)
class AssigneeConvention:
    """Identities named in the By Assignee view note."""

    human: str = DEFAULT_HUMAN_ASSIGNEE
    agent: str = DEFAULT_AGENT_ASSIGNEE


@dataclass(frozen=True)
class GeneratedIssue:
    title: str
    body: str


# ── Field resolution ────────────────────────────────────────


@dataclass(frozen=True)
class ResolvedFields:
    status: ProjectField | None
    priority: ProjectField | None
    date_fields: tuple[ProjectField, ...]
    start_date: ProjectField | None
    target_date: ProjectField | None
    board_group: str
    lane: str
    select_fields: tuple[ProjectField, ...] = field(default_factory=tuple)


def _first(fields: tuple[ProjectField, ...] | list[ProjectField], pattern: re.Pattern[str]) -> ProjectField | None:
    return next((f for f in fields if pattern.search(f.name)), None)


def resolve_fields(config: ViewSetupConfig) -> ResolvedFields:
    """Pick the fields the checklist refers to.

    Start and target dates are chosen by name (``start`` / ``target|end|due``)
    and fall back to the first and second DATE field. The two lookups are
    independent, so one field can end up as both.
    """
    fields = config.fields
    status = next((f for f in fields if f.name == STATUS_FIELD_NAME), None)
    priority = next((f for f in fields if f.name == PRIORITY_FIELD_NAME), None)
    date_fields = tuple(f for f in fields if f.type == DATE)

    start = _first(date_fields, _START_PATTERN)
    if start is None and date_fields:
        start = date_fields[0]
    target = _first(date_fields, _TARGET_PATTERN)
    if target is None and len(date_fields) > 1:
        target = date_fields[1]

    board_group = config.board_group_field or (status.name if status else STATUS_FIELD_NAME)
    lane = config.roadmap_lane_field or (priority.name if priority else PRIORITY_FIELD_NAME)

    return ResolvedFields(
        status=status,
        priority=priority,
        date_fields=date_fields,
        start_date=start,
        target_date=target,
        board_group=board_group,
        lane=lane,
        select_fields=tuple(f for f in fields if f.type == SINGLE_SELECT),
    )


# ── Sections ────────────────────────────────────────────────


def _overview(config: ViewSetupConfig) -> list[str]:
    return [
        "## Overview",
        f"This issue tracks the manual view setup for **[{config.project_title}]({config.project_url})** "
        f"(Project #{config.project_number}).",
        "",
        "The GitHub Projects API cannot create views, set grouping, or configure column layout — "
        "those steps must be done in the UI. This checklist ensures every project gets a consistent, "
        "fully configured workspace.",
        "",
        f"> **Project ID for API calls:** `{config.project_id}`",
        "",
        "---",
        "",
    ]


def _field_reference(config: ViewSetupConfig) -> list[str]:
    lines = [
        "## Field Reference",
        "These are the fields available on this project. IDs are needed when calling "
        "`update_project_item` or `bulk_update_project_items`.",
        "",
    ]
    if not config.fields:
        lines.append("")
    for f in config.fields:
        lines.append(f"- **{f.name}** (`{f.id}`)")
        if f.options:
            lines.extend(f"    - {o.name} → `{o.id}`" for o in f.options)
        else:
            lines.append("")
    lines += ["", "---", ""]
    return lines


def _bold_names(fields: tuple[ProjectField, ...]) -> str:
    return ", ".join(f"**{f.name}**" for f in fields)


def _table_view(config: ViewSetupConfig, resolved: ResolvedFields) -> list[str]:
    all_field_names = ", ".join(f"`{f.name}`" for f in config.fields)
    return [
        "## View 1: 📋 Table (default)",
        "",
        "The main overview — all items visible, sorted by priority.",
        "",
        '- [ ] Rename the default view to **"Table"** (click the tab name → edit)',
        f"- [ ] Click **Group by** → select **{resolved.board_group}**",
        f"- [ ] Open **Fields** settings → ensure all fields are visible: {all_field_names}",
        "- [ ] Click **Sort** → **Priority** ascending",
        "- [ ] Click **Save**",
        "",
        "---",
        "",
    ]


def _status_board_view(resolved: ResolvedFields) -> list[str]:
    lines = [
        "## View 2: 🗂️ Board — by Status",
        "",
        f"Kanban-style board with columns per {resolved.board_group} option.",
        "",
        "- [ ] Click **+ New view** at the top of the project",
        "- [ ] Choose layout: **Board**",
        '- [ ] Name it **"Board"**',
        f"- [ ] Set **Group by** → **{resolved.board_group}**",
    ]
    if resolved.status is not None and resolved.status.options is not None:
        lines.append("- [ ] Verify all columns appear:")
        lines.extend(f"  - [ ] {o.name}" for o in resolved.status.options)
    if resolved.status is None or not resolved.status.options:
        lines.append("")
    lines += [
        f"- [ ] Open **Fields** → hide body text, show: {_bold_names(resolved.select_fields)}",
        "- [ ] Click **Save**",
        "",
        "---",
        "",
    ]
    return lines


def _assignee_board_view(resolved: ResolvedFields, convention: AssigneeConvention) -> list[str]:
    return [
        "## View 2b: 👤 Board — by Assignee (swim lanes)",
        "",
        "Same board layout but sliced by who owns the work. "
        "This is how you separate human tasks from agent tasks at a glance.",
        "",
        "- [ ] Click **+ New view** → choose **Board**",
        '- [ ] Name it **"By Assignee"**',
        "- [ ] Set **Group by** → **Assignees**",
        f"- [ ] Set **Column by** → **{resolved.board_group}** (so columns are still Status)",
        f"- [ ] Open **Fields** → show: {_bold_names(resolved.select_fields)}",
        "- [ ] Click **Save**",
        "",
        f"> **Convention:** Issues assigned to **{convention.human}** are human tasks. "
        f"Issues assigned to **{convention.agent}** have an embedded 🤖 agent prompt in their body "
        "— paste it into a new Copilot chat to start that work.",
        "",
        "---",
        "",
    ]


def _roadmap_view(resolved: ResolvedFields) -> list[str]:
    lines = ["## View 3: 🗓️ Roadmap", ""]
    start, target = resolved.start_date, resolved.target_date
    if start is not None and target is not None:
        lines += [
            "Time-based view showing work scheduled across dates.",
            "",
            "- [ ] Click **+ New view** → choose **Roadmap**",
            '- [ ] Name it **"Roadmap"**',
            "- [ ] Click **Date fields** → set:",
            f"  - Start date: **{start.name}**",
            f"  - Target date: **{target.name}**",
            f"- [ ] Set **Group by** (swim lanes) → **{resolved.lane}**",
            "- [ ] Set zoom level: **Month**",
            "- [ ] Click **Save**",
            "",
            f"> If no items appear as bars, open an item and confirm its **{start.name}** and "
            f"**{target.name}** fields have values set. "
            "Use `set_item_date` or `bulk_update_project_items` to populate them.",
        ]
    else:
        lines += [
            "> ⚠️ No DATE fields found on this project. To enable Roadmap view:",
            "> 1. Use `create_project_field` to create `Start Date` (DATE) and `Target Date` (DATE) fields",
            "> 2. Populate them with `bulk_update_project_items`",
            "> 3. Then create the Roadmap view as above",
        ]
    lines += ["", "", "---"]
    return lines


def _extra_view(position: int, view: ExtraView) -> list[str]:
    lines = [
        "",
        f"### View {position}: {view.name} ({view.type})",
        view.description or "",
        "",
        f"- [ ] Click **+ New view** → choose **{_LAYOUT_LABELS.get(view.type, 'Table')}**",
        f'- [ ] Name it **"{view.name}"**',
    ]
    if view.group_by:
        lines.append(f"- [ ] Set **Group by** → **{view.group_by}**")
    if view.filter_by:
        lines.append(f"- [ ] Add filter: `{view.filter_by}`")
    if view.sort_by:
        lines.append(f"- [ ] Sort by **{view.sort_by}**")
    if view.show_fields is not None:
        lines.append(f"- [ ] Show fields: {', '.join(f'**{name}**' for name in view.show_fields)}")
    lines.append("- [ ] Click **Save**")
    return lines


def _extra_views(config: ViewSetupConfig) -> list[str]:
    lines: list[str] = []
    # Views 1-3 are the standard set, so extras start at 4.
    for i, view in enumerate(config.extra_views or (), start=4):
        lines += _extra_view(i, view)
    lines.append("")
    return lines


def _view_settings() -> list[str]:
    return [
        "## View Settings (apply to all views)",
        "",
        "- [ ] **Workflows** — Click ⚙️ → Workflows → enable:",
        "  - [ ] Auto-add items: _Item added to repository → add to project_",
        "  - [ ] Auto-close: _Item closed → set Status to Done_",
        '- [ ] **Insights** — Click 📊 → confirm "Current iteration" chart is available',
        "- [ ] **Limit** — On Board view, consider setting WIP limits per column (UI only)",
        "",
        "---",
        "",
    ]


def _api_quick_start(config: ViewSetupConfig, resolved: ResolvedFields) -> list[str]:
    status_id = resolved.status.id if resolved.status else "<STATUS_FIELD_ID>"
    start_id = resolved.start_date.id if resolved.start_date else "<START_DATE_ID>"
    return [
        "## API Quick-Start",
        "",
        "Once views are configured, use these to update items without the browser:",
        "",
        "```jsonc",
        "// Update a single item's status",
        "{",
        '  "tool": "update_project_item",',
        f'  "projectId": "{config.project_id}",',
        '  "itemId": "PVTI_...",',
        f'  "fieldId": "{status_id}",',
        '  "value": "<OPTION_ID>"',
        "}",
        "",
        "// Update multiple items at once",
        "{",
        '  "tool": "bulk_update_project_items",',
        f'  "projectId": "{config.project_id}",',
        '  "updates": [',
        f'    {{ "itemId": "PVTI_...", "fieldId": "{status_id}",   '
        '"value": "<status_option_id>",   "type": "singleSelect" },',
        f'    {{ "itemId": "PVTI_...", "fieldId": "{start_id}",  '
        '"value": "2026-03-01",           "type": "date" }',
        "  ]",
        "}",
        "```",
        "",
        "---",
        "",
    ]


def _status_options(resolved: ResolvedFields) -> list[str]:
    lines = ["## Status options"]
    if resolved.status is not None and resolved.status.options:
        lines.extend(f"  - `{o.id}` → **{o.name}**" for o in resolved.status.options)
    else:
        lines.append("  _(No options found — add via UI)_")
    lines += ["", "---", ""]
    return lines


# ── Entry point ─────────────────────────────────────────────


def build_view_setup_issue(
    config: ViewSetupConfig,
    convention: AssigneeConvention = AssigneeConvention(),
) -> GeneratedIssue:
    """Render the view-setup issue for a project.

    Pure: the same config (and convention) always yields the same title and
    body. Missing Status/Priority/date fields never raise; they switch the
    affected sections to their fallback text instead.
    """
    resolved = resolve_fields(config)
    lines = (
        _overview(config)
        + _field_reference(config)
        + _table_view(config, resolved)
        + _status_board_view(resolved)
        + _assignee_board_view(resolved, convention)
        + _roadmap_view(resolved)
        + _extra_views(config)
        + _view_settings()
        + _api_quick_start(config, resolved)
        + _status_options(resolved)
        + ["_Close this issue once all views are saved and workflow automations are enabled._", ""]
    )
    return GeneratedIssue(title=f"{TITLE_PREFIX}{config.project_title}", body="\n".join(lines))
