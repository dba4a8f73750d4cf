"""GitHub Projects — MCP server for GitHub Projects (ProjectsV2).

Exposes issue, project field and project item operations as MCP tools so
an agent can run a project board end to end. Steps the API cannot do
(view creation, grouping, layout) are covered by a generated setup issue
and by a handful of browser tools driving an existing Chromium session.
"""

import datetime as _dt
import json
import logging
import os
import re
import sys
import time
from typing import Any

import httpx
from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP
from playwright.async_api import Page, async_playwright

from view_setup import (
    DEFAULT_AGENT_ASSIGNEE,
    DEFAULT_HUMAN_ASSIGNEE,
    AssigneeConvention,
    ExtraView,
    ViewSetupConfig,
    build_view_setup_issue,
)

load_dotenv(os.path.join(os.path.dirname(os.path.abspath(__file__)), ".env"))

GITHUB_TOKEN = os.getenv("AI_GITHUB_TOKEN") or os.getenv("GITHUB_TOKEN", "")
GITHUB_OWNER = os.getenv("AI_GITHUB_USERNAME") or os.getenv("GITHUB_OWNER", "mxcksaiworkspace-art")
GITHUB_REPO = os.getenv("GITHUB_REPO", "Research-Lab")
GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip("/")
GRAPHQL_URL = f"{GITHUB_API_URL}/graphql"

BROWSER_DEBUG_PORT = int(os.getenv("BROWSER_DEBUG_PORT", "9222"))
SCREENSHOT_DIR = os.getenv("SCREENSHOT_DIR", os.getcwd())

ASSIGNEES = AssigneeConvention(
    human=os.getenv("HUMAN_ASSIGNEE", DEFAULT_HUMAN_ASSIGNEE),
    agent=os.getenv("AGENT_ASSIGNEE", DEFAULT_AGENT_ASSIGNEE),
)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

USER_AGENT = "github-projects-mcp/2.0"

logger = logging.getLogger(__name__)

mcp = FastMCP("github-projects")


class GitHubError(Exception):
    """A GitHub API call failed or returned nothing for a lookup."""


# ── HTTP helpers ─────────────────────────────────────────────


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient()


def _auth_headers() -> dict[str, str]:
    if not GITHUB_TOKEN:
        raise GitHubError("AI_GITHUB_TOKEN or GITHUB_TOKEN must be set (env or .env)")
    return {
        "Authorization": f"Bearer {GITHUB_TOKEN}",
        "Accept": "application/vnd.github+json",
        "User-Agent": USER_AGENT,
    }


def _error_detail(r: httpx.Response) -> str:
    """Extract a human-readable error from an HTTP response."""
    try:
        data = r.json()
        if isinstance(data, dict):
            return data.get("message", str(data))
        return str(data)
    except ValueError:
        return r.text[:200] if r.text else f"HTTP {r.status_code}"


async def _graphql(query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
    """Run a GraphQL query/mutation and return its ``data`` payload."""
    headers = _auth_headers()
    logger.debug("POST %s", GRAPHQL_URL)
    async with _client() as c:
        r = await c.post(GRAPHQL_URL, json={"query": query, "variables": variables or {}}, headers=headers, timeout=30)
    if not r.is_success:
        raise GitHubError(f"GraphQL request failed '{r.status_code} {r.reason_phrase}'\n{_error_detail(r)}")
    data = r.json()
    if data.get("errors"):
        raise GitHubError("GraphQL errors: " + "; ".join(e.get("message", str(e)) for e in data["errors"]))
    return data.get("data") or {}


async def _rest(method: str, path: str, body: dict | None = None, params: dict | None = None) -> Any:
    headers = _auth_headers()
    url = f"{GITHUB_API_URL}{path}"
    logger.debug("%s %s", method, url)
    async with _client() as c:
        r = await c.request(method, url, json=body, params=params, headers=headers, timeout=30)
    if not r.is_success:
        raise GitHubError(f"Client error '{r.status_code} {r.reason_phrase}' for url '{r.url}'\n{_error_detail(r)}")
    return r.json() if r.content else {}


def _fmt(data: Any) -> str:
    """Format API response as readable JSON."""
    return json.dumps(data, indent=2, default=str, ensure_ascii=False)


def _owner(owner: str) -> str:
    return owner or GITHUB_OWNER


def _repo(repo: str) -> str:
    return repo or GITHUB_REPO


# ── Shared lookups ───────────────────────────────────────────

PROJECT_QUERY = """
query($owner: String!, $number: Int!) {
  user(login: $owner) {
    projectV2(number: $number) {
      id
      number
      title
      shortDescription
      url
      public
      readme
      createdAt
      updatedAt
      fields(first: 20) {
        nodes {
          ... on ProjectV2Field { id name dataType }
          ... on ProjectV2IterationField { id name dataType }
          ... on ProjectV2SingleSelectField { id name dataType options { id name } }
        }
      }
    }
  }
}
"""

ADD_ITEM_MUTATION = """
mutation($projectId: ID!, $contentId: ID!) {
  addProjectV2ItemById(input: { projectId: $projectId, contentId: $contentId }) {
    item { id }
  }
}
"""

CREATE_ISSUE_MUTATION = """
mutation($repositoryId: ID!, $title: String!, $body: String!) {
  createIssue(input: { repositoryId: $repositoryId, title: $title, body: $body }) {
    issue { id number title url state }
  }
}
"""

UPDATE_ITEM_MUTATION = """
mutation($projectId: ID!, $itemId: ID!, $fieldId: ID!, $value: ProjectV2FieldValue!) {
  updateProjectV2ItemFieldValue(
    input: { projectId: $projectId, itemId: $itemId, fieldId: $fieldId, value: $value }
  ) {
    projectV2Item { id }
  }
}
"""


async def _fetch_project(owner: str, number: int) -> dict[str, Any]:
    data = await _graphql(PROJECT_QUERY, {"owner": owner, "number": number})
    project = (data.get("user") or {}).get("projectV2")
    if not project:
        raise GitHubError(f"Project #{number} not found for user '{owner}'")
    return project


async def _project_id(owner: str, number: int) -> str:
    data = await _graphql(
        """
        query($owner: String!, $number: Int!) {
          user(login: $owner) { projectV2(number: $number) { id } }
        }
        """,
        {"owner": owner, "number": number},
    )
    project = (data.get("user") or {}).get("projectV2")
    if not project:
        raise GitHubError(f"Project #{number} not found for user '{owner}'")
    return project["id"]


async def _add_to_project(project_id: str, content_id: str) -> dict[str, Any]:
    data = await _graphql(ADD_ITEM_MUTATION, {"projectId": project_id, "contentId": content_id})
    return data["addProjectV2ItemById"]["item"]


async def _create_issue(owner: str, repo: str, title: str, body: str) -> dict[str, Any]:
    data = await _graphql(
        """
        query($owner: String!, $repo: String!) {
          repository(owner: $owner, name: $repo) { id }
        }
        """,
        {"owner": owner, "repo": repo},
    )
    repository = data.get("repository")
    if not repository:
        raise GitHubError(f"Repository '{owner}/{repo}' not found")
    created = await _graphql(CREATE_ISSUE_MUTATION, {"repositoryId": repository["id"], "title": title, "body": body})
    return created["createIssue"]["issue"]


# ── Field values ─────────────────────────────────────────────

FIELD_DATA_TYPES = ("TEXT", "NUMBER", "DATE", "SINGLE_SELECT", "ITERATION")
OPTION_COLORS = ("RED", "ORANGE", "YELLOW", "GREEN", "BLUE", "PURPLE", "PINK", "GRAY")
VALUE_TYPES = {
    "singleSelect": "singleSelectOptionId",
    "text": "text",
    "number": "number",
    "date": "date",
    "iteration": "iterationId",
}

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _check_date(value: str) -> str:
    if not _DATE_RE.match(value):
        raise ValueError(f"Invalid date '{value}' — expected YYYY-MM-DD")
    _dt.date.fromisoformat(value)
    return value


def _field_value(value: Any, value_type: str) -> dict[str, Any]:
    """Build a ``ProjectV2FieldValue`` input for the given value type."""
    key = VALUE_TYPES.get(value_type)
    if key is None:
        raise ValueError(f"Unknown value type '{value_type}' — use one of: {', '.join(VALUE_TYPES)}")
    if value_type == "number":
        return {key: float(value)}
    if value_type == "date":
        return {key: _check_date(str(value))}
    return {key: str(value)}


# ── Project tools ────────────────────────────────────────────


@mcp.tool()
async def list_projects(owner: str = "", limit: int = 10) -> str:
    """List all GitHub Projects for a user.

    Args:
        owner: GitHub username (default: configured owner)
        limit: Max projects to return (default 10)
    """
    data = await _graphql(
        """
        query($owner: String!, $limit: Int!) {
          user(login: $owner) {
            projectsV2(first: $limit) {
              nodes { id number title shortDescription url public createdAt updatedAt }
            }
          }
        }
        """,
        {"owner": _owner(owner), "limit": limit},
    )
    projects = ((data.get("user") or {}).get("projectsV2") or {}).get("nodes") or []
    return _fmt(projects)


@mcp.tool()
async def get_project(project_number: int, owner: str = "") -> str:
    """Get details and fields (with option IDs) of a specific project.

    Args:
        project_number: Project number from the GitHub URL
        owner: GitHub username (default: configured owner)
    """
    return _fmt(await _fetch_project(_owner(owner), project_number))


@mcp.tool()
async def list_project_items(project_number: int, owner: str = "", limit: int = 50) -> str:
    """List all issues/PRs in a project with their field values.

    Args:
        project_number: Project number
        owner: GitHub username (default: configured owner)
        limit: Max items (default 50)
    """
    data = await _graphql(
        """
        query($owner: String!, $number: Int!, $limit: Int!) {
          user(login: $owner) {
            projectV2(number: $number) {
              items(first: $limit) {
                nodes {
                  id
                  type
                  content {
                    ... on Issue { id number title state url createdAt updatedAt }
                    ... on PullRequest { id number title state url createdAt updatedAt }
                  }
                  fieldValues(first: 10) {
                    nodes {
                      ... on ProjectV2ItemFieldTextValue {
                        text
                        field { ... on ProjectV2Field { name } }
                      }
                      ... on ProjectV2ItemFieldSingleSelectValue {
                        name
                        field { ... on ProjectV2SingleSelectField { name } }
                      }
                      ... on ProjectV2ItemFieldDateValue {
                        date
                        field { ... on ProjectV2Field { name } }
                      }
                      ... on ProjectV2ItemFieldNumberValue {
                        number
                        field { ... on ProjectV2Field { name } }
                      }
                    }
                  }
                }
              }
            }
          }
        }
        """,
        {"owner": _owner(owner), "number": project_number, "limit": limit},
    )
    project = (data.get("user") or {}).get("projectV2")
    if not project:
        raise GitHubError(f"Project #{project_number} not found for user '{_owner(owner)}'")
    return _fmt(project["items"]["nodes"])


async def _file_setup_issue(
    project: dict[str, Any],
    owner: str,
    repo: str,
    **overrides: Any,
) -> dict[str, Any]:
    config = ViewSetupConfig.from_project(project, **overrides)
    issue = build_view_setup_issue(config, ASSIGNEES)
    created = await _create_issue(owner, repo, issue.title, issue.body)
    item = await _add_to_project(project["id"], created["id"])
    logger.info("Filed view setup issue #%s for project #%s", created["number"], project["number"])
    return {**created, "projectItemId": item["id"]}


@mcp.tool()
async def create_project(title: str, owner: str = "", setup_issue: bool = True, repo: str = "") -> str:
    """Create a new GitHub Project and (by default) file its view setup issue.

    The setup issue is a checklist covering what the API cannot do: creating
    the Table/Board/Roadmap views, grouping and column layout.

    Args:
        title: Project title
        owner: GitHub username that will own the project (default: configured owner)
        setup_issue: Also create the "Configure views" issue (default true)
        repo: Repo to file the setup issue in (default: configured repo)
    """
    owner = _owner(owner)
    data = await _graphql(
        "query($owner: String!) { user(login: $owner) { id } }",
        {"owner": owner},
    )
    user = data.get("user")
    if not user:
        raise GitHubError(f"User '{owner}' not found")
    created = await _graphql(
        """
        mutation($ownerId: ID!, $title: String!) {
          createProjectV2(input: { ownerId: $ownerId, title: $title }) {
            projectV2 { id number title url }
          }
        }
        """,
        {"ownerId": user["id"], "title": title},
    )
    project = created["createProjectV2"]["projectV2"]
    logger.info("Created project #%s '%s' for %s", project["number"], title, owner)
    result: dict[str, Any] = {"project": project}
    if setup_issue:
        try:
            full = await _fetch_project(owner, project["number"])
            result["setupIssue"] = await _file_setup_issue(full, owner, _repo(repo))
        except GitHubError as e:
            logger.warning("Setup issue for project #%s failed: %s", project["number"], e)
            result["setupIssueError"] = str(e)
    return _fmt(result)


@mcp.tool()
async def create_view_setup_issue(
    project_number: int,
    owner: str = "",
    repo: str = "",
    extra_views: list[dict[str, Any]] | None = None,
    board_group_field: str = "",
    roadmap_start_field: str = "",
    roadmap_target_field: str = "",
    roadmap_lane_field: str = "",
) -> str:
    """Generate the "Configure views" checklist issue for an existing project and add it to the board.

    Args:
        project_number: Project number
        owner: GitHub username (default: configured owner)
        repo: Repo to file the issue in (default: configured repo)
        extra_views: Additional views to document, each with name, type
            (table, board or roadmap), description and optional groupBy,
            filterBy, sortBy, showFields
        board_group_field: Field to use as Board columns (default: Status)
        roadmap_start_field: Field for Roadmap start dates
        roadmap_target_field: Field for Roadmap target dates
        roadmap_lane_field: Field for Roadmap swim lanes (default: Priority)
    """
    views = tuple(ExtraView.from_dict(v) for v in extra_views) if extra_views else None
    owner = _owner(owner)
    project = await _fetch_project(owner, project_number)
    issue = await _file_setup_issue(
        project,
        owner,
        _repo(repo),
        board_group_field=board_group_field or None,
        roadmap_start_field=roadmap_start_field or None,
        roadmap_target_field=roadmap_target_field or None,
        roadmap_lane_field=roadmap_lane_field or None,
        extra_views=views,
    )
    return _fmt(issue)


@mcp.tool()
async def delete_project(project_id: str) -> str:
    """Permanently delete a GitHub Project.

    Args:
        project_id: Project global node ID (PVT_...)
    """
    data = await _graphql(
        """
        mutation($projectId: ID!) {
          deleteProjectV2(input: { projectId: $projectId }) { projectV2 { id title } }
        }
        """,
        {"projectId": project_id},
    )
    logger.info("Deleted project %s", project_id)
    return _fmt({"deleted": True, "project": data["deleteProjectV2"]["projectV2"]})


@mcp.tool()
async def create_project_field(
    project_id: str,
    name: str,
    data_type: str,
    options: list[dict[str, str]] | None = None,
) -> str:
    """Add a custom field to a project (text, number, date, iteration or single-select with options).

    Args:
        project_id: Project global node ID
        name: Field name
        data_type: TEXT, NUMBER, DATE, SINGLE_SELECT or ITERATION
        options: Options for SINGLE_SELECT fields, each with name and optional
            color (RED, ORANGE, YELLOW, GREEN, BLUE, PURPLE, PINK, GRAY) and description
    """
    data_type = data_type.upper()
    if data_type not in FIELD_DATA_TYPES:
        raise ValueError(f"Unknown data type '{data_type}' — use one of: {', '.join(FIELD_DATA_TYPES)}")

    select_options = None
    if data_type == "SINGLE_SELECT" and options:
        select_options = []
        for o in options:
            color = (o.get("color") or "GRAY").upper()
            if color not in OPTION_COLORS:
                raise ValueError(f"Unknown option color '{color}' — use one of: {', '.join(OPTION_COLORS)}")
            select_options.append({"name": o["name"], "color": color, "description": o.get("description", "")})

    data = await _graphql(
        """
        mutation($projectId: ID!, $name: String!, $dataType: ProjectV2CustomFieldType!,
                 $options: [ProjectV2SingleSelectFieldOptionInput!]) {
          createProjectV2Field(input: {
            projectId: $projectId, name: $name, dataType: $dataType, singleSelectOptions: $options
          }) {
            projectV2Field {
              ... on ProjectV2Field { id name dataType }
              ... on ProjectV2SingleSelectField { id name options { id name color } }
            }
          }
        }
        """,
        {"projectId": project_id, "name": name, "dataType": data_type, "options": select_options},
    )
    logger.info("Created %s field '%s' on %s", data_type, name, project_id)
    return _fmt(data["createProjectV2Field"]["projectV2Field"])


@mcp.tool()
async def add_item_to_project(project_number: int, content_id: str, owner: str = "") -> str:
    """Add an existing issue or PR to a project by its node ID.

    Args:
        project_number: Project number
        content_id: Global node ID of the issue or PR
        owner: GitHub username (default: configured owner)
    """
    project_id = await _project_id(_owner(owner), project_number)
    return _fmt(await _add_to_project(project_id, content_id))


@mcp.tool()
async def update_project_item(
    project_id: str,
    item_id: str,
    field_id: str,
    value: str,
    value_type: str = "singleSelect",
) -> str:
    """Update a field value on a project item (e.g. Status).

    Args:
        project_id: Project global node ID
        item_id: Project item global node ID (PVTI_...)
        field_id: Field global node ID (PVTF_... / PVTSSF_...)
        value: Option ID for single-select fields, otherwise the raw value
        value_type: singleSelect (default), text, number, date or iteration
    """
    data = await _graphql(
        UPDATE_ITEM_MUTATION,
        {"projectId": project_id, "itemId": item_id, "fieldId": field_id, "value": _field_value(value, value_type)},
    )
    return _fmt(data["updateProjectV2ItemFieldValue"]["projectV2Item"])


@mcp.tool()
async def bulk_update_project_items(project_id: str, updates: list[dict[str, Any]]) -> str:
    """Update many project item field values in one call.

    Each update is applied in order; a failing update is reported and the
    rest still run.

    Args:
        project_id: Project global node ID
        updates: List of {itemId, fieldId, value, type} where type is
            singleSelect (default), text, number, date or iteration
    """
    results = []
    for u in updates:
        entry = {"itemId": u.get("itemId"), "fieldId": u.get("fieldId")}
        try:
            value = _field_value(u.get("value"), u.get("type", "singleSelect"))
            await _graphql(
                UPDATE_ITEM_MUTATION,
                {"projectId": project_id, "itemId": u["itemId"], "fieldId": u["fieldId"], "value": value},
            )
        except (GitHubError, ValueError, KeyError, TypeError) as e:
            logger.warning("Bulk update failed for item %s: %s", entry["itemId"], e)
            results.append({**entry, "ok": False, "error": str(e)})
        else:
            results.append({**entry, "ok": True})
    updated = sum(1 for r in results if r["ok"])
    logger.info("Bulk update on %s: %d/%d succeeded", project_id, updated, len(results))
    return _fmt({"updated": updated, "failed": len(results) - updated, "results": results})


@mcp.tool()
async def set_item_date(project_id: str, item_id: str, field_id: str, date: str) -> str:
    """Set a date field value on a project item (used for roadmap start/end dates).

    Args:
        project_id: Project global node ID
        item_id: Project item global node ID (PVTI_...)
        field_id: Date field global node ID (PVTF_...)
        date: Date in YYYY-MM-DD format
    """
    await _graphql(
        UPDATE_ITEM_MUTATION,
        {"projectId": project_id, "itemId": item_id, "fieldId": field_id, "value": {"date": _check_date(date)}},
    )
    return _fmt({"set": True, "itemId": item_id, "fieldId": field_id, "date": date})


# ── Issue tools ──────────────────────────────────────────────


@mcp.tool()
async def create_issue(
    title: str,
    body: str = "",
    owner: str = "",
    repo: str = "",
    project_number: int = 0,
    labels: list[str] | None = None,
) -> str:
    """Create a new GitHub issue, optionally add it to a project.

    Args:
        title: Issue title
        body: Issue body (Markdown)
        owner: Repo owner (default: configured owner)
        repo: Repo name (default: configured repo)
        project_number: Project to add the issue to (optional)
        labels: Labels to apply
    """
    owner, repo = _owner(owner), _repo(repo)
    issue = await _create_issue(owner, repo, title, body)
    logger.info("Created issue %s/%s#%s", owner, repo, issue["number"])

    if labels:
        applied = await _rest("POST", f"/repos/{owner}/{repo}/issues/{issue['number']}/labels", {"labels": labels})
        issue["labels"] = [label["name"] for label in applied]
    if project_number:
        project_id = await _project_id(owner, project_number)
        item = await _add_to_project(project_id, issue["id"])
        issue["projectItemId"] = item["id"]
    return _fmt(issue)


@mcp.tool()
async def update_issue(
    issue_number: int,
    title: str = "",
    body: str = "",
    state: str = "",
    owner: str = "",
    repo: str = "",
) -> str:
    """Update an existing GitHub issue.

    Args:
        issue_number: Issue number
        title: New title (leave empty to keep current)
        body: New body (leave empty to keep current)
        state: open or closed
        owner: Repo owner (default: configured owner)
        repo: Repo name (default: configured repo)
    """
    if state and state.lower() not in ("open", "closed"):
        raise ValueError(f"Invalid state '{state}' — use open or closed")
    owner, repo = _owner(owner), _repo(repo)
    data = await _graphql(
        """
        query($owner: String!, $repo: String!, $number: Int!) {
          repository(owner: $owner, name: $repo) { issue(number: $number) { id } }
        }
        """,
        {"owner": owner, "repo": repo, "number": issue_number},
    )
    issue = (data.get("repository") or {}).get("issue")
    if not issue:
        raise GitHubError(f"Issue {owner}/{repo}#{issue_number} not found")

    patch: dict[str, Any] = {"issueId": issue["id"]}
    if title:
        patch["title"] = title
    if body:
        patch["body"] = body
    if state:
        patch["state"] = state.upper()
    result = await _graphql(
        """
        mutation($issueId: ID!, $title: String, $body: String, $state: IssueState) {
          updateIssue(input: { id: $issueId, title: $title, body: $body, state: $state }) {
            issue { id number title state url }
          }
        }
        """,
        patch,
    )
    return _fmt(result["updateIssue"]["issue"])


@mcp.tool()
async def search_issues(query: str, limit: int = 20) -> str:
    """Search issues and pull requests with GitHub search syntax.

    Args:
        query: GitHub search query (e.g. "repo:owner/name is:open label:bug")
        limit: Max results (default 20)
    """
    data = await _graphql(
        """
        query($searchQuery: String!, $limit: Int!) {
          search(query: $searchQuery, type: ISSUE, first: $limit) {
            nodes {
              ... on Issue {
                id number title state url createdAt updatedAt
                author { login }
                labels(first: 5) { nodes { name } }
              }
              ... on PullRequest {
                id number title state url createdAt updatedAt
                author { login }
              }
            }
          }
        }
        """,
        {"searchQuery": query, "limit": limit},
    )
    return _fmt(data["search"]["nodes"])


@mcp.tool()
async def add_assignees(issue_number: int, assignees: list[str], owner: str = "", repo: str = "") -> str:
    """Assign one or more users to an issue.

    Args:
        issue_number: Issue number
        assignees: GitHub usernames to assign
        owner: Repo owner (default: configured owner)
        repo: Repo name (default: configured repo)
    """
    data = await _rest(
        "POST",
        f"/repos/{_owner(owner)}/{_repo(repo)}/issues/{issue_number}/assignees",
        {"assignees": assignees},
    )
    return _fmt({"number": data.get("number"), "assignees": [a["login"] for a in data.get("assignees") or []]})


@mcp.tool()
async def add_issue_comment(issue_number: int, body: str, owner: str = "", repo: str = "") -> str:
    """Post a comment on an issue.

    Args:
        issue_number: Issue number
        body: Comment text (supports Markdown)
        owner: Repo owner (default: configured owner)
        repo: Repo name (default: configured repo)
    """
    data = await _rest("POST", f"/repos/{_owner(owner)}/{_repo(repo)}/issues/{issue_number}/comments", {"body": body})
    return _fmt({"id": data["id"], "url": data["html_url"], "created_at": data["created_at"]})


def _milestone(m: dict[str, Any]) -> dict[str, Any]:
    return {
        "number": m["number"],
        "title": m["title"],
        "description": m.get("description"),
        "due_on": m.get("due_on"),
        "open_issues": m.get("open_issues"),
        "closed_issues": m.get("closed_issues"),
        "state": m.get("state"),
        "url": m.get("html_url"),
    }


@mcp.tool()
async def create_milestone(title: str, description: str = "", due_on: str = "", owner: str = "", repo: str = "") -> str:
    """Create a milestone on a repo to group issues by release or sprint.

    Args:
        title: Milestone title
        description: Milestone description
        due_on: Due date in ISO 8601 format (e.g. 2026-03-01T00:00:00Z)
        owner: Repo owner (default: configured owner)
        repo: Repo name (default: configured repo)
    """
    body: dict[str, Any] = {"title": title}
    if description:
        body["description"] = description
    if due_on:
        body["due_on"] = due_on
    data = await _rest("POST", f"/repos/{_owner(owner)}/{_repo(repo)}/milestones", body)
    return _fmt(_milestone(data))


@mcp.tool()
async def list_milestones(owner: str = "", repo: str = "", state: str = "open") -> str:
    """List milestones on a repo.

    Args:
        owner: Repo owner (default: configured owner)
        repo: Repo name (default: configured repo)
        state: open (default), closed or all
    """
    if state not in ("open", "closed", "all"):
        raise ValueError(f"Invalid state '{state}' — use open, closed or all")
    data = await _rest(
        "GET",
        f"/repos/{_owner(owner)}/{_repo(repo)}/milestones",
        params={"state": state, "per_page": 30},
    )
    return _fmt([_milestone(m) for m in data])


@mcp.tool()
async def set_issue_milestone(issue_number: int, milestone_number: int, owner: str = "", repo: str = "") -> str:
    """Assign a milestone to an issue.

    Args:
        issue_number: Issue number
        milestone_number: Milestone number
        owner: Repo owner (default: configured owner)
        repo: Repo name (default: configured repo)
    """
    data = await _rest(
        "PATCH",
        f"/repos/{_owner(owner)}/{_repo(repo)}/issues/{issue_number}",
        {"milestone": milestone_number},
    )
    milestone = data.get("milestone")
    return _fmt({
        "number": data["number"],
        "title": data["title"],
        "milestone": {"number": milestone["number"], "title": milestone["title"]} if milestone else None,
    })


@mcp.tool()
async def create_repo(name: str, description: str = "", private: bool = False, auto_init: bool = False) -> str:
    """Create a new GitHub repository for the authenticated user.

    Args:
        name: Repository name
        description: Short description
        private: Make the repo private (default false)
        auto_init: Initialize with a README (default false)
    """
    data = await _rest(
        "POST",
        "/user/repos",
        {"name": name, "description": description, "private": private, "auto_init": auto_init},
    )
    logger.info("Created repo %s", data["full_name"])
    return _fmt({"name": data["name"], "full_name": data["full_name"], "url": data["html_url"], "private": data["private"]})


# ── Browser tools ────────────────────────────────────────────
# Attaches to an already-running browser started with --remote-debugging-port.

_playwright: Any = None
_browser: Any = None
_page: Page | None = None


async def _get_page(debug_port: int = 0) -> Page:
    """Return the cached page, or attach over CDP and pick a GitHub tab."""
    global _playwright, _browser, _page
    if _page is not None and not _page.is_closed():
        return _page

    port = debug_port or BROWSER_DEBUG_PORT
    if _playwright is None:
        _playwright = await async_playwright().start()
    if _browser is not None:
        await _browser.close()
    logger.info("Connecting to browser on port %d", port)
    _browser = await _playwright.chromium.connect_over_cdp(f"http://localhost:{port}")
    context = _browser.contexts[0] if _browser.contexts else await _browser.new_context()
    pages = context.pages
    _page = next((p for p in pages if "github.com" in p.url), None) or (pages[0] if pages else await context.new_page())
    return _page


@mcp.tool()
async def browser_navigate(url: str, debug_port: int = 0) -> str:
    """Navigate the connected browser to a URL.

    Args:
        url: URL to navigate to
        debug_port: Browser remote debug port (default 9222)
    """
    page = await _get_page(debug_port)
    await page.goto(url, wait_until="domcontentloaded")
    return _fmt({"url": page.url, "title": await page.title()})


@mcp.tool()
async def browser_click(selector: str, by_text: bool = False, debug_port: int = 0) -> str:
    """Click an element on the current page by visible text or CSS selector.

    Args:
        selector: CSS selector or visible text to click
        by_text: If true, match by visible text instead of CSS selector
        debug_port: Browser remote debug port (default 9222)
    """
    page = await _get_page(debug_port)
    if by_text:
        await page.get_by_text(selector, exact=False).first.click()
    else:
        await page.locator(selector).first.click()
    await page.wait_for_timeout(800)
    return _fmt({"clicked": selector, "url": page.url})


@mcp.tool()
async def browser_screenshot(debug_port: int = 0) -> str:
    """Take a screenshot of the current page and return where it was saved.

    Args:
        debug_port: Browser remote debug port (default 9222)
    """
    page = await _get_page(debug_port)
    path = os.path.join(SCREENSHOT_DIR, f"screenshot-{int(time.time() * 1000)}.png")
    await page.screenshot(path=path, full_page=False)
    return _fmt({"saved": path, "url": page.url})


@mcp.tool()
async def browser_get_page_info(debug_port: int = 0) -> str:
    """Get the current page URL and title.

    Args:
        debug_port: Browser remote debug port (default 9222)
    """
    page = await _get_page(debug_port)
    return _fmt({"url": page.url, "title": await page.title()})


def main() -> None:
    # stdout carries the MCP stdio stream, so logs go to stderr.
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        stream=sys.stderr,
    )
    logger.info("GitHub Projects MCP running on stdio (owner=%s, repo=%s)", GITHUB_OWNER, GITHUB_REPO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
