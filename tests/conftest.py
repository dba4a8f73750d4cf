"""Shared fixtures: a fake GitHub API behind httpx.MockTransport."""

import json
from typing import Any

import httpx
import pytest

import server


class FakeGitHub:
    """Replays queued responses in order and records every request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._responses: list[tuple[int, Any]] = []

    def reply(self, payload: Any, status: int = 200) -> "FakeGitHub":
        self._responses.append((status, payload))
        return self

    def data(self, payload: dict[str, Any]) -> "FakeGitHub":
        return self.reply({"data": payload})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.url}")
        status, payload = self._responses.pop(0)
        return httpx.Response(status, json=payload)

    def body(self, index: int) -> dict[str, Any]:
        return json.loads(self.requests[index].content)

    def variables(self, index: int) -> dict[str, Any]:
        return self.body(index)["variables"]


@pytest.fixture
def github(monkeypatch) -> FakeGitHub:
    fake = FakeGitHub()
    monkeypatch.setattr(server, "GITHUB_TOKEN", "ghp_test")
    monkeypatch.setattr(server, "GITHUB_OWNER", "octo")
    monkeypatch.setattr(server, "GITHUB_REPO", "lab")
    monkeypatch.setattr(server, "GITHUB_API_URL", "https://api.github.test")
    monkeypatch.setattr(server, "GRAPHQL_URL", "https://api.github.test/graphql")
    monkeypatch.setattr(server, "_client", lambda: httpx.AsyncClient(transport=httpx.MockTransport(fake.handler)))
    return fake


@pytest.fixture
def project_node() -> dict[str, Any]:
    return {
        "id": "PVT_1",
        "number": 4,
        "title": "Research Lab",
        "url": "https://github.com/users/octo/projects/4",
        "fields": {
            "nodes": [
                {"id": "F_title", "name": "Title", "dataType": "TITLE"},
                {
                    "id": "F_status",
                    "name": "Status",
                    "dataType": "SINGLE_SELECT",
                    "options": [{"id": "o1", "name": "Todo"}, {"id": "o2", "name": "Done"}],
                },
                {"id": "F_start", "name": "Start Date", "dataType": "DATE"},
                {"id": "F_target", "name": "Target Date", "dataType": "DATE"},
            ]
        },
    }
