"""Shared pytest fixtures.

The editing flow talks to ``FakeAgentServer``, an in-memory version of the
agents API mounted behind ``httpx.MockTransport``. Unlike ``httpx_mock`` it
keeps state between requests, so commits, activations and refreshes see
each other's effects.
"""

import json
import re
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from agent_editor import AgentEditor, AsyncAgentEditorClient, Notifier, Router

BASE_URL = "http://agent-editor.test"
AGENT_ID = "agent-1"

SAMPLE_CONFIG: dict[str, Any] = {
    "workflow": {
        "initial_node": "greeting",
        "nodes": [
            {"id": "greeting", "type": "conversation", "prompt": "Say hello"},
            {"id": "goodbye", "type": "end", "prompt": "Say goodbye"},
        ],
        "edges": [{"from": "greeting", "to": "goodbye"}],
        "llm": {"enabled": True, "model_name": "gpt-4o-mini", "temperature": 0.7},
        "tts": {"enabled": True, "voice_name": "Rachel", "model": "eleven_turbo_v2_5"},
    },
    "llm": {"model": "legacy-model"},
}

_AGENT_PATH = re.compile(r"^/api/agents/(?P<agent_id>[^/]+)(?P<rest>/.*)?$")


def _envelope(data: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json={"success": True, "data": data})


def _error(status_code: int, error: str, **extra: Any) -> httpx.Response:
    return httpx.Response(status_code, json={"success": False, "error": error, **extra})


class FakeAgentServer:
    """In-memory agents API: immutable versions, one active version per agent."""

    def __init__(self) -> None:
        self.agents: dict[str, dict[str, Any]] = {}
        self.versions: dict[str, list[dict[str, Any]]] = {}
        self.requests: list[httpx.Request] = []
        self.commit_bodies: list[dict[str, Any]] = []
        # (status_code, body) returned by the next commit instead of creating it
        self.fail_next_commit: tuple[int, dict[str, Any]] | None = None
        self.drop_next_commit = False
        # Runs while a commit request is in flight
        self.before_commit: Callable[[], None] | None = None

    def add_agent(
        self,
        agent_id: str = AGENT_ID,
        name: str = "Support Bot",
        config_json: dict[str, Any] | None = None,
        **version_fields: Any,
    ) -> None:
        self.agents[agent_id] = {"id": agent_id, "name": name, "description": None}
        self.versions[agent_id] = []
        if config_json is not None:
            self._create_version(
                agent_id,
                {"configJson": config_json, "notes": "Initial version", **version_fields},
            )

    def active_version(self, agent_id: str = AGENT_ID) -> dict[str, Any] | None:
        for version in self.versions[agent_id]:
            if version["isActive"]:
                return version
        return None

    def _create_version(self, agent_id: str, body: dict[str, Any]) -> dict[str, Any]:
        versions = self.versions[agent_id]
        number = len(versions) + 1
        version = {
            "id": f"{agent_id}-v{number}",
            "agentId": agent_id,
            "version": number,
            "configJson": body.get("configJson", {}),
            "globalPrompt": body.get("globalPrompt"),
            "ragEnabled": body.get("ragEnabled", False),
            "ragConfigId": body.get("ragConfigId"),
            "voiceConfigId": body.get("voiceConfigId"),
            "notes": body.get("notes"),
            "createdBy": "tester@example.com",
            "createdAt": "2026-01-15T12:00:00Z",
            "isActive": False,
        }
        versions.append(version)
        if body.get("autoActivate", True):
            self._activate(agent_id, version)
        return version

    def _activate(self, agent_id: str, version: dict[str, Any]) -> None:
        for other in self.versions[agent_id]:
            other["isActive"] = False
        version["isActive"] = True

    def _agent_detail(self, agent_id: str) -> dict[str, Any]:
        return {
            **self.agents[agent_id],
            "activeVersion": self.active_version(agent_id),
            "versionCount": len(self.versions[agent_id]),
            "callCount": 0,
            "phoneMappingCount": 0,
        }

    def _export(self, agent_id: str, version: dict[str, Any]) -> dict[str, Any]:
        tts = (version["configJson"].get("workflow") or {}).get("tts") or {}
        return {
            "tenant_id": "tenant-1",
            "agent_id": agent_id,
            "agent_name": self.agents[agent_id]["name"],
            "version": version["version"],
            "is_active": version["isActive"],
            "config_json": version["configJson"],
            "global_prompt": version["globalPrompt"],
            "rag_enabled": version["ragEnabled"],
            "rag_config_id": version["ragConfigId"],
            "voice_config_id": version["voiceConfigId"],
            "voice_name": tts.get("voice_name"),
            "created_at": version["createdAt"],
            "created_by": version["createdBy"],
            "notes": version["notes"],
        }

    def _commit(self, request: httpx.Request, agent_id: str) -> httpx.Response:
        if self.before_commit is not None:
            self.before_commit()
        if self.drop_next_commit:
            self.drop_next_commit = False
            raise httpx.ConnectError("Connection refused", request=request)
        if self.fail_next_commit is not None:
            status_code, body = self.fail_next_commit
            self.fail_next_commit = None
            return httpx.Response(status_code, json={"success": False, **body})

        body = json.loads(request.content)
        self.commit_bodies.append(body)
        version = self._create_version(agent_id, body)
        return _envelope({"id": version["id"], "version": version["version"]}, 201)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        match = _AGENT_PATH.match(request.url.path)
        if match is None or match["agent_id"] not in self.agents:
            return _error(404, "Agent not found")

        agent_id = match["agent_id"]
        rest = match["rest"] or ""
        versions = self.versions[agent_id]

        if request.method == "GET" and rest == "":
            return _envelope(self._agent_detail(agent_id))

        if rest == "/versions":
            if request.method == "GET":
                return _envelope(sorted(versions, key=lambda v: v["version"], reverse=True))
            if request.method == "POST":
                return self._commit(request, agent_id)

        activate = re.match(r"^/versions/(?P<version_id>[^/]+)/activate$", rest)
        if request.method == "PUT" and activate:
            for version in versions:
                if version["id"] == activate["version_id"]:
                    self._activate(agent_id, version)
                    return _envelope(version)
            return _error(404, "Version not found")

        if request.method == "GET" and rest == "/export":
            requested = request.url.params.get("version")
            if requested is None:
                target = self.active_version(agent_id)
            else:
                target = next((v for v in versions if v["version"] == int(requested)), None)
            if target is None:
                return _error(404, "Version not found")
            return _envelope(self._export(agent_id, target))

        return _error(405, f"Method {request.method} not allowed")


@pytest.fixture
def server() -> FakeAgentServer:
    """Fake server with one agent whose first version is active."""
    fake = FakeAgentServer()
    fake.add_agent(config_json=SAMPLE_CONFIG, globalPrompt="You are helpful.")
    return fake


@pytest.fixture
def client(server: FakeAgentServer) -> AsyncAgentEditorClient:
    return AsyncAgentEditorClient(base_url=BASE_URL, transport=httpx.MockTransport(server))


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def editor(client: AsyncAgentEditorClient, notifier: Notifier, tmp_path) -> AgentEditor:
    """Editor for ``AGENT_ID``; tests call ``await editor.open()`` themselves."""
    return AgentEditor(
        AGENT_ID,
        client,
        router=Router(current_path=f"/agents/{AGENT_ID}"),
        notifier=notifier,
        export_dir=tmp_path,
    )
