"""Tests for exporting an agent version."""

import json

import pytest

from agent_editor import (
    AgentEditor,
    ExportAction,
    ExportSnapshot,
    NotFoundError,
    Notification,
    export_filename,
    sanitize_filename,
)


class TestFilenames:
    """Tests for export file naming."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("Support Bot", "support_bot"),
            ("  Sales / EMEA (v2)!  ", "sales_emea_v2"),
            ("Überbot", "berbot"),
            ("!!!", "agent"),
        ],
    )
    def test_sanitize_filename(self, name: str, expected: str) -> None:
        assert sanitize_filename(name) == expected

    def test_export_filename(self) -> None:
        snapshot = ExportSnapshot(agent_id="a1", agent_name="Support Bot", version=7)
        assert export_filename(snapshot) == "support_bot_v7.json"


class TestExportAction:
    """Tests for writing exports to disk."""

    @pytest.mark.asyncio
    async def test_export_active_version(self, editor: AgentEditor, notifier, tmp_path) -> None:
        await editor.open()

        path = await editor.export()

        assert path == tmp_path / "support_bot_v1.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["agent_id"] == "agent-1"
        assert data["version"] == 1
        assert data["is_active"] is True
        assert data["voice_name"] == "Rachel"
        assert data["config_json"]["workflow"]["nodes"][0]["id"] == "greeting"
        assert notifier.last == Notification("success", "Exported Support Bot v1")

    @pytest.mark.asyncio
    async def test_export_ignores_drafts(self, editor: AgentEditor, server) -> None:
        """Exports read committed versions only."""
        await editor.open()
        editor.store.set_is_settings_dirty(True)

        path = await editor.export(version=1)

        assert json.loads(path.read_text(encoding="utf-8"))["version"] == 1
        assert editor.store.is_settings_dirty is True
        assert server.commit_bodies == []

    @pytest.mark.asyncio
    async def test_export_missing_version(self, client, notifier, tmp_path) -> None:
        exporter = ExportAction(client, notifier, tmp_path / "exports")

        with pytest.raises(NotFoundError):
            await exporter.export("agent-1", version=42)

        assert notifier.last == Notification(
            "error", "Failed to export agent: Not found: Version not found"
        )
        assert not (tmp_path / "exports").exists()
