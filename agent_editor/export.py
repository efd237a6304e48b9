"""Export an agent version to a JSON file."""

import json
import logging
import re
from pathlib import Path

from agent_editor.client import AsyncAgentEditorClient
from agent_editor.exceptions import AgentEditorError
from agent_editor.models import ExportSnapshot
from agent_editor.notifications import Notifier

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-z0-9]+")


def sanitize_filename(name: str) -> str:
    """Lowercase ``name`` and collapse anything but letters and digits to ``_``."""
    sanitized = _UNSAFE_CHARS.sub("_", name.lower()).strip("_")
    return sanitized or "agent"


def export_filename(snapshot: ExportSnapshot) -> str:
    return f"{sanitize_filename(snapshot.agent_name)}_v{snapshot.version}.json"


class ExportAction:
    """One-shot export; independent of drafts and of the save protocol."""

    def __init__(
        self,
        client: AsyncAgentEditorClient,
        notifier: Notifier,
        export_dir: str | Path = ".",
    ) -> None:
        self._client = client
        self._notifier = notifier
        self.export_dir = Path(export_dir)

    async def export(self, agent_id: str, version: int | None = None) -> Path:
        """Fetch the snapshot and write it next to previous exports.

        Args:
            agent_id: Agent to export.
            version: Version number; the active version when omitted.

        Returns:
            Path of the written file.
        """
        try:
            snapshot = await self._client.export_agent(agent_id, version)
        except AgentEditorError as e:
            self._notifier.error(f"Failed to export agent: {e.full_message}")
            raise

        self.export_dir.mkdir(parents=True, exist_ok=True)
        path = self.export_dir / export_filename(snapshot)
        path.write_text(
            json.dumps(snapshot.model_dump(mode="json"), indent=2) + "\n",
            encoding="utf-8",
        )
        logger.info(f"Exported agent {agent_id} v{snapshot.version} to {path}")
        self._notifier.success(f"Exported {snapshot.agent_name} v{snapshot.version}")
        return path
