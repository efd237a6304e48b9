"""Tracks the server's active configuration version for one agent."""

import logging

from agent_editor.client import AsyncAgentEditorClient
from agent_editor.drafts import DraftStore
from agent_editor.models import AgentDetail, ConfigVersion
from agent_editor.reconcile import CommittedFields

logger = logging.getLogger(__name__)


class VersionResolver:
    """Feeds the active version id of an agent into the draft store.

    Change detection is passive: nothing polls. A different active version is
    only noticed when ``refresh()`` runs (on open, after a commit, after an
    activation), and the store then drops drafts built on the old base.
    """

    def __init__(
        self,
        client: AsyncAgentEditorClient,
        store: DraftStore,
        agent_id: str,
    ) -> None:
        self._client = client
        self._store = store
        self.agent_id = agent_id
        self.agent: AgentDetail | None = None

    @property
    def active_version(self) -> ConfigVersion | None:
        return self.agent.active_version if self.agent else None

    def committed_fields(self) -> CommittedFields:
        """Baseline for the reconciler; empty for an agent without versions."""
        active = self.active_version
        if active is None:
            return CommittedFields(config_json={})
        return CommittedFields.from_version(active)

    async def refresh(self) -> AgentDetail:
        """Re-fetch agent detail and advance the store's base version."""
        agent = await self._client.get_agent(self.agent_id)
        self.agent = agent
        if agent.active_version is not None:
            logger.debug(
                f"Agent {self.agent_id} active version is v{agent.active_version.version} "
                f"({agent.active_version.id})"
            )
            self._store.set_base_version_id(agent.active_version.id)
        return agent
