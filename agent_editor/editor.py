"""Editing session for one agent: the owner of drafts, guards and saves."""

import logging
from pathlib import Path
from typing import Any

from agent_editor.client import AsyncAgentEditorClient
from agent_editor.commit import SaveIntent, SaveKind, VersionCommitService
from agent_editor.config import Settings
from agent_editor.confirmation import UnsavedChangesConfirmation
from agent_editor.drafts import DraftStore, UnsavedChangesWarning
from agent_editor.exceptions import AgentEditorError
from agent_editor.export import ExportAction
from agent_editor.models import AgentDetail, ConfigVersion, CreatedVersion
from agent_editor.navigation import NavigationInterceptor, Router
from agent_editor.notifications import Notifier
from agent_editor.resolver import VersionResolver

logger = logging.getLogger(__name__)

TABS = ("overview", "workflow", "settings", "versions")


class AgentEditor:
    """Editing page for one agent.

    Wires the draft store, the navigation guard, the unsaved-changes
    confirmation and the commit service together. Surfaces write their drafts
    into ``editor.store``; the host drives navigation through ``editor.router``.

    Example:
        async with AsyncAgentEditorClient() as client:
            async with AgentEditor("agent-123", client) as editor:
                editor.store.set_settings_draft(draft)
                editor.store.set_is_settings_dirty(True)

                editor.router.click("/calls")          # intercepted
                editor.confirmation.save()             # opens commit dialog
                await editor.submit_save("Lower temperature")
                assert editor.router.current_path == "/calls"
    """

    def __init__(
        self,
        agent_id: str,
        client: AsyncAgentEditorClient,
        *,
        router: Router | None = None,
        notifier: Notifier | None = None,
        export_dir: str | Path = ".",
    ) -> None:
        self.agent_id = agent_id
        self.client = client
        self.router = router or Router(current_path=f"/agents/{agent_id}")
        self.notifier = notifier or Notifier()
        self.active_tab = "overview"
        self._owns_client = False

        self.store = DraftStore()
        self.resolver = VersionResolver(client, self.store, agent_id)
        self.commit = VersionCommitService(
            client, self.store, self.resolver, self.router, self.notifier
        )
        self.confirmation = UnsavedChangesConfirmation(
            self.store,
            self.router,
            on_save=self.save_all,
            is_save_in_flight=lambda: self.commit.dialog.is_saving,
        )
        self.interceptor = NavigationInterceptor(
            self.store, self.router, agent_id, on_intercept=self.confirmation.open
        )
        self.unload_warning = UnsavedChangesWarning(self.store, self.router)
        self.exporter = ExportAction(client, self.notifier, export_dir)

    @classmethod
    def from_settings(
        cls,
        agent_id: str,
        settings: Settings,
        **kwargs: Any,
    ) -> "AgentEditor":
        client = AsyncAgentEditorClient.from_settings(settings)
        editor = cls(agent_id, client, export_dir=settings.export_dir, **kwargs)
        editor._owns_client = True
        return editor

    # Lifecycle

    async def open(self) -> AgentDetail:
        """Mount: install the guards and load the agent."""
        self.interceptor.attach()
        self.unload_warning.attach()
        return await self.resolver.refresh()

    def close(self) -> None:
        """Unmount: remove the guards. Drafts are not persisted."""
        self.interceptor.detach()
        self.unload_warning.detach()

    async def __aenter__(self) -> "AgentEditor":
        await self.open()
        return self

    async def __aexit__(self, *args: Any) -> None:
        self.close()
        if self._owns_client:
            await self.client.close()

    # State

    @property
    def agent(self) -> AgentDetail | None:
        return self.resolver.agent

    @property
    def active_version(self) -> ConfigVersion | None:
        return self.resolver.active_version

    @property
    def is_dirty(self) -> bool:
        return self.store.is_dirty

    def switch_tab(self, tab: str) -> None:
        """Switch tabs; drafts live in the store, so nothing is guarded."""
        if tab not in TABS:
            raise ValueError(f"Unknown tab: {tab}")
        self.active_tab = tab

    async def refresh(self) -> AgentDetail:
        return await self.resolver.refresh()

    # Saving

    def save_workflow(self) -> SaveIntent | None:
        return self.commit.request_save(SaveKind.WORKFLOW)

    def save_settings(self) -> SaveIntent | None:
        return self.commit.request_save(SaveKind.SETTINGS)

    def save_all(self, navigate_after_save: str | None = None) -> SaveIntent | None:
        """Save every dirty surface as one version."""
        return self.commit.request_save(SaveKind.COMBINED, navigate_after_save)

    async def submit_save(self, notes: str | None = None) -> CreatedVersion:
        return await self.commit.submit(notes)

    def cancel_save(self) -> None:
        self.commit.close_dialog()

    # Version history

    async def activate_version(self, version_id: str) -> ConfigVersion | None:
        """Activate an older version; drafts on the old base are dropped.

        Returns:
            The activated version, or None if it already was active.
        """
        if self.active_version is not None and self.active_version.id == version_id:
            self.notifier.info("This version is already active")
            return None

        try:
            version = await self.client.activate_version(self.agent_id, version_id)
        except AgentEditorError as e:
            self.notifier.error(e.full_message)
            raise

        logger.info(f"Activated agent {self.agent_id} version {version.version}")
        self.notifier.success(f"Version {version.version} activated successfully")
        await self.resolver.refresh()
        return version

    async def list_versions(self) -> list[ConfigVersion]:
        return await self.client.list_versions(self.agent_id)

    # Export

    async def export(self, version: int | None = None) -> Path:
        return await self.exporter.export(self.agent_id, version)
