"""Commit reconciled drafts as a new, immutable configuration version."""

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from agent_editor.client import AsyncAgentEditorClient
from agent_editor.constants import (
    FALLBACK_SAVE_NOTES,
    SAVE_SUCCESS_MESSAGES,
    SETTINGS_SAVE_NOTES,
    WORKFLOW_SAVE_NOTES,
)
from agent_editor.drafts import DraftStore
from agent_editor.exceptions import (
    AgentEditorError,
    CommitDialogClosedError,
    SaveInProgressError,
)
from agent_editor.models import CreatedVersion
from agent_editor.navigation import NavigationIntent, Router
from agent_editor.notifications import Notifier
from agent_editor.reconcile import reconcile
from agent_editor.resolver import VersionResolver

logger = logging.getLogger(__name__)


class SaveKind(str, Enum):
    """Which surface(s) a save covers; decides which drafts a commit clears."""

    WORKFLOW = "workflow"
    SETTINGS = "settings"
    COMBINED = "combined"


@dataclass(frozen=True)
class SaveIntent:
    """Everything needed to commit, captured before the notes dialog opens."""

    kind: SaveKind
    merged_config: dict[str, Any]
    global_prompt: str | None = None
    rag_enabled: bool = False
    rag_config_id: str | None = None
    voice_config_id: str | None = None
    navigate_after_save: str | None = None
    default_notes: str = FALLBACK_SAVE_NOTES


class CommitNotesDialog:
    """State of the commit-notes dialog.

    ``closed -> open`` when an intent is set; ``open -> closed`` on explicit
    close (intent discarded) or successful commit. Errors keep it open.
    """

    def __init__(self) -> None:
        self.intent: SaveIntent | None = None
        self.is_saving = False

    @property
    def is_open(self) -> bool:
        return self.intent is not None

    def open(self, intent: SaveIntent) -> None:
        self.intent = intent

    def close(self) -> None:
        self.intent = None


class VersionCommitService:
    """Builds save intents from the draft store and commits them."""

    def __init__(
        self,
        client: AsyncAgentEditorClient,
        store: DraftStore,
        resolver: VersionResolver,
        router: Router,
        notifier: Notifier,
    ) -> None:
        self._client = client
        self._store = store
        self._resolver = resolver
        self._router = router
        self._notifier = notifier
        self.dialog = CommitNotesDialog()

    @property
    def agent_id(self) -> str:
        return self._resolver.agent_id

    def build_intent(
        self,
        kind: SaveKind,
        navigate_after_save: str | None = None,
    ) -> SaveIntent | None:
        """Reconcile the drafts that ``kind`` covers against the active version.

        Returns:
            SaveIntent, or None when none of the covered drafts is dirty.
        """
        session = self._store.snapshot()
        if kind is SaveKind.WORKFLOW:
            session = dataclasses.replace(session, is_settings_dirty=False)
        elif kind is SaveKind.SETTINGS:
            session = dataclasses.replace(session, is_workflow_dirty=False)

        payload = reconcile(self._resolver.committed_fields(), session)
        if not payload.changed:
            return None

        if kind is SaveKind.WORKFLOW:
            default_notes = WORKFLOW_SAVE_NOTES
        elif kind is SaveKind.SETTINGS:
            default_notes = SETTINGS_SAVE_NOTES
        else:
            default_notes = f"Updated {' and '.join(payload.notes_parts)}"

        return SaveIntent(
            kind=kind,
            merged_config=payload.config_json,
            global_prompt=payload.global_prompt,
            rag_enabled=payload.rag_enabled,
            rag_config_id=payload.rag_config_id,
            voice_config_id=payload.voice_config_id,
            navigate_after_save=navigate_after_save,
            default_notes=default_notes,
        )

    def request_save(
        self,
        kind: SaveKind,
        navigate_after_save: str | None = None,
    ) -> SaveIntent | None:
        """Build an intent and open the commit-notes dialog with it."""
        if self.dialog.is_saving:
            raise SaveInProgressError("A save is already in progress")
        intent = self.build_intent(kind, navigate_after_save)
        if intent is None:
            logger.info(f"Nothing to save for agent {self.agent_id} ({kind.value})")
            return None
        self.dialog.open(intent)
        return intent

    def close_dialog(self) -> None:
        """Dismiss the dialog; drafts stay as they are."""
        self.dialog.close()

    def _clear_drafts(self, kind: SaveKind) -> None:
        if kind is SaveKind.WORKFLOW:
            self._store.clear_workflow_draft()
        elif kind is SaveKind.SETTINGS:
            self._store.clear_settings_draft()
        else:
            self._store.clear_all_drafts()

    async def commit_version(
        self,
        merged_config: dict[str, Any],
        notes: str,
        global_prompt: str | None,
        rag_enabled: bool,
        rag_config_id: str | None,
        voice_config_id: str | None,
        auto_activate: bool = True,
    ) -> CreatedVersion:
        return await self._client.commit_version(
            self.agent_id,
            merged_config,
            notes=notes,
            global_prompt=global_prompt,
            rag_enabled=rag_enabled,
            rag_config_id=rag_config_id,
            voice_config_id=voice_config_id,
            auto_activate=auto_activate,
        )

    async def submit(self, notes: str | None = None) -> CreatedVersion:
        """Commit the dialog's intent.

        On success the covered drafts are cleared, the dialog closes, the
        active version is re-fetched and any deferred navigation proceeds.
        On failure the error is shown and re-raised; dialog and drafts are
        left as they were so the user can retry.

        Raises:
            CommitDialogClosedError: If no intent is open.
            SaveInProgressError: If a commit is already in flight.
            AgentEditorError: If the commit request fails.
        """
        intent = self.dialog.intent
        if intent is None:
            raise CommitDialogClosedError("No save is pending")
        if self.dialog.is_saving:
            raise SaveInProgressError("A save is already in progress")

        resolved_notes = (notes or "").strip() or intent.default_notes

        self.dialog.is_saving = True
        try:
            created = await self.commit_version(
                intent.merged_config,
                resolved_notes,
                intent.global_prompt,
                intent.rag_enabled,
                intent.rag_config_id,
                intent.voice_config_id,
            )
        except AgentEditorError as e:
            self._notifier.error(e.full_message)
            raise
        finally:
            self.dialog.is_saving = False

        if self.dialog.intent is not intent:
            # Dialog dismissed while the request was in flight
            logger.info(
                f"Version {created.version} committed after its dialog was closed; "
                "drafts left in place"
            )
            return created

        self._clear_drafts(intent.kind)
        self._notifier.success(SAVE_SUCCESS_MESSAGES[intent.kind.value])
        self.dialog.close()

        try:
            await self._resolver.refresh()
        except AgentEditorError as e:
            logger.warning(f"Failed to refresh agent {self.agent_id} after commit: {e}")

        if intent.navigate_after_save:
            self._router.push(intent.navigate_after_save, NavigationIntent.ALLOWED)

        return created
