"""Draft store for the two editing surfaces of an agent.

Holds at most one in-progress draft per surface (workflow, settings), each
with an explicit dirty flag, scoped to one base version. Whenever the base
version moves from one known id to a different one, every draft is dropped:
the active configuration changed underneath the session.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from agent_editor.constants import UNLOAD_WARNING
from agent_editor.models import SettingsDraft, WorkflowDraft
from agent_editor.navigation import Router, UnloadEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DraftSession:
    """Immutable snapshot of the store's state."""

    workflow_draft: WorkflowDraft | None = None
    is_workflow_dirty: bool = False
    settings_draft: SettingsDraft | None = None
    is_settings_dirty: bool = False
    base_version_id: str | None = None

    @property
    def is_dirty(self) -> bool:
        return self.is_workflow_dirty or self.is_settings_dirty


DraftListener = Callable[[DraftSession], None]


class DraftStore:
    """Mutable draft state shared by the editing surfaces of one agent page.

    Example:
        store = DraftStore()
        unsubscribe = store.subscribe(lambda session: print(session.is_dirty))
        store.set_workflow_draft(WorkflowDraft.from_config(config))
        store.set_is_workflow_dirty(True)   # prints True
        unsubscribe()
    """

    def __init__(self, initial_version_id: str | None = None) -> None:
        self._workflow_draft: WorkflowDraft | None = None
        self._is_workflow_dirty = False
        self._settings_draft: SettingsDraft | None = None
        self._is_settings_dirty = False
        self._base_version_id = initial_version_id
        # Compared against on every set_base_version_id, independent of the public value
        self._previous_version_id = initial_version_id
        self._listeners: list[DraftListener] = []

    # Read accessors

    @property
    def workflow_draft(self) -> WorkflowDraft | None:
        return self._workflow_draft

    @property
    def is_workflow_dirty(self) -> bool:
        return self._is_workflow_dirty

    @property
    def settings_draft(self) -> SettingsDraft | None:
        return self._settings_draft

    @property
    def is_settings_dirty(self) -> bool:
        return self._is_settings_dirty

    @property
    def is_dirty(self) -> bool:
        return self._is_workflow_dirty or self._is_settings_dirty

    @property
    def base_version_id(self) -> str | None:
        return self._base_version_id

    def snapshot(self) -> DraftSession:
        return DraftSession(
            workflow_draft=self._workflow_draft,
            is_workflow_dirty=self._is_workflow_dirty,
            settings_draft=self._settings_draft,
            is_settings_dirty=self._is_settings_dirty,
            base_version_id=self._base_version_id,
        )

    # Subscriptions

    def subscribe(self, listener: DraftListener) -> Callable[[], None]:
        """Register a listener called with a snapshot after every mutation.

        Returns:
            Function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        session = self.snapshot()
        for listener in list(self._listeners):
            listener(session)

    # Mutations

    def set_workflow_draft(self, draft: WorkflowDraft | None) -> None:
        self._workflow_draft = draft
        self._notify()

    def set_is_workflow_dirty(self, dirty: bool) -> None:
        self._is_workflow_dirty = dirty
        self._notify()

    def set_settings_draft(self, draft: SettingsDraft | None) -> None:
        self._settings_draft = draft
        self._notify()

    def set_is_settings_dirty(self, dirty: bool) -> None:
        self._is_settings_dirty = dirty
        self._notify()

    def clear_workflow_draft(self) -> None:
        self._workflow_draft = None
        self._is_workflow_dirty = False
        self._notify()

    def clear_settings_draft(self) -> None:
        self._settings_draft = None
        self._is_settings_dirty = False
        self._notify()

    def clear_all_drafts(self) -> None:
        self._workflow_draft = None
        self._is_workflow_dirty = False
        self._settings_draft = None
        self._is_settings_dirty = False
        self._notify()

    def set_base_version_id(self, version_id: str | None) -> None:
        """Record the version the drafts are built on.

        Drafts are cleared only when a known base is replaced by a different
        known base. Setting the same id, or moving to/from None, keeps them.
        """
        previous = self._previous_version_id
        if version_id and previous and version_id != previous:
            logger.info(f"Base version changed from {previous} to {version_id}, clearing drafts")
            self.clear_all_drafts()
        self._previous_version_id = version_id
        self._base_version_id = version_id
        self._notify()

    # Surface change tracking

    def track_workflow(self, config: dict[str, Any], baseline_fingerprint: str) -> bool:
        """Sync the workflow editor's current graph into the store.

        Args:
            config: Config currently built from the editor's nodes and edges.
            baseline_fingerprint: Fingerprint of the config the editor loaded.

        Returns:
            Whether the workflow is now dirty.
        """
        draft = WorkflowDraft.from_config(config)
        dirty = draft.serialized_fingerprint != baseline_fingerprint
        self._is_workflow_dirty = dirty
        # Back at the baseline drops the draft entirely
        self._workflow_draft = draft if dirty else None
        self._notify()
        return dirty

    def track_settings(self, draft: SettingsDraft, baseline: SettingsDraft) -> bool:
        """Sync the settings form's current values into the store."""
        dirty = draft != baseline
        self._is_settings_dirty = dirty
        self._settings_draft = draft if dirty else None
        self._notify()
        return dirty


class UnsavedChangesWarning:
    """Unload hook that blocks closing the session while drafts are dirty.

    The warning text is advisory; hosts are free to show their own.
    """

    def __init__(self, store: DraftStore, router: Router) -> None:
        self._store = store
        self._router = router
        self._attached = False

    def attach(self) -> None:
        if not self._attached:
            self._router.add_unload_hook(self.handle_unload)
            self._attached = True

    def detach(self) -> None:
        if self._attached:
            self._router.remove_unload_hook(self.handle_unload)
            self._attached = False

    def handle_unload(self, event: UnloadEvent) -> None:
        if self._store.is_dirty:
            event.prevent_default(UNLOAD_WARNING)
