"""Three-way decision about unsaved changes: cancel, discard or save."""

import logging
from collections.abc import Callable
from enum import Enum

from agent_editor.drafts import DraftStore
from agent_editor.exceptions import SaveInProgressError
from agent_editor.navigation import NavigationIntent, PendingNavigation, Router

logger = logging.getLogger(__name__)


class ConfirmationState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"


class UnsavedChangesAction(str, Enum):
    SAVE = "save"
    DISCARD = "discard"
    CANCEL = "cancel"


class UnsavedChangesConfirmation:
    """State machine behind the unsaved-changes dialog.

    Opened by an intercepted navigation (or an explicit tab switch away from
    a dirty surface). Every action ends in ``closed``.

    Args:
        store: Draft store whose drafts are discarded on ``discard``.
        router: Router used for the deferred navigation.
        on_save: Starts the combined save; receives the path to navigate to
            once the commit succeeds. Returns None when there is nothing to
            commit, in which case the navigation happens immediately.
        is_save_in_flight: Reports whether a commit is currently running.
    """

    def __init__(
        self,
        store: DraftStore,
        router: Router,
        on_save: Callable[[str | None], object],
        is_save_in_flight: Callable[[], bool] = lambda: False,
    ) -> None:
        self._store = store
        self._router = router
        self._on_save = on_save
        self._is_save_in_flight = is_save_in_flight
        self.state = ConfirmationState.CLOSED
        self.pending_navigation: PendingNavigation | None = None
        self.target_tab: str | None = None

    @property
    def is_open(self) -> bool:
        return self.state is ConfirmationState.OPEN

    @property
    def is_saving(self) -> bool:
        return self._is_save_in_flight()

    @property
    def message(self) -> str:
        if self.pending_navigation is not None:
            return "You have unsaved changes. If you leave this page, your changes will be lost."
        if self.target_tab:
            return (
                "You have unsaved changes. If you switch to the "
                f'"{self.target_tab}" tab, your changes will be lost.'
            )
        return "You have unsaved changes that will be lost if you continue."

    def open(self, pending: PendingNavigation) -> None:
        """Open for an intercepted navigation; a newer one replaces an older one."""
        self.pending_navigation = pending
        self.target_tab = None
        self.state = ConfirmationState.OPEN

    def open_for_tab(self, tab_label: str) -> None:
        self.pending_navigation = None
        self.target_tab = tab_label
        self.state = ConfirmationState.OPEN

    def _close(self) -> None:
        self.state = ConfirmationState.CLOSED
        self.target_tab = None

    def resolve(self, action: UnsavedChangesAction) -> None:
        """Apply the user's choice.

        Raises:
            SaveInProgressError: While a commit is in flight.
        """
        if action is UnsavedChangesAction.CANCEL:
            self.cancel()
        elif action is UnsavedChangesAction.DISCARD:
            self.discard()
        else:
            self.save()

    def _check_idle(self) -> None:
        if self.is_saving:
            raise SaveInProgressError("Cannot resolve unsaved changes while saving")

    def cancel(self) -> None:
        self._check_idle()
        self._close()
        self.pending_navigation = None

    def discard(self) -> None:
        self._check_idle()
        self._store.clear_all_drafts()
        self._close()
        pending = self.pending_navigation
        if pending is not None:
            logger.info(f"Discarded unsaved changes, navigating to {pending.target_path}")
            self._router.push(pending.target_path, NavigationIntent.ALLOWED)
            self.pending_navigation = None

    def save(self) -> None:
        """Start the combined save; navigate straight away if nothing needs committing."""
        self._check_idle()
        self._close()
        pending = self.pending_navigation
        self.pending_navigation = None
        target = pending.target_path if pending else None
        intent = self._on_save(target)
        if intent is None and target is not None:
            logger.info(f"Nothing to commit, navigating to {target}")
            self._router.push(target, NavigationIntent.ALLOWED)
