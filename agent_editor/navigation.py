"""In-app navigation with pre-navigation hooks and the unsaved-changes guard."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from agent_editor.drafts import DraftStore

logger = logging.getLogger(__name__)


class NavigationIntent(Enum):
    """How a navigation treats the pre-navigation hooks."""

    GUARDED = "guarded"  # Hooks may block it (user clicks)
    ALLOWED = "allowed"  # Bypasses hooks (navigation the guard itself decided on)


@dataclass
class NavigationRequest:
    """A navigation about to happen. Hooks may prevent it."""

    href: str | None
    intent: NavigationIntent = NavigationIntent.GUARDED
    prevented: bool = False

    def prevent_default(self) -> None:
        self.prevented = True


@dataclass
class UnloadEvent:
    """The host is about to close the session (window close, process exit)."""

    prevented: bool = False
    return_value: str | None = None

    def prevent_default(self, message: str) -> None:
        self.prevented = True
        self.return_value = message


@dataclass(frozen=True)
class PendingNavigation:
    """Navigation deferred until the user decides about unsaved changes."""

    target_path: str


NavigationHook = Callable[[NavigationRequest], None]
UnloadHook = Callable[[UnloadEvent], None]


@dataclass
class Router:
    """Minimal client-side router.

    Hooks run synchronously, in registration order, before the path changes;
    the first hook that prevents a request stops the rest.
    """

    current_path: str = "/"
    history: list[str] = field(default_factory=list)
    _navigation_hooks: list[NavigationHook] = field(default_factory=list, init=False, repr=False)
    _unload_hooks: list[UnloadHook] = field(default_factory=list, init=False, repr=False)

    def add_navigation_hook(self, hook: NavigationHook) -> None:
        self._navigation_hooks.append(hook)

    def remove_navigation_hook(self, hook: NavigationHook) -> None:
        if hook in self._navigation_hooks:
            self._navigation_hooks.remove(hook)

    def add_unload_hook(self, hook: UnloadHook) -> None:
        self._unload_hooks.append(hook)

    def remove_unload_hook(self, hook: UnloadHook) -> None:
        if hook in self._unload_hooks:
            self._unload_hooks.remove(hook)

    def navigate(self, request: NavigationRequest) -> bool:
        """Run hooks for a request and perform it unless prevented.

        Returns:
            True if the router moved to ``request.href``.
        """
        if request.intent is NavigationIntent.GUARDED:
            for hook in list(self._navigation_hooks):
                hook(request)
                if request.prevented:
                    return False

        if not request.href:
            return False

        self.current_path = request.href
        self.history.append(request.href)
        return True

    def push(self, path: str, intent: NavigationIntent = NavigationIntent.GUARDED) -> bool:
        """Programmatic navigation."""
        return self.navigate(NavigationRequest(href=path, intent=intent))

    def click(self, href: str | None) -> bool:
        """A user click; ``href`` is None when no link encloses the target."""
        return self.navigate(NavigationRequest(href=href))

    def request_unload(self) -> UnloadEvent:
        """Ask unload hooks whether the session may close."""
        event = UnloadEvent()
        for hook in list(self._unload_hooks):
            hook(event)
        return event


class NavigationInterceptor:
    """Defers navigation out of an agent's editing page while drafts are dirty.

    Tab switches inside ``/agents/{agent_id}`` are never intercepted, nor are
    external links or clicks that do not land on a link.
    """

    def __init__(
        self,
        store: "DraftStore",
        router: Router,
        agent_id: str,
        on_intercept: Callable[[PendingNavigation], None],
    ) -> None:
        self._store = store
        self._router = router
        self._agent_id = agent_id
        self._on_intercept = on_intercept
        self._attached = False

    @property
    def agent_path(self) -> str:
        return f"/agents/{self._agent_id}"

    def attach(self) -> None:
        if not self._attached:
            self._router.add_navigation_hook(self.handle)
            self._attached = True

    def detach(self) -> None:
        if self._attached:
            self._router.remove_navigation_hook(self.handle)
            self._attached = False

    def handle(self, request: NavigationRequest) -> None:
        if request.intent is NavigationIntent.ALLOWED:
            return

        if not self._store.is_dirty:
            return

        href = request.href
        if not href:
            return

        # External links leave the app; nothing to protect
        if not href.startswith("/"):
            return

        if href.startswith(self.agent_path):
            return

        request.prevent_default()
        logger.debug(f"Intercepted navigation to {href} with unsaved changes")
        self._on_intercept(PendingNavigation(target_path=href))
