"""Agent Editor Python SDK.

Edits an agent's configuration through two independent surfaces (workflow
graph and settings form) without losing edits on navigation, and commits
them as new immutable versions.

Example usage:

    from agent_editor import AgentEditor, AsyncAgentEditorClient, SettingsDraft

    async with AsyncAgentEditorClient(base_url="http://localhost:3000") as client:
        async with AgentEditor("agent-123", client) as editor:
            draft = SettingsDraft.from_version(editor.active_version)
            draft.llm_temperature = 0.2
            editor.store.set_settings_draft(draft)
            editor.store.set_is_settings_dirty(True)

            # Leaving the page is deferred until the user decides
            editor.router.click("/calls")
            editor.confirmation.save()
            created = await editor.submit_save("Lower temperature")
            print(created.version)
"""

from agent_editor.client import AgentEditorClient, AsyncAgentEditorClient
from agent_editor.commit import CommitNotesDialog, SaveIntent, SaveKind, VersionCommitService
from agent_editor.config import Settings, configure_logging, get_settings
from agent_editor.confirmation import (
    ConfirmationState,
    UnsavedChangesAction,
    UnsavedChangesConfirmation,
)
from agent_editor.drafts import DraftSession, DraftStore, UnsavedChangesWarning
from agent_editor.editor import AgentEditor
from agent_editor.exceptions import (
    AgentEditorError,
    AuthenticationError,
    CommitDialogClosedError,
    NotFoundError,
    SaveInProgressError,
    ServerError,
    TransportError,
    ValidationError,
)
from agent_editor.export import ExportAction, export_filename, sanitize_filename
from agent_editor.models import (
    AgentDetail,
    ConfigVersion,
    CreatedVersion,
    CreateVersionRequest,
    ExportSnapshot,
    GlobalIntentDraft,
    GlobalIntentsDraft,
    PostCallAnalysisDraft,
    PostCallQuestionDraft,
    QuestionChoiceDraft,
    RagDraft,
    SettingsDraft,
    TtsDraft,
    WebhookAuthDraft,
    WebhookDraft,
    WebhookRetryDraft,
    WorkflowDraft,
)
from agent_editor.navigation import (
    NavigationIntent,
    NavigationInterceptor,
    NavigationRequest,
    PendingNavigation,
    Router,
    UnloadEvent,
)
from agent_editor.notifications import Notification, Notifier
from agent_editor.reconcile import (
    CommittedFields,
    ReconciledPayload,
    project_settings,
    reconcile,
)
from agent_editor.resolver import VersionResolver

__version__ = "0.1.0"
__all__ = [
    # Clients
    "AgentEditorClient",
    "AsyncAgentEditorClient",
    # Editing session
    "AgentEditor",
    "DraftStore",
    "DraftSession",
    "UnsavedChangesWarning",
    "VersionResolver",
    # Navigation
    "Router",
    "NavigationIntent",
    "NavigationInterceptor",
    "NavigationRequest",
    "PendingNavigation",
    "UnloadEvent",
    # Confirmation
    "ConfirmationState",
    "UnsavedChangesAction",
    "UnsavedChangesConfirmation",
    # Saving
    "CommitNotesDialog",
    "CommittedFields",
    "ReconciledPayload",
    "SaveIntent",
    "SaveKind",
    "VersionCommitService",
    "project_settings",
    "reconcile",
    # Export
    "ExportAction",
    "export_filename",
    "sanitize_filename",
    # Notifications
    "Notification",
    "Notifier",
    # Configuration
    "Settings",
    "configure_logging",
    "get_settings",
    # Models
    "AgentDetail",
    "ConfigVersion",
    "CreatedVersion",
    "CreateVersionRequest",
    "ExportSnapshot",
    "GlobalIntentDraft",
    "GlobalIntentsDraft",
    "PostCallAnalysisDraft",
    "PostCallQuestionDraft",
    "QuestionChoiceDraft",
    "RagDraft",
    "SettingsDraft",
    "TtsDraft",
    "WebhookAuthDraft",
    "WebhookDraft",
    "WebhookRetryDraft",
    "WorkflowDraft",
    # Exceptions
    "AgentEditorError",
    "AuthenticationError",
    "CommitDialogClosedError",
    "NotFoundError",
    "SaveInProgressError",
    "ServerError",
    "TransportError",
    "ValidationError",
]
