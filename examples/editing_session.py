"""Editing session example - change settings, leave the page, save on the way out."""

import asyncio
import sys

from agent_editor import (
    AgentEditor,
    AgentEditorError,
    SettingsDraft,
    UnsavedChangesAction,
    configure_logging,
    get_settings,
)


async def main(agent_id: str) -> None:
    """Lower the LLM temperature of an agent and commit it as a new version."""
    configure_logging()
    settings = get_settings()

    async with AgentEditor.from_settings(agent_id, settings) as editor:
        active = editor.active_version
        print(f"Editing {editor.agent.name} (v{active.version if active else 0})")

        # The settings form keeps its edits in the draft store
        baseline = SettingsDraft.from_version(active) if active else SettingsDraft()
        edited = baseline.model_copy(update={"llm_temperature": 0.2})
        editor.store.track_settings(edited, baseline)

        # Leaving the agent page is intercepted while dirty
        if not editor.router.click("/calls"):
            print(editor.confirmation.message)
            editor.confirmation.resolve(UnsavedChangesAction.SAVE)

        try:
            created = await editor.submit_save("Lower temperature")
        except AgentEditorError as e:
            print(f"Save failed: {e.full_message}")
            return

        print(f"Created version {created.version}, now at {editor.router.current_path}")

        path = await editor.export()
        print(f"Exported to {path}")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "agent-123"))
