"""Tests for draft reconciliation."""

import copy

from agent_editor import (
    CommittedFields,
    ConfigVersion,
    DraftSession,
    GlobalIntentDraft,
    GlobalIntentsDraft,
    PostCallAnalysisDraft,
    PostCallQuestionDraft,
    QuestionChoiceDraft,
    SettingsDraft,
    WebhookAuthDraft,
    WebhookDraft,
    WorkflowDraft,
    project_settings,
    reconcile,
)
from agent_editor.reconcile import build_question, build_tts_config


def _committed(config_json: dict, **fields) -> CommittedFields:
    return CommittedFields(config_json=config_json, **fields)


class TestReconcile:
    """Tests for reconcile()."""

    def test_nothing_dirty(self) -> None:
        config = {"workflow": {"nodes": []}}
        payload = reconcile(_committed(config, global_prompt="Hi"), DraftSession())

        assert payload.changed is False
        assert payload.config_json is config
        assert payload.global_prompt == "Hi"

    def test_settings_only_preserves_workflow_nodes(self) -> None:
        """Projecting settings touches the llm block and nothing else in the graph."""
        nodes = [{"id": "greeting"}, {"id": "goodbye"}]
        config = {"workflow": {"nodes": nodes, "llm": {"enabled": True}}}
        snapshot = copy.deepcopy(config)
        session = DraftSession(
            settings_draft=SettingsDraft(llm_enabled=False),
            is_settings_dirty=True,
        )

        payload = reconcile(_committed(config), session)

        assert payload.config_json["workflow"]["nodes"] is nodes
        assert payload.config_json["workflow"]["nodes"] == snapshot["workflow"]["nodes"]
        assert payload.config_json["workflow"]["llm"]["enabled"] is False
        assert payload.notes_parts == ["settings"]
        # Input left untouched
        assert config == snapshot

    def test_both_dirty_applies_settings_after_workflow(self) -> None:
        """The workflow draft is substituted, then settings are projected over it."""
        committed = {"workflow": {"nodes": [{"id": "old"}], "llm": {"enabled": False}}}
        new_nodes = [{"id": "greeting"}, {"id": "transfer"}]
        workflow_config = {"workflow": {"nodes": new_nodes, "llm": {"enabled": False}}}
        session = DraftSession(
            workflow_draft=WorkflowDraft.from_config(workflow_config),
            is_workflow_dirty=True,
            settings_draft=SettingsDraft(llm_enabled=True),
            is_settings_dirty=True,
        )

        payload = reconcile(_committed(committed), session)

        assert payload.config_json["workflow"]["nodes"] is new_nodes
        assert payload.config_json["workflow"]["llm"]["enabled"] is True
        assert payload.notes_parts == ["workflow", "settings"]

    def test_workflow_only_substitutes_config(self) -> None:
        workflow_config = {"workflow": {"nodes": [{"id": "a"}]}, "custom": 1}
        session = DraftSession(
            workflow_draft=WorkflowDraft.from_config(workflow_config),
            is_workflow_dirty=True,
        )

        payload = reconcile(
            _committed({"workflow": {"nodes": []}}, global_prompt="Keep me", rag_enabled=True),
            session,
        )

        assert payload.config_json == workflow_config
        assert payload.global_prompt == "Keep me"
        assert payload.rag_enabled is True
        assert payload.notes_parts == ["workflow"]

    def test_settings_override_scalar_fields(self) -> None:
        session = DraftSession(
            settings_draft=SettingsDraft(
                global_prompt="New prompt",
                rag_enabled=True,
                rag_config_id="rag-9",
                voice_config_id="voice-2",
            ),
            is_settings_dirty=True,
        )

        payload = reconcile(
            _committed({}, global_prompt="Old prompt", voice_config_id="voice-1"), session
        )

        assert payload.global_prompt == "New prompt"
        assert payload.rag_enabled is True
        assert payload.rag_config_id == "rag-9"
        assert payload.voice_config_id == "voice-2"

    def test_dirty_flag_without_draft_is_ignored(self) -> None:
        config = {"workflow": {}}
        payload = reconcile(_committed(config), DraftSession(is_workflow_dirty=True))

        assert payload.changed is False
        assert payload.config_json is config


class TestProjectSettings:
    """Tests for the canonical locations settings are written to."""

    def test_deprecated_root_keys_are_dropped(self) -> None:
        config = {
            "workflow": {"nodes": []},
            "llm": {"model": "old"},
            "tts": {"voice": "old"},
            "stt": {"model": "old"},
            "rag": {"top_k": 1},
            "custom": {"keep": True},
        }

        projected = project_settings(config, SettingsDraft())

        for key in ("llm", "tts", "stt", "rag"):
            assert key not in projected
        assert projected["custom"] == {"keep": True}
        assert projected["auto_hangup"] == {"enabled": True}
        assert "llm" in config

    def test_llm_provider_only_when_set(self) -> None:
        projected = project_settings({}, SettingsDraft())
        assert "provider_id" not in projected["workflow"]["llm"]

        projected = project_settings({}, SettingsDraft(llm_provider_id="prov-1"))
        assert projected["workflow"]["llm"]["provider_id"] == "prov-1"

    def test_rag_override(self) -> None:
        config = {"workflow": {"rag": {"top_k": 3}}}

        off = project_settings(config, SettingsDraft(rag_override_enabled=False))
        assert "rag" not in off["workflow"]

        on = project_settings(config, SettingsDraft(rag_override_enabled=True))
        assert on["workflow"]["rag"]["search_mode"] == "hybrid"
        assert on["workflow"]["rag"]["top_k"] == 5

    def test_tts_preserves_voice_name(self) -> None:
        draft = SettingsDraft(tts_enabled=False)
        draft.tts.pronunciation_dictionary_ids = " dict-1, ,dict-2 "

        block = build_tts_config(draft, {"voice_name": "Rachel", "model": "old"})

        assert block["voice_name"] == "Rachel"
        assert block["enabled"] is False
        assert block["pronunciation_dictionary_ids"] == ["dict-1", "dict-2"]
        assert "voice_name" not in build_tts_config(draft, {})

    def test_webhook_secret_only_with_auth(self) -> None:
        no_auth = project_settings(
            {}, SettingsDraft(webhooks=WebhookDraft(auth=WebhookAuthDraft(secret="x")))
        )
        assert no_auth["webhooks"]["auth"] == {"type": "none"}

        bearer = project_settings(
            {},
            SettingsDraft(
                webhooks=WebhookDraft(
                    enabled=True,
                    url="https://hooks.example.com/calls",
                    events=["call_ended"],
                    auth=WebhookAuthDraft(type="bearer", secret="s3cret"),
                )
            ),
        )
        webhooks = bearer["webhooks"]
        assert webhooks["auth"] == {"type": "bearer", "secret": "s3cret"}
        assert webhooks["events"] == ["call_ended"]
        assert webhooks["retry"]["max_retries"] == 3

    def test_global_intents(self) -> None:
        intents = GlobalIntentsDraft(
            enabled=True,
            intents={
                "transfer": GlobalIntentDraft(
                    description="Caller asks for a human",
                    examples=["talk to a person"],
                    target_node="transfer",
                    priority=10,
                    excluded_from_nodes=["goodbye"],
                )
            },
        )

        projected = project_settings({}, SettingsDraft(global_intents=intents))
        block = projected["workflow"]["global_intents"]

        assert block["enabled"] is True
        assert block["intents"]["transfer"] == {
            "description": "Caller asks for a human",
            "examples": ["talk to a person"],
            "target_node": "transfer",
            "priority": 10,
            "excluded_from_nodes": ["goodbye"],
        }


class TestQuestionPresence:
    """Optional question fields are omitted when they carry their default."""

    def test_defaults_omitted(self) -> None:
        block = build_question(PostCallQuestionDraft(name="resolved", description="Was it?"))
        assert block == {"name": "resolved", "description": "Was it?"}

    def test_non_defaults_present(self) -> None:
        block = build_question(
            PostCallQuestionDraft(
                name="sentiment",
                type="enum",
                choices=[QuestionChoiceDraft(value="positive", label="Positive")],
                required=True,
            )
        )
        assert block == {
            "name": "sentiment",
            "description": "",
            "type": "enum",
            "choices": [{"value": "positive", "label": "Positive"}],
            "required": True,
        }

    def test_post_call_analysis_block(self) -> None:
        analysis = PostCallAnalysisDraft(
            enabled=True,
            questions=[PostCallQuestionDraft(name="resolved")],
        )
        block = project_settings({}, SettingsDraft(post_call_analysis=analysis))
        analysis_block = block["workflow"]["post_call_analysis"]

        assert analysis_block["enabled"] is True
        assert "provider_id" not in analysis_block
        assert analysis_block["questions"] == [{"name": "resolved", "description": ""}]


class TestSettingsRoundTrip:
    """Loading a version into the form and projecting it back changes nothing."""

    def test_from_version_round_trip(self) -> None:
        draft = SettingsDraft(
            llm_provider_id="prov-1",
            llm_temperature=0.3,
            tts_enabled=False,
            rag_override_enabled=True,
            auto_hangup_enabled=False,
        )
        draft.tts.pronunciation_dictionary_ids = "dict-1, dict-2"
        config = project_settings({"workflow": {"nodes": [{"id": "a"}]}}, draft)
        version = ConfigVersion(id="v1", version=1, config_json=config)

        loaded = SettingsDraft.from_version(version)

        assert loaded == draft
        assert project_settings(config, loaded) == config

    def test_from_version_reads_legacy_root_llm(self) -> None:
        version = ConfigVersion(
            id="v1",
            version=1,
            config_json={"llm": {"enabled": False, "model": "legacy-model"}},
        )

        draft = SettingsDraft.from_version(version)

        assert draft.llm_enabled is False
        assert draft.llm_model == "legacy-model"

    def test_from_version_treats_nulls_as_missing(self) -> None:
        """Stored nulls fall back to the same defaults as absent keys."""
        version = ConfigVersion(
            id="v1",
            version=1,
            config_json={
                "workflow": {
                    "llm": {"enabled": None, "temperature": None, "max_tokens": None},
                    "tts": {"stability": None, "pronunciation_dictionary_ids": None},
                    "rag": {"top_k": None},
                    "post_call_analysis": {
                        "enabled": True,
                        "questions": [
                            {
                                "name": "sentiment",
                                "type": None,
                                "required": None,
                                "choices": [{"value": "positive", "label": None}],
                            }
                        ],
                    },
                    "global_intents": {
                        "enabled": None,
                        "intents": {"transfer": {"examples": None, "priority": None}},
                    },
                },
                "webhooks": {
                    "url": None,
                    "events": None,
                    "auth": {"type": None, "secret": None},
                    "retry": {"max_retries": None, "backoff_multiplier": None},
                },
                "auto_hangup": {"enabled": None},
            },
        )

        draft = SettingsDraft.from_version(version)

        assert draft.llm_enabled is True
        assert draft.llm_temperature == SettingsDraft().llm_temperature
        assert draft.llm_max_tokens == SettingsDraft().llm_max_tokens
        assert draft.tts.stability == SettingsDraft().tts.stability
        assert draft.tts.pronunciation_dictionary_ids == ""
        assert draft.rag_override_enabled is True
        assert draft.rag.top_k == 5
        question = draft.post_call_analysis.questions[0]
        assert question.type == "string"
        assert question.required is False
        assert question.choices == [QuestionChoiceDraft(value="positive", label="")]
        assert draft.global_intents.enabled is False
        assert draft.global_intents.intents["transfer"].examples == []
        assert draft.global_intents.intents["transfer"].priority == 0
        assert draft.webhooks.url == ""
        assert draft.webhooks.events == []
        assert draft.webhooks.auth == WebhookAuthDraft()
        assert draft.webhooks.retry.max_retries == 3
        assert draft.auto_hangup_enabled is True
