"""Reconcile workflow and settings drafts into one version payload.

The workflow editor owns the whole ``configJson`` when its draft is dirty, so
its config is substituted, never field-merged. The settings form then projects
its fields into their canonical nested locations of whatever ``configJson``
resulted; settings projections therefore win for overlapping keys.

Everything here is pure: no I/O, inputs are never mutated, and only the
branches that change are copied, so untouched sub-trees (e.g. the workflow's
``nodes`` list) keep their identity.
"""

from dataclasses import dataclass, field
from typing import Any

from agent_editor.constants import DEFAULT_QUESTION_TYPE, DEPRECATED_ROOT_KEYS
from agent_editor.drafts import DraftSession
from agent_editor.models import (
    ConfigVersion,
    GlobalIntentsDraft,
    PostCallAnalysisDraft,
    PostCallQuestionDraft,
    SettingsDraft,
    WebhookDraft,
)


@dataclass(frozen=True)
class CommittedFields:
    """Fields of the last committed version the merge starts from."""

    config_json: dict[str, Any]
    global_prompt: str | None = None
    rag_enabled: bool = False
    rag_config_id: str | None = None
    voice_config_id: str | None = None

    @classmethod
    def from_version(cls, version: ConfigVersion) -> "CommittedFields":
        return cls(
            config_json=version.config_json,
            global_prompt=version.global_prompt,
            rag_enabled=version.rag_enabled,
            rag_config_id=version.rag_config_id,
            voice_config_id=version.voice_config_id,
        )


@dataclass(frozen=True)
class ReconciledPayload:
    """Merged payload plus the scalar version fields, ready for commit."""

    config_json: dict[str, Any]
    global_prompt: str | None
    rag_enabled: bool
    rag_config_id: str | None
    voice_config_id: str | None
    # Which surfaces contributed, in merge order
    notes_parts: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.notes_parts)


def _llm_block(
    enabled: bool,
    provider_id: str | None,
    model_name: str,
    temperature: float,
    max_tokens: int,
) -> dict[str, Any]:
    block: dict[str, Any] = {"enabled": enabled}
    if provider_id:
        block["provider_id"] = provider_id
    block["model_name"] = model_name
    block["temperature"] = temperature
    block["max_tokens"] = max_tokens
    return block


def build_llm_config(draft: SettingsDraft) -> dict[str, Any]:
    block = _llm_block(
        draft.llm_enabled,
        draft.llm_provider_id,
        draft.llm_model,
        draft.llm_temperature,
        draft.llm_max_tokens,
    )
    block["service_tier"] = draft.llm_service_tier
    return block


def build_extraction_llm_config(draft: SettingsDraft) -> dict[str, Any]:
    return _llm_block(
        draft.extraction_llm_enabled,
        draft.extraction_llm_provider_id,
        draft.extraction_llm_model,
        draft.extraction_llm_temperature,
        draft.extraction_llm_max_tokens,
    )


def build_tts_config(draft: SettingsDraft, current_tts: dict[str, Any]) -> dict[str, Any]:
    """TTS block; ``voice_name`` is owned by the voice config and preserved."""
    tts = draft.tts
    block: dict[str, Any] = {"enabled": draft.tts_enabled}
    voice_name = current_tts.get("voice_name")
    if voice_name is not None:
        block["voice_name"] = voice_name
    block.update(
        {
            "model": tts.model,
            "stability": tts.stability,
            "similarity_boost": tts.similarity_boost,
            "style": tts.style,
            "use_speaker_boost": tts.use_speaker_boost,
            "enable_ssml_parsing": tts.enable_ssml_parsing,
            "pronunciation_dictionaries_enabled": tts.pronunciation_dictionaries_enabled,
            "pronunciation_dictionary_ids": [
                dictionary_id.strip()
                for dictionary_id in tts.pronunciation_dictionary_ids.split(",")
                if dictionary_id.strip()
            ],
        }
    )
    return block


def build_rag_override(draft: SettingsDraft) -> dict[str, Any]:
    rag = draft.rag
    return {
        "search_mode": rag.search_mode,
        "top_k": rag.top_k,
        "rrf_k": rag.rrf_k,
        "vector_weight": rag.vector_weight,
        "fts_weight": rag.fts_weight,
    }


def build_question(question: PostCallQuestionDraft) -> dict[str, Any]:
    """Question payload; default-valued optional fields are omitted."""
    block: dict[str, Any] = {
        "name": question.name,
        "description": question.description,
    }
    if question.type != DEFAULT_QUESTION_TYPE:
        block["type"] = question.type
    if len(question.choices) > 0:
        block["choices"] = [choice.model_dump() for choice in question.choices]
    if question.required is True:
        block["required"] = True
    return block


def build_post_call_analysis(analysis: PostCallAnalysisDraft) -> dict[str, Any]:
    block: dict[str, Any] = {"enabled": analysis.enabled}
    if analysis.provider_id:
        block["provider_id"] = analysis.provider_id
    block["model_name"] = analysis.model
    block["questions"] = [build_question(question) for question in analysis.questions]
    return block


def build_global_intents(config: GlobalIntentsDraft) -> dict[str, Any]:
    intents: dict[str, Any] = {}
    for intent_id, intent in config.intents.items():
        block: dict[str, Any] = {
            "description": intent.description,
            "examples": list(intent.examples),
            "target_node": intent.target_node,
            "priority": intent.priority,
        }
        if intent.active_from_nodes is not None:
            block["active_from_nodes"] = list(intent.active_from_nodes)
        if intent.excluded_from_nodes is not None:
            block["excluded_from_nodes"] = list(intent.excluded_from_nodes)
        intents[intent_id] = block
    return {"enabled": config.enabled, "intents": intents}


def build_webhooks(webhooks: WebhookDraft) -> dict[str, Any]:
    auth: dict[str, Any] = {"type": webhooks.auth.type}
    if webhooks.auth.type != "none":
        auth["secret"] = webhooks.auth.secret
    return {
        "enabled": webhooks.enabled,
        "url": webhooks.url,
        "events": list(webhooks.events),
        "auth": auth,
        "include_transcript": webhooks.include_transcript,
        "include_latency_metrics": webhooks.include_latency_metrics,
        "timeout_seconds": webhooks.timeout_seconds,
        "retry": webhooks.retry.model_dump(),
    }


def project_settings(config_json: dict[str, Any], draft: SettingsDraft) -> dict[str, Any]:
    """Write settings into their canonical locations of ``config_json``.

    Returns a new dict; ``config_json`` itself is left untouched.
    """
    workflow = dict(config_json.get("workflow") or {})
    workflow["llm"] = build_llm_config(draft)
    workflow["extraction_llm"] = build_extraction_llm_config(draft)
    workflow["tts"] = build_tts_config(draft, workflow.get("tts") or {})
    workflow["post_call_analysis"] = build_post_call_analysis(draft.post_call_analysis)
    workflow["global_intents"] = build_global_intents(draft.global_intents)
    if draft.rag_override_enabled:
        workflow["rag"] = build_rag_override(draft)
    else:
        workflow.pop("rag", None)

    projected = {
        key: value for key, value in config_json.items() if key not in DEPRECATED_ROOT_KEYS
    }
    projected["workflow"] = workflow
    projected["auto_hangup"] = {"enabled": draft.auto_hangup_enabled}
    projected["webhooks"] = build_webhooks(draft.webhooks)
    return projected


def reconcile(committed: CommittedFields, session: DraftSession) -> ReconciledPayload:
    """Merge zero, one or two dirty drafts over the committed version.

    Args:
        committed: Fields of the last committed (active) version.
        session: Current draft state.

    Returns:
        ReconciledPayload; ``notes_parts`` is empty when nothing was dirty.
    """
    config_json = committed.config_json
    global_prompt = committed.global_prompt
    rag_enabled = committed.rag_enabled
    rag_config_id = committed.rag_config_id
    voice_config_id = committed.voice_config_id
    notes_parts: list[str] = []

    if session.is_workflow_dirty and session.workflow_draft is not None:
        config_json = session.workflow_draft.config
        notes_parts.append("workflow")

    # Must run after the workflow substitution
    if session.is_settings_dirty and session.settings_draft is not None:
        draft = session.settings_draft
        config_json = project_settings(config_json, draft)
        global_prompt = draft.global_prompt
        rag_enabled = draft.rag_enabled
        rag_config_id = draft.rag_config_id
        voice_config_id = draft.voice_config_id
        notes_parts.append("settings")

    return ReconciledPayload(
        config_json=config_json,
        global_prompt=global_prompt,
        rag_enabled=rag_enabled,
        rag_config_id=rag_config_id,
        voice_config_id=voice_config_id,
        notes_parts=notes_parts,
    )
