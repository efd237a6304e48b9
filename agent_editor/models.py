"""Pydantic models for Agent Editor client."""

import json
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from agent_editor import constants


def _value(block: dict[str, Any], key: str, default: Any) -> Any:
    """``block[key]``, or ``default`` when the key is missing or null."""
    value = block.get(key)
    return default if value is None else value


class _WireModel(BaseModel):
    """Base for REST payloads: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ========================================
# REST models
# ========================================


class ConfigVersion(_WireModel):
    """Immutable configuration version of an agent."""

    id: str
    agent_id: str | None = None
    version: int = Field(..., ge=1)
    config_json: dict[str, Any] = Field(default_factory=dict)
    global_prompt: str | None = None
    rag_enabled: bool = False
    rag_config_id: str | None = None
    voice_config_id: str | None = None
    notes: str | None = None
    created_by: str | None = None
    created_at: datetime | None = None
    is_active: bool = False


class AgentDetail(_WireModel):
    """Agent detail including its currently active version."""

    id: str
    name: str
    description: str | None = None
    active_version: ConfigVersion | None = None
    version_count: int = 0
    call_count: int = 0
    phone_mapping_count: int = 0


class CreateVersionRequest(_WireModel):
    """Request body for committing a new version."""

    config_json: dict[str, Any]
    notes: str
    global_prompt: str | None = None
    rag_enabled: bool = False
    rag_config_id: str | None = None
    voice_config_id: str | None = None
    auto_activate: bool = True


class CreatedVersion(_WireModel):
    """Identifier pair returned by a successful commit."""

    id: str
    version: int


class ExportSnapshot(BaseModel):
    """Flattened export of one agent version (snake_case on the wire)."""

    tenant_id: str | None = None
    agent_id: str
    agent_name: str
    version: int
    is_active: bool = False
    config_json: dict[str, Any] = Field(default_factory=dict)
    global_prompt: str | None = None
    rag_enabled: bool = False
    rag_config_id: str | None = None
    voice_config_id: str | None = None
    voice_name: str | None = None
    created_at: str | None = None
    created_by: str | None = None
    notes: str | None = None


# ========================================
# Draft models
# ========================================


class WorkflowDraft(BaseModel):
    """Draft state for the workflow editor."""

    config: dict[str, Any]
    # Only used to detect no-op edits
    serialized_fingerprint: str

    @staticmethod
    def fingerprint(config: dict[str, Any]) -> str:
        """Compact, key-order-preserving JSON of a workflow config."""
        return json.dumps(config, separators=(",", ":"), default=str)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "WorkflowDraft":
        return cls(config=config, serialized_fingerprint=cls.fingerprint(config))


class TtsDraft(BaseModel):
    """TTS tuning parameters (configured per-agent)."""

    model: str = constants.DEFAULT_TTS_MODEL
    stability: float = constants.DEFAULT_TTS_STABILITY
    similarity_boost: float = constants.DEFAULT_TTS_SIMILARITY_BOOST
    style: float = constants.DEFAULT_TTS_STYLE
    use_speaker_boost: bool = True
    enable_ssml_parsing: bool = False
    pronunciation_dictionaries_enabled: bool = False
    # Comma-separated, as typed into the form
    pronunciation_dictionary_ids: str = ""


class RagDraft(BaseModel):
    """RAG tuning parameters, applied when the override is enabled."""

    search_mode: Literal["vector", "fts", "hybrid"] = constants.DEFAULT_RAG_SEARCH_MODE
    top_k: int = constants.DEFAULT_RAG_TOP_K
    rrf_k: int = constants.DEFAULT_RAG_RRF_K
    vector_weight: float = constants.DEFAULT_RAG_VECTOR_WEIGHT
    fts_weight: float = constants.DEFAULT_RAG_FTS_WEIGHT


class WebhookAuthDraft(BaseModel):
    type: Literal["none", "bearer", "hmac"] = "none"
    secret: str = ""


class WebhookRetryDraft(BaseModel):
    max_retries: int = constants.DEFAULT_WEBHOOK_MAX_RETRIES
    initial_delay_ms: int = constants.DEFAULT_WEBHOOK_INITIAL_DELAY_MS
    max_delay_ms: int = constants.DEFAULT_WEBHOOK_MAX_DELAY_MS
    backoff_multiplier: float = constants.DEFAULT_WEBHOOK_BACKOFF_MULTIPLIER


class WebhookDraft(BaseModel):
    """Outbound call-event webhook settings."""

    enabled: bool = False
    url: str = ""
    events: list[Literal["call_started", "call_ended", "call_analyzed"]] = Field(
        default_factory=list
    )
    auth: WebhookAuthDraft = Field(default_factory=WebhookAuthDraft)
    include_transcript: bool = True
    include_latency_metrics: bool = False
    timeout_seconds: int = constants.DEFAULT_WEBHOOK_TIMEOUT_SECONDS
    retry: WebhookRetryDraft = Field(default_factory=WebhookRetryDraft)


class QuestionChoiceDraft(BaseModel):
    value: str
    label: str = ""


class PostCallQuestionDraft(BaseModel):
    """One question answered by post-call analysis."""

    name: str
    description: str = ""
    type: Literal["string", "number", "enum", "boolean"] = "string"
    choices: list[QuestionChoiceDraft] = Field(default_factory=list)
    required: bool = False


class PostCallAnalysisDraft(BaseModel):
    enabled: bool = False
    provider_id: str | None = None
    model: str = constants.DEFAULT_LLM_MODEL
    questions: list[PostCallQuestionDraft] = Field(default_factory=list)


class GlobalIntentDraft(BaseModel):
    """Intent that can interrupt the flow from any node."""

    description: str = ""
    examples: list[str] = Field(default_factory=list)
    target_node: str = ""
    priority: int = 0
    # None means "all nodes" / "no exclusions"
    active_from_nodes: list[str] | None = None
    excluded_from_nodes: list[str] | None = None


class GlobalIntentsDraft(BaseModel):
    enabled: bool = False
    intents: dict[str, GlobalIntentDraft] = Field(default_factory=dict)


class SettingsDraft(BaseModel):
    """Draft state for the settings form."""

    global_prompt: str = ""

    llm_enabled: bool = True
    llm_provider_id: str | None = None
    llm_model: str = constants.DEFAULT_LLM_MODEL
    llm_temperature: float = constants.DEFAULT_LLM_TEMPERATURE
    llm_max_tokens: int = constants.DEFAULT_LLM_MAX_TOKENS
    llm_service_tier: str = constants.DEFAULT_LLM_SERVICE_TIER

    extraction_llm_enabled: bool = False
    extraction_llm_provider_id: str | None = None
    extraction_llm_model: str = constants.DEFAULT_EXTRACTION_MODEL
    extraction_llm_temperature: float = constants.DEFAULT_EXTRACTION_TEMPERATURE
    extraction_llm_max_tokens: int = constants.DEFAULT_EXTRACTION_MAX_TOKENS

    tts_enabled: bool = True
    tts: TtsDraft = Field(default_factory=TtsDraft)

    rag_enabled: bool = False
    rag_config_id: str | None = None
    rag_override_enabled: bool = False
    rag: RagDraft = Field(default_factory=RagDraft)

    voice_config_id: str | None = None
    auto_hangup_enabled: bool = True

    webhooks: WebhookDraft = Field(default_factory=WebhookDraft)
    post_call_analysis: PostCallAnalysisDraft = Field(default_factory=PostCallAnalysisDraft)
    global_intents: GlobalIntentsDraft = Field(default_factory=GlobalIntentsDraft)

    @classmethod
    def from_version(cls, version: ConfigVersion) -> "SettingsDraft":
        """Build the form's initial state from a committed version.

        Reads the canonical nested locations under ``configJson.workflow``,
        falling back to the deprecated root-level blocks for configurations
        stored before the nested layout existed. Stored nulls count as
        missing.
        """
        config = version.config_json
        workflow = config.get("workflow") or {}
        llm = workflow.get("llm") or config.get("llm") or {}
        extraction = workflow.get("extraction_llm") or {}
        tts = workflow.get("tts") or config.get("tts") or {}
        rag = workflow.get("rag") or {}
        analysis = workflow.get("post_call_analysis") or {}
        intents = workflow.get("global_intents") or {}
        webhooks = config.get("webhooks") or {}
        auth = webhooks.get("auth") or {}
        retry = webhooks.get("retry") or {}
        auto_hangup = config.get("auto_hangup") or {}

        dictionary_ids = _value(tts, "pronunciation_dictionary_ids", [])

        return cls(
            global_prompt=version.global_prompt or "",
            llm_enabled=_value(llm, "enabled", True),
            llm_provider_id=llm.get("provider_id"),
            llm_model=llm.get("model_name") or llm.get("model") or constants.DEFAULT_LLM_MODEL,
            llm_temperature=_value(llm, "temperature", constants.DEFAULT_LLM_TEMPERATURE),
            llm_max_tokens=_value(llm, "max_tokens", constants.DEFAULT_LLM_MAX_TOKENS),
            llm_service_tier=llm.get("service_tier") or constants.DEFAULT_LLM_SERVICE_TIER,
            extraction_llm_enabled=_value(extraction, "enabled", False),
            extraction_llm_provider_id=extraction.get("provider_id"),
            extraction_llm_model=extraction.get("model_name") or constants.DEFAULT_EXTRACTION_MODEL,
            extraction_llm_temperature=_value(
                extraction, "temperature", constants.DEFAULT_EXTRACTION_TEMPERATURE
            ),
            extraction_llm_max_tokens=_value(
                extraction, "max_tokens", constants.DEFAULT_EXTRACTION_MAX_TOKENS
            ),
            tts_enabled=_value(tts, "enabled", True),
            tts=TtsDraft(
                model=tts.get("model") or constants.DEFAULT_TTS_MODEL,
                stability=_value(tts, "stability", constants.DEFAULT_TTS_STABILITY),
                similarity_boost=_value(
                    tts, "similarity_boost", constants.DEFAULT_TTS_SIMILARITY_BOOST
                ),
                style=_value(tts, "style", constants.DEFAULT_TTS_STYLE),
                use_speaker_boost=_value(tts, "use_speaker_boost", True),
                enable_ssml_parsing=_value(tts, "enable_ssml_parsing", False),
                pronunciation_dictionaries_enabled=_value(
                    tts, "pronunciation_dictionaries_enabled", False
                ),
                pronunciation_dictionary_ids=", ".join(dictionary_ids),
            ),
            rag_enabled=version.rag_enabled,
            rag_config_id=version.rag_config_id,
            rag_override_enabled=bool(rag),
            rag=RagDraft(
                search_mode=_value(rag, "search_mode", constants.DEFAULT_RAG_SEARCH_MODE),
                top_k=_value(rag, "top_k", constants.DEFAULT_RAG_TOP_K),
                rrf_k=_value(rag, "rrf_k", constants.DEFAULT_RAG_RRF_K),
                vector_weight=_value(rag, "vector_weight", constants.DEFAULT_RAG_VECTOR_WEIGHT),
                fts_weight=_value(rag, "fts_weight", constants.DEFAULT_RAG_FTS_WEIGHT),
            ),
            voice_config_id=version.voice_config_id,
            auto_hangup_enabled=_value(auto_hangup, "enabled", True),
            webhooks=WebhookDraft(
                enabled=_value(webhooks, "enabled", False),
                url=_value(webhooks, "url", ""),
                events=_value(webhooks, "events", []),
                auth=WebhookAuthDraft(
                    type=_value(auth, "type", "none"),
                    secret=_value(auth, "secret", ""),
                ),
                include_transcript=_value(webhooks, "include_transcript", True),
                include_latency_metrics=_value(webhooks, "include_latency_metrics", False),
                timeout_seconds=_value(
                    webhooks, "timeout_seconds", constants.DEFAULT_WEBHOOK_TIMEOUT_SECONDS
                ),
                retry=WebhookRetryDraft(
                    max_retries=_value(
                        retry, "max_retries", constants.DEFAULT_WEBHOOK_MAX_RETRIES
                    ),
                    initial_delay_ms=_value(
                        retry, "initial_delay_ms", constants.DEFAULT_WEBHOOK_INITIAL_DELAY_MS
                    ),
                    max_delay_ms=_value(
                        retry, "max_delay_ms", constants.DEFAULT_WEBHOOK_MAX_DELAY_MS
                    ),
                    backoff_multiplier=_value(
                        retry, "backoff_multiplier", constants.DEFAULT_WEBHOOK_BACKOFF_MULTIPLIER
                    ),
                ),
            ),
            post_call_analysis=PostCallAnalysisDraft(
                enabled=_value(analysis, "enabled", False),
                provider_id=analysis.get("provider_id"),
                model=analysis.get("model_name") or constants.DEFAULT_LLM_MODEL,
                questions=[
                    PostCallQuestionDraft(
                        name=_value(question, "name", ""),
                        description=_value(question, "description", ""),
                        type=_value(question, "type", constants.DEFAULT_QUESTION_TYPE),
                        choices=[
                            QuestionChoiceDraft(
                                value=_value(choice, "value", ""),
                                label=_value(choice, "label", ""),
                            )
                            for choice in _value(question, "choices", [])
                        ],
                        required=_value(question, "required", False),
                    )
                    for question in _value(analysis, "questions", [])
                ],
            ),
            global_intents=GlobalIntentsDraft(
                enabled=_value(intents, "enabled", False),
                intents={
                    intent_id: GlobalIntentDraft(
                        description=_value(intent, "description", ""),
                        examples=_value(intent, "examples", []),
                        target_node=_value(intent, "target_node", ""),
                        priority=_value(intent, "priority", 0),
                        active_from_nodes=intent.get("active_from_nodes"),
                        excluded_from_nodes=intent.get("excluded_from_nodes"),
                    )
                    for intent_id, intent in _value(intents, "intents", {}).items()
                },
            ),
        )
