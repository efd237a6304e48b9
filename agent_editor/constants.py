"""Constants for Agent Editor.

Single source of truth for defaults shared by the drafts, the reconciler and
the commit flow. Defaults here must match what the settings projection writes,
otherwise round-tripping a stored configuration produces a spurious diff.
"""

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_TIMEOUT = 30.0

# Deprecated root-level config keys superseded by configJson.workflow.*
DEPRECATED_ROOT_KEYS = ("tts", "stt", "llm", "rag")

# LLM defaults
DEFAULT_LLM_MODEL = "gpt-4o-mini"
DEFAULT_LLM_TEMPERATURE = 0.8
DEFAULT_LLM_MAX_TOKENS = 150
DEFAULT_LLM_SERVICE_TIER = "auto"

# Extraction LLM defaults (variable extraction runs deterministic)
DEFAULT_EXTRACTION_MODEL = "gpt-4o-mini"
DEFAULT_EXTRACTION_TEMPERATURE = 0.0
DEFAULT_EXTRACTION_MAX_TOKENS = 500

# TTS defaults
DEFAULT_TTS_MODEL = "eleven_turbo_v2_5"
DEFAULT_TTS_STABILITY = 0.5
DEFAULT_TTS_SIMILARITY_BOOST = 0.75
DEFAULT_TTS_STYLE = 0.0

# RAG override defaults
DEFAULT_RAG_SEARCH_MODE = "hybrid"
DEFAULT_RAG_TOP_K = 5
DEFAULT_RAG_RRF_K = 60
DEFAULT_RAG_VECTOR_WEIGHT = 0.5
DEFAULT_RAG_FTS_WEIGHT = 0.5

# Webhook defaults
WEBHOOK_EVENTS = ("call_started", "call_ended", "call_analyzed")
DEFAULT_WEBHOOK_TIMEOUT_SECONDS = 10
DEFAULT_WEBHOOK_MAX_RETRIES = 3
DEFAULT_WEBHOOK_INITIAL_DELAY_MS = 1000
DEFAULT_WEBHOOK_MAX_DELAY_MS = 10000
DEFAULT_WEBHOOK_BACKOFF_MULTIPLIER = 2.0

# Post-call analysis question defaults (omitted from payloads when unchanged)
DEFAULT_QUESTION_TYPE = "string"

# Commit notes
WORKFLOW_SAVE_NOTES = "Updated via visual editor"
SETTINGS_SAVE_NOTES = "Updated via settings"
FALLBACK_SAVE_NOTES = "Updated agent configuration"

# Success notifications by save kind
SAVE_SUCCESS_MESSAGES = {
    "workflow": "New workflow version created",
    "settings": "Settings saved as a new version",
    "combined": "Changes saved successfully",
}

UNLOAD_WARNING = "You have unsaved changes. Are you sure you want to leave?"
