"""
Configuration Management for askdesk

Loads configuration from ~/.askdesk/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field

logger = logging.getLogger("askdesk.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".askdesk"
CONFIG_PATH = CONFIG_DIR / "config.json"

DEFAULT_PERSONA = (
    "You are Yam Cheff, a friendly and enthusiastic chef from Yamfoods, passionate "
    "about baking with love and sharing culinary knowledge. Answer the question in a "
    "warm, engaging tone, as if you're chatting with food lovers in Addis Ababa. Use "
    "the provided context and the user's previous conversation history to provide "
    "accurate, relevant, and delightful responses. Use {language} by default unless "
    "a user insists otherwise. Keep your response concise yet engaging. Let's get cooking!"
)


@dataclass
class EmbeddingConfig:
    """Embedding backend configuration"""
    model: str = "text-embedding-004"
    dimension: int = 768
    max_chars: int = 5000
    retries: int = 3
    backoff_seconds: float = 1.0


@dataclass
class LLMConfig:
    """Generative backend configuration"""
    provider: str = "google"
    google_api_key: str = ""
    google_model: str = "gemini-1.5-flash"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    max_tokens: int = 1024
    timeout: float = 60.0


@dataclass
class VectorStoreConfig:
    """Vector store configuration"""
    path: str = str(CONFIG_DIR / "vectors")
    collection: str = "docs"
    top_k: int = 3


@dataclass
class ToolBridgeConfig:
    """Query executor process configuration"""
    command: str = ""  # empty: current interpreter
    server_path: str = ""  # empty: run the bundled executor module
    timeout: float = 120.0


@dataclass
class HistoryConfig:
    max_turns: int = 5


@dataclass
class AssistantConfig:
    """Persona and routing behaviour"""
    persona: str = DEFAULT_PERSONA
    default_language: str = "Amharic"
    database_mode: str = "tools"  # "tools" or "direct"


@dataclass
class DatabaseConfig:
    """Database reached by the query executor"""
    url: str = ""
    host: str = "localhost"
    user: str = ""
    password: str = ""
    name: str = ""

    @property
    def resolved_url(self) -> str:
        if self.url:
            return self.url
        credentials = self.user
        if self.password:
            credentials = f"{credentials}:{self.password}"
        return f"mysql+pymysql://{credentials}@{self.host}/{self.name}"


@dataclass
class IngestionConfig:
    csv_file: str = "yam-resource.csv"
    batch_size: int = 10


@dataclass
class AskdeskConfig:
    """Main askdesk configuration"""
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    vector_store: VectorStoreConfig = field(default_factory=VectorStoreConfig)
    tool_bridge: ToolBridgeConfig = field(default_factory=ToolBridgeConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    assistant: AssistantConfig = field(default_factory=AssistantConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    ingestion: IngestionConfig = field(default_factory=IngestionConfig)


def _parse_section(cls, data: dict, name: str):
    """Build a config section from ``data[name]``, ignoring unknown keys."""
    section = data.get(name, {})
    defaults = cls()
    values = {
        key: section.get(key, getattr(defaults, key))
        for key in defaults.__dataclass_fields__
    }
    return cls(**values)


def _env_overrides():
    """(env var, section, attribute, converter) tuples"""
    return [
        ("EMBEDDING_MODEL", "embedding", "model", str),
        ("EMBEDDING_DIMENSION", "embedding", "dimension", int),
        ("EMBEDDING_MAX_CHARS", "embedding", "max_chars", int),
        ("EMBEDDING_RETRIES", "embedding", "retries", int),
        ("ASKDESK_LLM_PROVIDER", "llm", "provider", str),
        ("GOOGLE_API_KEY", "llm", "google_api_key", str),
        ("GEMINI_API_KEY", "llm", "google_api_key", str),
        ("GOOGLE_MODEL", "llm", "google_model", str),
        ("ANTHROPIC_API_KEY", "llm", "anthropic_api_key", str),
        ("ANTHROPIC_MODEL", "llm", "anthropic_model", str),
        ("OPENAI_API_KEY", "llm", "openai_api_key", str),
        ("OPENAI_MODEL", "llm", "openai_model", str),
        ("VECTOR_STORE_PATH", "vector_store", "path", str),
        ("VECTOR_COLLECTION", "vector_store", "collection", str),
        ("RETRIEVAL_TOP_K", "vector_store", "top_k", int),
        ("MCP_SERVER_COMMAND", "tool_bridge", "command", str),
        ("MCP_SERVER_PATH", "tool_bridge", "server_path", str),
        ("TOOL_CALL_TIMEOUT", "tool_bridge", "timeout", float),
        ("MAX_HISTORY", "history", "max_turns", int),
        ("DEFAULT_LANGUAGE", "assistant", "default_language", str),
        ("DATABASE_MODE", "assistant", "database_mode", str),
        ("DATABASE_URL", "database", "url", str),
        ("DB_HOST", "database", "host", str),
        ("DB_USER", "database", "user", str),
        ("DB_PASSWORD", "database", "password", str),
        ("DB_NAME", "database", "name", str),
        ("CSV_FILE", "ingestion", "csv_file", str),
        ("BATCH_SIZE", "ingestion", "batch_size", int),
    ]


def load_config() -> AskdeskConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (~/.askdesk/config.json)
    3. Default values
    """
    config = AskdeskConfig()

    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.embedding = _parse_section(EmbeddingConfig, data, "embedding")
            config.llm = _parse_section(LLMConfig, data, "llm")
            config.vector_store = _parse_section(VectorStoreConfig, data, "vector_store")
            config.tool_bridge = _parse_section(ToolBridgeConfig, data, "tool_bridge")
            config.history = _parse_section(HistoryConfig, data, "history")
            config.assistant = _parse_section(AssistantConfig, data, "assistant")
            config.database = _parse_section(DatabaseConfig, data, "database")
            config.ingestion = _parse_section(IngestionConfig, data, "ingestion")
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load config file %s: %s", CONFIG_PATH, e)

    for env_var, section, attr, convert in _env_overrides():
        value = os.getenv(env_var)
        if not value:
            continue
        try:
            setattr(getattr(config, section), attr, convert(value))
        except ValueError:
            logger.warning("Ignoring invalid value for %s: %r", env_var, value)

    return config
