"""Application settings with Pydantic Settings validation.

Secrets (API keys) are loaded from the environment or a .env file.
Non-sensitive configuration is loaded from config/main.yaml (plus any other
config/*.yaml overlay), validated against JSON schemas and deep-merged.
Environment values always win over YAML defaults.
"""

import json
from pathlib import Path
from typing import Any, Final, cast

import yaml
from jsonschema import ValidationError as JSONSchemaValidationError
from jsonschema import validate
from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.config.logging_config import get_logger
from src.domain.models import QueryMode, RecordType
from src.domain.scoring_constants import QUALITY_THRESHOLDS

CONFIG_DIR: Final[Path] = Path("config")
SCHEMA_DIR: Final[Path] = CONFIG_DIR / "schemas"
MAIN_CONFIG_NAME: Final[str] = "main"

SEARCH_TIMEOUT_SECONDS_DEFAULT: Final[float] = 20.0
INTENT_TIMEOUT_SECONDS_DEFAULT: Final[float] = 10.0
LLM_TIMEOUT_SECONDS_DEFAULT: Final[float] = 8.0

logger = cast(Any, get_logger(__name__))


def _resolve_config_path(path: Path) -> Path:
    """Resolve config paths against the working directory, then the repo root."""
    if path.is_absolute() or path.exists():
        return path
    repo_root = Path(__file__).resolve().parents[2]
    return repo_root / path


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge into base (takes precedence)

    Returns:
        Merged dictionary
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_schema(schema_name: str) -> dict[str, Any]:
    """Load JSON Schema from config/schemas/.

    Args:
        schema_name: Schema name without extension (e.g., "main")

    Returns:
        JSON Schema dictionary or empty dict if not found
    """
    schema_path = _resolve_config_path(SCHEMA_DIR / f"{schema_name}.schema.json")
    if not schema_path.exists():
        return {}

    try:
        with open(schema_path, encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("config_schema_load_failed", schema=schema_name, error=str(e))
        return {}


def validate_config_section(
    config: dict[str, Any], schema_name: str, file_path: str = ""
) -> None:
    """Validate config section against JSON Schema.

    Raises:
        ValueError: If validation fails
    """
    schema = load_schema(schema_name)
    if not schema:
        return

    try:
        validate(instance=config, schema=schema)
        logger.debug("config_validation_succeeded", schema=schema_name)
    except JSONSchemaValidationError as e:
        error_msg = f"Config validation failed for {schema_name}"
        if file_path:
            error_msg += f" (file: {file_path})"
        error_msg += f": {e.message}"
        raise ValueError(error_msg) from e


def _load_yaml_file(path: Path, schema_name: str) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as e:
        logger.warning("config_file_load_failed", path=str(path), error=str(e))
        return {}

    if not isinstance(loaded, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")

    validate_config_section(loaded, schema_name, str(path))
    logger.debug("config_file_loaded", path=str(path), schema=schema_name)
    return loaded


def load_all_configs(config_dir: Path = CONFIG_DIR) -> dict[str, Any]:
    """Load and merge all YAML configs from the config directory.

    Loading order (later overrides earlier):
    1. config/main.yaml
    2. All other config/*.yaml files (sorted alphabetically)

    Returns:
        Merged configuration dictionary

    Raises:
        ValueError: If a file fails schema validation
    """
    directory = _resolve_config_path(config_dir)
    if not directory.is_dir():
        logger.info("config_load_complete", file_count=0)
        return {}

    main_path = directory / f"{MAIN_CONFIG_NAME}.yaml"
    overlays = sorted(path for path in directory.glob("*.yaml") if path != main_path)

    merged: dict[str, Any] = {}
    file_count = 0
    if main_path.exists():
        merged = _load_yaml_file(main_path, MAIN_CONFIG_NAME)
        file_count += 1
    for overlay in overlays:
        merged = deep_merge(merged, _load_yaml_file(overlay, overlay.stem))
        file_count += 1

    logger.info("config_load_complete", file_count=file_count)
    return merged


class Settings(BaseSettings):
    """Application settings.

    Secrets come from the environment/.env. Everything else falls back to
    YAML defaults, then to the field defaults below.
    """

    model_config = SettingsConfigDict(
        env_file=".env" if Path(".env").exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === SECRETS (from .env) ===

    openai_api_key: SecretStr = Field(..., description="OpenAI API key (from .env)")
    pinecone_api_key: SecretStr = Field(
        ..., description="Pinecone API key (from .env)"
    )

    @field_validator("openai_api_key", "pinecone_api_key", mode="before")
    @classmethod
    def _ensure_secret(
        cls, value: SecretStr | str | None, info: ValidationInfo
    ) -> SecretStr:
        if value is None:
            raise ValueError(f"{info.field_name} must be provided")

        if isinstance(value, SecretStr):
            secret_value = value.get_secret_value()
        else:
            secret_value = str(value)

        if not secret_value.strip():
            raise ValueError(f"{info.field_name} must not be empty")

        return value if isinstance(value, SecretStr) else SecretStr(secret_value)

    def __init__(self, **data: Any):
        """Initialize settings with auto-loaded configs from all YAML files."""
        config = load_all_configs()

        super().__init__(**data)
        self._apply_yaml_defaults(config)

    def _apply_yaml_defaults(self, config: dict[str, Any]) -> None:
        """Apply YAML-sourced defaults without overriding env-provided values."""

        fields_from_env = set(self.model_fields_set)

        def _assign(field_name: str, value: Any) -> None:
            if value is None:
                return
            if field_name in fields_from_env:
                return

            object.__setattr__(self, field_name, value)
            self.model_fields_set.add(field_name)

        search_config = config.get("search") or {}
        _assign("search_index_name", search_config.get("index_name"))
        _assign("search_namespace", search_config.get("namespace"))
        _assign("search_top_k", search_config.get("top_k"))
        record_types = search_config.get("record_types")
        if record_types is not None:
            _assign("search_record_types", [RecordType(value) for value in record_types])
        _assign("search_timeout_seconds", search_config.get("timeout_seconds"))
        _assign("search_char_budget", search_config.get("char_budget"))
        _assign("search_title_max_chars", search_config.get("title_max_chars"))
        _assign("search_part_max_chars", search_config.get("part_max_chars"))
        _assign(
            "search_treat_blank_cost_as_free",
            search_config.get("treat_blank_cost_as_free"),
        )
        _assign("search_cheap_cost_max_usd", search_config.get("cheap_cost_max_usd"))
        thresholds = search_config.get("quality_thresholds")
        if thresholds is not None:
            merged_thresholds = dict(self.search_quality_thresholds)
            merged_thresholds.update(
                {QueryMode(mode): float(value) for mode, value in thresholds.items()}
            )
            _assign("search_quality_thresholds", merged_thresholds)

        llm_config = config.get("llm") or {}
        _assign("llm_model", llm_config.get("model"))
        _assign("llm_embedding_model", llm_config.get("embedding_model"))
        _assign("llm_timeout_seconds", llm_config.get("timeout_seconds"))
        _assign("intent_timeout_seconds", llm_config.get("intent_timeout_seconds"))
        _assign("llm_date_prompt_file", llm_config.get("date_prompt_file"))
        _assign("llm_intent_prompt_file", llm_config.get("intent_prompt_file"))

        processing_config = config.get("processing") or {}
        _assign("tz_default", processing_config.get("tz_default"))

        transport_config = config.get("transport") or {}
        _assign("public_app_url", transport_config.get("public_app_url"))
        _assign("default_tenant", transport_config.get("default_tenant"))

        logging_config = config.get("logging") or {}
        _assign("log_level", logging_config.get("level"))
        _assign("log_json", logging_config.get("json"))

    # Search pipeline
    search_index_name: str = Field(
        default="campus-events", description="Pinecone index holding events"
    )
    search_namespace: str = Field(
        default="", description="Pinecone namespace (empty = default namespace)"
    )
    search_top_k: int = Field(
        default=20, ge=1, le=100, description="Nearest neighbors to over-fetch"
    )
    search_record_types: list[RecordType] = Field(
        default_factory=lambda: [RecordType.EVENT, RecordType.ORGANIZATION],
        description="Record types eligible for search results",
    )
    search_timeout_seconds: float = Field(
        default=SEARCH_TIMEOUT_SECONDS_DEFAULT,
        gt=0,
        description="Outer deadline for one search request",
    )
    search_char_budget: int = Field(
        default=300, ge=80, description="Character budget for pure-date replies"
    )
    search_title_max_chars: int = Field(
        default=25, ge=8, description="Title cap in reply lines"
    )
    search_part_max_chars: int = Field(
        default=600, ge=160, description="Longest single transport message"
    )
    search_treat_blank_cost_as_free: bool = Field(
        default=True,
        description="Count an empty cost field as free for free-intent queries",
    )
    search_cheap_cost_max_usd: float = Field(
        default=10.0, ge=0, description="Highest dollar amount considered cheap"
    )
    search_quality_thresholds: dict[QueryMode, float] = Field(
        default_factory=lambda: dict(QUALITY_THRESHOLDS),
        description="Minimum enhanced score per query mode",
    )

    # LLM configuration
    llm_model: str = Field(
        default="gpt-4o-mini", description="Chat model for date fallback and intent"
    )
    llm_embedding_model: str = Field(
        default="text-embedding-3-small", description="Embedding model"
    )
    llm_timeout_seconds: float = Field(
        default=LLM_TIMEOUT_SECONDS_DEFAULT,
        gt=0,
        description="Timeout for the AI date fallback call",
    )
    intent_timeout_seconds: float = Field(
        default=INTENT_TIMEOUT_SECONDS_DEFAULT,
        gt=0,
        description="Timeout for inbound intent classification",
    )
    llm_date_prompt_file: str = Field(
        default="config/prompts/date_fallback.yaml",
        description="Prompt for the AI date fallback",
    )
    llm_intent_prompt_file: str = Field(
        default="config/prompts/intent.yaml",
        description="Prompt for intent classification",
    )

    # Processing configuration
    tz_default: str = Field(
        default="America/New_York", description="Campus timezone for date parsing"
    )

    # Transport
    public_app_url: str = Field(
        default="https://usethemove.com", description="Base URL for poster links"
    )
    default_tenant: str = Field(
        default="UNC-Chapel Hill", description="Tenant used when none is supplied"
    )

    # Observability
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Emit JSON logs")

    @field_validator("search_record_types")
    @classmethod
    def _non_empty_record_types(cls, value: list[RecordType]) -> list[RecordType]:
        if not value:
            raise ValueError("search_record_types must not be empty")
        return value


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance.

    Only entry points call this; components receive values via constructors.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()  # type: ignore[call-arg]
    return _settings
