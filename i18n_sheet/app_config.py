"""Application configuration for the i18n sheet converter."""
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import jsonschema
import yaml
from dotenv import load_dotenv

logger = logging.getLogger("i18n_sheet.config")

CONFIG_ENV_VAR = 'I18N_SHEET_CONFIG_FILE'
DEFAULT_CONFIG_FILE = 'config.yaml'

DEFAULT_SHEET_NAME = 'Translations'
DEFAULT_SOURCE_PATH = './public/assets/i18n'
DEFAULT_TARGET_FILE = './translations.xlsx'
DEFAULT_TARGET_PATH = './public/assets/i18n'
DEFAULT_MODEL_NAME = 'gpt-4o-mini'

_NON_EMPTY_STRING = {"type": "string", "minLength": 1}

CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "languages": {
            "type": "object",
            "patternProperties": {r"^[\w.-]+$": _NON_EMPTY_STRING},
            "additionalProperties": False,
        },
        "defaults": {
            "type": "object",
            "properties": {
                "source_path": _NON_EMPTY_STRING,
                "target_file": _NON_EMPTY_STRING,
                "target_path": _NON_EMPTY_STRING,
                "sheet_name": _NON_EMPTY_STRING,
            },
            "additionalProperties": False,
        },
        "fail_on_duplicates": {"type": "boolean"},
        "report": {"type": "boolean"},
        "translation": {
            "type": "object",
            "properties": {
                "model_name": _NON_EMPTY_STRING,
                "source_language": _NON_EMPTY_STRING,
                "max_concurrent_api_calls": {"type": "integer", "minimum": 1},
                "requests_per_minute": {"type": "integer", "minimum": 1},
                "max_batch_tokens": {"type": "integer", "minimum": 1},
            },
            "additionalProperties": False,
        },
        "logging": {
            "type": "object",
            "properties": {
                "log_level": {"type": "string"},
                "log_file_path": {"type": ["string", "null"]},
                "log_to_console": {"type": "boolean"},
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or is invalid."""


@dataclass
class AppConfig:
    """Application configuration dataclass."""
    # Language configuration
    languages: Dict[str, str] = field(default_factory=dict)

    # Default paths
    source_path: str = DEFAULT_SOURCE_PATH
    target_file: str = DEFAULT_TARGET_FILE
    target_path: str = DEFAULT_TARGET_PATH
    sheet_name: str = DEFAULT_SHEET_NAME

    # Conversion behaviour
    fail_on_duplicates: bool = False
    report: bool = True

    # Translation settings
    model_name: str = DEFAULT_MODEL_NAME
    source_language: str = 'en'
    max_concurrent_api_calls: int = 2
    requests_per_minute: int = 60
    max_batch_tokens: int = 2000
    openai_api_key: Optional[str] = None

    # Logging
    log_level: str = 'INFO'
    log_file_path: Optional[str] = None
    log_to_console: bool = True


def validate_config_object(config: Any) -> Dict[str, Any]:
    """
    Validate a parsed configuration object against ``CONFIG_SCHEMA``.

    Raises:
        ConfigError: Listing every schema violation found.
    """
    validator = jsonschema.Draft7Validator(CONFIG_SCHEMA)
    errors = sorted(validator.iter_errors(config), key=lambda e: list(e.absolute_path))
    if errors:
        details = "\n".join(
            f"- {error.message} at {'.'.join(str(p) for p in error.absolute_path) or '<root>'}"
            for error in errors
        )
        raise ConfigError(f"Invalid configuration:\n{details}")
    return config


def _resolve_config_path(config_path: Optional[str]) -> tuple[str, bool]:
    """Return the config file path and whether it was explicitly requested."""
    if config_path:
        return config_path, True
    from_env = os.environ.get(CONFIG_ENV_VAR)
    if from_env:
        return from_env, True
    return os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE), False


def _ensure_within_cwd(config_file: str) -> str:
    resolved = os.path.abspath(config_file)
    try:
        rel = os.path.relpath(resolved, os.getcwd())
    except ValueError:
        rel = resolved
    if rel.split(os.sep, 1)[0] == os.pardir or os.path.isabs(rel):
        raise ConfigError("Config file path must be within the current working directory")
    return resolved


def _load_yaml_config(config_file: str, explicit: bool) -> Dict[str, Any]:
    """Load and validate the YAML configuration file."""
    if explicit:
        config_file = _ensure_within_cwd(config_file)

    if not os.path.exists(config_file):
        if explicit:
            raise ConfigError(f"Configuration file '{config_file}' not found.")
        logger.debug("No configuration file at '%s'. Using default configuration.", config_file)
        return {}

    try:
        with open(config_file, 'r', encoding='utf-8') as config_file_stream:
            loaded_config = yaml.safe_load(config_file_stream)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in configuration file '{config_file}': {e}")
    except OSError as e:
        raise ConfigError(f"Could not read configuration file '{config_file}': {e}")

    if loaded_config is None:
        logger.warning("Configuration file '%s' is empty. Using default configuration.", config_file)
        return {}
    if not isinstance(loaded_config, dict):
        raise ConfigError(f"Configuration file '{config_file}' must contain a YAML dictionary.")

    logger.debug("Loaded configuration from: %s", config_file)
    return validate_config_object(loaded_config)


def _load_dotenv_file() -> None:
    dotenv_path = os.path.join(os.getcwd(), '.env')
    if os.path.exists(dotenv_path):
        load_dotenv(dotenv_path)


def build_app_config(config: Dict[str, Any]) -> AppConfig:
    """Build an AppConfig from a validated configuration dictionary."""
    defaults = config.get('defaults', {})
    translation = config.get('translation', {})
    log_config = config.get('logging', {})

    return AppConfig(
        languages=dict(config.get('languages', {})),
        source_path=defaults.get('source_path', DEFAULT_SOURCE_PATH),
        target_file=defaults.get('target_file', DEFAULT_TARGET_FILE),
        target_path=defaults.get('target_path', DEFAULT_TARGET_PATH),
        sheet_name=defaults.get('sheet_name', DEFAULT_SHEET_NAME),
        fail_on_duplicates=config.get('fail_on_duplicates', False),
        report=config.get('report', True),
        model_name=os.environ.get('I18N_SHEET_MODEL_NAME', translation.get('model_name', DEFAULT_MODEL_NAME)),
        source_language=translation.get('source_language', 'en'),
        max_concurrent_api_calls=translation.get('max_concurrent_api_calls', 2),
        requests_per_minute=translation.get('requests_per_minute', 60),
        max_batch_tokens=translation.get('max_batch_tokens', 2000),
        openai_api_key=os.environ.get('OPENAI_API_KEY'),
        log_level=log_config.get('log_level', 'INFO').upper(),
        log_file_path=log_config.get('log_file_path'),
        log_to_console=log_config.get('log_to_console', True),
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load application configuration from a YAML file and environment variables.

    Args:
        config_path: Explicit config file. Falls back to ``$I18N_SHEET_CONFIG_FILE``
            and then to ``config.yaml`` in the working directory.

    Returns:
        AppConfig: The loaded application configuration.

    Raises:
        ConfigError: If an explicitly requested file is missing, unreadable or invalid.
    """
    _load_dotenv_file()
    config_file, explicit = _resolve_config_path(config_path)
    config = _load_yaml_config(config_file, explicit)
    return build_app_config(config)
