"""
Configuration utilities for loading secrets and settings.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_GENIUS_API_URL = "https://api.genius.com"


def load_secrets() -> Dict[str, Any]:
    """Load the secrets document from environment or file.

    Supports both JSON and YAML formats. When loading from environment variable,
    tries to parse as JSON first, then falls back to YAML. When loading from file,
    the format is determined by the file extension (.json, .yml, .yaml).
    """
    # Try to load from environment variable (JSON or YAML)
    secrets_str = os.environ.get("SECRETS_CONFIG")
    if secrets_str:
        try:
            return _as_mapping(json.loads(secrets_str))
        except json.JSONDecodeError:
            try:
                return _as_mapping(yaml.safe_load(secrets_str))
            except yaml.YAMLError as e:
                logger.error("Failed to parse SECRETS_CONFIG as JSON or YAML: %s", e)

    secrets_path = os.environ.get("SECRETS_PATH", "/workspace/secrets.json")
    try:
        with open(secrets_path, "r", encoding="utf-8") as f:
            if secrets_path.endswith((".yml", ".yaml")):
                return _as_mapping(yaml.safe_load(f))
            else:
                return _as_mapping(json.load(f))
    except FileNotFoundError:
        logger.warning("Secrets file not found: %s", secrets_path)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        logger.error("Failed to parse secrets file: %s", e)

    return {}


def _as_mapping(value: Any) -> Dict[str, Any]:
    if isinstance(value, dict):
        return value
    logger.error("Secrets document is not a mapping - ignoring it")
    return {}


def get_genius_token() -> str:
    """Return the Genius API bearer token.

    `GENIUS_TOKEN` takes precedence over the `genius_token` secret.

    Raises:
        ValueError: If no token is configured
    """
    token = os.environ.get("GENIUS_TOKEN") or load_secrets().get("genius_token")
    if not token:
        raise ValueError("genius_token is not configured")
    return token


def get_genius_api_url() -> str:
    return os.environ.get("GENIUS_API_URL", DEFAULT_GENIUS_API_URL).rstrip("/")


def get_project_id() -> Optional[str]:
    """Project the functions are deployed in, as set by the runtime."""
    return os.environ.get("GCLOUD_PROJECT") or os.environ.get("GOOGLE_CLOUD_PROJECT")


def is_dry_run() -> bool:
    return os.environ.get("DRY_RUN", "false").lower() == "true"
