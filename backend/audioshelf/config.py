"""
AudioShelf Configuration Module

This module implements a hierarchical configuration system:
1. Secrets are retrieved from environment variables (NOT from config.yaml)
2. Other settings are loaded from config.yaml file

Environment Variables (Optional at import time):
    - ADMIN_PASSWORD: Shared secret for the admin area
    - S3_ACCESS_KEY_ID: Object storage access key
    - S3_SECRET_ACCESS_KEY: Object storage secret key
    - AUDIOSHELF_CONFIG: Alternative path to the YAML configuration file

Usage:
    export ADMIN_PASSWORD="change-me"
    export S3_ACCESS_KEY_ID="..."
    export S3_SECRET_ACCESS_KEY="..."
"""
import os
from pathlib import Path
from typing import Optional

import yaml


# ==================== Path Configuration ====================
# Get the project root directory (backend/)
BASE_DIR = Path(__file__).resolve().parent.parent
CONFIG_PATH = Path(os.environ.get("AUDIOSHELF_CONFIG") or BASE_DIR / "config.yaml")


# ==================== Load YAML Configuration ====================
def _load_yaml_config():
    """Load configuration from config.yaml file."""
    if not CONFIG_PATH.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {CONFIG_PATH}\n"
            "Please create config.yaml in the backend directory "
            "or point AUDIOSHELF_CONFIG at one."
        )

    with open(CONFIG_PATH, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


# Load config at module import time
_config = _load_yaml_config()


def get_config(key: str, default=None):
    """
    Get configuration value by dot-notation key.

    Args:
        key: Dot-separated key path (e.g., 'storage.bucket')
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    keys = key.split(".")
    value = _config

    for k in keys:
        if isinstance(value, dict):
            value = value.get(k)
        else:
            return default

    return value if value is not None else default


# ==================== Secrets from Environment Variables ====================
def _get_env_key(key: str, required: bool = False) -> Optional[str]:
    """
    Get a secret from an environment variable.

    Args:
        key: Environment variable name
        required: If True, raises error when key is not set

    Returns:
        Secret value or None

    Raises:
        ValueError: If required key is not set
    """
    value = os.environ.get(key)
    if required and not value:
        raise ValueError(
            f"Required environment variable '{key}' is not set.\n"
            f"Please export it before starting the service:\n"
            f"  export {key}=\"your_value_here\""
        )
    return value


# ==================== Public Configuration Constants ====================

# Application Settings
APP_NAME = get_config("app.name", "AudioShelf")
APP_VERSION = get_config("app.version", "1.0.0")
DEBUG = get_config("app.debug", True)

# Database Settings
DATABASE_PATH = str(BASE_DIR / get_config("database.path", "./data/audioshelf.db"))
DATABASE_ECHO = get_config("database.echo", False)

# ==================== Object Storage Configuration ====================
S3_REGION = get_config("storage.region", "us-east-1")
S3_ENDPOINT = get_config("storage.endpoint", "") or None
S3_BUCKET = get_config("storage.bucket", "audioshelf")
S3_ACCESS_KEY_ID = _get_env_key("S3_ACCESS_KEY_ID")
S3_SECRET_ACCESS_KEY = _get_env_key("S3_SECRET_ACCESS_KEY")

# Presigned URL lifetimes (seconds)
PLAY_URL_TTL = int(get_config("storage.play_url_ttl", 300))
COVER_URL_TTL = int(get_config("storage.cover_url_ttl", 3600))
UPLOAD_URL_TTL = int(get_config("storage.upload_url_ttl", 3600))

# ==================== Admin Gate ====================
ADMIN_PASSWORD = _get_env_key("ADMIN_PASSWORD")
ADMIN_COOKIE_NAME = get_config("admin.cookie_name", "admin_auth")
ADMIN_COOKIE_MAX_AGE = int(get_config("admin.cookie_max_age", 60 * 60 * 24))

# ==================== Logging Configuration ====================
LOG_LEVEL = get_config("logging.level", "INFO")
_log_file = get_config("logging.file", "./logs/app.log")
LOG_FILE = str(BASE_DIR / _log_file) if _log_file else ""
LOG_ROTATION = get_config("logging.rotation", "10 MB")
LOG_RETENTION = get_config("logging.retention", "7 days")

# ==================== API Server Configuration ====================
API_HOST = get_config("api.host", "127.0.0.1")
API_PORT = get_config("api.port", 8000)
API_PREFIX = get_config("api.prefix", "/api").rstrip("/")
CORS_ORIGINS = get_config("api.cors_origins", ["http://localhost:3000"])

# ==================== Player Client Configuration ====================
PLAYER_API_BASE_URL = get_config("player.api_base_url", "http://127.0.0.1:8000/api")
PLAYER_SESSION_FILE = str(Path(get_config("player.session_file", "~/.audioshelf/session-id")).expanduser())
PLAYER_SAVE_INTERVAL = float(get_config("player.save_interval", 5))
PLAYER_SKIP_BACK_THRESHOLD = float(get_config("player.skip_back_threshold", 3))
PLAYER_SEEK_STEP = float(get_config("player.seek_step", 10))
PLAYER_REQUEST_TIMEOUT = float(get_config("player.request_timeout", 15))


# ==================== Utility Functions ====================
def reload_config():
    """Reload configuration from config.yaml file."""
    global _config
    _config = _load_yaml_config()


def print_config_summary():
    """Print a summary of current configuration (without exposing secrets)."""
    print(f"\n{'='*60}")
    print(f"Application: {APP_NAME} v{APP_VERSION}")
    print(f"Debug Mode: {DEBUG}")
    print(f"{'='*60}")
    print(f"\n[Database]")
    print(f"  Path: {DATABASE_PATH}")
    print(f"  Echo Queries: {DATABASE_ECHO}")

    print(f"\n[Object Storage]")
    print(f"  Bucket: {S3_BUCKET}")
    print(f"  Region: {S3_REGION}")
    print(f"  Endpoint: {S3_ENDPOINT or 'AWS default'}")
    print(f"  Access Key: {'*** Set ***' if S3_ACCESS_KEY_ID else 'NOT SET'}")
    print(f"  Play URL TTL: {PLAY_URL_TTL}s")

    print(f"\n[Admin]")
    print(f"  Password: {'*** Set ***' if ADMIN_PASSWORD else 'NOT SET'}")

    print(f"\n[API Server]")
    print(f"  Host: {API_HOST}")
    print(f"  Port: {API_PORT}")
    print(f"  Prefix: {API_PREFIX}")

    print(f"\n[Player]")
    print(f"  API: {PLAYER_API_BASE_URL}")
    print(f"  Save Interval: {PLAYER_SAVE_INTERVAL}s")
    print(f"{'='*60}\n")


if __name__ == "__main__":
    # Test configuration loading
    print_config_summary()
