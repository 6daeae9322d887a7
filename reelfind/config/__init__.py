"""Configuration management module.

The reelfind configuration lives in ~/.config/reelfind/config.toml and
is read once per CLI invocation.

Usage:
    from reelfind.config import load_config, get_defaults, get_user

    config = load_config()
    defaults = get_defaults(config)
"""

import os
import tomllib

import tomli_w

from .paths import CONFIG_FILE, ensure_config_dir
from .schema import BackendConfig, DefaultsConfig, ReelfindConfig, UserConfig
from .template import CONFIG_TEMPLATE

__all__ = [
    "load_config",
    "save_config",
    "init_config",
    "get_defaults",
    "get_backend",
    "get_user",
    "set_config_value",
    "CONFIG_FILE",
    "DEFAULTS",
    "API_KEY_ENV_VAR",
    "KNOWN_KEYS",
]

API_KEY_ENV_VAR = "REELFIND_API_KEY"

# Values used when config.toml omits a [defaults] key
DEFAULTS: DefaultsConfig = {
    "debounce_ms": 300,
    "min_query_length": 2,
    "search_limit": 10,
    "poll_interval": 10.0,
}

# section -> key -> value type, for `config set`
KNOWN_KEYS: dict[str, dict[str, type]] = {
    "defaults": {
        "debounce_ms": int,
        "min_query_length": int,
        "search_limit": int,
        "poll_interval": float,
    },
    "backend": {"endpoint": str, "api_key": str, "timeout": float},
    "user": {"id": str, "email": str, "organization_id": str},
    "logging": {"level": str, "file": str},
}

_cached_config: ReelfindConfig | None = None


def load_config(*, force_reload: bool = False) -> ReelfindConfig:
    """Load configuration from disk, cached after the first read.

    A missing config file loads as an empty dict.

    Args:
        force_reload: Re-read the file even if a cached copy exists.
    """
    global _cached_config

    if force_reload or _cached_config is None:
        _cached_config = _read_config()
    return _cached_config


def save_config(config: ReelfindConfig) -> None:
    """Write configuration to disk and refresh the cache.

    The file is readable by the owner only, since it may hold an API key.
    """
    global _cached_config

    ensure_config_dir()
    CONFIG_FILE.write_text(tomli_w.dumps(config))
    CONFIG_FILE.chmod(0o600)
    _cached_config = config


def init_config(*, overwrite: bool = False) -> bool:
    """Write the config template.

    Returns:
        True if the file was written, False if one already existed and
        ``overwrite`` was not set.
    """
    ensure_config_dir()

    if CONFIG_FILE.exists() and not overwrite:
        return False

    CONFIG_FILE.write_text(CONFIG_TEMPLATE)
    CONFIG_FILE.chmod(0o600)
    return True


def get_defaults(config: ReelfindConfig) -> DefaultsConfig:
    """Get [defaults] merged over the built-in values."""
    merged: DefaultsConfig = dict(DEFAULTS)  # type: ignore[assignment]
    merged.update(config.get("defaults", {}))
    return merged


def get_backend(config: ReelfindConfig) -> BackendConfig:
    """Get [backend] settings with the API key resolved.

    The REELFIND_API_KEY environment variable takes precedence over
    an api_key stored in the config file.
    """
    backend: BackendConfig = dict(config.get("backend", {}))  # type: ignore[assignment]
    env_key = os.environ.get(API_KEY_ENV_VAR)
    if env_key:
        backend["api_key"] = env_key
    return backend


def get_user(config: ReelfindConfig) -> UserConfig | None:
    """Get the [user] identity, or None if no user id is configured."""
    user = config.get("user", {})
    if not user.get("id"):
        return None
    return user


def set_config_value(key: str, value: str) -> None:
    """Set one ``section.key`` value and save.

    Examples:
        set_config_value("defaults.search_limit", "25")
        set_config_value("backend.endpoint", "https://example.com/graphql")

    Raises:
        ValueError: If the key is unknown or the value has the wrong type.
    """
    section, _, name = key.partition(".")
    expected = KNOWN_KEYS.get(section, {}).get(name)
    if expected is None:
        known = ", ".join(
            f"{s}.{k}" for s, keys in KNOWN_KEYS.items() for k in keys
        )
        raise ValueError(f"Unknown config key {key!r} (known keys: {known})")

    config = load_config(force_reload=True)
    config.setdefault(section, {})[name] = expected(value)  # type: ignore[misc]
    save_config(config)


def _read_config() -> ReelfindConfig:
    if not CONFIG_FILE.exists():
        return {}
    with open(CONFIG_FILE, "rb") as f:
        return tomllib.load(f)
