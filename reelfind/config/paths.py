"""Path constants and directory utilities for reelfind config.

Follows the XDG Base Directory layout:
- Config: ~/.config/reelfind/
- Saved searches: ~/.config/reelfind/saved-searches.json
"""

from pathlib import Path


# XDG-compliant config directory
CONFIG_DIR = Path.home() / ".config" / "reelfind"
CONFIG_FILE = CONFIG_DIR / "config.toml"

# Local saved-search store (owner-only permissions)
SAVED_SEARCHES_FILE = CONFIG_DIR / "saved-searches.json"


def ensure_config_dir() -> Path:
    """Create config directory if it doesn't exist.

    Sets directory permissions to 700 since the saved-search store
    and the API key live here.

    Returns the config directory path.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    CONFIG_DIR.chmod(0o700)
    return CONFIG_DIR
