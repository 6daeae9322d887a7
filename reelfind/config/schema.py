"""Configuration schema definitions.

Uses TypedDict for type safety without runtime overhead.
These types match the structure of config.toml.
"""

from typing import TypedDict


class DefaultsConfig(TypedDict, total=False):
    """Default settings for search dispatch and polling.

    Attributes:
        debounce_ms: Quiet period after the last keystroke before searching.
        min_query_length: Shorter queries are never dispatched.
        search_limit: Maximum number of results requested from the backend.
        poll_interval: Seconds between saved-search refreshes in watch mode.
    """

    debounce_ms: int
    min_query_length: int
    search_limit: int
    poll_interval: float


class BackendConfig(TypedDict, total=False):
    """Search backend connection settings.

    Attributes:
        endpoint: GraphQL endpoint URL.
        api_key: API key (prefer the REELFIND_API_KEY env var).
        timeout: Request timeout in seconds.
    """

    endpoint: str
    api_key: str
    timeout: float


class UserConfig(TypedDict, total=False):
    """Identity used as the owner of saved searches.

    Attributes:
        id: User identifier (createdBy).
        email: User email (createdByEmail).
        organization_id: Organization the saved searches belong to.
    """

    id: str
    email: str
    organization_id: str


class LoggingConfig(TypedDict, total=False):
    """Logging settings.

    Attributes:
        level: Log level name (e.g., "WARNING", "DEBUG").
        file: Optional log file path; logs go to stderr when unset.
    """

    level: str
    file: str


class ReelfindConfig(TypedDict, total=False):
    """Root configuration structure."""

    defaults: DefaultsConfig
    backend: BackendConfig
    user: UserConfig
    logging: LoggingConfig
