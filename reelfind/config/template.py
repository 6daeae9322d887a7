"""Default configuration template.

This template is written to ~/.config/reelfind/config.toml
when running `reelfind config init`.
"""

CONFIG_TEMPLATE = """\
# reelfind configuration

[defaults]
debounce_ms = 300
min_query_length = 2
search_limit = 10
poll_interval = 10

[backend]
# GraphQL endpoint exposing the universalSearch query.
# endpoint = "https://xxxxxxxx.appsync-api.us-east-1.amazonaws.com/graphql"
timeout = 10.0
# For the API key, use the REELFIND_API_KEY environment variable.

[user]
# Owner identity recorded on saved searches.
# id = "user-123"
# email = "you@example.com"
# organization_id = "org-456"

[logging]
level = "WARNING"
# file = "~/.local/state/reelfind/reelfind.log"
"""
