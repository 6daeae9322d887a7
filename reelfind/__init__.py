"""reelfind: search and facet composition for production assets."""

__version__ = "0.1.0"
