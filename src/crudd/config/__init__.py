"""Configuration management for crudd.

Loads and validates YAML-based configuration with Pydantic models.
Environment variables prefixed with ``CRUDD_`` override file values.
"""

from crudd.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
