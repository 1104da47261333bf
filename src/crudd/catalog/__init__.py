"""The static catalog of diagnostic commands the dashboard can run."""

from crudd.catalog.commands import DEFAULT_COMMANDS, CatalogError, CommandCatalog

__all__ = ["DEFAULT_COMMANDS", "CatalogError", "CommandCatalog"]
