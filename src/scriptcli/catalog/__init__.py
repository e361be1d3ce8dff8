"""Remote application catalog."""

from scriptcli.catalog.client import CatalogClient

__all__ = ["CatalogClient"]
