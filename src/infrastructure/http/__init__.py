"""
HTTP Infrastructure Module

Exports:
    - HttpCatalogImportClient: httpx client for the import backend
"""

from .catalog_import_client import HttpCatalogImportClient

__all__ = ["HttpCatalogImportClient"]
