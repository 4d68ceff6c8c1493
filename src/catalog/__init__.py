"""Catalog module — movies, favourites, audit trail."""

from src.catalog.service import catalog_service

__all__ = ["catalog_service"]
