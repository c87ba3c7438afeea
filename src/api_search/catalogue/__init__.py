"""Catalogue service client."""

from api_search.catalogue.client import fetch_self_description, load_endpoints

__all__ = ["fetch_self_description", "load_endpoints"]
