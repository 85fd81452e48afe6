"""Catalogue collaborator factory.

Provides get_catalogue() / set_catalogue() to swap implementations:
- InMemoryCatalogue for development and testing
- any adapter implementing the Catalogue port in production
"""

from storefront.catalogue.memory_adapter import InMemoryCatalogue
from storefront.catalogue.port import Catalogue, CatalogueProduct

__all__ = ["Catalogue", "CatalogueProduct", "InMemoryCatalogue", "get_catalogue", "reset_catalogue", "set_catalogue"]

_current_catalogue: Catalogue | None = None


def get_catalogue() -> Catalogue:
    """Return the current catalogue. Defaults to an empty InMemoryCatalogue."""
    global _current_catalogue
    if _current_catalogue is None:
        _current_catalogue = InMemoryCatalogue()
    return _current_catalogue


def set_catalogue(catalogue: Catalogue) -> None:
    """Override the active catalogue (useful for tests)."""
    global _current_catalogue
    _current_catalogue = catalogue


def reset_catalogue() -> None:
    """Reset to the default catalogue."""
    global _current_catalogue
    _current_catalogue = None
