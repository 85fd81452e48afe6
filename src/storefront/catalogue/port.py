"""Catalogue port (abstract interface).

The cart only needs a product's price, name, image and selectable variants
at the moment a shopper adds it. Product CRUD and catalogue browsing live
elsewhere; adapters implement this contract for whatever backs them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CatalogueProduct:
    """A product as the catalogue reports it."""

    id: str
    name: str
    price: float
    sale_price: float | None = None
    image: str | None = None
    variants: tuple[str, ...] = field(default_factory=tuple)
    in_stock: bool = True

    @property
    def unit_price(self) -> float:
        """Price a new cart line is charged at: the sale price when there is one."""
        return self.sale_price if self.sale_price else self.price

    @property
    def requires_variant(self) -> bool:
        return len(self.variants) > 0


class Catalogue(ABC):
    """Abstract catalogue interface."""

    @abstractmethod
    def get_product(self, product_id: str) -> CatalogueProduct | None:
        """Return the product with the given id, or None if it is unknown."""
        ...
