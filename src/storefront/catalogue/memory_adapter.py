"""In-memory catalogue for development and testing."""

from storefront.catalogue.port import Catalogue, CatalogueProduct


class InMemoryCatalogue(Catalogue):
    """Catalogue backed by a dict of products keyed by id."""

    def __init__(self, products: list[CatalogueProduct] | None = None) -> None:
        self._products: dict[str, CatalogueProduct] = {}
        for product in products or []:
            self.register(product)

    def register(self, product: CatalogueProduct) -> None:
        self._products[str(product.id)] = product

    def get_product(self, product_id: str) -> CatalogueProduct | None:
        return self._products.get(str(product_id))
