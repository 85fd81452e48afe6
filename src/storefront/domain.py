"""Storefront bounded context — shopping cart, checkout and order lifecycle.

Handles cart aggregation for a shopper's session, the checkout wizard that
turns a cart into an order, time-derived order status and secure order
lookup.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

storefront = Domain(name="storefront")
