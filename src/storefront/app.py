"""Storefront FastAPI application.

Every request runs inside the storefront domain context, with a request id
bound into the structured log context for its duration.

Usage:
    uvicorn storefront.app:create_app --factory --host 0.0.0.0 --port 8000
"""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.domain import storefront
from storefront.utils.logging import add_context, clear_context, get_logger

logger = get_logger(__name__)


def create_app(init_domain: bool = True) -> FastAPI:
    # PROTEAN_ENV selects the domain.toml overlay applied by init()
    if init_domain:
        storefront.init()

    app = FastAPI(
        title="Storefront API",
        description="Cart, checkout and order lookup",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the storefront domain context and request log context."""
        add_context(request_id=request.headers.get("x-request-id") or uuid4().hex, path=request.url.path)
        try:
            with storefront.domain_context():
                response = await call_next(request)
        finally:
            clear_context()
        return response

    from storefront.api import cart_router, order_router

    app.include_router(cart_router)
    app.include_router(order_router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": storefront.name})

    logger.info("Storefront API ready")
    return app
