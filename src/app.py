"""Makhana Store FastAPI application.

Multi-domain web server that processes commands synchronously via HTTP.
Each request is wrapped in the correct domain context based on URL prefix.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalogue.domain import catalogue
from catalogue.product.seed import seed_products
from identity.domain import identity
from ordering.domain import ordering
from shared.config import get_settings
from shared.database import init_domains, setup_db
from shared.errors import HANDLED_ERRORS, describe
from shared.logging import add_context, clear_context, configure_logging, get_logger

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Domains are initialized at module level so uvicorn workers share them.
init_domains()

logger = get_logger(__name__)

# ---------------------------------------------------------------------------
# Route-to-domain mapping
# ---------------------------------------------------------------------------
_ROUTE_DOMAIN_MAP = {
    "/customers": identity,
    "/products": catalogue,
    "/cart": ordering,
    "/orders": ordering,
    "/coupons": ordering,
}


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    for prefix, domain in _ROUTE_DOMAIN_MAP.items():
        if path.startswith(prefix):
            return domain
    return None


# ---------------------------------------------------------------------------
# Startup
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    configure_logging(settings)

    for domain in (identity, catalogue, ordering):
        setup_db(domain)
    if settings.seed_catalogue:
        seed_products()

    logger.info("Application started", environment=settings.environment)
    yield
    logger.info("Application shutting down")


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Makhana Store API",
    description="Pinaka Makhana store: catalogue, cart, orders and coupons",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().get_allowed_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the correct Protean domain context for each request."""
    domain = _resolve_domain(request.url.path)
    if domain is not None:
        with domain.domain_context():
            response = await call_next(request)
        return response
    # No domain match: pass through (health check, docs, etc.)
    return await call_next(request)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Bind a request id to every log line emitted while serving the request."""
    clear_context()
    add_context(request_id=request.headers.get("X-Request-ID") or str(uuid4()), path=request.url.path)
    try:
        return await call_next(request)
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------
async def domain_error_handler(request: Request, exc: Exception):
    status, body = describe(exc)
    if status >= 500:
        logger.error("Request failed", error=body["error"], messages=body["messages"], path=request.url.path)
    return JSONResponse(status_code=status, content=body)


for _error_class in HANDLED_ERRORS:
    app.add_exception_handler(_error_class, domain_error_handler)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    messages: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"] if part != "body") or "_entity"
        messages.setdefault(field, []).append(error["msg"])
    return JSONResponse(status_code=422, content={"error": "validation_error", "messages": messages})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", path=request.url.path)
    status, body = describe(exc)
    return JSONResponse(status_code=status, content=body)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from catalogue.api import product_router  # noqa: E402
from identity.api import router as identity_router  # noqa: E402
from ordering.api import cart_router, coupon_router, order_router  # noqa: E402

app.include_router(identity_router)
app.include_router(product_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(coupon_router)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    settings = get_settings()
    return JSONResponse(
        content={
            "status": "ok",
            "app": settings.app_name,
            "environment": settings.environment,
            "domains": {domain.name: {"name": domain.name} for domain in (identity, catalogue, ordering)},
        }
    )
