"""Gourmet Ratings FastAPI application.

Web server that processes commands synchronously via HTTP. Every request is
wrapped in the ratings domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → in-memory providers
#   - "production" → PostgreSQL and Redis
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers
from ratings.domain import ratings  # noqa: E402

ratings.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Gourmet Ratings API",
    description="Restaurant reviews, reviewer trust and trust-weighted store scores",
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
    """Push the ratings domain context for each request."""
    with ratings.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers and error handlers
# ---------------------------------------------------------------------------
from ratings.api import (  # noqa: E402
    admin_router,
    register_error_handlers,
    review_router,
    reviewer_router,
    store_router,
)

app.include_router(reviewer_router)
app.include_router(store_router)
app.include_router(review_router)
app.include_router(admin_router)

register_exception_handlers(app)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": ratings.name})
