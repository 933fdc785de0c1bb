"""Taxonomy FastAPI application.

Serves the category hierarchy to the storefront and admin collaborators.
Authentication and image uploads are handled upstream.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

import uuid

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the storage provider from taxonomy/domain.toml:
#   - unset / "test" → in-memory provider
#   - "sqlite"       → local sqlite file
#   - "production"   → postgresql at DATABASE_URL
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from taxonomy.config import get_settings
from taxonomy.domain import taxonomy  # noqa: E402
from taxonomy.utils.db import setup_db
from taxonomy.utils.logging import add_context, clear_context

taxonomy.init()
setup_db(taxonomy)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Taxonomy API",
    description="Catalogue category hierarchy: slugs, breadcrumbs and tree maintenance",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the taxonomy domain context and bind a request id to every log line."""
    clear_context()
    add_context(request_id=request.headers.get("x-request-id") or str(uuid.uuid4()), path=request.url.path)
    try:
        with taxonomy.domain_context():
            response = await call_next(request)
        return response
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from taxonomy.api import category_router, register_error_handlers  # noqa: E402

app.include_router(category_router)
register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "taxonomy": {"name": taxonomy.name},
            },
        }
    )
