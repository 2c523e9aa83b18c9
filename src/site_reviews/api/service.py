"""Assemble the FastAPI application around an initialized domain."""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.domain import Domain

from site_reviews.api.errors import register_exception_handlers
from site_reviews.api.routes import moderation_router, review_router
from site_reviews.config import settings

_DOMAIN_PREFIXES = ("/reviews", "/moderation")


def build_app(domain: Domain) -> FastAPI:
    app = FastAPI(
        title="Site Reviews API",
        description="Moderated community reviews for site entities",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings(domain)["cors"]["allow_origins"],
        allow_methods=["GET", "POST", "PUT"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the Protean domain context for each review request."""
        if request.url.path.startswith(_DOMAIN_PREFIXES):
            with domain.domain_context():
                return await call_next(request)
        return await call_next(request)

    register_exception_handlers(app)

    app.include_router(review_router)
    app.include_router(moderation_router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domains": {"site_reviews": {"name": domain.name}}})

    return app
