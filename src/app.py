"""Site Reviews FastAPI application.

Serves the public review routes and the moderator routes. Commands are
processed synchronously inside each request.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → SQLite test database, fixed moderator token
#   - "production" → PostgreSQL from DATABASE_URL, proxy-aware throttling, JSON logs
from site_reviews.domain import site_reviews

site_reviews.init()

from site_reviews.api.service import build_app  # noqa: E402
from site_reviews.config import settings  # noqa: E402
from site_reviews.utils.logging import configure_logging  # noqa: E402

_logging = settings(site_reviews)["logging"]
configure_logging(level=_logging["level"], json=_logging["json"])

app = build_app(site_reviews)
