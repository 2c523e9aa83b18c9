"""Site Reviews bounded context — community ratings and comments per site entity.

Handles review submission (honeypot, validation, throttling), moderation
(Pending → Approved | Rejected) and rating aggregation over approved
reviews. Every review belongs to one ``(site_slug, entity_type, entity_slug)``
scope and no public read ever crosses scopes.
"""

import structlog
from protean.domain import Domain

site_reviews = Domain(name="site_reviews")

logger = structlog.get_logger(__name__)
