"""Application settings of the Site Reviews domain.

Protean loads ``domain.toml`` and applies the ``PROTEAN_ENV`` overlay; the
settings this package owns live under its ``[custom]`` table. Keys missing
there fall back to ``DEFAULTS``, and moderator tokens can also be supplied
through ``SITE_REVIEWS_MODERATOR_TOKENS`` so secrets stay out of the file.
"""

import copy
import os

from site_reviews.domain import site_reviews

TOKENS_ENV_VAR = "SITE_REVIEWS_MODERATOR_TOKENS"

DEFAULTS = {
    "list_limit": 50,
    "rate_limit": {"limit": 5, "window_seconds": 60, "trust_proxy_headers": False},
    "moderation": {"tokens": {}},
    "client": {"timeout_seconds": 10.0},
    "cors": {"allow_origins": ["*"]},
    "logging": {"level": "INFO", "json": False},
}


def _fill_defaults(target: dict, defaults: dict) -> dict:
    for key, value in defaults.items():
        if key not in target:
            target[key] = copy.deepcopy(value)
        elif isinstance(value, dict) and isinstance(target[key], dict):
            _fill_defaults(target[key], value)
    return target


def parse_tokens(raw: str) -> dict[str, str]:
    """Parse ``token:moderator,token:moderator`` into a token map."""
    tokens = {}
    for pair in raw.split(","):
        token, _, moderator_id = pair.strip().partition(":")
        if token and moderator_id:
            tokens[token] = moderator_id
    return tokens


def settings(domain=site_reviews) -> dict:
    """Return the domain's ``custom`` settings with defaults filled in place.

    The same dict is returned on every call, so changes made to it are seen
    by every reader.
    """
    custom = domain.config.setdefault("custom", {})
    _fill_defaults(custom, DEFAULTS)

    extra_tokens = os.environ.get(TOKENS_ENV_VAR)
    if extra_tokens:
        custom["moderation"]["tokens"].update(parse_tokens(extra_tokens))

    return custom


def moderator_tokens(domain=site_reviews) -> dict[str, str]:
    return settings(domain)["moderation"]["tokens"]
