"""Tests for the application settings carried in the domain's ``[custom]`` config."""

from types import SimpleNamespace

import pytest

from site_reviews.config import DEFAULTS, TOKENS_ENV_VAR, moderator_tokens, parse_tokens, settings
from site_reviews.domain import site_reviews


@pytest.fixture()
def bare_domain():
    """Stands in for a domain whose config has nothing under ``custom``."""
    return SimpleNamespace(config={"custom": {}})


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv(TOKENS_ENV_VAR, raising=False)


class TestParseTokens:
    def test_pairs_are_split(self):
        assert parse_tokens("tok-1:alice, tok-2:bob") == {"tok-1": "alice", "tok-2": "bob"}

    def test_incomplete_pairs_are_skipped(self):
        assert parse_tokens("broken,:nobody,tok-3:") == {}

    def test_empty_string(self):
        assert parse_tokens("") == {}


class TestSettings:
    def test_missing_keys_fall_back_to_defaults(self, bare_domain):
        custom = settings(bare_domain)
        assert custom["list_limit"] == DEFAULTS["list_limit"]
        assert custom["rate_limit"] == {"limit": 5, "window_seconds": 60, "trust_proxy_headers": False}
        assert custom["client"]["timeout_seconds"] == 10.0

    def test_partial_tables_are_completed(self, bare_domain):
        bare_domain.config["custom"] = {"rate_limit": {"limit": 2}}
        rate_limit = settings(bare_domain)["rate_limit"]
        assert rate_limit == {"limit": 2, "window_seconds": 60, "trust_proxy_headers": False}

    def test_defaults_are_not_shared(self, bare_domain):
        settings(bare_domain)["moderation"]["tokens"]["tok"] = "alice"
        assert DEFAULTS["moderation"]["tokens"] == {}

    def test_same_dict_every_call(self, bare_domain):
        assert settings(bare_domain) is settings(bare_domain)

    def test_tokens_from_environment_are_merged(self, bare_domain, monkeypatch):
        monkeypatch.setenv(TOKENS_ENV_VAR, "tok-1:alice,tok-2:bob")
        assert moderator_tokens(bare_domain) == {"tok-1": "alice", "tok-2": "bob"}


class TestPackagedConfig:
    def test_test_environment_has_moderator_token(self):
        assert moderator_tokens(site_reviews)["test-moderator-token"] == "mod-test"

    def test_list_limit(self):
        assert settings(site_reviews)["list_limit"] == 50
