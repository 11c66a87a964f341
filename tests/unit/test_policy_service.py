"""Tests for the origin and bearer gates."""

from unittest.mock import patch

import pytest

from visitor_stats.services.policy_service import (
    UNKNOWN_ORIGIN,
    is_bearer_valid,
    is_origin_allowed,
    resolve_request_origin,
)
from visitor_stats.services.stats_store import set_allowed_origins


class TestResolveRequestOrigin:
    """Tests for resolve_request_origin."""

    def test_origin_header_wins(self):
        assert resolve_request_origin("https://a.example", "https://b.example/post/x") == "https://a.example"

    def test_falls_back_to_referer_origin(self):
        assert resolve_request_origin(None, "https://b.example:8443/post/x?y=1") == "https://b.example:8443"

    @pytest.mark.parametrize("referer", [None, "", "not a url", "http://[bad"])
    def test_unknown(self, referer):
        assert resolve_request_origin(None, referer) == UNKNOWN_ORIGIN


class TestIsOriginAllowed:
    """Tests for is_origin_allowed."""

    def test_listed_origin(self, db_session):
        set_allowed_origins(db_session, ["https://a.example"])
        assert is_origin_allowed(db_session, "https://a.example") is True
        assert is_origin_allowed(db_session, "https://evil.example") is False

    def test_wildcard(self, db_session):
        set_allowed_origins(db_session, ["*"])
        assert is_origin_allowed(db_session, "https://anything.example") is True

    def test_empty_list_denies(self, db_session):
        assert is_origin_allowed(db_session, "https://a.example") is False

    def test_read_failure_denies(self, db_session):
        with patch(
            "visitor_stats.services.policy_service.stats_store.get_allowed_origins",
            side_effect=ValueError("bad json"),
        ):
            assert is_origin_allowed(db_session, "https://a.example") is False


class TestIsBearerValid:
    """Tests for is_bearer_valid."""

    def test_exact_match(self):
        assert is_bearer_valid("Bearer k3y", "k3y") is True

    @pytest.mark.parametrize("header", [None, "", "k3y", "Bearer wrong", "bearer k3y", "Bearer k3y "])
    def test_rejected(self, header):
        assert is_bearer_valid(header, "k3y") is False

    def test_unset_key_rejects_everything(self):
        assert is_bearer_valid("Bearer ", "") is False
