"""
Tests for session utilities.

This module tests HTTP client creation and configuration.
"""

from unittest.mock import patch

import httpx

from migrate_packages.api import TokenAuth
from migrate_packages.utils import create_session_with_retry
from migrate_packages.utils.session import USER_AGENT


class TestSessionUtilities:
    """Test session utility functions."""

    def test_create_session_with_retry(self):
        """Test create_session_with_retry function."""
        session = create_session_with_retry()

        assert isinstance(session, httpx.Client)
        assert session.timeout.connect == 10.0
        assert session.follow_redirects
        assert session.headers["User-Agent"] == USER_AGENT
        assert not session.is_closed

    def test_create_session_with_auth(self):
        """Test the auth flow is attached to the client."""
        auth = TokenAuth("ghp_example")
        session = create_session_with_retry(auth=auth)

        assert session.auth is auth

    def test_create_session_custom_timeout(self):
        """Test create_session_with_retry with custom timeout."""
        session = create_session_with_retry(timeout=600.0)

        assert session.timeout.read == 600.0
        assert session.timeout.connect == 10.0

    def test_create_session_extra_headers(self):
        """Test additional default headers."""
        session = create_session_with_retry(headers={"Accept": "application/vnd.github+json"})

        assert session.headers["Accept"] == "application/vnd.github+json"
        assert session.headers["User-Agent"] == USER_AGENT

    def test_create_session_http2_not_available(self):
        """Test create_session_with_retry when HTTP/2 is not available."""
        with patch("importlib.util.find_spec", return_value=None):
            session = create_session_with_retry()

            assert isinstance(session, httpx.Client)
            assert not session.is_closed
