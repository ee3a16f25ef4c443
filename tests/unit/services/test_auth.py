"""Tests for the header-based auth provider."""
from starlette.requests import Request

from mementos.services import AuthUser, HeaderAuthProvider


def _request(headers):
    raw = [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in headers.items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


class TestHeaderAuthProvider:

    def test_no_header_means_anonymous(self):
        assert HeaderAuthProvider().current_user(_request({})) is None

    def test_blank_header_means_anonymous(self):
        assert HeaderAuthProvider().current_user(_request({"X-Auth-User-Id": "  "})) is None

    def test_reads_id_and_emails(self):
        user = HeaderAuthProvider().current_user(_request({
            "X-Auth-User-Id": "user_2abc",
            "X-Auth-User-Email": "a@example.com, b@example.com",
        }))

        assert user == AuthUser("user_2abc", ["a@example.com", "b@example.com"])
        assert user.primary_email == "a@example.com"

    def test_custom_headers(self):
        provider = HeaderAuthProvider(id_header="X-User", email_header="X-Mail")
        user = provider.current_user(_request({"X-User": "u1"}))

        assert user.id == "u1"
        assert user.primary_email is None
