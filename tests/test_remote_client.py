"""Tests for RemoteClient against a stub requests session."""

import json

import pytest
import requests

from iron_stride.core.models import UserData, UserProfile
from iron_stride.io.serializers import user_data_to_dict
from iron_stride.sync.remote import Identity, RemoteAuthError, RemoteClient, RemoteError

USER = Identity.with_token("user-1", "secret")


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None, reason="OK"):
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else (json.dumps(body) if body is not None else "")
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class StubSession:
    """Records requests and replays a canned response (or raises)."""

    def __init__(self, response=None, error=None):
        self.response = response or FakeResponse()
        self.error = error
        self.calls = []

    def _handle(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def get(self, url, **kwargs):
        return self._handle("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._handle("POST", url, **kwargs)


def _make_client(session) -> RemoteClient:
    return RemoteClient("https://example.com/", timeout=3, session=session)


def _document() -> dict:
    return user_data_to_dict(UserData(profile=UserProfile(name="Sam"), schema_version=2))


class TestFetch:
    def test_url_and_auth_header(self):
        session = StubSession(FakeResponse(body=_document()))
        _make_client(session).fetch(USER)
        method, url, kwargs = session.calls[0]
        assert (method, url) == ("GET", "https://example.com/api/user-data")
        assert kwargs["headers"] == {"Authorization": "Bearer secret"}
        assert kwargs["timeout"] == 3

    def test_document_parsed(self):
        data = _make_client(StubSession(FakeResponse(body=_document()))).fetch(USER)
        assert data.profile.name == "Sam"
        assert data.schema_version == 2

    def test_no_content_is_none(self):
        assert _make_client(StubSession(FakeResponse(status_code=204))).fetch(USER) is None

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_failure(self, status):
        with pytest.raises(RemoteAuthError):
            _make_client(StubSession(FakeResponse(status_code=status, reason="Unauthorized"))).fetch(USER)

    def test_server_error(self):
        session = StubSession(FakeResponse(status_code=500, text="boom", reason="Server Error"))
        with pytest.raises(RemoteError, match="500 boom"):
            _make_client(session).fetch(USER)

    def test_invalid_body(self):
        with pytest.raises(RemoteError, match="invalid document"):
            _make_client(StubSession(FakeResponse(body={"history": []}))).fetch(USER)

    def test_non_json_body(self):
        with pytest.raises(RemoteError):
            _make_client(StubSession(FakeResponse(text="<html>"))).fetch(USER)

    def test_network_error_wrapped(self):
        session = StubSession(error=requests.exceptions.ConnectionError("down"))
        with pytest.raises(RemoteError, match="fetch failed"):
            _make_client(session).fetch(USER)

    def test_missing_token(self):
        session = StubSession()
        with pytest.raises(RemoteAuthError):
            _make_client(session).fetch(Identity.with_token("user-1", ""))
        assert session.calls == []

    def test_token_provider_failure(self):
        def provider():
            raise RuntimeError("expired")

        with pytest.raises(RemoteAuthError, match="expired"):
            _make_client(StubSession()).fetch(Identity("user-1", provider))


class TestPush:
    def test_body_carries_updated_at(self):
        session = StubSession()
        _make_client(session).push(USER, UserData(profile=UserProfile(name="Sam"), schema_version=2))
        method, url, kwargs = session.calls[0]
        assert method == "POST"
        body = kwargs["json"]
        assert body["profile"]["name"] == "Sam"
        assert body["schemaVersion"] == 2
        assert isinstance(body["updatedAt"], int) and body["updatedAt"] > 0

    def test_push_error_status(self):
        with pytest.raises(RemoteError):
            _make_client(StubSession(FakeResponse(status_code=502, reason="Bad Gateway"))).push(
                USER, UserData(profile=UserProfile())
            )

    def test_push_network_error(self):
        session = StubSession(error=requests.exceptions.Timeout("slow"))
        with pytest.raises(RemoteError, match="push failed"):
            _make_client(session).push(USER, UserData(profile=UserProfile()))
