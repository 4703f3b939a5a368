"""
HTTP client for the remote user-data document.

The server keeps one document per signed-in user at ``/api/user-data``:

    GET   → 200 + UserData JSON, or 204 when no document exists yet
    POST  → upsert-merge of the body; the body carries ``updatedAt``

Both calls need a bearer token.  Every failure is raised as RemoteError
(RemoteAuthError for 401/403) so the sync coordinator can decide what to
swallow.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable

import requests

from ..core.config import HTTP_TIMEOUT_SECONDS, USER_DATA_API_PATH
from ..core.models import UserData
from ..io.serializers import ValidationError, dict_to_user_data, user_data_to_dict

log = logging.getLogger(__name__)


class RemoteError(Exception):
    """Remote user-data call failed (network, HTTP status, bad body)."""


class RemoteAuthError(RemoteError):
    """The server rejected the bearer token."""


@dataclass(frozen=True)
class Identity:
    """
    A signed-in user as seen by the sync layer.

    ``token_provider`` is called for every request so expiring tokens can be
    refreshed by whoever owns authentication.
    """

    user_id: str
    token_provider: Callable[[], str]

    @classmethod
    def with_token(cls, user_id: str, token: str) -> "Identity":
        return cls(user_id=user_id, token_provider=lambda: token)


class RemoteClient:
    """Blocking client; the coordinator runs it off the event loop."""

    def __init__(
        self,
        base_url: str,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        """
        Args:
            base_url: Server root, e.g. "https://example.com"
            timeout: Per-request timeout in seconds
            session: Optional requests session (tests pass a stub)
        """
        self.url = base_url.rstrip("/") + USER_DATA_API_PATH
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, identity: Identity) -> dict[str, str]:
        try:
            token = identity.token_provider()
        except Exception as exc:
            raise RemoteAuthError(f"could not obtain a token: {exc}") from exc
        if not token:
            raise RemoteAuthError("missing auth token")
        return {"Authorization": f"Bearer {token}"}

    def _check(self, response: requests.Response, action: str) -> None:
        if response.status_code in (401, 403):
            raise RemoteAuthError(f"{action}: unauthorized ({response.status_code})")
        if not response.ok:
            detail = response.text.strip() or response.reason
            raise RemoteError(f"{action}: HTTP {response.status_code} {detail}")

    def fetch(self, identity: Identity) -> UserData | None:
        """
        Load the user's document.

        Returns:
            UserData, or None when the server has no document (204)

        Raises:
            RemoteError: On network failure, non-2xx status or invalid body
        """
        try:
            response = self.session.get(self.url, headers=self._headers(identity), timeout=self.timeout)
        except requests.exceptions.RequestException as exc:
            raise RemoteError(f"fetch failed: {exc}") from exc

        if response.status_code == 204:
            log.debug("remote: no document for %s", identity.user_id)
            return None
        self._check(response, "fetch")

        try:
            return dict_to_user_data(response.json())
        except (ValueError, ValidationError) as exc:
            raise RemoteError(f"fetch returned an invalid document: {exc}") from exc

    def push(self, identity: Identity, data: UserData) -> None:
        """
        Upsert the user's document, stamping ``updatedAt`` (epoch ms).

        Raises:
            RemoteError: On network failure or non-2xx status
        """
        body = user_data_to_dict(data)
        body["updatedAt"] = int(time.time() * 1000)
        try:
            response = self.session.post(
                self.url,
                json=body,
                headers=self._headers(identity),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise RemoteError(f"push failed: {exc}") from exc
        self._check(response, "push")
        log.debug("remote: pushed document for %s", identity.user_id)
