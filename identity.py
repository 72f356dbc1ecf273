"""
Client for the hosted identity service (Supabase auth REST API).

The shop never stores credentials. It forwards sign-up / sign-in requests and
resolves bearer tokens to the user they were issued for.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from errors import UpstreamError

logger = logging.getLogger(__name__)

SESSION_KEYS = ("access_token", "token_type", "expires_in", "expires_at", "refresh_token")


@dataclass
class Identity:
    id: str
    email: str
    raw: Dict[str, Any] = field(default_factory=dict)


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"Identity service returned {resp.status_code}"
    for key in ("error_description", "msg", "message", "error"):
        if isinstance(body, dict) and body.get(key):
            return str(body[key])
    return f"Identity service returned {resp.status_code}"


def _split_session(body: Dict[str, Any]) -> Dict[str, Any]:
    # sign-in and auto-confirmed sign-up return the session with the user nested;
    # sign-up awaiting email confirmation returns the bare user
    if "access_token" in body:
        session = {k: body[k] for k in SESSION_KEYS if k in body}
        session["user"] = body.get("user")
        return {"user": body.get("user"), "session": session}
    return {"user": body, "session": None}


class IdentityClient:
    def __init__(self, base_url: str, api_key: str, session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self.base_url}/auth/v1/{path}"

    def _headers(self, token: Optional[str] = None) -> Dict[str, str]:
        headers = {"apikey": self.api_key, "Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def get_user(self, token: str) -> Optional[Identity]:
        """Resolve a bearer token; ``None`` when the service does not recognise it."""
        try:
            resp = self.session.get(self._url("user"), headers=self._headers(token), timeout=self.timeout)
        except requests.RequestException as e:
            logger.exception("Identity service unreachable")
            raise UpstreamError(str(e))
        if resp.status_code in (401, 403, 404):
            return None
        if not resp.ok:
            raise UpstreamError(_error_message(resp))
        user = resp.json()
        if not user or not user.get("id"):
            return None
        return Identity(id=str(user["id"]), email=user.get("email") or "", raw=user)

    def sign_up(self, email: str, password: str, name: Optional[str] = None) -> Dict[str, Any]:
        payload = {"email": email, "password": password, "data": {"full_name": name}}
        body = self._post("signup", payload)
        return _split_session(body)

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        body = self._post("token?grant_type=password", {"email": email, "password": password})
        return _split_session(body)

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = self.session.post(self._url(path), json=payload, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            logger.exception("Identity service unreachable")
            raise UpstreamError(str(e))
        if not resp.ok:
            raise UpstreamError(_error_message(resp))
        return resp.json()
