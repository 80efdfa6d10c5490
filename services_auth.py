# services_auth.py — email/password sign-in against the hosted auth API (<base>/auth/v1)
import logging

import jwt
import requests

from errors import AuthError

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15
JWT_AUDIENCE = "authenticated"


def token_claims(token: str, secret: str = None) -> dict:
    """
    Decodes the session access token. With `secret` (the project's JWT secret)
    the signature is checked; without it only expiry is enforced.
    """
    if not token:
        raise AuthError("No session")
    try:
        if secret:
            return jwt.decode(token, secret, algorithms=["HS256"], audience=JWT_AUDIENCE)
        return jwt.decode(token, options={"verify_signature": False, "verify_exp": True,
                                          "verify_aud": False})
    except jwt.ExpiredSignatureError as e:
        raise AuthError("Session expired") from e
    except jwt.InvalidTokenError as e:
        raise AuthError(f"Invalid session: {e}") from e


class AuthClient:
    def __init__(self, base_url: str, api_key: str, timeout: float = DEFAULT_TIMEOUT, session=None):
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def sign_in(self, email: str, password: str) -> dict:
        try:
            r = self.session.request(
                "POST", f"{self.base_url}/auth/v1/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                headers={"apikey": self.api_key, "Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.warning("[AUTH] sign-in transport error: %s", e)
            raise AuthError("An unexpected error occurred") from e
        try:
            body = r.json() or {}
        except ValueError:
            body = {}
        if r.status_code >= 400 or not body.get("access_token"):
            msg = (body.get("error_description") or body.get("msg")
                   or body.get("message") or "Invalid login credentials")
            log.info("[AUTH] sign-in rejected for %s: %s", email, msg)
            raise AuthError(msg)
        user = body.get("user") or {}
        log.info("[AUTH] signed in %s", user.get("email") or email)
        return {
            "access_token": body["access_token"],
            "refresh_token": body.get("refresh_token"),
            "expires_at": body.get("expires_at"),
            "user": {
                "id": user.get("id"),
                "email": user.get("email") or email,
                "role": user.get("role"),
                "last_sign_in_at": user.get("last_sign_in_at"),
            },
        }

    def sign_out(self, access_token: str) -> bool:
        """Revokes the session upstream; failures are logged only."""
        if not access_token:
            return False
        try:
            r = self.session.request(
                "POST", f"{self.base_url}/auth/v1/logout",
                headers={"apikey": self.api_key, "Authorization": f"Bearer {access_token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.warning("[AUTH] sign-out error: %s", e)
            return False
        if r.status_code >= 400:
            log.warning("[AUTH] sign-out rejected: HTTP %s", r.status_code)
            return False
        return True
