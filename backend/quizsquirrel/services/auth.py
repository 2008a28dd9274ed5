"""
Auth adapter over the hosted backend's auth client.

Everything here is a pass-through: the backend owns credential storage,
token refresh and email delivery. Failures come back as BackendError, except
sign_up() which reports them inside its SignUpResult.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

from flask import current_app, g, request

from quizsquirrel.extensions import supabase
from quizsquirrel.models import AuthUser
from quizsquirrel.services.errors import AUTH_ERRORS, BackendError

log = logging.getLogger(__name__)

CALLBACK_PATH = "/auth/callback"


@dataclass
class SignUpResult:
    error: BackendError | None
    confirmation_sent: bool
    debug_details: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None


class AuthService:
    def __init__(self, client, origin: str):
        self._client = client
        self.origin = origin.rstrip("/")

    @property
    def redirect_url(self) -> str:
        """Where the confirmation email link sends the user back to."""
        return f"{self.origin}{CALLBACK_PATH}"

    # ── Session ─────────────────────────────────────────────────────────────

    def get_session(self):
        try:
            return self._client.auth.get_session()
        except AUTH_ERRORS as e:
            raise BackendError.from_exc(e) from e

    def current_user(self) -> AuthUser | None:
        session = self.get_session()
        if session is None or session.user is None:
            return None
        return AuthUser.from_backend(session.user)

    def subscribe(self, callback: Callable[[str, Any], None]):
        """Register ``callback(event, session)`` for auth change events.

        Returns the backend subscription; call ``unsubscribe()`` on it.
        """
        return self._client.auth.on_auth_state_change(callback)

    # ── Credentials ─────────────────────────────────────────────────────────

    def sign_in(self, email: str, password: str) -> AuthUser:
        try:
            resp = self._client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AUTH_ERRORS as e:
            log.info("Sign-in failed for %s: %s", email, e)
            raise BackendError.from_exc(e) from e

        log.info("Signed in %s", email)
        return AuthUser.from_backend(resp.user)

    def sign_up(self, email: str, password: str) -> SignUpResult:
        redirect_to = self.redirect_url
        log.debug("Signup attempt with redirect URL: %s", redirect_to)

        try:
            resp = self._client.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {"email_redirect_to": redirect_to},
                }
            )
        except AUTH_ERRORS as e:
            log.info("Sign-up rejected for %s: %s", email, e)
            return SignUpResult(
                error=BackendError.from_exc(e),
                confirmation_sent=False,
                debug_details=self._debug_details(redirect_to, None),
            )
        except Exception as e:
            log.exception("Unexpected error during signup for %s", email)
            return SignUpResult(
                error=BackendError("Unexpected error during signup", 500),
                confirmation_sent=False,
                debug_details={
                    "error": repr(e),
                    "timestamp": _now_iso(),
                },
            )

        details = self._debug_details(redirect_to, resp)
        log.debug("Signup response for %s: %s", email, details)

        # No session yet means the provider is waiting on the email link.
        confirmation_sent = resp.user is not None and resp.session is None
        return SignUpResult(error=None, confirmation_sent=confirmation_sent, debug_details=details)

    def sign_out(self) -> None:
        try:
            self._client.auth.sign_out()
        except AUTH_ERRORS as e:
            raise BackendError.from_exc(e) from e
        log.info("Signed out")

    # ── Email link completion ───────────────────────────────────────────────

    def set_session(self, access_token: str, refresh_token: str) -> AuthUser | None:
        try:
            resp = self._client.auth.set_session(access_token, refresh_token)
        except AUTH_ERRORS as e:
            raise BackendError.from_exc(e) from e
        except (ValueError, IndexError, KeyError) as e:
            # the SDK decodes the access token locally before any request
            log.info("Rejected malformed session tokens: %s", e.__class__.__name__)
            raise BackendError("Invalid session tokens", 401) from e
        return AuthUser.from_backend(resp.user) if resp.user else None

    def exchange_code(self, code: str) -> AuthUser | None:
        try:
            resp = self._client.auth.exchange_code_for_session({"auth_code": code})
        except AUTH_ERRORS as e:
            raise BackendError.from_exc(e) from e
        return AuthUser.from_backend(resp.user) if resp.user else None

    def verify_token_hash(self, token_hash: str, otp_type: str) -> AuthUser | None:
        try:
            resp = self._client.auth.verify_otp({"token_hash": token_hash, "type": otp_type})
        except AUTH_ERRORS as e:
            raise BackendError.from_exc(e) from e
        return AuthUser.from_backend(resp.user) if resp.user else None

    def resend_verification(self, email: str) -> None:
        try:
            self._client.auth.resend(
                {
                    "type": "signup",
                    "email": email,
                    "options": {"email_redirect_to": self.redirect_url},
                }
            )
        except AUTH_ERRORS as e:
            raise BackendError.from_exc(e) from e
        log.info("Resent verification email to %s", email)

    # ── Helpers ─────────────────────────────────────────────────────────────

    def _debug_details(self, redirect_to: str, resp) -> dict[str, Any]:
        user = getattr(resp, "user", None)
        identities = getattr(user, "identities", None) if user else None
        return {
            "redirect_url": redirect_to,
            "user_created": user is not None,
            "identities_count": len(identities) if identities is not None else None,
            "session": getattr(resp, "session", None) is not None,
            "timestamp": _now_iso(),
            "origin": self.origin,
        }


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_auth_service() -> AuthService:
    """The AuthService bound to the current request's backend client."""
    if "auth_service" not in g:
        origin = current_app.config.get("SITE_URL") or request.host_url
        g.auth_service = AuthService(supabase.client, origin)
    return g.auth_service
