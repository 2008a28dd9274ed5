"""
extensions.py — Flask extension objects, initialised in create_app().

The Supabase client keeps auth state (session, PKCE code verifier) in its
storage adapter. A server handles many browsers, so every request builds its
own client whose storage is the signed Flask session cookie.
"""
import logging

from flask import Flask, current_app, g, session
from supabase import ClientOptions, create_client

log = logging.getLogger(__name__)


class SessionStorage:
    """Supabase auth storage backed by the Flask session."""

    prefix = "sb:"

    def get_item(self, key: str) -> str | None:
        return session.get(self.prefix + key)

    def set_item(self, key: str, value: str) -> None:
        session[self.prefix + key] = value

    def remove_item(self, key: str) -> None:
        session.pop(self.prefix + key, None)


def create_supabase_client(config, storage: SessionStorage):
    url = config.get("SUPABASE_URL")
    key = config.get("SUPABASE_ANON_KEY")
    if not url or not key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_ANON_KEY must be set")

    options = ClientOptions(
        storage=storage,
        persist_session=True,
        # no background refresh timers inside a request
        auto_refresh_token=False,
        flow_type=config.get("AUTH_FLOW_TYPE", "pkce"),
    )
    return create_client(url, key, options=options)


class Supabase:
    """Per-request Supabase client, in the shape of a Flask extension."""

    def __init__(self, app: Flask | None = None, client_factory=None):
        self._client_factory = client_factory
        if app is not None:
            self.init_app(app, client_factory)

    def init_app(self, app: Flask, client_factory=None) -> None:
        app.extensions["supabase"] = client_factory or self._client_factory or create_supabase_client
        app.teardown_appcontext(self._teardown)

    @property
    def client(self):
        if "supabase_client" not in g:
            factory = current_app.extensions["supabase"]
            g.supabase_client = factory(current_app.config, SessionStorage())
            log.debug("Built backend client for %s", current_app.config.get("SUPABASE_URL"))
        return g.supabase_client

    @staticmethod
    def _teardown(exc):
        g.pop("supabase_client", None)


supabase = Supabase()
