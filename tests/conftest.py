"""
Shared fixtures: an in-memory stand-in for the hosted backend.

The fake client mirrors the slice of the supabase client surface the app
touches (auth calls, auth events, table query builder). Its session lives in
the storage adapter the app hands it, so sessions survive across test-client
requests through the Flask session cookie exactly like the real client.
"""

import json
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from supabase import AuthApiError, PostgrestAPIError

from quizsquirrel import create_app

STORAGE_KEY = "supabase.auth.token"


class FakeBackend:
    """Server-side state shared by every client built during a test."""

    def __init__(self):
        self.users = {}        # email -> dict(id, password, confirmed)
        self.quizzes = []      # rows of the quizzes table
        self.codes = {}        # PKCE auth code -> email
        self.token_hashes = {} # email-link token hash -> email
        self.sent_emails = []  # (type, email, redirect_to)
        self.rest_tokens = []
        self.autoconfirm = False
        self.active_subscriptions = 0
        self._failures = {}

    # ── helpers used by tests ──────────────────────────────────────────────

    def add_user(self, email, password="Secr3t!pass", confirmed=True):
        user_id = str(uuid.uuid4())
        self.users[email] = {"id": user_id, "password": password, "confirmed": confirmed}
        return user_id

    def add_quiz(self, user_id, title, description="", is_public=False, age_days=0):
        row = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "title": title,
            "description": description,
            "is_public": is_public,
            "created_at": (datetime.now(timezone.utc) - timedelta(days=age_days)).isoformat(),
        }
        self.quizzes.append(row)
        return row

    def fail(self, op, exc):
        """Make the next call to ``op`` raise ``exc``."""
        self._failures[op] = exc

    def check(self, op):
        exc = self._failures.pop(op, None)
        if exc is not None:
            raise exc

    def email_for(self, user_id):
        for email, u in self.users.items():
            if u["id"] == user_id:
                return email
        return None

    def client_factory(self, config, storage):
        return FakeClient(self, storage)


def auth_error(message, status=400, code=None):
    return AuthApiError(message, status, code)


def rest_error(message, code="42501"):
    return PostgrestAPIError({"message": message, "code": code, "hint": None, "details": None})


def _make_user(user_id, email, confirmed, identities=None):
    return SimpleNamespace(
        id=user_id,
        email=email,
        email_confirmed_at=datetime.now(timezone.utc).isoformat() if confirmed else None,
        identities=identities if identities is not None else [SimpleNamespace(provider="email")],
    )


class FakeSubscription:
    def __init__(self, auth, callback):
        self._auth = auth
        self.callback = callback

    def unsubscribe(self):
        if self.callback in self._auth.callbacks:
            self._auth.callbacks.remove(self.callback)
            self._auth.backend.active_subscriptions -= 1


class FakeAuth:
    def __init__(self, backend, storage):
        self.backend = backend
        self.storage = storage
        self.callbacks = []

    # ── session plumbing ───────────────────────────────────────────────────

    def _start_session(self, email, event="SIGNED_IN"):
        u = self.backend.users[email]
        raw = {"user_id": u["id"], "email": email, "access_token": f"at-{u['id']}"}
        self.storage.set_item(STORAGE_KEY, json.dumps(raw))
        session = self._to_session(raw)
        self._notify(event, session)
        return session

    def _to_session(self, raw):
        confirmed = self.backend.users.get(raw["email"], {}).get("confirmed", True)
        return SimpleNamespace(
            user=_make_user(raw["user_id"], raw["email"], confirmed),
            access_token=raw["access_token"],
            refresh_token="rt",
        )

    def _notify(self, event, session):
        for cb in list(self.callbacks):
            cb(event, session)

    # ── supabase auth surface ──────────────────────────────────────────────

    def get_session(self):
        self.backend.check("get_session")
        stored = self.storage.get_item(STORAGE_KEY)
        return self._to_session(json.loads(stored)) if stored else None

    def on_auth_state_change(self, callback):
        self.callbacks.append(callback)
        self.backend.active_subscriptions += 1
        return FakeSubscription(self, callback)

    def sign_in_with_password(self, credentials):
        self.backend.check("sign_in")
        u = self.backend.users.get(credentials["email"])
        if not u or u["password"] != credentials["password"]:
            raise auth_error("Invalid login credentials")
        if not u["confirmed"]:
            raise auth_error("Email not confirmed")
        session = self._start_session(credentials["email"])
        return SimpleNamespace(user=session.user, session=session)

    def sign_up(self, credentials):
        self.backend.check("sign_up")
        email = credentials["email"]
        redirect_to = credentials.get("options", {}).get("email_redirect_to")
        if email in self.backend.users:
            # the provider hides existing accounts behind an identity-less user
            u = self.backend.users[email]
            return SimpleNamespace(user=_make_user(u["id"], email, True, identities=[]), session=None)

        self.backend.add_user(email, credentials["password"], confirmed=self.backend.autoconfirm)
        if self.backend.autoconfirm:
            session = self._start_session(email)
            return SimpleNamespace(user=session.user, session=session)

        self.backend.sent_emails.append(("signup", email, redirect_to))
        u = self.backend.users[email]
        return SimpleNamespace(user=_make_user(u["id"], email, False), session=None)

    def sign_out(self):
        self.backend.check("sign_out")
        self.storage.remove_item(STORAGE_KEY)
        self._notify("SIGNED_OUT", None)

    def set_session(self, access_token, refresh_token):
        self.backend.check("set_session")
        for email, u in self.backend.users.items():
            if access_token == f"at-{u['id']}":
                u["confirmed"] = True
                session = self._start_session(email)
                return SimpleNamespace(user=session.user, session=session)
        raise auth_error("Invalid JWT", 401)

    def exchange_code_for_session(self, params):
        self.backend.check("exchange_code")
        email = self.backend.codes.pop(params["auth_code"], None)
        if email is None:
            raise auth_error("invalid flow state, no valid flow state found", 404)
        self.backend.users[email]["confirmed"] = True
        session = self._start_session(email)
        return SimpleNamespace(user=session.user, session=session)

    def verify_otp(self, params):
        self.backend.check("verify_otp")
        email = self.backend.token_hashes.pop(params["token_hash"], None)
        if email is None:
            raise auth_error("Email link is invalid or has expired", 403)
        self.backend.users[email]["confirmed"] = True
        session = self._start_session(email)
        return SimpleNamespace(user=session.user, session=session)

    def resend(self, credentials):
        self.backend.check("resend")
        self.backend.sent_emails.append(
            (credentials["type"], credentials["email"], credentials["options"]["email_redirect_to"])
        )
        return SimpleNamespace(user=None, session=None)


class FakeQuery:
    def __init__(self, backend, table):
        self.backend = backend
        self.table = table
        self.action = "select"
        self.columns = "*"
        self.filters = []
        self.order_by = None
        self.payload = None

    def select(self, columns="*"):
        self.action, self.columns = "select", columns
        return self

    def insert(self, row):
        self.action, self.payload = "insert", row
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def _matches(self, row):
        return all(row.get(col) == val for col, val in self.filters)

    def execute(self):
        self.backend.check(f"{self.table}.{self.action}")
        rows = self.backend.quizzes

        if self.action == "insert":
            row = dict(self.payload)
            row.setdefault("id", str(uuid.uuid4()))
            row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
            rows.append(row)
            return SimpleNamespace(data=[row])

        if self.action == "delete":
            gone = [r for r in rows if self._matches(r)]
            self.backend.quizzes = [r for r in rows if not self._matches(r)]
            return SimpleNamespace(data=gone)

        data = [dict(r) for r in rows if self._matches(r)]
        if "profiles(email)" in self.columns:
            for r in data:
                r["profiles"] = {"email": self.backend.email_for(r["user_id"])}
        if self.order_by:
            col, desc = self.order_by
            data.sort(key=lambda r: r[col], reverse=desc)
        return SimpleNamespace(data=data)


class FakePostgrest:
    def __init__(self, backend):
        self.backend = backend

    def auth(self, token):
        self.backend.rest_tokens.append(token)


class FakeClient:
    def __init__(self, backend, storage):
        self.backend = backend
        self.auth = FakeAuth(backend, storage)
        self.postgrest = FakePostgrest(backend)

    def table(self, name):
        return FakeQuery(self.backend, name)


# ── Fixtures ──────────────────────────────────────────────────────────────────

PASSWORD = "Secr3t!pass"


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def app(backend):
    return create_app("testing", client_factory=backend.client_factory)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user_id(backend):
    return backend.add_user("ada@example.com", PASSWORD)


@pytest.fixture
def signed_in(client, user_id):
    resp = client.post("/login", data={"email": "ada@example.com", "password": PASSWORD})
    assert resp.status_code == 302
    return client
