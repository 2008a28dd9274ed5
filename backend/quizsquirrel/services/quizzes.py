"""
Quiz data access — one backend table call per operation.

Ownership is enforced by row-level security on the backend. The owner
filters below only narrow the query; they are not the guard.
"""

from __future__ import annotations

import logging

from flask import g

from quizsquirrel.extensions import supabase
from quizsquirrel.models import Quiz
from quizsquirrel.services.auth import get_auth_service
from quizsquirrel.services.errors import REST_ERRORS, BackendError

log = logging.getLogger(__name__)

TABLE = "quizzes"
PUBLIC_COLUMNS = "id, title, description, is_public, user_id, created_at, profiles(email)"


class QuizService:
    def __init__(self, client, access_token: str | None = None):
        self._client = client
        if access_token:
            # a session restored from storage does not re-key the REST client
            self._client.postgrest.auth(access_token)

    def list_owned(self, user_id: str) -> list[Quiz]:
        try:
            resp = (
                self._client.table(TABLE)
                .select("*")
                .eq("user_id", user_id)
                .order("created_at", desc=True)
                .execute()
            )
        except REST_ERRORS as e:
            log.warning("Loading quizzes for %s failed: %s", user_id, e)
            raise BackendError.from_exc(e) from e
        return [Quiz.from_row(row) for row in resp.data or []]

    def create(self, user_id: str, title: str, description: str = "", is_public: bool = False) -> Quiz:
        title = (title or "").strip()
        if not title:
            raise BackendError("Title is required", 400)

        row = {
            "user_id": user_id,
            "title": title,
            "description": (description or "").strip(),
            "is_public": bool(is_public),
        }
        try:
            resp = self._client.table(TABLE).insert(row).execute()
        except REST_ERRORS as e:
            log.warning("Creating quiz for %s failed: %s", user_id, e)
            raise BackendError.from_exc(e) from e

        if not resp.data:
            raise BackendError("Quiz was not created")
        quiz = Quiz.from_row(resp.data[0])
        log.info("Created quiz %s for %s", quiz.id, user_id)
        return quiz

    def delete(self, quiz_id: str, user_id: str) -> None:
        try:
            (
                self._client.table(TABLE)
                .delete()
                .eq("id", quiz_id)
                .eq("user_id", user_id)
                .execute()
            )
        except REST_ERRORS as e:
            log.warning("Deleting quiz %s failed: %s", quiz_id, e)
            raise BackendError.from_exc(e) from e
        log.info("Deleted quiz %s for %s", quiz_id, user_id)

    def list_public(self) -> list[Quiz]:
        try:
            resp = (
                self._client.table(TABLE)
                .select(PUBLIC_COLUMNS)
                .eq("is_public", True)
                .order("created_at", desc=True)
                .execute()
            )
        except REST_ERRORS as e:
            log.warning("Loading public quizzes failed: %s", e)
            raise BackendError.from_exc(e) from e
        return [Quiz.from_row(row) for row in resp.data or []]


def filter_quizzes(quizzes: list[Quiz], term: str | None) -> list[Quiz]:
    """Case-insensitive match of ``term`` against title and description."""
    term = (term or "").strip().lower()
    if not term:
        return list(quizzes)
    return [
        q for q in quizzes
        if term in q.title.lower() or term in q.description.lower()
    ]


def get_quiz_service() -> QuizService:
    if "quiz_service" not in g:
        session = get_auth_service().get_session()
        token = session.access_token if session else None
        g.quiz_service = QuizService(supabase.client, token)
    return g.quiz_service
