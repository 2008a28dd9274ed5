"""Public quiz browser — open to everyone, with a simple text search."""
from flask import Blueprint, render_template, request

from quizsquirrel.services import BackendError, filter_quizzes, get_quiz_service

quizzes_bp = Blueprint("quizzes", __name__)


@quizzes_bp.get("/quizzes")
def public_list():
    term = (request.args.get("q") or "").strip()
    quizzes, error = [], None
    try:
        quizzes = filter_quizzes(get_quiz_service().list_public(), term)
    except BackendError as e:
        error = e.message
    return render_template("public_quizzes.html", quizzes=quizzes, term=term, error=error)
