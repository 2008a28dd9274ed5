"""
Dashboard views — the signed-in user's own quizzes.

GET   /                        – list owned quizzes
POST  /quizzes/new             – create a quiz
POST  /quizzes/<id>/delete     – delete an owned quiz
"""

from flask import Blueprint, flash, g, redirect, render_template, request, url_for

from quizsquirrel.services import BackendError, get_quiz_service
from quizsquirrel.views import login_required

dashboard_bp = Blueprint("dashboard", __name__)


@dashboard_bp.get("/")
@login_required
def index():
    quizzes, error = [], None
    try:
        quizzes = get_quiz_service().list_owned(g.user.id)
    except BackendError as e:
        error = e.message
    return render_template("dashboard.html", quizzes=quizzes, error=error)


@dashboard_bp.post("/quizzes/new")
@login_required
def create():
    try:
        quiz = get_quiz_service().create(
            g.user.id,
            title=request.form.get("title", ""),
            description=request.form.get("description", ""),
            is_public=request.form.get("is_public") == "on",
        )
    except BackendError as e:
        flash(e.message, "error")
    else:
        flash(f"Created “{quiz.title}”.", "success")
    return redirect(url_for("dashboard.index"))


@dashboard_bp.post("/quizzes/<quiz_id>/delete")
@login_required
def delete(quiz_id):
    try:
        get_quiz_service().delete(quiz_id, g.user.id)
    except BackendError as e:
        flash(e.message, "error")
    else:
        flash("Quiz deleted.", "success")
    return redirect(url_for("dashboard.index"))
