"""
Auth views

Routes
------
GET/POST  /login                       – password sign-in
GET/POST  /register                    – create an account
POST      /logout                      – end the session
GET       /email-verification          – "check your email" status page
POST      /email-verification/resend   – resend the confirmation email
GET       /auth/callback               – landing page of the email link
POST      /auth/callback               – session tokens forwarded from the URL fragment
"""

from __future__ import annotations

import logging

from flask import (
    Blueprint,
    current_app,
    flash,
    g,
    redirect,
    render_template,
    request,
    session,
    url_for,
)

from quizsquirrel.services import BackendError, get_auth_service
from quizsquirrel.utils.validation import validate_email, validate_password
from quizsquirrel.views import safe_next

log = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)

# Address awaiting confirmation, kept so the status page can offer a resend
PENDING_EMAIL_KEY = "pending_email"


# ── Login ────────────────────────────────────────────────────────────────────

@auth_bp.route("/login", methods=["GET", "POST"])
def login():
    next_url = safe_next(request.values.get("next"), url_for("dashboard.index"))
    if g.user:
        return redirect(next_url)

    if request.method == "GET":
        return render_template("login.html", email="", next=next_url)

    email = (request.form.get("email") or "").strip().lower()
    password = request.form.get("password", "")

    error = None
    if not email or not password:
        error = "Please fill in both fields."
    elif not validate_email(email):
        error = "Please enter a valid email address."
    else:
        try:
            get_auth_service().sign_in(email, password)
        except BackendError as e:
            error = e.message

    if error:
        return render_template("login.html", email=email, next=next_url, error=error), 400

    return redirect(next_url)


# ── Register ─────────────────────────────────────────────────────────────────

@auth_bp.route("/register", methods=["GET", "POST"])
def register():
    if g.user:
        return redirect(url_for("dashboard.index"))

    if request.method == "GET":
        return render_template("register.html", email="", errors=[])

    email = (request.form.get("email") or "").strip().lower()
    password = request.form.get("password", "")
    confirm = request.form.get("confirm_password", "")

    errors = _validate_registration(email, password, confirm)
    if errors:
        return render_template("register.html", email=email, errors=errors), 400

    result = get_auth_service().sign_up(email, password)
    debug = result.debug_details if current_app.config.get("SHOW_AUTH_DEBUG") else None

    if not result.ok:
        errors = [{"step": "signup", "message": result.error.message}]
        return render_template("register.html", email=email, errors=errors, debug=debug), 400

    if result.confirmation_sent:
        log.info("Signup for %s awaits email confirmation", email)
        session[PENDING_EMAIL_KEY] = email
        return redirect(url_for("auth.email_verification"))

    log.info("Signup for %s needs no confirmation", email)
    return redirect(url_for("dashboard.index"))


def _validate_registration(email: str, password: str, confirm: str) -> list[dict]:
    errors = []
    if not validate_email(email):
        errors.append({"step": "validation", "message": "Please enter a valid email address"})

    check = validate_password(password)
    errors += [{"step": "validation", "message": msg} for msg in check.errors]

    if password != confirm:
        errors.append({"step": "validation", "message": "Passwords do not match"})
    return errors


# ── Logout ───────────────────────────────────────────────────────────────────

@auth_bp.post("/logout")
def logout():
    try:
        get_auth_service().sign_out()
    except BackendError as e:
        flash(e.message, "error")
        return redirect(url_for("dashboard.index"))
    return redirect(url_for("auth.login"))


# ── Email verification ───────────────────────────────────────────────────────

@auth_bp.get("/email-verification")
def email_verification():
    return render_template(
        "email_verification.html",
        email=session.get(PENDING_EMAIL_KEY, ""),
    )


@auth_bp.post("/email-verification/resend")
def resend_verification():
    email = (request.form.get("email") or session.get(PENDING_EMAIL_KEY) or "").strip().lower()

    if not validate_email(email):
        flash("Please enter a valid email address.", "error")
        return redirect(url_for("auth.email_verification"))

    try:
        get_auth_service().resend_verification(email)
    except BackendError as e:
        flash(e.message, "error")
    else:
        session[PENDING_EMAIL_KEY] = email
        flash(f"We sent a new verification link to {email}.", "success")
    return redirect(url_for("auth.email_verification"))


# ── Email link callback ──────────────────────────────────────────────────────

@auth_bp.get("/auth/callback")
def callback():
    args = request.args

    if args.get("error"):
        message = args.get("error_description") or args["error"]
        log.info("Auth callback returned an error: %s", message)
        flash(message, "error")
        return redirect(url_for("auth.login"))

    auth = get_auth_service()
    try:
        if args.get("code"):
            auth.exchange_code(args["code"])
        elif args.get("token_hash") and args.get("type"):
            auth.verify_token_hash(args["token_hash"], args["type"])
        else:
            # tokens may sit in the URL fragment, which only the browser sees;
            # the page posts them back in a form body
            return render_template("auth_callback.html")
    except BackendError as e:
        return _callback_failed(e)

    return _callback_done()


@auth_bp.post("/auth/callback")
def callback_tokens():
    access_token = request.form.get("access_token", "")
    refresh_token = request.form.get("refresh_token", "")
    if not access_token or not refresh_token:
        flash("The verification link is incomplete.", "error")
        return redirect(url_for("auth.login"))

    try:
        get_auth_service().set_session(access_token, refresh_token)
    except BackendError as e:
        return _callback_failed(e)

    return _callback_done()


def _callback_failed(e: BackendError):
    log.warning("Auth callback failed: %s", e.message)
    flash(e.message, "error")
    return redirect(url_for("auth.login"))


def _callback_done():
    session.pop(PENDING_EMAIL_KEY, None)
    log.info("Auth callback completed")
    return redirect(url_for("dashboard.index"))
