from functools import wraps
from urllib.parse import urlsplit

from flask import g, redirect, request, url_for


def login_required(view):
    """Send signed-out visitors to the login page, remembering where they were."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        if g.get("user") is None:
            return redirect(url_for("auth.login", next=request.path))
        return view(*args, **kwargs)

    return wrapped


def safe_next(target: str | None, default: str) -> str:
    # only same-site paths; browsers read "\" as "/", so "/\host" is offsite
    if not target:
        return default
    parts = urlsplit(target.replace("\\", "/"))
    if parts.scheme or parts.netloc or not target.startswith("/") or target.startswith("//"):
        return default
    if any(ch in target for ch in "\\\r\n\t"):
        return default
    return target
