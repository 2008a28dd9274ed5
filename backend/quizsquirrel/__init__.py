import logging
import os

from flask import Flask, g, request

from quizsquirrel.config import config_map
from quizsquirrel.extensions import supabase

log = logging.getLogger(__name__)


def create_app(env: str = None, client_factory=None) -> Flask:
    app = Flask(__name__)

    env = env or os.getenv("FLASK_ENV", "development")
    app.config.from_object(config_map.get(env, config_map["default"]))

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Init extensions
    supabase.init_app(app, client_factory)

    _register_auth_hooks(app)

    with app.app_context():
        from quizsquirrel.navigation import nav_links

        @app.context_processor
        def inject_nav():
            user = g.get("user")
            return {"current_user": user, "nav_links": nav_links(user)}

        # Register blueprints
        from quizsquirrel.views.auth import auth_bp
        from quizsquirrel.views.dashboard import dashboard_bp
        from quizsquirrel.views.quizzes import quizzes_bp
        app.register_blueprint(auth_bp)
        app.register_blueprint(dashboard_bp)
        app.register_blueprint(quizzes_bp)

    log.debug("QuizSquirrel app created (env=%s)", env)
    return app


def _register_auth_hooks(app: Flask) -> None:
    from quizsquirrel.models import AuthUser
    from quizsquirrel.services import BackendError, get_auth_service

    def on_auth_event(event, session):
        log.debug("Auth event %s", event)
        g.user = AuthUser.from_backend(session.user) if session and session.user else None

    @app.before_request
    def load_user():
        g.user = None
        if request.endpoint == "static":
            return
        auth = get_auth_service()
        g.auth_subscription = auth.subscribe(on_auth_event)
        try:
            g.user = auth.current_user()
        except BackendError as e:
            # e.g. an expired refresh token; the visitor is treated as signed out
            log.warning("Could not restore session: %s", e.message)

    @app.teardown_request
    def drop_subscription(exc):
        sub = g.pop("auth_subscription", None)
        if sub is not None:
            sub.unsubscribe()
