from __future__ import annotations
import atexit

from flask import Flask, current_app


class Dashboard:
    """Flask extension holding the in-memory dashboard session of an app."""

    def __init__(self, app: Flask | None = None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask, **session_options) -> None:
        # local import: the session pulls in every blueprint service module
        from blueprints.core.services import build_session

        session = build_session(app.config, **session_options)
        app.extensions["dashboard"] = session
        if app.config.get("NOTIFICATION_SIMULATION"):
            session.start_arrivals()
            atexit.register(session.stop_arrivals)

    @property
    def session(self):
        return current_app.extensions["dashboard"]


dashboard = Dashboard()
