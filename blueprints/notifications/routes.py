# blueprints/notifications/routes.py
from __future__ import annotations

from flask import Blueprint, jsonify

from extensions import dashboard
from blueprints.core.services import notification_json

api_bp = Blueprint("notifications_api", __name__)


def _feed_json():
    feed = dashboard.session.feed
    return {
        "items": [notification_json(n) for n in feed.items()],
        "unread_count": feed.unread_count(),
        "capacity": feed.capacity,
    }


@api_bp.get("/notifications")
def api_notifications():
    return jsonify(_feed_json())


@api_bp.post("/notifications/<int:notification_id>/read")
def api_mark_read(notification_id: int):
    # unknown ids are a no-op, same as in the feed
    dashboard.session.mark_notification_read(notification_id)
    return jsonify({"ok": True, **_feed_json()})


@api_bp.post("/notifications/read-all")
def api_mark_all_read():
    dashboard.session.mark_all_notifications_read()
    return jsonify({"ok": True, **_feed_json()})
