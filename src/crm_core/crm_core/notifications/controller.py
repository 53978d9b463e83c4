from __future__ import annotations

from flask import Flask, Response, g, request, stream_with_context

from ..common.http import bearer_token, json_response, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    authenticated = login_required(container)

    @app.route("/notifications", methods=["GET"], endpoint="notifications_list")
    @authenticated
    def list_notifications():
        unread_only = request.args.get("unread_only", "").lower() in {"1", "true", "yes"}
        return json_response(container.notification_hub.list(g.employee_id, unread_only))

    @app.route("/notifications/count", methods=["GET"], endpoint="notifications_count")
    @authenticated
    def unread_count():
        return json_response({"count": container.notification_hub.unread_count(g.employee_id)})

    @app.route("/notifications/<int:notification_id>/read", methods=["PATCH"], endpoint="notifications_read")
    @authenticated
    def mark_read(notification_id: int):
        return json_response(container.notification_hub.mark_read(notification_id, g.employee_id))

    @app.route("/notifications/read-all", methods=["POST"], endpoint="notifications_read_all")
    @authenticated
    def mark_all_read():
        return json_response({"count": container.notification_hub.mark_all_read(g.employee_id)})

    @app.route("/notifications/stream", methods=["GET"], endpoint="notifications_stream")
    def stream():
        # Refused with 401 (via the error handler) before any stream is opened.
        session = container.live_channel.open(bearer_token())
        return Response(
            stream_with_context(container.live_channel.stream(session)),
            mimetype="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )
