from __future__ import annotations

from flask import Flask, g, request

from ..common.http import body, json_response, login_required, required_date, roles_required
from ..core.enums import LeaveCategory, LeaveStatus, Role
from ..core.exceptions import ValidationError
from ..container import Container


def _category(value) -> LeaveCategory:
    try:
        return LeaveCategory(str(value or "").upper())
    except ValueError:
        raise ValidationError("category must be SICK or VACATION")


def _status(value):
    if not value:
        return None
    try:
        return LeaveStatus(str(value).upper())
    except ValueError:
        raise ValidationError("Unknown leave status")


def register(app: Flask, container: Container) -> None:
    authenticated = login_required(container)
    admin_only = roles_required(container, Role.ADMIN)

    @app.route("/leave/requests", methods=["POST"], endpoint="leave_submit")
    @authenticated
    def submit():
        data = body()
        leave = container.leave_service.submit(
            g.employee_id,
            _category(data.get("category")),
            required_date(data.get("start_date"), "start_date"),
            required_date(data.get("end_date"), "end_date"),
            data.get("reason"),
        )
        return json_response(leave, 201)

    @app.route("/leave/requests/me", methods=["GET"], endpoint="leave_mine")
    @authenticated
    def my_requests():
        return json_response(container.leave_service.my_requests(g.employee_id))

    @app.route("/leave/requests", methods=["GET"], endpoint="leave_all")
    @admin_only
    def all_requests():
        return json_response(container.leave_service.all_requests(_status(request.args.get("status"))))

    @app.route("/leave/requests/<int:request_id>/approve", methods=["POST"], endpoint="leave_approve")
    @admin_only
    def approve(request_id: int):
        leave = container.leave_service.approve(request_id, g.employee_id, body().get("comment"))
        return json_response(leave)

    @app.route("/leave/requests/<int:request_id>/reject", methods=["POST"], endpoint="leave_reject")
    @admin_only
    def reject(request_id: int):
        leave = container.leave_service.reject(request_id, g.employee_id, body().get("comment"))
        return json_response(leave)

    @app.route("/leave/quotas", methods=["GET"], endpoint="leave_quotas")
    @authenticated
    def quotas():
        return json_response(container.leave_service.quotas(g.employee_id))
