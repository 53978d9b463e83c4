from __future__ import annotations

from flask import Flask, g, request

from ..common.http import body, json_response, login_required, optional_date, roles_required
from ..core.enums import Role
from ..container import Container
from .model import Location


def _location() -> Location:
    data = body().get("location")
    if not isinstance(data, dict):
        data = {}
    return Location(
        city=data.get("city"),
        ip=data.get("ip") or request.remote_addr,
        device=data.get("device") or request.headers.get("User-Agent"),
    )


def register(app: Flask, container: Container) -> None:
    authenticated = login_required(container)
    staff_admin = roles_required(container, Role.ADMIN, Role.MANAGER)

    @app.route("/attendance/sign-in", methods=["POST"], endpoint="attendance_sign_in")
    @authenticated
    def sign_in():
        record = container.attendance_service.sign_in(g.employee_id, _location())
        return json_response(record, 201)

    @app.route("/attendance/sign-out", methods=["POST"], endpoint="attendance_sign_out")
    @authenticated
    def sign_out():
        record = container.attendance_service.sign_out(g.employee_id, _location())
        return json_response(record)

    @app.route("/attendance/me", methods=["GET"], endpoint="attendance_me")
    @authenticated
    def my_attendance():
        records = container.attendance_service.my_attendance(
            g.employee_id,
            optional_date(request.args.get("start_date"), "start_date"),
            optional_date(request.args.get("end_date"), "end_date"),
        )
        return json_response(records)

    @app.route("/attendance/dashboard", methods=["GET"], endpoint="attendance_dashboard")
    @staff_admin
    def dashboard():
        data = container.analytics_service.dashboard(
            optional_date(request.args.get("start_date"), "start_date"),
            optional_date(request.args.get("end_date"), "end_date"),
        )
        return json_response(data)

    @app.route("/attendance/analytics/<int:year>/<int:month>", methods=["GET"], endpoint="attendance_monthly")
    @staff_admin
    def monthly(year: int, month: int):
        return json_response(container.analytics_service.monthly_analytics(year, month))
