"""Drive the service layer directly (no Flask).

Controllers are thin; the rules live in the services wired by the container.
"""

import importlib

from config import get_settings_module

from src.crm_core.crm_core.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, secret_key=settings.SECRET_KEY)

    employee_id = 1
    print("token:", container.tokens.issue(employee_id))
    print("quotas:", container.leave_service.quotas(employee_id))
    print("today:", container.attendance_service.today(employee_id))
    print("unread:", container.notification_hub.unread_count(employee_id))


if __name__ == "__main__":
    main()
