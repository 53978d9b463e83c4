"""Company CRM core package.

Feature modules (employees, attendance, leave, notifications) each carry a
model, a repository port, a MySQL adapter, a service and a thin Flask
controller.
"""
