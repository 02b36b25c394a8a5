"""School Attendance package.

Feature modules (schedules, attendance, students, devices) follow the same
layering: frozen dataclass models, Protocol repositories with a MySQL
implementation, services holding the business rules, and a thin Flask
controller per feature.
"""
