"""Committee Shifts package.

Shift-slot booking, same-day attendance confirmation and push reminders for
district committees, organized by feature modules (slots, attendance,
notifications, ...) with a thin Flask controller layer over service/repository
layers.
"""
