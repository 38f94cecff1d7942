"""HR Attendance package.

This package is organized by feature modules (attendance, reports, employees,
offices, shifts, events) with a thin Flask controller layer on top of
service/repository layers.
"""
