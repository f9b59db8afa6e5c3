"""Attendance & payroll engine package.

This package is organized by feature modules (calendar, attendance, leaves,
payroll, ...) with a thin Flask controller layer over service/repository layers.
"""
