"""Tuition Portal backend package.

This package is organized by feature modules (users, students, classes,
attendance) with a thin Flask controller layer and service/repository layers.
"""
