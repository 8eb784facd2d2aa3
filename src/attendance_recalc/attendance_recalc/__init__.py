"""Attendance recalculation engine.

Feature modules (shifts, schedules, attendance, calculations, recalc, settings)
with a thin Flask JSON controller layer over service/repository layers. Daily
attendance is computed from punch logs and the resolved shift schedule, cached
per (employee, date) and kept fresh through a durable recalculation queue.
"""
