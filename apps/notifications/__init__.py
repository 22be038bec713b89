"""Notifications app package.

Forwards committed booking events to an external webhook. Delivery runs
in a Celery task and never affects the booking that raised the event.
"""
