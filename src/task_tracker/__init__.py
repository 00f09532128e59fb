"""
Task Tracker backend package.

In-memory task and category tracking: entity model, validation pipeline,
concurrent stores, services, and a FastAPI adapter exposing them over HTTP.
Build the HTTP application with ``task_tracker.main.create_app``.
"""

__version__ = "0.1.0"
