"""
Top‑level package for the Meetup Planner API.

This file makes ``meetup_planner_api`` a Python package so that
modules within ``app`` can be imported using fully qualified names
like ``meetup_planner_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
