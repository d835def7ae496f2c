"""
Top level package for the csloadout.gg project.

Holds the Django settings, the root URL configuration, logging setup and the
small pieces shared by every app (error taxonomy, request helpers and the
cron endpoint guard).
"""

__all__ = []
