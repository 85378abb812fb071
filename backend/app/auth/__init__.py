# app/auth/__init__.py
"""
Authentication modules for the task tracker.

This package contains:
- identity.py: CallerIdentity, the result of a successful bearer-token check
"""
from app.auth.identity import CallerIdentity

__all__ = ["CallerIdentity"]
