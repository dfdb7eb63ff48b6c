"""
flaskbase - Authentication.

Cookie-session façade with polled auth state changes.
"""

from flaskbase.auth.ensure import ensure_session
from flaskbase.auth.session import AuthClient, Subscription
from flaskbase.auth.watcher import SessionWatcher

__all__ = [
    "AuthClient",
    "Subscription",
    "SessionWatcher",
    "ensure_session",
]
