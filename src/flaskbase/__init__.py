"""
flaskbase - Supabase-shaped client for the chat/OCR Flask API.

Surfaces:
- db: chainable query builder (.from_().select().eq().order().limit())
- auth: cookie-session façade with polled auth state changes
- rpc / functions: JSON POST endpoints
- storage: multipart uploads and public URLs
"""

__version__ = "1.0.0"

from flaskbase.client import FlaskbaseClient, close_client, create_client, get_client
from flaskbase.models import AuthEvent, Result, Session, User

__all__ = [
    "FlaskbaseClient",
    "create_client",
    "get_client",
    "close_client",
    "Result",
    "Session",
    "User",
    "AuthEvent",
]
