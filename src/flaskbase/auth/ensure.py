"""
Dev session bootstrap.

Signs the configured dev user in when no session exists, creating the
account on first use.
"""

import logging
from typing import TYPE_CHECKING

from flaskbase.models import Session

if TYPE_CHECKING:
    from flaskbase.client import FlaskbaseClient

logger = logging.getLogger(__name__)


async def ensure_session(
    client: "FlaskbaseClient",
    email: str | None = None,
    password: str | None = None,
) -> Session | None:
    """
    Return the current session, signing in the dev user if there is none.

    Args:
        client: Connected client
        email: Overrides settings.dev_user_email
        password: Overrides settings.dev_user_password

    Returns:
        The active session, or None if sign-in failed
    """
    current = await client.auth.get_session()
    if current.data and current.data["session"] is not None:
        return current.data["session"]

    credentials = {
        "email": email or client.settings.dev_user_email,
        "password": password or client.settings.dev_user_password,
    }

    # Fails harmlessly when the account already exists
    signup = await client.auth.sign_up(credentials)
    if signup.error is not None:
        logger.debug(f"Dev sign-up skipped: {signup.error}")

    signin = await client.auth.sign_in_with_password(credentials)
    if signin.error is not None:
        logger.warning(f"Dev sign-in failed for {credentials['email']}: {signin.error}")
        return None

    return client.auth.current_session
