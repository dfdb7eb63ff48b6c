"""
flaskbase - Auth session façade.

The Flask API keeps the session in a cookie and only offers a stateless
"who am I" endpoint (GET /auth/session). AuthClient turns that into an
observable session:

- one process-wide cached Session (None when signed out)
- on_auth_state_change() subscribers fed by a single shared poll task
- sign-in/sign-up/sign-out update the cache immediately

Usage:
    sub = client.auth.on_auth_state_change(lambda event, session: print(event, session))
    await client.auth.sign_in_with_password({"email": "a@b.c", "password": "secret"})
    ...
    sub.unsubscribe()
"""

import asyncio
import inspect
import itertools
import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError

from flaskbase.models import AuthEvent, AuthState, Result, Session, User
from flaskbase.transport import ApiTransport

logger = logging.getLogger(__name__)

AuthCallback = Callable[[AuthEvent, Session | None], Any]


class Subscription:
    """Handle for one on_auth_state_change() registration."""

    def __init__(self, owner: "AuthClient", key: int):
        self._owner: AuthClient | None = owner
        self.id = key

    @property
    def active(self) -> bool:
        return self._owner is not None and self._owner._has_subscriber(self.id)

    def unsubscribe(self) -> None:
        """Stop notifications. Safe to call repeatedly or after the client closed."""
        if self._owner is None:
            return
        self._owner._remove_subscriber(self.id)
        self._owner = None


class AuthClient:
    """
    Session façade over the cookie-based /auth endpoints.

    on_auth_state_change() must be called from inside a running event loop,
    since it starts the poll task.
    """

    def __init__(self, transport: ApiTransport, *, poll_interval: float = 1.5):
        self._transport = transport
        self.poll_interval = poll_interval

        self._session: Session | None = None
        self._state = AuthState.UNKNOWN
        # Value the poller compares against; seeded from the cache when polling starts
        self._last_observed: Session | None = None

        self._subscribers: dict[int, AuthCallback] = {}
        self._ids = itertools.count(1)
        self._poll_task: asyncio.Task | None = None
        self._tick_lock = asyncio.Lock()

    # -------------------------------------------------------------------------
    # Cached reads
    # -------------------------------------------------------------------------

    @property
    def current_session(self) -> Session | None:
        return self._session

    @property
    def state(self) -> AuthState:
        return self._state

    def _set_session(self, session: Session | None) -> None:
        self._session = session
        self._state = AuthState.SIGNED_IN if session is not None else AuthState.SIGNED_OUT

    async def _fetch_session(self) -> Result:
        result = await self._transport.request("/auth/session")
        if result.error is not None:
            return result
        try:
            session = Session.from_payload(result.data)
        except ValidationError as e:
            logger.warning(f"Malformed session payload: {e}")
            return Result(data=None, error=e)
        return Result(data=session, error=None)

    # -------------------------------------------------------------------------
    # One-shot session reads
    # -------------------------------------------------------------------------

    async def get_session(self) -> Result:
        """Fetch the session now and refresh the cache. Subscribers are not notified."""
        result = await self._fetch_session()
        if result.error is not None:
            return Result(data=None, error=result.error)
        self._set_session(result.data)
        return Result(data={"session": result.data}, error=None)

    async def get_user(self) -> Result:
        """Same fetch as get_session(), shaped as {"user": User | None}."""
        result = await self.get_session()
        if result.error is not None:
            return result
        session = result.data["session"]
        return Result(data={"user": session.user if session else None}, error=None)

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def on_auth_state_change(self, callback: AuthCallback) -> Subscription:
        """
        Register a callback(event, session) fired whenever the polled session changes.

        Callbacks may be plain functions or coroutine functions.
        """
        key = next(self._ids)
        self._subscribers[key] = callback
        self._ensure_polling()
        return Subscription(self, key)

    def _has_subscriber(self, key: int) -> bool:
        return key in self._subscribers

    def _remove_subscriber(self, key: int) -> None:
        self._subscribers.pop(key, None)
        if not self._subscribers:
            self._stop_polling()

    def _ensure_polling(self) -> None:
        if self._poll_task is not None and not self._poll_task.done():
            return
        self._last_observed = self._session
        self._poll_task = asyncio.get_running_loop().create_task(self._poll_loop())

    def _stop_polling(self) -> None:
        if self._poll_task is not None:
            self._poll_task.cancel()
            self._poll_task = None

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            try:
                await self.poll_once()
            except Exception:
                logger.exception("Session poll tick failed")

    async def poll_once(self) -> bool:
        """
        Run one poll tick.

        Returns:
            True if the session changed and subscribers were notified
        """
        async with self._tick_lock:
            result = await self._fetch_session()
            if result.error is not None:
                logger.debug(f"Session poll failed, skipping tick: {result.error}")
                return False

            next_session: Session | None = result.data
            if next_session == self._last_observed:
                if self._state is AuthState.UNKNOWN:
                    self._set_session(next_session)
                return False

            self._last_observed = next_session
            self._set_session(next_session)
            event = AuthEvent.SIGNED_IN if next_session is not None else AuthEvent.SIGNED_OUT
            logger.info(f"Auth state changed: {event.value}")

            for key, callback in list(self._subscribers.items()):
                # Skip callbacks removed while an earlier one was running
                if key not in self._subscribers:
                    continue
                try:
                    outcome = callback(event, next_session)
                    if inspect.isawaitable(outcome):
                        await outcome
                except Exception:
                    logger.exception(f"Auth subscriber {key} failed on {event.value}")

            return True

    # -------------------------------------------------------------------------
    # One-shot auth operations
    # -------------------------------------------------------------------------

    def _accept_user(self, result: Result) -> Result:
        if result.error is not None:
            return Result(data=None, error=result.error)

        payload = result.data.get("user") if isinstance(result.data, dict) else None
        try:
            user = User.model_validate(payload) if payload else None
        except ValidationError as e:
            logger.warning(f"Malformed user payload: {e}")
            return Result(data=None, error=e)
        if user is not None:
            self._set_session(Session(user=user))
        return Result(data={"user": user}, error=None)

    async def sign_in_with_password(self, credentials: Mapping[str, str]) -> Result:
        """Sign in with {"email", "password"}. The cache is updated on success only."""
        result = await self._transport.request(
            "/auth/signin",
            method="POST",
            body={"email": credentials["email"], "password": credentials["password"]},
        )
        return self._accept_user(result)

    async def sign_up(self, credentials: Mapping[str, str]) -> Result:
        """Create an account; the API signs the new user in."""
        result = await self._transport.request(
            "/auth/signup",
            method="POST",
            body={"email": credentials["email"], "password": credentials["password"]},
        )
        return self._accept_user(result)

    async def sign_out(self) -> Result:
        """Sign out. The cache is cleared even if the request fails."""
        result = await self._transport.request("/auth/signout", method="POST")
        self._set_session(None)
        return Result(data=None, error=result.error)

    async def update_user(self, payload: dict[str, Any]) -> Result:
        result = await self._transport.request("/auth/update_user", method="POST", body=payload)
        if result.error is not None:
            return Result(data=None, error=result.error)
        return Result(data=result.data, error=None)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def close(self) -> None:
        """Cancel polling and drop every subscription."""
        self._subscribers.clear()
        task = self._poll_task
        self._stop_polling()
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
