"""
Session watcher.

Keeps a {user, session, loading} snapshot in sync with the auth façade:
subscribes to changes first, then resolves the initial session.
"""

from flaskbase.auth.session import AuthClient, Subscription
from flaskbase.models import AuthEvent, Session, User


class SessionWatcher:
    def __init__(self, auth: AuthClient):
        self._auth = auth
        self._subscription: Subscription | None = None
        self._active = False

        self.session: Session | None = None
        self.loading = True

    @property
    def user(self) -> User | None:
        return self.session.user if self.session else None

    async def start(self) -> "SessionWatcher":
        self._active = True
        self._subscription = self._auth.on_auth_state_change(self._on_change)

        result = await self._auth.get_session()
        if not self._active:
            return self
        self.session = result.data["session"] if result.data else None
        self.loading = False
        return self

    def _on_change(self, event: AuthEvent, session: Session | None) -> None:
        if not self._active:
            return
        self.session = session

    def stop(self) -> None:
        self._active = False
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def __aenter__(self) -> "SessionWatcher":
        return await self.start()

    async def __aexit__(self, *exc_info) -> None:
        self.stop()
