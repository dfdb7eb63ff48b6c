"""
flaskbase - Client façade.

One object exposing the Supabase-shaped surface used by the app:

    client = create_client()
    await client.from_("chats").select("*").order("created_at", ascending=False)
    await client.auth.get_session()
    await client.rpc("reset_monthly_credits")
    await client.functions.invoke("chat-router", body={...})
    await client.storage.from_("uploads").upload("a/b.pdf", data)
"""

import logging
from typing import Any

import httpx

from flaskbase.auth.session import AuthClient
from flaskbase.config import ClientSettings, get_settings
from flaskbase.db.query import QueryBuilder
from flaskbase.models import Result
from flaskbase.rpc import FunctionsClient, RpcClient
from flaskbase.storage import StorageClient
from flaskbase.transport import ApiTransport

logger = logging.getLogger(__name__)


class FlaskbaseClient:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        settings: ClientSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings or get_settings()
        self.transport = ApiTransport(
            base_url or self.settings.flask_api_url,
            timeout=self.settings.request_timeout_seconds,
            client=http_client,
        )
        self.auth = AuthClient(self.transport, poll_interval=self.settings.auth_poll_interval_seconds)
        self.functions = FunctionsClient(self.transport)
        self.storage = StorageClient(self.transport)
        self._rpc = RpcClient(self.transport)

    @property
    def base_url(self) -> str:
        return self.transport.base_url

    def from_(self, collection: str) -> QueryBuilder:
        """Start a query chain on a collection."""
        return QueryBuilder(self.transport, collection)

    # supabase-py spelling
    table = from_

    async def rpc(self, fn: str, params: dict[str, Any] | None = None) -> Result:
        return await self._rpc(fn, params)

    async def aclose(self) -> None:
        await self.auth.close()
        await self.transport.aclose()

    async def __aenter__(self) -> "FlaskbaseClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def create_client(
    base_url: str | None = None,
    *,
    settings: ClientSettings | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> FlaskbaseClient:
    """Create a new, independent client."""
    return FlaskbaseClient(base_url, settings=settings, http_client=http_client)


# Singleton client instance
_client: FlaskbaseClient | None = None


def get_client() -> FlaskbaseClient:
    """
    Get the process-wide client.

    Uses singleton pattern so the session cookie and cached auth state are shared.
    """
    global _client

    if _client is None:
        _client = create_client()
        logger.debug(f"Created client for {_client.base_url}")

    return _client


async def close_client() -> None:
    """Tear down the process-wide client (cancels auth polling)."""
    global _client

    if _client is not None:
        await _client.aclose()
        _client = None
