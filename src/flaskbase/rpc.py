"""
flaskbase - RPC and functions.

Both are JSON POSTs: /rpc/{fn} for database-side procedures and
/functions/{name} for server functions (chat router, support mail).
"""

from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from flaskbase.models import Result
from flaskbase.transport import ApiTransport

if TYPE_CHECKING:
    from flaskbase.client import FlaskbaseClient


class RpcClient:
    """Callable RPC entry point: await client.rpc("fn", {...})."""

    def __init__(self, transport: ApiTransport):
        self._transport = transport

    async def __call__(self, fn: str, params: dict[str, Any] | None = None) -> Result:
        return await self._transport.request(f"/rpc/{fn}", method="POST", body=params or {})


class FunctionsClient:
    def __init__(self, transport: ApiTransport):
        self._transport = transport

    async def invoke(self, name: str, *, body: Any = None) -> Result:
        return await self._transport.request(f"/functions/{name}", method="POST", body=body or {})


# =============================================================================
# App endpoints
# =============================================================================


class ChatRouterRequest(BaseModel):
    """Body of /functions/chat-router (camelCase on the wire)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    action: Literal["send", "regenerate"]
    version: Literal["V1", "V2", "V3"]
    chat_id: str | None = None
    text: str | None = None
    last_user_text: str | None = None


async def reset_monthly_credits(client: "FlaskbaseClient") -> Result:
    """Reset chat credits; data is {"v1", "v2", "v3"}."""
    return await client.rpc("reset_monthly_credits")


async def reset_monthly_ocr_credits(client: "FlaskbaseClient") -> Result:
    """Reset OCR credits; data is {"ocr_bill", "ocr_bank"}."""
    return await client.rpc("reset_monthly_ocr_credits")


async def chat_router(
    client: "FlaskbaseClient",
    action: Literal["send", "regenerate"],
    version: Literal["V1", "V2", "V3"],
    *,
    chat_id: str | None = None,
    text: str | None = None,
    last_user_text: str | None = None,
) -> Result:
    """
    Send or regenerate a chat turn.

    Returns:
        Result whose data carries "assistant" and the remaining "credits"
    """
    request = ChatRouterRequest(
        action=action,
        version=version,
        chat_id=chat_id,
        text=text,
        last_user_text=last_user_text,
    )
    body = request.model_dump(by_alias=True, exclude_none=True)
    return await client.functions.invoke("chat-router", body=body)


async def contact_support(client: "FlaskbaseClient", subject: str, message: str) -> Result:
    return await client.functions.invoke(
        "contact-support", body={"subject": subject, "message": message}
    )
