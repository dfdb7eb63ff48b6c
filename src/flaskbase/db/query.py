"""
flaskbase - Chainable query builder.

Translates a fluent chain against one collection into exactly one request:

    rows = await client.from_("chats").select("*").eq("user_id", uid).order("created_at", ascending=False).limit(20)
    chat = await client.from_("chats").insert({"title": "New chat"}).select().single()
    await client.from_("chats").delete().eq("id", chat_id)

Filter/order/pagination calls only mutate the builder's RequestState. Nothing
touches the network until a terminal call (execute/single/maybe_single or
awaiting the builder) is awaited, and a builder issues its request at most
once no matter how many times it is awaited.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from flaskbase.errors import QueryBuilderError
from flaskbase.models import HttpMethod, Result
from flaskbase.transport import NO_BODY, ApiTransport

logger = logging.getLogger(__name__)


def to_param(value: Any) -> str:
    """String conversion used for filter values on the wire."""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return "null"
    return str(value)


# =============================================================================
# Request State
# =============================================================================


@dataclass
class RequestState:
    """Everything one chain accumulates before it is executed."""

    filters: dict[str, Any] = field(default_factory=dict)
    order: tuple[str, bool] | None = None
    range: tuple[int, int] | None = None
    limit: int | None = None
    method: HttpMethod = HttpMethod.GET
    payload: Any = None

    def pagination(self) -> tuple[int, int] | None:
        """Inclusive (from, to) window. An explicit range always beats limit."""
        if self.range is not None:
            return self.range
        if self.limit is not None:
            return (0, max(0, self.limit - 1))
        return None

    def to_params(self) -> list[tuple[str, str]]:
        params = [(f"eq.{column}", to_param(value)) for column, value in self.filters.items()]

        if self.order is not None:
            column, ascending = self.order
            params.append(("order", f"{column}.{'asc' if ascending else 'desc'}"))

        window = self.pagination()
        if window is not None:
            params.append(("from", str(window[0])))
            params.append(("to", str(window[1])))

        return params


# =============================================================================
# Pending Result
# =============================================================================


class ExecutionState(str, Enum):
    PENDING = "pending"
    EXECUTING = "executing"
    DONE = "done"


class PendingResult:
    """
    Deferred Result of a terminal call.

    The wrapped coroutine starts on the first await and runs once; every
    later await resolves to the same Result.
    """

    def __init__(self, run: Callable[[], Awaitable[Result]]):
        self._run = run
        self._future: asyncio.Future | None = None

    @property
    def state(self) -> ExecutionState:
        if self._future is None:
            return ExecutionState.PENDING
        if not self._future.done():
            return ExecutionState.EXECUTING
        return ExecutionState.DONE

    @property
    def result(self) -> Result | None:
        """The settled Result, or None while pending/executing."""
        if self.state is ExecutionState.DONE:
            return self._future.result()
        return None

    def _start(self) -> asyncio.Future:
        if self._future is None:
            self._future = asyncio.ensure_future(self._run())
        return self._future

    def __await__(self):
        return self._start().__await__()

    def then(self, fn: Callable[[Result], Result]) -> "PendingResult":
        """Derive a PendingResult that reuses this execution."""

        async def derived() -> Result:
            return fn(await self)

        return PendingResult(derived)


def first_row(result: Result) -> Result:
    """single()/maybe_single() shaping: first element of a list, None if empty."""
    if result.error is not None:
        return result
    if isinstance(result.data, list):
        return Result(data=result.data[0] if result.data else None, error=None)
    return result


# =============================================================================
# Builders
# =============================================================================


class QueryBuilder:
    """Fluent request builder for one collection."""

    def __init__(self, transport: ApiTransport, collection: str):
        self._transport = transport
        self.collection = collection
        self.state = RequestState()
        self._execution: PendingResult | None = None

    def _check_open(self) -> None:
        if self._execution is not None:
            raise QueryBuilderError(
                f"Query on '{self.collection}' was already executed; start a new chain"
            )

    def _set_method(self, method: HttpMethod, payload: Any = None) -> None:
        self._check_open()
        if self.state.method is not HttpMethod.GET:
            raise QueryBuilderError(
                f"Query on '{self.collection}' is already a {self.state.method.value}; "
                f"cannot also {method.value}"
            )
        self.state.method = method
        self.state.payload = payload

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def select(self, columns: str = "*") -> "QueryBuilder":
        # The API always returns full rows; kept for call-site parity.
        self._check_open()
        return self

    def eq(self, column: str, value: Any) -> "QueryBuilder":
        self._check_open()
        self.state.filters[column] = value
        return self

    def order(self, column: str, *, ascending: bool = True) -> "QueryBuilder":
        self._check_open()
        self.state.order = (column, ascending)
        return self

    def range(self, start: int, end: int) -> "QueryBuilder":
        self._check_open()
        self.state.range = (start, end)
        return self

    def limit(self, count: int) -> "QueryBuilder":
        self._check_open()
        self.state.limit = count
        return self

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def insert(self, payload: Any) -> "QueryBuilder":
        self._set_method(HttpMethod.POST, payload)
        return self

    def update(self, payload: Any) -> "QueryBuilder":
        self._set_method(HttpMethod.PATCH, payload)
        return self

    def delete(self) -> "DeleteBuilder":
        self._set_method(HttpMethod.DELETE)
        return DeleteBuilder(self)

    # -------------------------------------------------------------------------
    # Terminal calls
    # -------------------------------------------------------------------------

    def execute(self) -> PendingResult:
        """Freeze the chain and return its (memoized) pending execution."""
        if self._execution is None:
            self._execution = PendingResult(self._run)
        return self._execution

    def single(self) -> PendingResult:
        # Does not enforce "exactly one row": more than one row yields the first.
        return self.execute().then(first_row)

    def maybe_single(self) -> PendingResult:
        return self.execute().then(first_row)

    def __await__(self):
        return self.execute().__await__()

    async def _run(self) -> Result:
        state = self.state
        if state.method is HttpMethod.DELETE and not state.filters:
            logger.warning(f"Unscoped DELETE on '{self.collection}'")

        params = state.to_params()
        body = state.payload if state.method in (HttpMethod.POST, HttpMethod.PATCH) else NO_BODY

        logger.debug(f"{state.method.value} /db/{self.collection} {params}")
        return await self._transport.request(
            f"/db/{self.collection}",
            method=state.method.value,
            params=params,
            body=body,
        )

    def __repr__(self) -> str:
        return f"QueryBuilder({self.collection!r}, {self.state!r})"


class DeleteBuilder:
    """Restricted builder returned by delete(): scope with eq(), then await."""

    def __init__(self, parent: QueryBuilder):
        self._parent = parent

    def eq(self, column: str, value: Any) -> "DeleteBuilder":
        self._parent.eq(column, value)
        return self

    def execute(self) -> PendingResult:
        return self._parent.execute()

    def __await__(self):
        return self._parent.execute().__await__()
