"""
flaskbase - Exception types.

Expected failures (offline, bad credentials, HTTP errors) never propagate as
exceptions: they end up in Result.error. Only caller bugs the query builder
can detect are raised.
"""


class FlaskbaseError(Exception):
    """Base class for all flaskbase errors."""


class TransportError(FlaskbaseError):
    """The request never produced a usable HTTP response."""

    def __init__(self, message: str, *, method: str, url: str):
        super().__init__(message)
        self.method = method
        self.url = url

    def __repr__(self) -> str:
        return f"TransportError({self.args[0]!r}, method={self.method!r}, url={self.url!r})"


class QueryBuilderError(FlaskbaseError):
    """A query chain was used in a way it cannot honour."""
