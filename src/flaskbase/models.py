"""
flaskbase - Shared models.

Result is the {data, error} pair every operation resolves to.
User/Session mirror the payload of GET /auth/session.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from flaskbase.errors import FlaskbaseError


@dataclass(frozen=True)
class Result:
    """
    Normalized outcome of one API call.

    Exactly one of data/error is set, except for a successful call whose
    payload is legitimately empty (data=None, error=None).
    """

    data: Any = None
    error: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return data, raising if the call failed."""
        if self.error is not None:
            if isinstance(self.error, BaseException):
                raise FlaskbaseError(str(self.error)) from self.error
            raise FlaskbaseError(str(self.error))
        return self.data


class User(BaseModel):
    """Authenticated user as reported by the API."""

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str
    email: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        # Integer primary keys come back as numbers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class Session(BaseModel):
    """Signed-in session. Replaced wholesale on every change."""

    model_config = ConfigDict(frozen=True)

    user: User

    @classmethod
    def from_payload(cls, payload: Any) -> "Session | None":
        """
        Build a session from a /auth/session style body ({"user": {...} | null}).

        Raises:
            pydantic.ValidationError: if the user object is malformed
        """
        if not isinstance(payload, dict):
            return None
        user = payload.get("user")
        if not user:
            return None
        return cls(user=User.model_validate(user))


class AuthEvent(str, Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


class AuthState(str, Enum):
    UNKNOWN = "UNKNOWN"
    SIGNED_OUT = "SIGNED_OUT"
    SIGNED_IN = "SIGNED_IN"


class HttpMethod(str, Enum):
    """Request method of a query chain (READ/CREATE/UPDATE/DELETE)."""

    GET = "GET"
    POST = "POST"
    PATCH = "PATCH"
    DELETE = "DELETE"
