"""Protocol interfaces for the collaborators the client consumes."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol


class TokenSource(Protocol):
    """Supplies bearer tokens; raises AuthError when none can be obtained."""

    async def get_bearer_token(self) -> str: ...


class RestInvoker(Protocol):
    """Issues one HTTP call and returns the parsed JSON body.

    Raises HttpError(status, body) for non-success responses.
    """

    async def invoke(
        self,
        method: str,
        path: str,
        query: Mapping[str, Any] | None = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any: ...
