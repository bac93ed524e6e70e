"""Bearer token sources for authenticating the recognize connection.

Token acquisition and refresh belong to the caller's auth stack; these
adapters only present an existing token, or a token-producing callable, through
the TokenSource interface.
"""

import inspect
from collections.abc import Awaitable, Callable

from .exceptions import AuthError


class StaticTokenSource:
    """A fixed, pre-acquired bearer token."""

    def __init__(self, token: str):
        self._token = token

    async def get_bearer_token(self) -> str:
        if not self._token:
            raise AuthError("No bearer token configured")
        return self._token


class CallableTokenSource:
    """Wraps a sync or async callable that returns a fresh token on each call.

    Exceptions raised by the callable surface as AuthError.
    """

    def __init__(self, fetch: Callable[[], str | Awaitable[str]]):
        self._fetch = fetch

    async def get_bearer_token(self) -> str:
        try:
            token = self._fetch()
            if inspect.isawaitable(token):
                token = await token
        except AuthError:
            raise
        except Exception as e:
            raise AuthError(f"Failed to obtain bearer token: {e}") from e
        if not token:
            raise AuthError("Token source returned an empty token")
        return str(token)


__all__ = ["CallableTokenSource", "StaticTokenSource"]
