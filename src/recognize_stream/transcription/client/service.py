#!/usr/bin/env python3
"""Speech-to-text service client.

SpeechToTextClient is the entry point most callers use: it resolves the
service URL and transport defaults from configuration, holds the caller's
collaborators (token source, REST invoker), and builds RecognizeStream
instances for WebSocket recognition.
"""

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from ...core.config import ConfigLoader, get_config, setup_logging
from .exceptions import StreamingError
from .interfaces import RestInvoker, TokenSource
from .internal.streaming import RecognizeStream
from .internal.transport import Connector
from .types import StreamOptions

logger = setup_logging(__name__)


class SpeechToTextClient:
    """Client for the speech-to-text service.

    Args:
        url: Service base URL (http(s) or ws(s)); defaults to configuration
        token_source: Supplies a bearer token for each new connection
        headers: Extra headers sent with every request and upgrade
        verify_tls: Set False to accept self-signed certificates
        rest_invoker: Performs REST calls for the model endpoints
        connector: Transport factory for WebSocket connections
        config: Configuration loader; the global one by default
        diagnostics: Logger handed to every stream this client creates

    """

    def __init__(
        self,
        url: str | None = None,
        token_source: TokenSource | None = None,
        headers: Mapping[str, str] | None = None,
        verify_tls: bool | None = None,
        rest_invoker: RestInvoker | None = None,
        connector: Connector | None = None,
        config: ConfigLoader | None = None,
        diagnostics: logging.Logger | None = None,
    ):
        self.config = config or get_config()
        self.url = url or self.config.service_url
        self.token_source = token_source
        self.headers = dict(headers or {})
        self.verify_tls = self.config.verify_tls if verify_tls is None else verify_tls
        self.rest_invoker = rest_invoker
        self.connector = connector
        self._log = diagnostics or logger

    def recognize_using_websocket(
        self,
        *,
        structured: bool | None = None,
        headers: Mapping[str, str] | None = None,
        **params: Any,
    ) -> RecognizeStream:
        """Create a recognition stream.

        Recognition parameters are passed as keywords; hyphenated wire names
        via ``**{"content-type": "audio/wav"}`` or the ``content_type`` alias.
        No connection is made until the first audio chunk is written.

        Args:
            structured: Yield raw service frames instead of final text;
                defaults to configuration
            headers: Extra headers for this connection only
            **params: Recognition parameters

        Returns:
            A RecognizeStream that has not connected yet

        """
        options = StreamOptions.build(
            url=self.url,
            headers={**self.headers, **(headers or {})},
            structured=self.config.structured if structured is None else structured,
            verify_tls=self.verify_tls,
            default_model=self.config.default_model,
            watermark=self.config.watermark,
            poll_interval=self.config.poll_interval,
            open_timeout=self.config.open_timeout,
            diagnostics=self._log,
            **params,
        )
        self._log.debug(f"Creating recognize stream for {options.url}")
        return RecognizeStream(
            options,
            connector=self.connector,
            token_source=self.token_source,
            diagnostics=self._log,
        )

    async def list_models(self) -> Any:
        """List the recognition models the service offers."""
        return await self._invoke("GET", "/v1/models")

    async def get_model(self, model_id: str) -> Any:
        """Describe one recognition model."""
        if not model_id:
            raise ValueError("model_id must be provided")
        return await self._invoke("GET", f"/v1/models/{quote(model_id, safe='')}")

    async def _invoke(self, method: str, path: str) -> Any:
        if self.rest_invoker is None:
            raise StreamingError("No REST invoker configured for this client")
        headers = dict(self.headers)
        if self.token_source is not None:
            token = await self.token_source.get_bearer_token()
            headers["Authorization"] = f"Bearer {token}"
        self._log.debug(f"{method} {path}")
        return await self.rest_invoker.invoke(method, path, headers=headers)


__all__ = ["SpeechToTextClient"]
