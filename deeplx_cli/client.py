#!/usr/bin/env python3
# ABOUTME: HTTP client for DeepLX-compatible translation servers.
# ABOUTME: Probes reachability, posts translation requests, and maps failures to errors.

import json
from typing import Optional

import requests
from rich.console import Console
from rich.markup import escape

from deeplx_cli.config import APP_NAME, APP_VERSION, DEFAULT_TIMEOUT
from deeplx_cli.errors import (
    AuthenticationError,
    ConnectionFailedError,
    EmptyTextError,
    EndpointNotFoundError,
    RateLimitError,
    RequestTimeoutError,
    ResponseParseError,
    ServerError,
    ServerUnreachableError,
    TranslationFailedError,
)
from deeplx_cli.models import TranslationRequest, TranslationResponse

console = Console(stderr=True)


class DeepLXClient:
    """Client for a single DeepLX server.

    One client is created per invocation; it owns a requests session that is
    closed with the client. No retries are attempted: the first failure is
    raised as a DeepLXError subclass.
    """

    def __init__(
        self,
        server_url: str,
        token: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        debug: bool = False,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the client.

        Args:
            server_url: Base URL of the server, e.g. http://localhost:1188
            token: Optional bearer token
            timeout: Timeout in seconds for each network call
            debug: Write request/response traces to stderr
            session: Optional pre-built session (mainly for tests)
        """
        self.server_url = server_url
        self.token = token or ""
        self.timeout = timeout
        self.debug = debug
        self.session = session or requests.Session()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self) -> None:
        self.session.close()

    @property
    def translate_url(self) -> str:
        return f"{self.server_url.rstrip('/')}/translate"

    def _debug(self, message: str) -> None:
        if self.debug:
            console.print(f"[dim]Debug:[/] {escape(message)}", soft_wrap=True, highlight=False)

    def check_connection(self) -> None:
        """Check that something answers at the base URL.

        Any HTTP response counts as reachable, whatever its status.

        Raises:
            ServerUnreachableError: Connection refused or host not found
            RequestTimeoutError: No answer within the timeout
            ConnectionFailedError: Any other transport failure
        """
        try:
            response = self.session.get(self.server_url, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise RequestTimeoutError(self.server_url, self.timeout) from e
        except requests.exceptions.SSLError as e:
            raise ConnectionFailedError(
                f"server not reachable at {self.server_url}: {e}", self.server_url
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise ServerUnreachableError(self.server_url) from e
        except requests.exceptions.RequestException as e:
            raise ConnectionFailedError(
                f"server not reachable at {self.server_url}: {e}", self.server_url
            ) from e
        response.close()

    def translate(
        self,
        text: str,
        source_lang: str = "auto",
        target_lang: str = "en",
        probe: bool = True,
    ) -> TranslationResponse:
        """Translate text through the server's /translate endpoint.

        Args:
            text: Text to translate
            source_lang: Source language code, or "auto"
            target_lang: Target language code
            probe: Check reachability with a GET on the base URL first

        Returns:
            The parsed response; `data` holds the translation

        Raises:
            DeepLXError: One of its subclasses, depending on what went wrong
        """
        if not text or not text.strip():
            raise EmptyTextError()

        if probe:
            self.check_connection()

        request = TranslationRequest(text, source_lang, target_lang)
        body = json.dumps(request.to_dict(), ensure_ascii=False)
        self._debug(f"Request body: {body}")

        headers = {
            "Content-Type": "application/json",
            "User-Agent": f"{APP_NAME}/{APP_VERSION}",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
            self._debug("Using token authentication")
        else:
            self._debug("No token provided")

        try:
            response = self.session.post(
                self.translate_url,
                data=body.encode("utf-8"),
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise RequestTimeoutError(self.server_url, self.timeout) from e
        except requests.exceptions.SSLError as e:
            raise ConnectionFailedError(f"failed to send request: {e}", self.server_url) from e
        except requests.exceptions.ConnectionError as e:
            raise ServerUnreachableError(self.server_url, during_request=True) from e
        except requests.exceptions.RequestException as e:
            raise ConnectionFailedError(f"failed to send request: {e}", self.server_url) from e

        response_text = response.text
        self._debug(f"Response status: {response.status_code}")
        self._debug(f"Response body: {response_text}")

        return self._parse_response(response.status_code, response_text)

    def _parse_response(self, status: int, body: str) -> TranslationResponse:
        """Map an HTTP status and body onto a response or an error."""
        if status == 401:
            raise AuthenticationError(body)
        if status == 429:
            raise RateLimitError(body)
        if status == 404:
            raise EndpointNotFoundError(self.server_url, body)
        if status != 200:
            raise ServerError(status, body)

        try:
            payload = json.loads(body)
        except ValueError as e:
            raise ResponseParseError(str(e), body) from e

        if not isinstance(payload, dict):
            raise ResponseParseError("expected a JSON object", body)

        try:
            result = TranslationResponse.from_dict(payload)
        except (TypeError, ValueError) as e:
            raise ResponseParseError(str(e), body) from e

        if result.code != 200:
            raise TranslationFailedError(result.code, result.data)

        return result
