#!/usr/bin/env python3
# ABOUTME: Exception types raised by the DeepLX client and config store.
# ABOUTME: Each failure mode has its own class so callers can tell them apart.

from typing import Optional

DEEPLX_DOCKER_COMMAND = "docker run -d -p 1188:1188 ghcr.io/owo-network/deeplx:latest"
DEEPLX_PROJECT_URL = "https://github.com/OwO-Network/DeepLX"


class DeepLXError(Exception):
    """Base class for every error the client reports to the user."""


class EmptyTextError(DeepLXError):
    """Raised when there is nothing to translate."""

    def __init__(self, message: str = "no text to translate"):
        super().__init__(message)


class ConnectionFailedError(DeepLXError):
    """The server could not be reached or the request could not be sent."""

    def __init__(self, message: str, server_url: str = ""):
        super().__init__(message)
        self.server_url = server_url


class ServerUnreachableError(ConnectionFailedError):
    """Nothing is listening at the server URL (refused or unresolvable).

    The message carries guidance for starting a local DeepLX server.
    """

    def __init__(self, server_url: str, during_request: bool = False):
        if during_request:
            message = (
                f"cannot connect to DeepLX server at {server_url}\n\n"
                "It looks like DeepLX is not running. To fix this:\n\n"
                "1. Start DeepLX with Docker:\n"
                f"   {DEEPLX_DOCKER_COMMAND}\n\n"
                "2. Or use a different server:\n"
                '   translate --url https://your-server.com "Hello world"\n\n'
                "3. Or configure a default server:\n"
                "   translate config set --url https://your-server.com\n\n"
                f"For more info: {DEEPLX_PROJECT_URL}"
            )
        else:
            message = (
                f"cannot connect to DeepLX server at {server_url}\n\n"
                "No DeepLX server found. To start one:\n\n"
                f"  {DEEPLX_DOCKER_COMMAND}\n\n"
                "Or specify a different server:\n\n"
                '  translate --url https://your-server.com "Hello world"'
            )
        super().__init__(message, server_url)


class RequestTimeoutError(ConnectionFailedError):
    """The server did not answer within the timeout."""

    def __init__(self, server_url: str, timeout: float):
        super().__init__(
            f"request to {server_url} timed out after {timeout:g}s", server_url
        )
        self.timeout = timeout


class HTTPStatusError(DeepLXError):
    """The server answered with a non-200 HTTP status."""

    def __init__(self, message: str, status: int, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class AuthenticationError(HTTPStatusError):
    def __init__(self, body: str = ""):
        super().__init__("authentication failed - check your token", 401, body)


class RateLimitError(HTTPStatusError):
    def __init__(self, body: str = ""):
        super().__init__("rate limit exceeded - please wait and try again", 429, body)


class EndpointNotFoundError(HTTPStatusError):
    def __init__(self, server_url: str, body: str = ""):
        super().__init__(
            f"server endpoint not found - check your URL: {server_url}", 404, body
        )


class ServerError(HTTPStatusError):
    def __init__(self, status: int, body: str = ""):
        super().__init__(f"server returned status {status}: {body}", status, body)


class ResponseParseError(DeepLXError):
    """The response body was not the JSON object we expect."""

    def __init__(self, detail: str, body: Optional[str] = None):
        super().__init__(f"failed to parse response: {detail}")
        self.body = body


class TranslationFailedError(DeepLXError):
    """HTTP 200, but the payload reports a failure code."""

    def __init__(self, code: int, message: str):
        super().__init__(f"translation failed with code {code}: {message}")
        self.code = code
        self.server_message = message


class ConfigError(DeepLXError):
    """The config file could not be located or written."""
