#!/usr/bin/env python3
# ABOUTME: Tests for the DeepLX HTTP client.
# ABOUTME: Verifies request building, status mapping, and connection error handling.

import json
import socket
import time

import pytest
import requests
from unittest.mock import MagicMock

from deeplx_cli.client import DeepLXClient
from deeplx_cli.errors import (
    AuthenticationError,
    ConnectionFailedError,
    DeepLXError,
    EmptyTextError,
    EndpointNotFoundError,
    HTTPStatusError,
    RateLimitError,
    RequestTimeoutError,
    ResponseParseError,
    ServerError,
    ServerUnreachableError,
    TranslationFailedError,
)

SERVER_URL = "http://deeplx.test:1188"


def make_response(status_code=200, body=None):
    """Build a fake requests response."""
    response = MagicMock()
    response.status_code = status_code
    if body is None:
        body = {"code": 200, "id": 1, "data": "Hola", "alternatives": []}
    response.text = body if isinstance(body, str) else json.dumps(body)
    return response


@pytest.fixture
def session():
    """A mock requests session whose probe succeeds and translation returns 'Hola'."""
    mock_session = MagicMock(spec=requests.Session)
    mock_session.get.return_value = make_response(200, "DeepLX: Please visit the website")
    mock_session.post.return_value = make_response()
    return mock_session


@pytest.fixture
def client(session):
    return DeepLXClient(SERVER_URL, timeout=7, session=session)


def sent_body(session):
    return json.loads(session.post.call_args.kwargs["data"])


def test_translate_success(client, session):
    """A 200 response with payload code 200 returns the parsed response."""
    session.post.return_value = make_response(200, {
        "code": 200,
        "id": 8300079001,
        "data": "Hola",
        "alternatives": ["Buenas", "Saludos"],
        "source_lang": "EN",
        "target_lang": "ES",
        "method": "Free",
    })

    result = client.translate("Hello", "en", "es")

    assert result.data == "Hola"
    assert result.alternatives == ["Buenas", "Saludos"]
    assert result.id == 8300079001
    assert result.method == "Free"
    assert result.source_lang == "EN"


def test_translate_posts_json_to_translate_endpoint(client, session):
    client.translate("Hello world", "en", "de")

    session.post.assert_called_once()
    assert session.post.call_args.args[0] == f"{SERVER_URL}/translate"
    assert session.post.call_args.kwargs["timeout"] == 7
    headers = session.post.call_args.kwargs["headers"]
    assert headers["Content-Type"] == "application/json"
    assert headers["User-Agent"].startswith("translate/")
    assert "Authorization" not in headers
    assert sent_body(session) == {
        "text": "Hello world",
        "source_lang": "EN",
        "target_lang": "DE",
    }


def test_translate_upper_cases_language_codes(client, session):
    """Language codes go out upper-case whatever the input case."""
    client.translate("Hello", "auto", "zh-hans")

    body = sent_body(session)
    assert body["source_lang"] == "AUTO"
    assert body["target_lang"] == "ZH-HANS"


def test_translate_sends_bearer_token(session):
    client = DeepLXClient(SERVER_URL, token="s3cret", session=session)
    client.translate("Hello")

    headers = session.post.call_args.kwargs["headers"]
    assert headers["Authorization"] == "Bearer s3cret"


def test_translate_keeps_non_ascii_text(client, session):
    client.translate("こんにちは", "ja", "en")

    raw = session.post.call_args.kwargs["data"]
    assert "こんにちは".encode("utf-8") in raw
    assert sent_body(session)["text"] == "こんにちは"


def test_translate_strips_trailing_slash(session):
    client = DeepLXClient(SERVER_URL + "/", session=session)
    client.translate("Hello")

    assert session.post.call_args.args[0] == f"{SERVER_URL}/translate"


def test_translate_probes_base_url_first(client, session):
    client.translate("Hello")

    session.get.assert_called_once_with(SERVER_URL, timeout=7)


def test_translate_without_probe(client, session):
    client.translate("Hello", probe=False)

    session.get.assert_not_called()
    session.post.assert_called_once()


def test_probe_accepts_any_status(client, session):
    """Anything answering at the base URL counts as reachable."""
    session.get.return_value = make_response(404, "not found")

    client.check_connection()


def test_translate_empty_text(client, session):
    """Empty text is rejected before any network call."""
    with pytest.raises(EmptyTextError):
        client.translate("   ")

    session.get.assert_not_called()
    session.post.assert_not_called()


@pytest.mark.parametrize("status, error_class, message", [
    (401, AuthenticationError, "authentication failed"),
    (429, RateLimitError, "rate limit exceeded"),
    (404, EndpointNotFoundError, "endpoint not found"),
])
def test_translate_http_errors(client, session, status, error_class, message):
    session.post.return_value = make_response(status, "nope")

    with pytest.raises(error_class) as excinfo:
        client.translate("Hello")

    assert message in str(excinfo.value)
    assert excinfo.value.status == status
    assert isinstance(excinfo.value, HTTPStatusError)


def test_translate_endpoint_not_found_mentions_url(client, session):
    session.post.return_value = make_response(404, "404 page not found")

    with pytest.raises(EndpointNotFoundError) as excinfo:
        client.translate("Hello")
    assert SERVER_URL in str(excinfo.value)


def test_translate_other_status_includes_body(client, session):
    session.post.return_value = make_response(502, "Bad Gateway")

    with pytest.raises(ServerError) as excinfo:
        client.translate("Hello")

    assert str(excinfo.value) == "server returned status 502: Bad Gateway"
    assert excinfo.value.body == "Bad Gateway"


def test_translate_malformed_json(client, session):
    session.post.return_value = make_response(200, "<html>oops</html>")

    with pytest.raises(ResponseParseError) as excinfo:
        client.translate("Hello")
    assert "failed to parse response" in str(excinfo.value)


def test_translate_non_object_json(client, session):
    session.post.return_value = make_response(200, "[1, 2, 3]")

    with pytest.raises(ResponseParseError):
        client.translate("Hello")


def test_translate_bad_field_types(client, session):
    session.post.return_value = make_response(200, {"code": 200, "data": "x", "alternatives": "nope"})

    with pytest.raises(ResponseParseError):
        client.translate("Hello")


def test_translate_payload_failure_code(client, session):
    """A 200 response can still carry an application-level failure."""
    session.post.return_value = make_response(200, {"code": 503, "data": "busy"})

    with pytest.raises(TranslationFailedError) as excinfo:
        client.translate("Hello")

    assert excinfo.value.code == 503
    assert excinfo.value.server_message == "busy"
    assert "busy" in str(excinfo.value)


def test_translate_null_alternatives(client, session):
    session.post.return_value = make_response(200, {"code": 200, "data": "Hallo", "alternatives": None})

    result = client.translate("Hello", "en", "de")
    assert result.alternatives == []


def test_probe_connection_refused(client, session):
    session.get.side_effect = requests.exceptions.ConnectionError("Connection refused")

    with pytest.raises(ServerUnreachableError) as excinfo:
        client.translate("Hello")

    message = str(excinfo.value)
    assert "cannot connect to DeepLX server" in message
    assert "docker run -d -p 1188:1188" in message
    session.post.assert_not_called()


def test_request_connection_refused(client, session):
    session.post.side_effect = requests.exceptions.ConnectionError("Connection refused")

    with pytest.raises(ServerUnreachableError) as excinfo:
        client.translate("Hello")

    message = str(excinfo.value)
    assert "It looks like DeepLX is not running" in message
    assert "translate config set --url" in message


def test_probe_timeout(client, session):
    session.get.side_effect = requests.exceptions.ConnectTimeout("timed out")

    with pytest.raises(RequestTimeoutError) as excinfo:
        client.check_connection()
    assert "timed out after 7s" in str(excinfo.value)


def test_request_timeout(client, session):
    session.post.side_effect = requests.exceptions.ReadTimeout("timed out")

    with pytest.raises(RequestTimeoutError):
        client.translate("Hello")


def test_invalid_url(client, session):
    session.get.side_effect = requests.exceptions.MissingSchema("No scheme supplied")

    with pytest.raises(ConnectionFailedError) as excinfo:
        client.check_connection()
    assert "server not reachable" in str(excinfo.value)
    assert not isinstance(excinfo.value, ServerUnreachableError)


def test_all_errors_share_a_base_class():
    for error in (
        EmptyTextError(),
        ServerUnreachableError(SERVER_URL),
        AuthenticationError(),
        TranslationFailedError(500, "x"),
        ResponseParseError("x"),
    ):
        assert isinstance(error, DeepLXError)


def test_debug_output_goes_to_stderr(session, capsys):
    client = DeepLXClient(SERVER_URL, token="abc", debug=True, session=session)
    client.translate("Hello", "en", "es")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Request body:" in captured.err
    assert "Using token authentication" in captured.err
    assert "Response status: 200" in captured.err
    assert "abc" not in captured.err


def test_context_manager_closes_session(session):
    with DeepLXClient(SERVER_URL, session=session) as client:
        client.translate("Hello")

    session.close.assert_called_once()


def test_unreachable_server_fails_fast(monkeypatch):
    """A closed local port is reported as unreachable well within the timeout."""
    for name in ("HTTP_PROXY", "http_proxy", "ALL_PROXY", "all_proxy"):
        monkeypatch.delenv(name, raising=False)

    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()

    start = time.monotonic()
    with DeepLXClient(f"http://127.0.0.1:{port}", timeout=3) as client:
        with pytest.raises(ConnectionFailedError):
            client.translate("Hello")
    assert time.monotonic() - start < 10
