import hashlib
import hmac
import time

import pytest
from fastapi.testclient import TestClient

from slackbot import Bot
from slackbot.config import BotSettings
from slackbot.errors import AuthInitializationError, SignatureMismatchError
from slackbot.verifier import (
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    SignatureVerifier,
    compute_signature,
    verify_signature,
)

from conftest import SECRET, signed_headers


def test_compute_signature_matches_reference_hmac():
    expected = "v0=" + hmac.new(b"s", b"v0:1700000000:{}", hashlib.sha256).hexdigest()
    assert compute_signature("s", "1700000000", "{}") == expected
    assert compute_signature("s", "1700000000", b"{}") == expected


def test_one_byte_change_fails_verification():
    signature = compute_signature("s", "1700000000", "{}")
    assert verify_signature("s", "1700000000", "{}", signature)
    assert not verify_signature("s", "1700000000", "{ }", signature)
    assert not verify_signature("t", "1700000000", "{}", signature)
    assert not verify_signature("s", "1700000001", "{}", signature)


def test_from_headers_requires_both_headers():
    with pytest.raises(AuthInitializationError):
        SignatureVerifier.from_headers({}, "s")
    with pytest.raises(AuthInitializationError):
        SignatureVerifier.from_headers({TIMESTAMP_HEADER: "1700000000"}, "s", now=1700000000)
    with pytest.raises(AuthInitializationError):
        SignatureVerifier.from_headers({SIGNATURE_HEADER: "v0=abc"}, "s", now=1700000000)


def test_from_headers_rejects_bad_timestamps_and_missing_secret():
    headers = {SIGNATURE_HEADER: "v0=abc", TIMESTAMP_HEADER: "yesterday"}
    with pytest.raises(AuthInitializationError):
        SignatureVerifier.from_headers(headers, "s")

    headers = {SIGNATURE_HEADER: "v0=abc", TIMESTAMP_HEADER: "1700000000"}
    with pytest.raises(AuthInitializationError):
        SignatureVerifier.from_headers(headers, "s", now=1700000000 + 301)
    with pytest.raises(AuthInitializationError):
        SignatureVerifier.from_headers(headers, "", now=1700000000)


def test_ensure_raises_on_mismatch():
    headers = {
        SIGNATURE_HEADER: compute_signature("s", "1700000000", "{}"),
        TIMESTAMP_HEADER: "1700000000",
    }
    verifier = SignatureVerifier.from_headers(headers, "s", now=1700000000)
    verifier.ensure(b"{}")
    with pytest.raises(SignatureMismatchError):
        verifier.ensure(b"{}x")


@pytest.fixture
def verified_bot():
    return Bot("token", SECRET, settings=BotSettings(verify_signatures=True))


def test_unsigned_request_is_server_error(verified_bot):
    with TestClient(verified_bot.create_app()) as client:
        resp = client.post("/slack/events", json={"type": "url_verification", "challenge": "x"})
    assert resp.status_code == 500
    assert resp.content == b""


def test_signed_request_reaches_handler_with_body_intact(verified_bot):
    body = '{"type": "url_verification", "challenge": "abc123"}'
    headers = {**signed_headers(body), "Content-Type": "application/json"}
    with TestClient(verified_bot.create_app()) as client:
        resp = client.post("/slack/events", content=body, headers=headers)
    assert resp.status_code == 200
    assert resp.text == "abc123"


def test_signed_form_request_can_still_be_decoded(verified_bot):
    hits = []
    verified_bot.register_command("test", lambda bot, command: hits.append(command.text))
    body = "command=%2Ftest&text=hello"
    headers = {**signed_headers(body), "Content-Type": "application/x-www-form-urlencoded"}
    with TestClient(verified_bot.create_app()) as client:
        resp = client.post("/slack/commands/test", content=body, headers=headers)
    assert resp.status_code == 200
    assert hits == ["hello"]


def test_wrong_secret_is_unauthorized(verified_bot):
    body = '{"type": "url_verification", "challenge": "abc123"}'
    headers = signed_headers(body, secret="secret2")
    with TestClient(verified_bot.create_app()) as client:
        resp = client.post("/slack/events", content=body, headers=headers)
    assert resp.status_code == 401


def test_stale_timestamp_is_server_error(verified_bot):
    body = "{}"
    headers = signed_headers(body, timestamp=str(int(time.time()) - 3600))
    with TestClient(verified_bot.create_app()) as client:
        resp = client.post("/slack/events", content=body, headers=headers)
    assert resp.status_code == 500


def test_verification_can_be_disabled_per_app(verified_bot):
    with TestClient(verified_bot.create_app(verify=False)) as client:
        resp = client.post("/slack/events", json={"type": "url_verification", "challenge": "ok"})
    assert resp.status_code == 200
    assert resp.text == "ok"
