import json
import time

import pytest
from fastapi.testclient import TestClient

from slackbot import Bot
from slackbot.config import BotSettings
from slackbot.verifier import SIGNATURE_HEADER, TIMESTAMP_HEADER, compute_signature

TOKEN = "token"
SECRET = "secret"


@pytest.fixture
def bot():
    return Bot(TOKEN, SECRET, settings=BotSettings(verify_signatures=False))


@pytest.fixture
def client(bot):
    """Client for an app without signature checks. Build it after registering handlers or not, routes are central."""
    with TestClient(bot.create_app()) as c:
        yield c


@pytest.fixture
def lenient_client(bot):
    """Client that turns handler exceptions into 500 responses instead of raising."""
    with TestClient(bot.create_app(), raise_server_exceptions=False) as c:
        yield c


def signed_headers(body: bytes | str, secret: str = SECRET, timestamp: str | None = None) -> dict:
    timestamp = timestamp or str(int(time.time()))
    return {
        TIMESTAMP_HEADER: timestamp,
        SIGNATURE_HEADER: compute_signature(secret, timestamp, body),
    }


def callback_event(kind: str, **fields) -> dict:
    return {"type": "event_callback", "team_id": "T1", "event": {"type": kind, **fields}}


def interaction_form(**payload) -> dict:
    return {"payload": json.dumps(payload)}
