"""Request signature verification - Slack's v0 HMAC-SHA256 signing scheme."""
import hashlib
import hmac
import time
from typing import Awaitable, Callable, Mapping

from fastapi import Request
from starlette.requests import ClientDisconnect

from slackbot.errors import AuthInitializationError, BadRequestError, SignatureMismatchError
from slackbot.logger import get_logger

SIGNATURE_HEADER = "X-Slack-Signature"
TIMESTAMP_HEADER = "X-Slack-Request-Timestamp"
VERSION = "v0"
DEFAULT_MAX_AGE = 300

logger = get_logger(__name__)


def compute_signature(secret: str, timestamp: str, body: bytes | str) -> str:
    """Return "v0=" + hex HMAC-SHA256 of "v0:<timestamp>:<body>" keyed by secret."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    base = f"{VERSION}:{timestamp}:".encode("utf-8") + body
    digest = hmac.new(secret.encode("utf-8"), base, hashlib.sha256).hexdigest()
    return f"{VERSION}={digest}"


class SignatureVerifier:
    """Checks one request's signature. Build it with from_headers, then call ensure(body)."""

    def __init__(self, secret: str, timestamp: str, signature: str):
        self.secret = secret
        self.timestamp = timestamp
        self.signature = signature

    @classmethod
    def from_headers(
        cls,
        headers: Mapping[str, str],
        secret: str,
        *,
        max_age: int = DEFAULT_MAX_AGE,
        now: float | None = None,
    ) -> "SignatureVerifier":
        if not secret:
            raise AuthInitializationError("signing secret is not configured")
        signature = headers.get(SIGNATURE_HEADER) or ""
        timestamp = headers.get(TIMESTAMP_HEADER) or ""
        if not signature or not timestamp:
            raise AuthInitializationError("missing signature headers")
        try:
            sent_at = int(timestamp)
        except ValueError:
            raise AuthInitializationError(f"malformed request timestamp: {timestamp!r}") from None
        current = time.time() if now is None else now
        if max_age and abs(current - sent_at) > max_age:
            raise AuthInitializationError("request timestamp outside the allowed window")
        return cls(secret, timestamp, signature)

    def expected(self, body: bytes | str) -> str:
        return compute_signature(self.secret, self.timestamp, body)

    def ensure(self, body: bytes | str) -> None:
        if not hmac.compare_digest(self.expected(body).encode("utf-8"), self.signature.encode("utf-8")):
            raise SignatureMismatchError()


def verify_signature(
    secret: str,
    timestamp: str,
    body: bytes | str,
    signature: str,
) -> bool:
    """Boolean form of the check, without the timestamp window."""
    try:
        SignatureVerifier(secret, timestamp, signature).ensure(body)
    except SignatureMismatchError:
        return False
    return True


def request_verifier(
    secret_getter: Callable[[], str],
    max_age: int = DEFAULT_MAX_AGE,
) -> Callable[[Request], Awaitable[None]]:
    """FastAPI dependency that rejects requests not signed with the bot's secret.

    Request.body() caches the bytes on the request, so the form or JSON
    decoding done by the route afterwards reads the same body again.
    """

    async def verify(request: Request) -> None:
        logger.debug("Verifying slack request signature for %s", request.url.path)
        verifier = SignatureVerifier.from_headers(request.headers, secret_getter(), max_age=max_age)
        try:
            body = await request.body()
        except ClientDisconnect as e:
            raise BadRequestError("could not read request body") from e
        verifier.ensure(body)

    return verify
