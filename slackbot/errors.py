"""Errors raised by the dispatch core. Each carries the HTTP status the transport answers with."""


class SlackbotError(Exception):
    status_code = 500
    default_message = "slackbot error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class BadRequestError(SlackbotError):
    status_code = 400
    default_message = "bad request"


class EmptyPayloadError(BadRequestError):
    default_message = "empty payload"


class BadPayloadError(BadRequestError):
    default_message = "bad payload"


class InvalidCommandError(BadRequestError):
    default_message = "invalid command"


class CommandNotFoundError(SlackbotError):
    status_code = 404
    default_message = "no handler for command"


class AuthInitializationError(SlackbotError):
    """Request cannot be checked at all (missing headers, stale timestamp, no secret)."""

    status_code = 500
    default_message = "cannot initialize request verifier"


class SignatureMismatchError(SlackbotError):
    status_code = 401
    default_message = "signature mismatch"


class AlreadyBootedError(SlackbotError):
    default_message = "bot already booted"


class UnknownOptionsCallbackError(SlackbotError):
    default_message = "unknown options callback"
