"""Dispatcher - decodes inbound payloads, selects registered handlers and builds the reply.

Four pipelines:
- commands: one handler per command name, its reply becomes the body
- events: broadcast to every handler of the inner event kind
- interactions: first handler returning a value wins
- menu options: one producer per callback id, flat or grouped options
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Literal, Mapping

from pydantic import ValidationError

from slackbot.errors import (
    BadPayloadError,
    BadRequestError,
    CommandNotFoundError,
    EmptyPayloadError,
    InvalidCommandError,
    UnknownOptionsCallbackError,
)
from slackbot.models import EventsAPIEvent, EventType, InteractionCallback, Message, SlashCommand, to_body
from slackbot.registry import FlatOptionsProducer, GroupedOptionsProducer, Registry


@dataclass(frozen=True)
class Reply:
    """What the transport writes back. Status is always 200; failures are raised instead."""

    body: Any = None
    media_type: Literal["json", "text", "empty"] = "empty"
    status_code: int = 200

    @classmethod
    def empty(cls) -> "Reply":
        return cls()

    @classmethod
    def json_body(cls, value: Any) -> "Reply":
        return cls(body=to_body(value), media_type="json")

    @classmethod
    def plain_text(cls, value: str) -> "Reply":
        return cls(body=value, media_type="text")


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def decode_interaction(payload: str | None) -> InteractionCallback:
    """Decode the form field `payload` of an interactive or menu request."""
    if not payload:
        raise EmptyPayloadError()
    try:
        return InteractionCallback.model_validate_json(payload)
    except ValidationError as e:
        raise BadPayloadError(f"bad payload: {e.error_count()} validation error(s)") from e


class Dispatcher:
    """Runs the dispatch pipelines for one bot. Holds no per-request state."""

    def __init__(self, bot: Any, registry: Registry):
        self.bot = bot
        self.registry = registry

    @property
    def logger(self) -> logging.Logger:
        return self.bot.logger

    # -- commands -----------------------------------------------------------

    def dispatch_command(self, name: str, form: Mapping[str, Any]) -> Reply:
        try:
            command = SlashCommand.model_validate(dict(form))
        except ValidationError as e:
            raise BadRequestError("unparseable slash command") from e
        if not command.command:
            raise InvalidCommandError()

        callback = self.registry.lookup_command(name)
        if callback is None:
            raise CommandNotFoundError(f"no handler for command {name!r}")

        self.logger.debug("Dispatching command %s (%s)", name, command.command)
        reply = callback(self.bot, command)
        if _is_empty(reply):
            return Reply.empty()
        if isinstance(reply, str):
            reply = Message(text=reply)
        return Reply.json_body(reply)

    # -- events -------------------------------------------------------------

    def dispatch_event(self, body: bytes | str) -> Reply:
        try:
            data = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise BadRequestError("event body is not valid JSON") from e
        if not isinstance(data, dict):
            raise BadRequestError("event body is not a JSON object")
        try:
            event = EventsAPIEvent.model_validate(data)
        except ValidationError as e:
            raise BadRequestError("unparseable event envelope") from e

        if event.type == EventType.URL_VERIFICATION:
            if not isinstance(data.get("challenge"), str):
                raise BadRequestError("url verification without a challenge")
            return Reply.plain_text(event.challenge)

        if event.type == EventType.CALLBACK_EVENT:
            if not event.inner_kind:
                raise BadRequestError("callback event without an inner event type")
            self._broadcast(event)
            return Reply.empty()

        if event.type == EventType.APP_RATE_LIMITED:
            self.logger.warning(
                "Slack rate limited event delivery (team=%s, minute=%s)",
                event.team_id,
                event.minute_rate_limited,
            )
            return Reply.empty()

        raise BadRequestError(f"unknown event envelope type {event.type!r}")

    def _broadcast(self, event: EventsAPIEvent) -> None:
        callbacks = self.registry.lookup_events(event.inner_kind)
        self.logger.debug("Dispatching %s event to %d handler(s)", event.inner_kind, len(callbacks))
        isolate = self.bot.settings.isolate_event_handlers
        for callback in callbacks:
            if not isolate:
                callback(self.bot, event)
                continue
            try:
                callback(self.bot, event)
            except Exception:
                self.logger.exception(
                    "Event handler %s failed for %s event",
                    getattr(callback, "__name__", repr(callback)),
                    event.inner_kind,
                )

    # -- interactions ---------------------------------------------------------

    def dispatch_interaction(self, payload: str | None) -> Reply:
        interaction = decode_interaction(payload)
        routes = self.registry.lookup_interactions(interaction.type)
        self.logger.debug(
            "Dispatching %s interaction to %d route(s)",
            interaction.type.value if interaction.type else "untyped",
            len(routes),
        )
        for route in routes:
            if not route.matches(interaction):
                continue
            response = route.handler(self.bot, interaction)
            if response is not None:
                return Reply.json_body(response)
        return Reply.empty()

    # -- select menus ---------------------------------------------------------

    def dispatch_menu_options(self, payload: str | None) -> Reply:
        interaction = decode_interaction(payload)
        producer = self.registry.lookup_menu_options(interaction.callback_id)
        if producer is None:
            self.logger.debug("No menu options registered for %r", interaction.callback_id)
            return Reply.empty()

        if isinstance(producer, (FlatOptionsProducer, GroupedOptionsProducer)):
            options = producer.callback(self.bot, interaction)
        else:
            raise UnknownOptionsCallbackError(
                f"menu options for {interaction.callback_id!r} registered as {type(producer).__name__}"
            )
        if _is_empty(options):
            return Reply.empty()
        return Reply.json_body(options)
