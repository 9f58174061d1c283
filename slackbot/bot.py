"""Bot - owns the handler registry, exposes the registration API and runs the HTTP server."""
import functools
import logging
import re
import threading
import time
from pathlib import Path
from typing import Any, Callable

import uvicorn
from fastapi import FastAPI

from slackbot.config import BotSettings, get_env, load_config
from slackbot.dispatcher import Dispatcher
from slackbot.errors import AlreadyBootedError, SlackbotError
from slackbot.filters import (
    BlockActionFilter,
    CallbackIdFilter,
    KeywordFilter,
    KeywordMode,
    Predicate,
    ViewCallbackIdFilter,
    match_all,
)
from slackbot.models import EventContainer, EventsAPIEvent, InnerEventKind, InteractionType
from slackbot.registry import (
    FlatOptionsProducer,
    GroupedOptionsProducer,
    InteractionRoute,
    Registry,
)
from slackbot import transport

STARTUP_TIMEOUT = 10.0


def _callback_name(callback: Callable) -> str:
    return getattr(callback, "__qualname__", None) or getattr(callback, "__name__", None) or repr(callback)


class FilteredEventHandler:
    """Event handler that passes an EventContainer to callback when predicate accepts the event."""

    def __init__(self, predicate: Predicate, callback: Callable):
        self.predicate = predicate
        self.callback = callback
        self.__name__ = _callback_name(callback)

    def __call__(self, bot: "Bot", event: EventsAPIEvent) -> None:
        if self.predicate(event):
            self.callback(bot, EventContainer.from_api_event(event))


def _discard_reply(callback: Callable) -> Callable:
    """Interaction kinds other than view submissions never answer with a body."""

    @functools.wraps(callback)
    def adapter(bot: "Bot", interaction: Any) -> None:
        callback(bot, interaction)
        return None

    return adapter


class Bot:
    """Slack bot: register handlers, then boot() to serve the /slack endpoints."""

    def __init__(
        self,
        token: str,
        signing_secret: str,
        *,
        settings: BotSettings | None = None,
        logger: logging.Logger | None = None,
    ):
        self.token = token
        self.signing_secret = signing_secret
        self.settings = settings or BotSettings()
        self._logger = logger
        self.registry = Registry()
        self.dispatcher = Dispatcher(self, self.registry)
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None
        self._boot_lock = threading.Lock()

    @classmethod
    def from_config(cls, project_root: Path | None = None, **kwargs: Any) -> "Bot":
        """Build a bot from config/settings.yaml and SLACK_TOKEN / SLACK_SIGNING_SECRET."""
        env = get_env(project_root)
        return cls(env.slack_token, env.signing_secret, settings=load_config(project_root), **kwargs)

    @property
    def logger(self) -> logging.Logger:
        if self._logger is None:
            self._logger = logging.getLogger("slackbot")
        return self._logger

    def set_logger(self, logger: logging.Logger) -> None:
        self._logger = logger

    # -- commands and events --------------------------------------------------

    def register_command(self, name: str, callback: Callable) -> None:
        """Register the handler for /<name>. A later registration replaces an earlier one."""
        self.logger.debug("RegisterCommand %s", name)
        self.registry.register_command(name, callback)

    def register_event(self, kind: str, callback: Callable) -> None:
        """Append a handler for an inner event kind. Handlers run in registration order."""
        self.logger.debug("RegisterEvent %s", kind)
        self.registry.register_event(kind, callback)

    def register_keyword(
        self,
        pattern: str | re.Pattern,
        callback: Callable,
        *,
        mode: KeywordMode | None = None,
    ) -> None:
        """Call callback with an EventContainer for every message whose text matches pattern."""
        keyword = KeywordFilter(pattern, mode or self.settings.keyword_mode)
        self.logger.debug("RegisterKeyword %r", keyword)
        self.registry.register_event(InnerEventKind.MESSAGE, FilteredEventHandler(keyword, callback))

    def register_typed_event(self, kind: str, callback: Callable) -> None:
        """Like register_event, but callback receives an EventContainer with the typed inner event."""
        self.logger.debug("RegisterEvent %s (typed)", kind)
        self.registry.register_event(kind, FilteredEventHandler(match_all, callback))

    def register_message_event(self, callback: Callable) -> None:
        self.register_typed_event(InnerEventKind.MESSAGE, callback)

    def register_app_mention_event(self, callback: Callable) -> None:
        self.register_typed_event(InnerEventKind.APP_MENTION, callback)

    def register_reaction_added_event(self, callback: Callable) -> None:
        self.register_typed_event(InnerEventKind.REACTION_ADDED, callback)

    def register_reaction_removed_event(self, callback: Callable) -> None:
        self.register_typed_event(InnerEventKind.REACTION_REMOVED, callback)

    def register_member_joined_channel_event(self, callback: Callable) -> None:
        self.register_typed_event(InnerEventKind.MEMBER_JOINED_CHANNEL, callback)

    def register_app_home_opened_event(self, callback: Callable) -> None:
        self.register_typed_event(InnerEventKind.APP_HOME_OPENED, callback)

    # -- interactions ---------------------------------------------------------

    def register_interaction(
        self,
        interaction_type: InteractionType | str,
        callback: Callable,
        predicate: Predicate = match_all,
    ) -> None:
        """Append a handler for an interaction type. The first handler returning a value answers."""
        interaction_type = InteractionType(interaction_type)
        self.logger.debug("RegisterInteractive %s", interaction_type.value)
        route = InteractionRoute(handler=callback, predicate=predicate, name=_callback_name(callback))
        self.registry.register_interaction(interaction_type, route)

    def register_message_action_interaction(self, callback_id: str, callback: Callable) -> None:
        self.register_interaction(
            InteractionType.MESSAGE_ACTION, _discard_reply(callback), CallbackIdFilter(callback_id)
        )

    def register_shortcut_interaction(self, callback_id: str, callback: Callable) -> None:
        self.register_interaction(
            InteractionType.SHORTCUT, _discard_reply(callback), CallbackIdFilter(callback_id)
        )

    def register_block_actions_interaction(self, filter: BlockActionFilter, callback: Callable) -> None:
        self.register_interaction(InteractionType.BLOCK_ACTIONS, _discard_reply(callback), filter)

    def register_view_submission_interaction(self, callback_id: str, callback: Callable) -> None:
        """callback may return a ViewSubmissionResponse, or None for no response."""
        self.register_interaction(
            InteractionType.VIEW_SUBMISSION, callback, ViewCallbackIdFilter(callback_id)
        )

    def register_view_closed_interaction(self, callback_id: str, callback: Callable) -> None:
        self.register_interaction(
            InteractionType.VIEW_CLOSED, _discard_reply(callback), ViewCallbackIdFilter(callback_id)
        )

    # -- select menus ---------------------------------------------------------

    def register_select_options(self, callback_id: str, callback: Callable) -> None:
        """callback(bot, interaction) returns an OptionsResponse."""
        self.logger.debug("RegisterSelectOptions %s", callback_id)
        self.registry.register_menu_options(callback_id, FlatOptionsProducer(callback))

    def register_select_option_groups(self, callback_id: str, callback: Callable) -> None:
        """callback(bot, interaction) returns an OptionGroupsResponse."""
        self.logger.debug("RegisterSelectOptionGroups %s", callback_id)
        self.registry.register_menu_options(callback_id, GroupedOptionsProducer(callback))

    def register_menu_options(self, callback_id: str, producer: Any) -> None:
        """Store a FlatOptionsProducer or GroupedOptionsProducer; other values fail at dispatch."""
        self.logger.debug("RegisterMenuOptions %s", callback_id)
        self.registry.register_menu_options(callback_id, producer)

    # -- decorators -----------------------------------------------------------

    def command(self, name: str) -> Callable:
        def decorator(fn: Callable) -> Callable:
            self.register_command(name, fn)
            return fn

        return decorator

    def event(self, kind: str, *, typed: bool = False) -> Callable:
        def decorator(fn: Callable) -> Callable:
            if typed:
                self.register_typed_event(kind, fn)
            else:
                self.register_event(kind, fn)
            return fn

        return decorator

    def keyword(self, pattern: str | re.Pattern, *, mode: KeywordMode | None = None) -> Callable:
        def decorator(fn: Callable) -> Callable:
            self.register_keyword(pattern, fn, mode=mode)
            return fn

        return decorator

    def message_action(self, callback_id: str) -> Callable:
        return self._decorate(self.register_message_action_interaction, callback_id)

    def shortcut(self, callback_id: str) -> Callable:
        return self._decorate(self.register_shortcut_interaction, callback_id)

    def block_action(self, action_id: str = "", block_id: str = "") -> Callable:
        return self._decorate(
            self.register_block_actions_interaction, BlockActionFilter(action_id, block_id)
        )

    def view_submission(self, callback_id: str) -> Callable:
        return self._decorate(self.register_view_submission_interaction, callback_id)

    def view_closed(self, callback_id: str) -> Callable:
        return self._decorate(self.register_view_closed_interaction, callback_id)

    def select_options(self, callback_id: str) -> Callable:
        return self._decorate(self.register_select_options, callback_id)

    def select_option_groups(self, callback_id: str) -> Callable:
        return self._decorate(self.register_select_option_groups, callback_id)

    @staticmethod
    def _decorate(register: Callable, key: Any) -> Callable:
        def decorator(fn: Callable) -> Callable:
            register(key, fn)
            return fn

        return decorator

    # -- serving --------------------------------------------------------------

    def create_app(self, *, verify: bool | None = None) -> FastAPI:
        """FastAPI app serving /slack. Signature checks follow settings unless verify is given."""
        if verify is None:
            verify = self.settings.verify_signatures
        return transport.create_app(self, verify=verify)

    def prepare_app(self, app: FastAPI, *, verify: bool | None = None) -> FastAPI:
        if verify is None:
            verify = self.settings.verify_signatures
        return transport.prepare_app(app, self, verify=verify)

    @property
    def booted(self) -> bool:
        return self._server is not None

    def boot(self, host: str | None = None, port: int | None = None, *, app: FastAPI | None = None) -> None:
        """Start serving on a background thread. Raises AlreadyBootedError if already serving."""
        host = host or self.settings.host
        port = self.settings.port if port is None else port
        with self._boot_lock:
            if self._server is not None:
                raise AlreadyBootedError()

            self.logger.info("Booting slackbot on %s:%s", host, port)
            app = self.prepare_app(app) if app is not None else self.create_app()
            config = uvicorn.Config(
                app,
                host=host,
                port=port,
                log_level=self.settings.log_level.lower(),
                timeout_graceful_shutdown=self.settings.shutdown_timeout,
            )
            server = uvicorn.Server(config)
            thread = threading.Thread(target=server.run, name="slackbot-server", daemon=True)
            thread.start()

            deadline = time.monotonic() + STARTUP_TIMEOUT
            while not server.started:
                if not thread.is_alive() or time.monotonic() > deadline:
                    server.should_exit = True
                    raise SlackbotError(f"failed to start server on {host}:{port}")
                time.sleep(0.05)

            self._server = server
            self._thread = thread
            self.logger.info("Slackbot serving %s", self.registry.describe())

    def shutdown(self, timeout: float | None = None) -> None:
        """Stop serving: let in-flight requests drain for up to timeout seconds, then force close."""
        timeout = self.settings.shutdown_timeout if timeout is None else timeout
        with self._boot_lock:
            server, thread = self._server, self._thread
            if server is None or thread is None:
                return

            self.logger.info("Shutting down slackbot (timeout %.1fs)", timeout)
            # uvicorn reads this when it starts draining; 0 cancels in-flight requests at once.
            server.config.timeout_graceful_shutdown = timeout
            server.should_exit = True
            thread.join(timeout)
            if thread.is_alive():
                self.logger.warning("Server forced to shutdown after %.1fs", timeout)
                server.force_exit = True
                thread.join(1.0)

            self._server = None
            self._thread = None

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Boot and block until interrupted, then shut down."""
        self.boot(host, port)
        try:
            while self._thread is not None and self._thread.is_alive():
                self._thread.join(0.5)
        except KeyboardInterrupt:
            self.logger.info("Interrupted")
        finally:
            self.shutdown()
