"""Handler registry - commands, events, interactions and menu options behind one read/write lock."""
import threading
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator

from slackbot.filters import Predicate, match_all
from slackbot.models import InteractionType

CommandCallback = Callable[[Any, Any], Any]
EventCallback = Callable[[Any, Any], None]
InteractionHandler = Callable[[Any, Any], Any]
OptionsCallback = Callable[[Any, Any], Any]


class ReadWriteLock:
    """Many readers or one writer. Waiting writers block new readers."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


@dataclass(frozen=True)
class InteractionRoute:
    """An interaction handler and the predicate that decides whether it runs."""

    handler: InteractionHandler
    predicate: Predicate = match_all
    name: str = ""

    def matches(self, interaction: Any) -> bool:
        return self.predicate(interaction)


@dataclass(frozen=True)
class FlatOptionsProducer:
    """Menu callback returning an OptionsResponse (a flat option list)."""

    callback: OptionsCallback


@dataclass(frozen=True)
class GroupedOptionsProducer:
    """Menu callback returning an OptionGroupsResponse (grouped options)."""

    callback: OptionsCallback


@dataclass
class Registry:
    """Owned by a single Bot. Entries live as long as the bot and are never removed."""

    _commands: dict[str, CommandCallback] = field(default_factory=dict)
    _events: dict[str, list[EventCallback]] = field(default_factory=lambda: defaultdict(list))
    _interactions: dict[InteractionType, list[InteractionRoute]] = field(
        default_factory=lambda: defaultdict(list)
    )
    _menu_options: dict[str, Any] = field(default_factory=dict)
    _lock: ReadWriteLock = field(default_factory=ReadWriteLock)

    def register_command(self, name: str, handler: CommandCallback) -> None:
        if not name:
            raise ValueError("command name must not be empty")
        with self._lock.write():
            self._commands[name] = handler

    def register_event(self, kind: str, handler: EventCallback) -> None:
        with self._lock.write():
            self._events[kind].append(handler)

    def register_interaction(self, interaction_type: InteractionType | str, route: InteractionRoute) -> None:
        interaction_type = InteractionType(interaction_type)
        with self._lock.write():
            self._interactions[interaction_type].append(route)

    def register_menu_options(self, identifier: str, producer: Any) -> None:
        """Store a menu producer as-is; its shape is only checked when a menu request arrives."""
        with self._lock.write():
            self._menu_options[identifier] = producer

    def lookup_command(self, name: str) -> CommandCallback | None:
        with self._lock.read():
            return self._commands.get(name)

    def lookup_events(self, kind: str) -> tuple[EventCallback, ...]:
        with self._lock.read():
            return tuple(self._events.get(kind, ()))

    def lookup_interactions(self, interaction_type: InteractionType | str | None) -> tuple[InteractionRoute, ...]:
        if interaction_type is None:
            return ()
        with self._lock.read():
            return tuple(self._interactions.get(InteractionType(interaction_type), ()))

    def lookup_menu_options(self, identifier: str) -> Any | None:
        with self._lock.read():
            return self._menu_options.get(identifier)

    def command_names(self) -> list[str]:
        with self._lock.read():
            return sorted(self._commands)

    def describe(self) -> dict[str, int]:
        """Handler counts per map, for logs and the CLI."""
        with self._lock.read():
            return {
                "commands": len(self._commands),
                "events": sum(len(v) for v in self._events.values()),
                "interactions": sum(len(v) for v in self._interactions.values()),
                "menu_options": len(self._menu_options),
            }
