"""Filter predicates - pure match rules over decoded events and interactions.

An empty or unset filter field always matches.
"""
import re
from dataclasses import dataclass
from typing import Any, Callable, Literal

from slackbot.models import EventsAPIEvent, InteractionCallback

Predicate = Callable[[Any], bool]
KeywordMode = Literal["regex", "substring"]


@dataclass(frozen=True)
class CallbackIdFilter:
    """Matches message actions and shortcuts by the payload's callback_id."""

    callback_id: str = ""

    def __call__(self, interaction: InteractionCallback) -> bool:
        return not self.callback_id or interaction.callback_id == self.callback_id


@dataclass(frozen=True)
class ViewCallbackIdFilter:
    """Matches view submissions and view closes by the nested view's callback_id."""

    callback_id: str = ""

    def __call__(self, interaction: InteractionCallback) -> bool:
        return not self.callback_id or interaction.view.callback_id == self.callback_id


@dataclass(frozen=True)
class BlockActionFilter:
    """Matches block_actions against the first action in the payload.

    Specify action_id to only match certain actions, block_id to only match
    certain blocks, or both. A payload without actions never matches.
    """

    action_id: str = ""
    block_id: str = ""

    def __call__(self, interaction: InteractionCallback) -> bool:
        if not interaction.actions:
            return False
        action = interaction.actions[0]
        action_match = not self.action_id or action.action_id == self.action_id
        block_match = not self.block_id or action.block_id == self.block_id
        return action_match and block_match


class KeywordFilter:
    """Matches message events whose text contains a pattern.

    regex mode searches anywhere in the text; substring mode is a
    case-insensitive containment test. A compiled pattern is always used as a regex.
    """

    def __init__(self, pattern: str | re.Pattern, mode: KeywordMode = "regex"):
        if mode not in ("regex", "substring"):
            raise ValueError(f"unknown keyword mode: {mode!r}")
        if isinstance(pattern, re.Pattern):
            mode = "regex"
        self.mode = mode
        self.pattern = pattern
        self._regex = re.compile(pattern) if mode == "regex" else None
        self._needle = pattern.casefold() if mode == "substring" else ""

    def __repr__(self) -> str:
        shown = self.pattern.pattern if isinstance(self.pattern, re.Pattern) else self.pattern
        return f"KeywordFilter({shown!r}, mode={self.mode!r})"

    def matches(self, text: str) -> bool:
        if self._regex is not None:
            return self._regex.search(text or "") is not None
        return self._needle in (text or "").casefold()

    def __call__(self, event: EventsAPIEvent) -> bool:
        if event.inner_kind != "message" or event.event is None:
            return False
        return self.matches(getattr(event.event, "text", "") or "")


def all_of(*predicates: Predicate) -> Predicate:
    """AND-compose predicates; no predicates matches everything."""

    def combined(value: Any) -> bool:
        return all(p(value) for p in predicates)

    return combined


def match_all(_: Any) -> bool:
    return True
