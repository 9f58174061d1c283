"""Slack payload models - decoded envelopes for commands, events and interactions, plus reply values."""
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SlackModel(BaseModel):
    """Base for decoded Slack payloads. Unknown platform fields are kept, not rejected."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _null_means_default(cls, data: Any) -> Any:
        """Slack sends null for values it has none of. Declared fields then keep their defaults."""
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None or k not in cls.model_fields}
        return data


# ---------------------------------------------------------------------------
# Slash commands
# ---------------------------------------------------------------------------


class SlashCommand(SlackModel):
    token: str = ""
    command: str = ""
    text: str = ""
    response_url: str = ""
    trigger_id: str = ""
    user_id: str = ""
    user_name: str = ""
    team_id: str = ""
    team_domain: str = ""
    channel_id: str = ""
    channel_name: str = ""
    enterprise_id: str = ""
    enterprise_name: str = ""
    api_app_id: str = ""


# ---------------------------------------------------------------------------
# Events API
# ---------------------------------------------------------------------------


class EventType:
    URL_VERIFICATION = "url_verification"
    CALLBACK_EVENT = "event_callback"
    APP_RATE_LIMITED = "app_rate_limited"


class InnerEventKind:
    MESSAGE = "message"
    APP_MENTION = "app_mention"
    REACTION_ADDED = "reaction_added"
    REACTION_REMOVED = "reaction_removed"
    MEMBER_JOINED_CHANNEL = "member_joined_channel"
    APP_HOME_OPENED = "app_home_opened"


class InnerEvent(SlackModel):
    type: str = ""


class EventsAPIEvent(SlackModel):
    type: str
    token: str = ""
    team_id: str = ""
    api_app_id: str = ""
    event_id: str = ""
    event_time: int | None = None
    event: InnerEvent | None = None
    challenge: str | None = None
    minute_rate_limited: int | None = None

    @property
    def inner_kind(self) -> str:
        return self.event.type if self.event else ""


class MessageEvent(SlackModel):
    type: str = InnerEventKind.MESSAGE
    subtype: str = ""
    channel: str = ""
    channel_type: str = ""
    user: str = ""
    bot_id: str = ""
    text: str = ""
    ts: str = ""
    thread_ts: str = ""
    event_ts: str = ""


class AppMentionEvent(SlackModel):
    type: str = InnerEventKind.APP_MENTION
    user: str = ""
    text: str = ""
    ts: str = ""
    channel: str = ""
    thread_ts: str = ""
    event_ts: str = ""


class ReactionAddedEvent(SlackModel):
    type: str = InnerEventKind.REACTION_ADDED
    user: str = ""
    reaction: str = ""
    item_user: str = ""
    item: dict[str, Any] = Field(default_factory=dict)
    event_ts: str = ""


class ReactionRemovedEvent(ReactionAddedEvent):
    type: str = InnerEventKind.REACTION_REMOVED


class MemberJoinedChannelEvent(SlackModel):
    type: str = InnerEventKind.MEMBER_JOINED_CHANNEL
    user: str = ""
    channel: str = ""
    channel_type: str = ""
    team: str = ""
    inviter: str = ""


class AppHomeOpenedEvent(SlackModel):
    type: str = InnerEventKind.APP_HOME_OPENED
    user: str = ""
    channel: str = ""
    tab: str = ""
    view: dict[str, Any] | None = None
    event_ts: str = ""


INNER_EVENT_MODELS: dict[str, type[SlackModel]] = {
    InnerEventKind.MESSAGE: MessageEvent,
    InnerEventKind.APP_MENTION: AppMentionEvent,
    InnerEventKind.REACTION_ADDED: ReactionAddedEvent,
    InnerEventKind.REACTION_REMOVED: ReactionRemovedEvent,
    InnerEventKind.MEMBER_JOINED_CHANNEL: MemberJoinedChannelEvent,
    InnerEventKind.APP_HOME_OPENED: AppHomeOpenedEvent,
}


class EventContainer(BaseModel):
    """A callback event together with its inner event decoded into the kind's model."""

    api_event: EventsAPIEvent
    event: SlackModel

    @classmethod
    def from_api_event(cls, api_event: EventsAPIEvent) -> "EventContainer":
        kind = api_event.inner_kind
        model = INNER_EVENT_MODELS.get(kind, InnerEvent)
        data = api_event.event.model_dump() if api_event.event else {}
        return cls(api_event=api_event, event=model.model_validate(data))


# ---------------------------------------------------------------------------
# Interactions
# ---------------------------------------------------------------------------


class InteractionType(str, Enum):
    BLOCK_ACTIONS = "block_actions"
    BLOCK_SUGGESTION = "block_suggestion"
    MESSAGE_ACTION = "message_action"
    SHORTCUT = "shortcut"
    VIEW_SUBMISSION = "view_submission"
    VIEW_CLOSED = "view_closed"
    INTERACTIVE_MESSAGE = "interactive_message"
    DIALOG_SUBMISSION = "dialog_submission"
    DIALOG_CANCELLATION = "dialog_cancellation"
    DIALOG_SUGGESTION = "dialog_suggestion"


class View(SlackModel):
    id: str = ""
    type: str = ""
    callback_id: str = ""
    private_metadata: str = ""
    hash: str = ""
    state: dict[str, Any] = Field(default_factory=dict)


class BlockAction(SlackModel):
    action_id: str = ""
    block_id: str = ""
    type: str = ""
    value: str = ""
    action_ts: str = ""


class InteractionCallback(SlackModel):
    type: InteractionType | None = None
    callback_id: str = ""
    action_id: str = ""
    block_id: str = ""
    trigger_id: str = ""
    response_url: str = ""
    token: str = ""
    user: dict[str, Any] = Field(default_factory=dict)
    team: dict[str, Any] = Field(default_factory=dict)
    channel: dict[str, Any] = Field(default_factory=dict)
    message: dict[str, Any] = Field(default_factory=dict)
    view: View = Field(default_factory=View)
    actions: list[BlockAction] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def _blank_type(cls, v: Any) -> Any:
        return None if v == "" else v


# ---------------------------------------------------------------------------
# Reply values
# ---------------------------------------------------------------------------


class ReplyModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class PlainText(ReplyModel):
    type: Literal["plain_text"] = "plain_text"
    text: str
    emoji: bool | None = None


class Message(ReplyModel):
    text: str | None = None
    blocks: list[dict[str, Any]] | None = None
    attachments: list[dict[str, Any]] | None = None
    response_type: Literal["in_channel", "ephemeral"] | None = None
    replace_original: bool | None = None
    delete_original: bool | None = None
    thread_ts: str | None = None


class Option(ReplyModel):
    text: PlainText | None = None
    value: str
    description: PlainText | None = None

    @classmethod
    def plain(cls, text: str, value: str) -> "Option":
        return cls(text=PlainText(text=text), value=value)


class OptionGroup(ReplyModel):
    label: PlainText | None = None
    options: list[Option] = Field(default_factory=list)


class OptionsResponse(ReplyModel):
    options: list[Option] = Field(default_factory=list)


class OptionGroupsResponse(ReplyModel):
    option_groups: list[OptionGroup] = Field(default_factory=list)


class ViewSubmissionResponse(ReplyModel):
    response_action: Literal["clear", "update", "push", "errors"]
    view: dict[str, Any] | None = None
    errors: dict[str, str] | None = None

    @classmethod
    def clear(cls) -> "ViewSubmissionResponse":
        return cls(response_action="clear")

    @classmethod
    def update(cls, view: dict[str, Any]) -> "ViewSubmissionResponse":
        return cls(response_action="update", view=view)

    @classmethod
    def push(cls, view: dict[str, Any]) -> "ViewSubmissionResponse":
        return cls(response_action="push", view=view)

    @classmethod
    def with_errors(cls, errors: dict[str, str]) -> "ViewSubmissionResponse":
        return cls(response_action="errors", errors=errors)


def to_body(value: Any) -> Any:
    """Encode a handler reply as a JSON-ready value."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    return value
