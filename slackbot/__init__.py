from .bot import Bot
from .config import BotSettings, load_config
from .errors import (
    AlreadyBootedError,
    AuthInitializationError,
    BadPayloadError,
    BadRequestError,
    CommandNotFoundError,
    EmptyPayloadError,
    SignatureMismatchError,
    SlackbotError,
    UnknownOptionsCallbackError,
)
from .filters import BlockActionFilter, KeywordFilter
from .models import (
    EventContainer,
    EventsAPIEvent,
    InteractionCallback,
    InteractionType,
    Message,
    Option,
    OptionGroup,
    OptionGroupsResponse,
    OptionsResponse,
    SlashCommand,
    ViewSubmissionResponse,
)
from .registry import FlatOptionsProducer, GroupedOptionsProducer

__all__ = [
    "Bot",
    "BotSettings",
    "load_config",
    "AlreadyBootedError",
    "AuthInitializationError",
    "BadPayloadError",
    "BadRequestError",
    "CommandNotFoundError",
    "EmptyPayloadError",
    "SignatureMismatchError",
    "SlackbotError",
    "UnknownOptionsCallbackError",
    "BlockActionFilter",
    "KeywordFilter",
    "EventContainer",
    "EventsAPIEvent",
    "InteractionCallback",
    "InteractionType",
    "Message",
    "Option",
    "OptionGroup",
    "OptionGroupsResponse",
    "OptionsResponse",
    "SlashCommand",
    "ViewSubmissionResponse",
    "FlatOptionsProducer",
    "GroupedOptionsProducer",
]
