"""Listen for app mentions."""
from slackbot import Bot, EventContainer
from slackbot.logger import get_logger, setup_logging

logger = get_logger(__name__)
bot = Bot.from_config()


def on_app_mention(bot: Bot, container: EventContainer) -> None:
    logger.info("mentioned by %s: %s", container.event.user, container.event.text)


bot.register_app_mention_event(on_app_mention)

if __name__ == "__main__":
    setup_logging()
    bot.run()
