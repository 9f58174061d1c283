"""React to any message containing "fire", in any case."""
import re

from slackbot import Bot, EventContainer
from slackbot.logger import get_logger, setup_logging

logger = get_logger(__name__)
bot = Bot.from_config()


@bot.keyword(re.compile("fire", re.IGNORECASE))
def on_fire(bot: Bot, container: EventContainer) -> None:
    logger.info("fire in %s: %s", container.event.channel, container.event.text)


if __name__ == "__main__":
    setup_logging()
    bot.run()
