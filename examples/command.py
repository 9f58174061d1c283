"""Slash command that answers Hello World!"""
from slackbot import Bot, Message
from slackbot.logger import get_logger, setup_logging

logger = get_logger(__name__)
bot = Bot.from_config()


@bot.command("test")
def test_command(bot: Bot, command) -> Message:
    logger.info("command %s from %s: %s", command.command, command.user_name, command.text)
    return Message(text="Hello World!")  # return None for no reply


if __name__ == "__main__":
    setup_logging()
    bot.run()
