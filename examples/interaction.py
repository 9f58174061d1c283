"""Global shortcut plus a modal whose submission clears the view stack."""
from slackbot import Bot, InteractionCallback, ViewSubmissionResponse
from slackbot.logger import get_logger, setup_logging

logger = get_logger(__name__)
bot = Bot.from_config()


@bot.shortcut("test_id")
def on_shortcut(bot: Bot, interaction: InteractionCallback) -> None:
    logger.info("shortcut %s by %s", interaction.callback_id, interaction.user.get("id"))


@bot.view_submission("feedback_modal")
def on_feedback(bot: Bot, interaction: InteractionCallback) -> ViewSubmissionResponse:
    logger.info("feedback state: %s", interaction.view.state)
    return ViewSubmissionResponse.clear()


if __name__ == "__main__":
    setup_logging()
    bot.run()
