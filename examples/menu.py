"""External select menus: one flat, one grouped."""
from slackbot import Bot, Option, OptionGroup, OptionGroupsResponse, OptionsResponse
from slackbot.models import PlainText
from slackbot.logger import setup_logging

bot = Bot.from_config()


@bot.select_options("callback1")
def colors(bot: Bot, interaction) -> OptionsResponse:
    return OptionsResponse(options=[Option.plain("Red", "red"), Option.plain("Blue", "blue")])


@bot.select_option_groups("callback2")
def sizes(bot: Bot, interaction) -> OptionGroupsResponse:
    return OptionGroupsResponse(
        option_groups=[
            OptionGroup(label=PlainText(text="Small"), options=[Option.plain("XS", "xs"), Option.plain("S", "s")]),
            OptionGroup(label=PlainText(text="Large"), options=[Option.plain("L", "l"), Option.plain("XL", "xl")]),
        ]
    )


if __name__ == "__main__":
    setup_logging()
    bot.run()
