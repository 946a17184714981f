import logging
import os
import sys
from datetime import datetime, timezone

import discord
from discord.ext import commands, tasks

# Make the weather modules in the repository root importable when run as a script
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from config import load_settings  # noqa: E402
from weather_pipeline import build_pipeline, is_post_due  # noqa: E402
from weather_report import GOOD_MORNING  # noqa: E402


def report_to_embed(report):
    """Build a Discord embed from a rendered weather report."""
    embed = discord.Embed(
        title=report.title,
        description=report.description,
        color=report.color,
        timestamp=datetime.now(timezone.utc),
    )
    for field in report.fields:
        embed.add_field(name=field.name, value=field.value, inline=field.inline)
    if report.footer:
        embed.set_footer(text=report.footer)
    return embed


def create_bot(settings, pipeline):
    intents = discord.Intents.default()
    intents.message_content = True

    bot = commands.Bot(
        command_prefix=settings.command_prefix,
        intents=intents,
        case_insensitive=True,
        help_command=None,
    )
    last_posted_date = None

    @bot.group(name="weather", invoke_without_command=True, case_insensitive=True)
    async def weather(ctx):
        """Roll current weather conditions."""
        report = pipeline.run_daily_report()
        await ctx.send(embed=report_to_embed(report))

    @weather.command(name="help")
    async def weather_help(ctx):
        """Show the weather bot commands."""
        await ctx.send(embed=report_to_embed(pipeline.help_report()))

    # Daily weather posting task
    @tasks.loop(minutes=15)
    async def post_daily_weather():
        nonlocal last_posted_date
        try:
            now = settings.now()
            if not is_post_due(now, settings.post_time, last_posted_date):
                return
            logging.info(f"Posting window open at {now} - posting daily weather")

            channel = bot.get_channel(settings.channel_id)
            if not channel:
                logging.warning(f"Could not find channel with ID {settings.channel_id}")
                return

            report = pipeline.run_daily_report(now.date())
            try:
                await channel.send(content=GOOD_MORNING, embed=report_to_embed(report))
                last_posted_date = now.date()
                logging.info(f"Posted daily weather to #{channel}")
            except discord.errors.Forbidden:
                logging.error(f"Missing permissions to post in channel {channel}")
        except Exception as e:
            logging.error(f"Error in post_daily_weather task: {e}")
            # Don't let the task die - it will continue with the next scheduled run

    bot.daily_weather_loop = post_daily_weather

    @bot.event
    async def on_ready():
        logging.info(f'{bot.user} is online and ready to report Night City weather!')
        if not post_daily_weather.is_running():
            post_daily_weather.start()

    return bot


def main():
    settings = load_settings()
    logging.basicConfig(level=settings.log_level, format='%(asctime)s - %(levelname)s - %(message)s')
    pipeline = build_pipeline(settings)
    bot = create_bot(settings, pipeline)
    bot.run(settings.discord_token, log_handler=None)


if __name__ == "__main__":
    main()
