"""
cronbot Discord Bot

Maintains the Discord connection, replays persisted cron jobs on startup,
and delivers their messages when triggers fire.
"""

import asyncio
import logging
import os
from typing import Optional

import asyncpg
import discord
from discord.ext import commands
from dotenv import load_dotenv

import analytics
from commands.cron_commands import CronCommands
from commands.views import PagerRegistry
from cronjobs import CronBotConfig, CronJobStore, CronScheduler, ScheduledJob, StorageError

load_dotenv()

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("cronbot")


class CronBot(commands.Bot):
    """Discord bot that posts scheduled messages."""

    def __init__(self, config: Optional[CronBotConfig] = None):
        intents = discord.Intents.default()
        intents.message_content = True
        intents.guilds = True
        intents.guild_messages = True
        intents.guild_reactions = True

        # Commands are routed by CronCommands.on_message, not discord.ext prefixes
        super().__init__(
            command_prefix=commands.when_mentioned,
            intents=intents,
            help_command=None,
        )

        self.config = config or CronBotConfig.from_env()
        self.db_pool: Optional[asyncpg.Pool] = None
        self.store: Optional[CronJobStore] = None
        self.pagers = PagerRegistry()
        self.scheduler = CronScheduler(self.deliver_job, timezone=self.config.timezone)
        self._jobs_restored = False

    async def setup_hook(self):
        """Called when the bot is starting up."""
        logger.info(f"Setup: DATABASE_URL={'set' if self.config.database_url else 'missing'}")
        logger.info(f"Setup: CRON_TIMEZONE={self.config.timezone}")
        logger.info(f"Setup: ANALYTICS_ENABLED={self.config.analytics_enabled}")

        if not self.config.database_url:
            raise RuntimeError("DATABASE_URL environment variable not set")

        self.db_pool = await asyncpg.create_pool(self.config.database_url)
        self.store = CronJobStore(self.db_pool)
        await self.store.ensure_schema()
        await analytics.init(self.db_pool, enabled=self.config.analytics_enabled)

        await self.add_cog(
            CronCommands(self, self.store, self.scheduler, self.pagers, self.config)
        )
        logger.info("Cron commands loaded")

    async def on_ready(self):
        """Called when the bot has connected to Discord (again on every reconnect)."""
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")

        if self._jobs_restored:
            return
        try:
            await self.scheduler.restore(self.store)
        except StorageError as e:
            # Retried on the next on_ready
            logger.error(f"Failed to restore cron jobs: {e}")
            return
        self._jobs_restored = True

    async def deliver_job(self, job: ScheduledJob) -> None:
        """Send a job's message. Does nothing if the channel is gone or hidden."""
        channel = self.get_channel(job.channel_id)
        if channel is None:
            try:
                channel = await self.fetch_channel(job.channel_id)
            except (discord.NotFound, discord.Forbidden) as e:
                logger.warning(f"Cron job {job.id}: channel {job.channel_id} unavailable ({e})")
                return

        await channel.send(job.message)
        logger.info(f"Delivered cron job {job.id} to channel {job.channel_id}")

    async def close(self):
        """Clean up resources on shutdown."""
        await self.scheduler.shutdown()
        analytics.shutdown()
        if self.db_pool:
            await self.db_pool.close()
        await super().close()


async def main():
    """Run the bot."""
    config = CronBotConfig.from_env()
    if not config.discord_token:
        print("Error: DISCORD_BOT_TOKEN environment variable not set")
        print("Please set it in your .env file")
        return

    bot = CronBot(config)
    async with bot:
        await bot.start(config.discord_token)


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
