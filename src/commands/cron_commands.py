# cronbot - Discord Cron Scheduler Bot
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
Cron Text Commands

Prefix commands for managing scheduled channel messages:
- +addcron <minute> <hour> <day> <month> <weekday> <message>
- +listcron
- +deletecron <id>
- +help

The cron expression is always the five space-separated tokens after the
command name, so "@daily" or "@every 5m" can't be entered here.
"""

import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Optional

import discord
from discord.ext import commands

from analytics import track
from cronjobs import (
    CronBotConfig,
    CronBotError,
    CronJobStore,
    CronScheduler,
    PermissionDeniedError,
    ScheduledJob,
    ScopeError,
    StorageError,
    ValidationError,
    is_valid_cron,
)

from .views import PagerRegistry, ReactionPager

logger = logging.getLogger("cronbot.commands.cron")

CRON_FIELD_COUNT = 5

PERMISSION_DENIED_REPLY = "You require the `Manage Server` permission to manage cron jobs."
SCOPE_REPLY = "This command is only available in servers."
INVALID_CRON_REPLY = "Invalid cron expression."
LIST_ERROR_REPLY = "An error occurred while listing cron jobs."
GENERIC_ERROR_REPLY = "Something went wrong. Please try again."


def parse_add_command(content: str) -> tuple[str, str]:
    """
    Split "+addcron <5 cron fields> <message>" into (cron_expression, message).

    Splits on single spaces: tokens 1-5 are the expression, the rest
    (rejoined with single spaces) is the message. Either part may be empty.
    """
    parts = content.split(" ")
    cron_expression = " ".join(parts[1 : 1 + CRON_FIELD_COUNT])
    message = " ".join(parts[1 + CRON_FIELD_COUNT :])
    return cron_expression, message


def parse_delete_command(content: str) -> int:
    """
    Extract the job ID from "+deletecron <id>".

    Raises:
        ValidationError: If the ID is missing or not an integer
    """
    parts = content.split(" ")
    if len(parts) < 2 or not parts[1]:
        raise ValidationError("Missing job ID")
    try:
        return int(parts[1])
    except ValueError:
        raise ValidationError(f"Invalid job ID: {parts[1]!r}")


@dataclass
class Route:
    name: str
    handler: Callable[[discord.Message], Awaitable[None]]
    # Reply for storage and unexpected failures; validation errors carry their own
    failure_reply: str


class CronCommands(commands.Cog):
    """
    Text commands for cron job management.

    Mutating commands (+addcron, +deletecron) require Manage Server.
    Every error is turned into a reply at the command boundary.
    """

    def __init__(
        self,
        bot: commands.Bot,
        store: CronJobStore,
        scheduler: CronScheduler,
        pagers: PagerRegistry,
        config: Optional[CronBotConfig] = None,
    ):
        self.bot = bot
        self.store = store
        self.scheduler = scheduler
        self.pagers = pagers
        self.config = config or CronBotConfig()

        prefix = self.config.command_prefix
        self.add_usage = f"Usage: {prefix}addcron <cronTime> <message>"
        self.delete_usage = f"Usage: {prefix}deletecron <id>"
        self.routes = [
            Route(f"{prefix}addcron", self.add_cron, GENERIC_ERROR_REPLY),
            Route(f"{prefix}listcron", self.list_cron, LIST_ERROR_REPLY),
            Route(f"{prefix}deletecron", self.delete_cron, GENERIC_ERROR_REPLY),
            Route(f"{prefix}help", self.show_help, GENERIC_ERROR_REPLY),
        ]

    # =========================================================================
    # Dispatch
    # =========================================================================

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message):
        if message.author.bot:
            return
        await self.handle_message(message)

    async def handle_message(self, message: discord.Message) -> bool:
        """
        Run the command matching the message's prefix.

        Returns:
            True if the message was a cron command
        """
        route = self._match(message.content)
        if route is None:
            return False

        track(
            "command_used",
            "command",
            user_id=message.author.id,
            channel_id=message.channel.id,
            guild_id=message.guild.id if message.guild else None,
            properties={"command_name": route.name},
        )

        try:
            await route.handler(message)
        except StorageError as e:
            logger.error(f"{route.name} storage failure: {e}", exc_info=True)
            await message.reply(route.failure_reply)
        except CronBotError as e:
            logger.info(f"{route.name} rejected for user {message.author.id}: {e}")
            await message.reply(str(e))
        except Exception as e:
            logger.error(f"{route.name} failed: {e}", exc_info=True)
            await message.reply(route.failure_reply)
        return True

    def _match(self, content: str) -> Optional[Route]:
        for route in self.routes:
            if content.startswith(route.name):
                return route
        return None

    def _require_manage_guild(self, message: discord.Message) -> None:
        # DM authors are Users and have no guild permissions
        permissions = getattr(message.author, "guild_permissions", None)
        if permissions is None or not permissions.manage_guild:
            raise PermissionDeniedError(PERMISSION_DENIED_REPLY)

    def _require_guild(self, message: discord.Message) -> discord.Guild:
        if message.guild is None:
            raise ScopeError(SCOPE_REPLY)
        return message.guild

    # =========================================================================
    # +addcron
    # =========================================================================

    async def add_cron(self, message: discord.Message) -> None:
        """Validate, persist and schedule a new cron job."""
        self._require_manage_guild(message)

        cron_expression, text = parse_add_command(message.content)
        if not cron_expression or not text:
            raise ValidationError(self.add_usage)

        guild = self._require_guild(message)

        if not is_valid_cron(cron_expression):
            raise ValidationError(INVALID_CRON_REPLY)

        # Raises InvalidCronError before anything is stored
        trigger = self.scheduler.build_trigger(cron_expression)

        job = ScheduledJob(
            cron_expression=cron_expression,
            message=text,
            channel_id=message.channel.id,
            guild_id=guild.id,
            created_by=message.author.id,
        )
        job_id = await self.store.insert(job)
        job = replace(job, id=job_id)
        self.scheduler.schedule(job, trigger)

        await message.reply("Cron job scheduled!")

        track(
            "cron_job_created",
            "cron",
            user_id=message.author.id,
            channel_id=message.channel.id,
            guild_id=guild.id,
            properties={"job_id": job_id, "cron_expression": cron_expression},
        )

    # =========================================================================
    # +listcron
    # =========================================================================

    async def list_cron(self, message: discord.Message) -> None:
        """Show this server's cron jobs in a reaction pager."""
        guild = self._require_guild(message)

        jobs = await self.store.list_all(guild_id=guild.id)
        # Empty result gets a hint instead of a blank "Page 1 of 1" pager
        if not jobs:
            await message.reply(
                f"No cron jobs scheduled in this server. "
                f"Use `{self.config.command_prefix}addcron` to create one!"
            )
            return

        lines = [job.preview(self.config.list_preview_length) for job in jobs]
        await ReactionPager.create(
            message.channel,
            lines,
            self.pagers,
            per_page=self.config.page_size,
        )

    # =========================================================================
    # +deletecron
    # =========================================================================

    async def delete_cron(self, message: discord.Message) -> None:
        """Delete a job and stop its trigger. Unknown IDs are not reported."""
        self._require_manage_guild(message)
        guild = self._require_guild(message)

        try:
            job_id = parse_delete_command(message.content)
        except ValidationError:
            raise ValidationError(self.delete_usage)

        deleted = await self.store.delete_by_id(job_id, guild_id=guild.id)
        if deleted:
            self.scheduler.cancel(job_id)

        await message.reply("Cron job deleted!")

        track(
            "cron_job_deleted",
            "cron",
            user_id=message.author.id,
            channel_id=message.channel.id,
            guild_id=guild.id,
            properties={"job_id": job_id, "existed": deleted},
        )

    # =========================================================================
    # +help
    # =========================================================================

    async def show_help(self, message: discord.Message) -> None:
        prefix = self.config.command_prefix
        await message.reply(
            "Commands:\n"
            f"{prefix}addcron <cronTime> <message>\n"
            f"{prefix}listcron\n"
            f"{prefix}deletecron <id>"
        )

    # =========================================================================
    # Pager events
    # =========================================================================

    @commands.Cog.listener()
    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent):
        if self.bot.user is not None and payload.user_id == self.bot.user.id:
            return
        if payload.member is not None and payload.member.bot:
            return

        pager = self.pagers.get(payload.message_id)
        if pager is None:
            return

        user = payload.member or discord.Object(id=payload.user_id)
        try:
            await pager.process_reaction(payload.emoji.name, user)
        except discord.HTTPException as e:
            logger.warning(f"Failed to update pager {payload.message_id}: {e}")

    @commands.Cog.listener()
    async def on_raw_message_delete(self, payload: discord.RawMessageDeleteEvent):
        if self.pagers.discard(payload.message_id):
            logger.debug(f"Dropped pager for deleted message {payload.message_id}")
