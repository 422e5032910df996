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

"""Tests for cron job delivery from the bot."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import discord
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cronjobs import CronBotConfig, ScheduledJob, StorageError
from discord_bot import CronBot

JOB = ScheduledJob(id=1, cron_expression="0 9 * * *", message="standup", channel_id=111, guild_id=222)


@pytest.fixture
def bot():
    return CronBot(CronBotConfig(timezone="UTC"))


class TestDeliverJob:
    """Test sending a fired job's message."""

    @pytest.mark.asyncio
    async def test_sends_to_cached_channel(self, bot):
        channel = MagicMock()
        channel.send = AsyncMock()

        with patch.object(bot, "get_channel", return_value=channel):
            await bot.deliver_job(JOB)

        channel.send.assert_awaited_once_with("standup")

    @pytest.mark.asyncio
    async def test_fetches_uncached_channel(self, bot):
        channel = MagicMock()
        channel.send = AsyncMock()

        with patch.object(bot, "get_channel", return_value=None), \
                patch.object(bot, "fetch_channel", AsyncMock(return_value=channel)) as fetch:
            await bot.deliver_job(JOB)

        fetch.assert_awaited_once_with(111)
        channel.send.assert_awaited_once_with("standup")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error_cls,status", [
        (discord.NotFound, 404),
        (discord.Forbidden, 403),
    ])
    async def test_missing_channel_is_noop(self, bot, error_cls, status):
        error = error_cls(MagicMock(status=status, reason="error"), "error")

        with patch.object(bot, "get_channel", return_value=None), \
                patch.object(bot, "fetch_channel", AsyncMock(side_effect=error)):
            await bot.deliver_job(JOB)


class TestBotWiring:
    """Test the bot's component setup."""

    def test_scheduler_uses_config_timezone(self):
        bot = CronBot(CronBotConfig(timezone="Asia/Tokyo"))
        assert bot.scheduler.tz.zone == "Asia/Tokyo"
        assert bot.scheduler.deliver == bot.deliver_job
        assert len(bot.pagers) == 0


class TestOnReady:
    """Test the one-time replay of persisted jobs."""

    @pytest.mark.asyncio
    async def test_restores_once(self, bot):
        bot.scheduler.restore = AsyncMock(return_value=2)
        with patch.object(CronBot, "user", new_callable=PropertyMock, return_value=MagicMock(id=1)), \
             patch.object(CronBot, "guilds", new_callable=PropertyMock, return_value=[]):
            await bot.on_ready()
            await bot.on_ready()

        bot.scheduler.restore.assert_awaited_once_with(bot.store)

    @pytest.mark.asyncio
    async def test_failed_restore_is_retried(self, bot):
        bot.scheduler.restore = AsyncMock(side_effect=[StorageError("db down"), 3])
        with patch.object(CronBot, "user", new_callable=PropertyMock, return_value=MagicMock(id=1)), \
             patch.object(CronBot, "guilds", new_callable=PropertyMock, return_value=[]):
            await bot.on_ready()
            assert bot._jobs_restored is False
            await bot.on_ready()

        assert bot.scheduler.restore.await_count == 2
        assert bot._jobs_restored is True
