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
Discord UI Components for Cron Commands

Reaction-driven pagination for +listcron output. Each pager is bound to the
message it sent and is looked up by that message's ID when a reaction arrives.
"""

import asyncio
import logging
import math
from typing import Iterable, Optional

import discord

logger = logging.getLogger("cronbot.commands.views")

PREV_EMOJI = "⬅️"
NEXT_EMOJI = "➡️"

# Discord message length limit
DISCORD_MAX_LENGTH = 2000


class ReactionPager:
    """
    Paginated text message navigated with ⬅️ / ➡️ reactions.

    Features:
    - Saturating prev/next (page stays within 1..total_pages)
    - The acting user's reaction is removed after each move so the
      count stays at the bot's own reaction
    - Updates are serialized per pager
    """

    def __init__(
        self,
        items: Iterable[str],
        per_page: int = 10,
        message: Optional[discord.Message] = None,
    ):
        """
        Initialize the pager.

        Args:
            items: Lines to paginate (fixed for the pager's lifetime)
            per_page: Lines per page
            message: Message this pager edits (set by create())
        """
        self.items = list(items)
        self.per_page = per_page
        self.total_pages = max(1, math.ceil(len(self.items) / per_page))
        self.page = 1
        self.message = message
        self._lock = asyncio.Lock()

    @classmethod
    async def create(
        cls,
        channel: discord.abc.Messageable,
        items: Iterable[str],
        registry: "PagerRegistry",
        per_page: int = 10,
    ) -> "ReactionPager":
        """Send the first page, add navigation reactions and register the pager."""
        pager = cls(items, per_page=per_page)
        message = await channel.send(pager.render())
        await message.add_reaction(PREV_EMOJI)
        await message.add_reaction(NEXT_EMOJI)
        pager.message = message
        registry.register(pager)
        return pager

    @property
    def message_id(self) -> Optional[int]:
        return self.message.id if self.message is not None else None

    def next(self) -> int:
        self.page = min(self.page + 1, self.total_pages)
        return self.page

    def prev(self) -> int:
        self.page = max(self.page - 1, 1)
        return self.page

    def page_items(self) -> list[str]:
        start = (self.page - 1) * self.per_page
        return self.items[start : start + self.per_page]

    def render(self) -> str:
        content = "\n".join([f"Page {self.page} of {self.total_pages}", *self.page_items()])
        # Edits can't be split, so truncate
        if len(content) > DISCORD_MAX_LENGTH:
            content = content[: DISCORD_MAX_LENGTH - 20] + "\n\n[...truncated]"
        return content

    async def process_reaction(
        self, emoji: str, user: discord.abc.Snowflake
    ) -> bool:
        """
        Apply a navigation reaction.

        Args:
            emoji: Reaction emoji name
            user: User who reacted

        Returns:
            True if the emoji was a navigation reaction
        """
        if emoji == NEXT_EMOJI:
            move = self.next
        elif emoji == PREV_EMOJI:
            move = self.prev
        else:
            return False

        async with self._lock:
            move()
            if self.message is None:
                return True
            await self.message.edit(content=self.render())
            await self._reset_reaction(emoji, user)

        logger.debug(f"Pager {self.message_id} moved to page {self.page}/{self.total_pages}")
        return True

    async def _reset_reaction(self, emoji: str, user: discord.abc.Snowflake) -> None:
        try:
            await self.message.remove_reaction(emoji, user)
        except discord.Forbidden:
            # Needs Manage Messages; navigation still works without it
            logger.debug(f"Missing permission to remove reactions on {self.message_id}")
        except discord.HTTPException as e:
            logger.warning(f"Failed to remove reaction on {self.message_id}: {e}")
        try:
            await self.message.add_reaction(emoji)
        except discord.HTTPException as e:
            logger.warning(f"Failed to re-add reaction on {self.message_id}: {e}")


class PagerRegistry:
    """
    Live pagers keyed by message ID.

    Lives for the process; pagers are lost on restart.
    """

    def __init__(self):
        self._pagers: dict[int, ReactionPager] = {}

    def __len__(self) -> int:
        return len(self._pagers)

    def register(self, pager: ReactionPager) -> None:
        if pager.message_id is None:
            raise ValueError("Pager has no message to register under")
        if pager.message_id in self._pagers:
            logger.warning(f"Replacing pager for message {pager.message_id}")
        self._pagers[pager.message_id] = pager

    def get(self, message_id: int) -> Optional[ReactionPager]:
        return self._pagers.get(message_id)

    async def delete(self, message_id: int) -> bool:
        """
        Delete a pager's message and forget the pager.

        Returns:
            True if a pager was registered for the message
        """
        pager = self._pagers.get(message_id)
        if pager is None:
            return False

        try:
            await pager.message.delete()
        except discord.NotFound:
            pass
        except discord.HTTPException as e:
            logger.warning(f"Failed to delete pager message {message_id}: {e}")

        self._pagers.pop(message_id, None)
        return True

    def discard(self, message_id: int) -> bool:
        """Forget a pager whose message is already gone."""
        return self._pagers.pop(message_id, None) is not None
