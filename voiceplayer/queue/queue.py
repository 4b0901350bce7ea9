"""
队列 - 单个服务器的播放会话

持有语音连接、播放器选项和调用方附加的数据。
曲目列表的管理不在这里处理，队列只负责连接的生命周期。
"""

import logging
from typing import Any, Optional, TYPE_CHECKING
import discord

from voiceplayer.core.errors import QueueDestroyedError, UnknownVoiceError
from voiceplayer.core.interfaces import IQueue, PlayerOptions

if TYPE_CHECKING:
    from voiceplayer.player import Player


class Queue(IQueue):
    """
    服务器播放会话

    由 Player 创建并登记，每个服务器至多存在一个未销毁的队列。
    """

    def __init__(self, player: "Player", guild: discord.Guild, options: PlayerOptions, data: Any = None):
        """
        初始化队列

        Args:
            player: 所属播放器
            guild: Discord服务器
            options: 合并后的播放器选项
            data: 调用方附加数据，队列不做解释
        """
        self.player = player
        self.guild = guild
        self.guild_id = guild.id
        self.options = options
        self.data = data

        self.connection: Optional[discord.VoiceClient] = None
        self.destroyed = False

        self.logger = logging.getLogger(f"voiceplayer.queue.{guild.id}")
        self.logger.debug(f"队列初始化完成 - 服务器 {guild.id}")

    @property
    def is_connected(self) -> bool:
        """是否持有有效的语音连接"""
        return self.connection is not None and self.connection.is_connected()

    async def join(self, channel: discord.abc.Connectable) -> None:
        """
        连接到语音频道

        已连接到同一频道时不做任何事；连接到其他频道时移动过去。

        Args:
            channel: 目标语音频道

        Raises:
            QueueDestroyedError: 队列已被销毁
            UnknownVoiceError: 目标不是语音频道
        """
        if self.destroyed:
            raise QueueDestroyedError(self.guild_id)

        if not isinstance(channel, (discord.VoiceChannel, discord.StageChannel)):
            raise UnknownVoiceError(getattr(channel, "id", None))

        if self.connection is not None:
            if self.connection.channel == channel:
                self.logger.debug(f"已连接到频道: {channel.name}")
                return
            await self.connection.move_to(channel)
            self.logger.info(f"移动到频道: {channel.name}")
            return

        self.connection = await channel.connect(self_deaf=self.options.deafen_on_join)
        self.logger.info(f"成功连接到语音频道: {channel.name} (服务器: {self.guild.name})")

    async def leave(self) -> None:
        """
        断开语音连接并销毁队列

        重复调用是安全的。队列仍登记在播放器中时会同时移除登记。
        断开连接失败只记录日志，队列照常销毁。
        """
        if self.destroyed:
            return
        self.destroyed = True

        connection, self.connection = self.connection, None
        if connection is not None:
            try:
                await connection.disconnect(force=True)
                self.logger.info(f"已断开语音连接 - 服务器 {self.guild_id}")
            except Exception as e:
                self.logger.error(f"断开语音连接失败 - 服务器 {self.guild_id}: {e}", exc_info=True)

        if self.player.get_queue(self.guild_id) is self:
            self.player.delete_queue(self.guild_id)

    def __repr__(self) -> str:
        return f"<Queue guild={self.guild_id} connected={self.connection is not None} destroyed={self.destroyed}>"
