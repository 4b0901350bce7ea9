"""
播放器 - 服务器队列登记与语音状态协调

Player 维护 服务器ID -> 队列 的映射，并监听 Discord 的语音状态更新事件，
根据队列选项执行自动离开、断线检测和解除闭麦通知等生命周期操作。
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set, Union
import discord
from discord.ext import commands

from voiceplayer.core.errors import InvalidGuildError
from voiceplayer.core.interfaces import IQueue, PlayerOptions, VoiceSnapshot
from voiceplayer.queue import Queue
from voiceplayer.utils.cache import init_cache

EventHandler = Callable[[IQueue], Awaitable[None]]

CACHE_NAMESPACE = "voiceplayer"


class Player:
    """
    播放器实现

    每个服务器至多持有一个未销毁的队列。所有状态都在事件循环中读写，
    延迟复查任务在触发时重新读取实时频道成员，而不是信任事件快照。
    """

    def __init__(
        self,
        client: commands.Bot,
        options: Optional[Union[PlayerOptions, Dict[str, Any]]] = None
    ):
        """
        初始化播放器

        Args:
            client: Discord机器人实例
            options: 进程级默认选项（PlayerOptions 或字段字典）
        """
        self.client = client
        self.options = PlayerOptions().merge(options)
        self.logger = logging.getLogger("voiceplayer.player")

        # 服务器队列
        self.queues: Dict[int, IQueue] = {}

        # 通知事件处理器
        self._event_handlers: Dict[str, List[EventHandler]] = {
            "client_disconnect": [],  # 机器人被断开语音连接
            "client_undeafen": [],  # 机器人被解除服务器闭麦
            "channel_empty": [],  # 语音频道已无其他成员
        }

        # 尚未完成的空频道复查任务
        self._pending_checks: Set[asyncio.Task] = set()

        if self.options.cache and self.options.cache_path:
            init_cache(self.options.cache_path, CACHE_NAMESPACE)

        self.client.add_listener(self._on_voice_state_update, "on_voice_state_update")

        self.logger.info("🎵 播放器初始化完成")

    # 队列登记

    def create_queue(
        self,
        guild_id: int,
        options: Optional[Union[PlayerOptions, Dict[str, Any]]] = None,
        data: Any = None
    ) -> IQueue:
        """
        创建服务器队列

        服务器已有未销毁的队列时直接返回该队列，忽略 options 和 data。

        Args:
            guild_id: Discord服务器ID
            options: 单次调用的覆盖选项
            data: 附加到队列的调用方数据

        Returns:
            服务器队列

        Raises:
            InvalidGuildError: 客户端无法解析该服务器
        """
        guild = self.client.get_guild(guild_id)
        if guild is None:
            raise InvalidGuildError(guild_id)

        existing = self.get_queue(guild_id)
        if existing is not None and not existing.destroyed:
            return existing

        queue = Queue(self, guild, self.options.merge(options), data)
        self.set_queue(guild_id, queue)
        self.logger.debug(f"为服务器 {guild_id} 创建队列")

        return queue

    def has_queue(self, guild_id: int) -> bool:
        """服务器是否登记了队列（不论是否已销毁）"""
        return guild_id in self.queues

    def get_queue(self, guild_id: int) -> Optional[IQueue]:
        """获取服务器队列，不存在时返回 None"""
        return self.queues.get(guild_id)

    def set_queue(self, guild_id: int, queue: IQueue) -> None:
        """
        登记服务器队列，直接覆盖已有登记

        调用方需要先销毁旧队列，否则旧连接会被遗留。
        """
        self.queues[guild_id] = queue

    def delete_queue(self, guild_id: int) -> None:
        """移除服务器队列登记，不会断开连接"""
        self.queues.pop(guild_id, None)

    # 通知事件

    def add_event_handler(self, event_type: str, handler: EventHandler) -> None:
        """
        添加通知事件处理器

        Args:
            event_type: 事件类型（client_disconnect / client_undeafen / channel_empty）
            handler: 接收队列的异步处理函数
        """
        if event_type in self._event_handlers:
            self._event_handlers[event_type].append(handler)
            self.logger.debug(f"添加事件处理器: {event_type}")
        else:
            self.logger.warning(f"未知事件类型: {event_type}")

    def on(self, event_type: str) -> Callable[[EventHandler], EventHandler]:
        """add_event_handler 的装饰器形式"""
        def decorator(handler: EventHandler) -> EventHandler:
            self.add_event_handler(event_type, handler)
            return handler
        return decorator

    async def _trigger_event(self, event_type: str, queue: IQueue) -> None:
        """按注册顺序调用事件处理器，单个处理器出错不影响其他处理器"""
        for handler in self._event_handlers.get(event_type, []):
            try:
                await handler(queue)
            except Exception as e:
                self.logger.error(
                    f"事件处理器 {getattr(handler, '__name__', handler)} 处理 {event_type} 时出错: {e}",
                    exc_info=True
                )

    # 语音状态协调

    async def _on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState
    ) -> None:
        """discord.py 语音状态更新监听器"""
        await self._voice_update(
            VoiceSnapshot.from_state(member, before),
            VoiceSnapshot.from_state(member, after),
        )

    def _client_id(self) -> Optional[int]:
        user = self.client.user
        return user.id if user else None

    async def _voice_update(self, old: VoiceSnapshot, new: VoiceSnapshot) -> None:
        """
        处理一次语音状态变化

        Args:
            old: 变化前的快照
            new: 变化后的快照
        """
        queue = self.get_queue(old.guild_id)
        if queue is None or queue.connection is None:
            return

        options = queue.options

        if new.channel_id is None and old.member_id == self._client_id():
            self.logger.info(f"机器人已被断开语音连接 - 服务器 {old.guild_id}")
            await queue.leave()
            await self._trigger_event("client_disconnect", queue)
            return

        if options.deafen_on_join and old.server_deaf and not new.server_deaf:
            self.logger.debug(f"机器人被解除服务器闭麦 - 服务器 {old.guild_id}")
            await self._trigger_event("client_undeafen", queue)

        if old.channel_id == new.channel_id:
            return
        # 通知处理器可能已让队列离开
        connection = queue.connection
        if connection is None or not options.leave_on_empty or len(connection.channel.members) > 1:
            return

        self.logger.debug(f"语音频道可能已空，{options.timeout} 秒后复查 - 服务器 {old.guild_id}")
        task = asyncio.create_task(self._check_empty_channel(queue, options.timeout))
        self._pending_checks.add(task)
        task.add_done_callback(self._pending_checks.discard)

    async def _check_empty_channel(self, queue: IQueue, delay: float) -> None:
        """延迟复查队列所在频道，仍只剩机器人时离开"""
        await asyncio.sleep(delay)

        # 等待期间队列可能已离开或被销毁
        connection = queue.connection
        if connection is None or connection.channel is None:
            return

        members = connection.channel.members
        if len(members) > 1:
            return

        client_id = self._client_id()
        if any(member.id == client_id for member in members):
            self.logger.info(f"语音频道已空，离开频道 - 服务器 {queue.guild_id}")
            await queue.leave()
            await self._trigger_event("channel_empty", queue)
