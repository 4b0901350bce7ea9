"""
核心数据结构与接口定义

定义播放器选项、语音状态快照以及队列（会话）的抽象接口，
供 Player 与 Queue 之间解耦使用。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional, Union
import discord

from .errors import PlayerError, PlayerErrorCode


@dataclass
class PlayerOptions:
    """
    播放器选项

    进程级默认值由 Player 持有，创建队列时与单次调用的覆盖项合并。
    """
    deafen_on_join: bool = False
    leave_on_empty: bool = True
    timeout: float = 0  # 空频道复查延迟（秒）
    cache: bool = False
    cache_path: Optional[str] = None

    def merge(self, overrides: Optional[Union["PlayerOptions", Dict[str, Any]]] = None) -> "PlayerOptions":
        """
        合并覆盖项，返回新的选项对象

        覆盖项中显式给出（非 None）的值优先于当前值。

        Args:
            overrides: PlayerOptions 实例或字段字典

        Returns:
            合并后的新选项

        Raises:
            PlayerError: 覆盖项包含未知字段
        """
        if overrides is None:
            return replace(self)

        if isinstance(overrides, PlayerOptions):
            overrides = {f.name: getattr(overrides, f.name) for f in fields(overrides)}

        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise PlayerError(
                PlayerErrorCode.INVALID_OPTIONS,
                f"Unknown player options: {', '.join(sorted(unknown))}"
            )

        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


@dataclass(frozen=True)
class VoiceSnapshot:
    """语音状态快照 - 某一时刻成员的频道与服务器闭麦状态"""
    guild_id: int
    member_id: int
    channel_id: Optional[int]
    server_deaf: bool = False

    @classmethod
    def from_state(cls, member: discord.Member, state: discord.VoiceState) -> "VoiceSnapshot":
        """
        从 discord.py 的成员与语音状态构建快照

        Args:
            member: 状态变化的成员
            state: 变化前或变化后的语音状态

        Returns:
            语音状态快照
        """
        channel = state.channel if state else None
        return cls(
            guild_id=member.guild.id,
            member_id=member.id,
            channel_id=channel.id if channel else None,
            server_deaf=bool(state.deaf) if state else False,
        )


class IQueue(ABC):
    """队列（会话）接口 - Player 只依赖这些成员"""

    guild_id: int
    options: PlayerOptions
    connection: Optional[discord.VoiceClient]
    data: Any
    destroyed: bool

    @abstractmethod
    async def join(self, channel: discord.abc.Connectable) -> None:
        """连接到语音频道"""
        pass

    @abstractmethod
    async def leave(self) -> None:
        """断开连接并销毁队列（幂等）"""
        pass
