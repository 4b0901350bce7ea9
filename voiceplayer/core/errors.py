"""
播放器异常定义

所有面向调用方的错误都继承自 PlayerError，并携带一个 PlayerErrorCode，
方便上层根据错误码生成提示消息。
"""

from enum import Enum
from typing import Optional


class PlayerErrorCode(Enum):
    """播放器错误码"""
    INVALID_GUILD = "InvalidGuild"
    INVALID_OPTIONS = "InvalidOptions"
    QUEUE_DESTROYED = "QueueDestroyed"
    UNKNOWN_VOICE = "UnknownVoice"


_DEFAULT_MESSAGES = {
    PlayerErrorCode.INVALID_GUILD: "Invalid Guild was provided",
    PlayerErrorCode.INVALID_OPTIONS: "Invalid player options were provided",
    PlayerErrorCode.QUEUE_DESTROYED: "The Queue was destroyed",
    PlayerErrorCode.UNKNOWN_VOICE: "The provided channel is not a voice channel",
}


class PlayerError(Exception):
    """
    播放器基础异常

    Args:
        code: 错误码
        message: 可选的自定义消息，默认使用错误码对应的消息
    """

    def __init__(self, code: PlayerErrorCode, message: Optional[str] = None):
        self.code = code
        self.message = message or _DEFAULT_MESSAGES[code]
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"


class InvalidGuildError(PlayerError):
    """
    无效服务器异常

    创建队列时客户端无法解析服务器ID时抛出。
    """

    def __init__(self, guild_id: int):
        super().__init__(PlayerErrorCode.INVALID_GUILD, f"Invalid Guild was provided: {guild_id}")
        self.guild_id = guild_id


class QueueDestroyedError(PlayerError):
    """对已销毁的队列执行操作时抛出"""

    def __init__(self, guild_id: int):
        super().__init__(PlayerErrorCode.QUEUE_DESTROYED)
        self.guild_id = guild_id


class UnknownVoiceError(PlayerError):
    """传入的频道不是语音频道时抛出"""

    def __init__(self, channel_id: Optional[int] = None):
        super().__init__(PlayerErrorCode.UNKNOWN_VOICE)
        self.channel_id = channel_id
