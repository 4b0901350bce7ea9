"""核心模块 - 数据结构、接口与异常定义"""

from .errors import (
    PlayerError,
    PlayerErrorCode,
    InvalidGuildError,
    QueueDestroyedError,
    UnknownVoiceError,
)
from .interfaces import IQueue, PlayerOptions, VoiceSnapshot

__all__ = [
    "PlayerError",
    "PlayerErrorCode",
    "InvalidGuildError",
    "QueueDestroyedError",
    "UnknownVoiceError",
    "IQueue",
    "PlayerOptions",
    "VoiceSnapshot",
]
