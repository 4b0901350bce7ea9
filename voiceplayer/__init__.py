"""
voiceplayer - Discord 服务器语音播放会话管理

提供按服务器登记的播放队列、语音状态协调以及异步查询结果缓存。
"""

from voiceplayer.core import (
    PlayerError,
    PlayerErrorCode,
    InvalidGuildError,
    QueueDestroyedError,
    UnknownVoiceError,
    PlayerOptions,
    VoiceSnapshot,
)
from voiceplayer.player import Player
from voiceplayer.queue import Queue
from voiceplayer.utils.cache import cached, init_cache, reset_cache

__version__ = "1.0.0"

__all__ = [
    "Player",
    "Queue",
    "PlayerOptions",
    "VoiceSnapshot",
    "PlayerError",
    "PlayerErrorCode",
    "InvalidGuildError",
    "QueueDestroyedError",
    "UnknownVoiceError",
    "cached",
    "init_cache",
    "reset_cache",
]
