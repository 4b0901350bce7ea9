"""
队列模块 - 单个服务器的播放会话

该模块负责会话的语音连接生命周期，曲目列表操作不在此处理。
"""

from .queue import Queue

__all__ = [
    "Queue"
]
