"""
结果缓存 - 为昂贵且幂等的异步查询提供磁盘缓存

缓存存储是进程级状态，必须先调用 init_cache() 初始化；
未初始化时被装饰的函数照常执行，只是不缓存结果。
缓存层永远不会抛出异常，失败只会退化为重新计算。

diskcache 的读写是同步的 SQLite 操作，会在事件循环中直接执行，
只适合缓存元数据这类小结果。
"""

import functools
import inspect
import logging
import os
from typing import Any, Awaitable, Callable, Optional, TypeVar

import diskcache

logger = logging.getLogger("voiceplayer.utils.cache")

T = TypeVar("T")

_cache_instance: Optional[diskcache.Cache] = None
_MISSING = object()


def init_cache(path: str, namespace: str = "") -> diskcache.Cache:
    """
    初始化进程级缓存存储

    重复初始化会替换当前存储，旧存储中的内容不会被合并。

    Args:
        path: 缓存根目录
        namespace: 命名空间，作为根目录下的子目录

    Returns:
        新的缓存存储
    """
    global _cache_instance

    directory = os.path.join(path, namespace) if namespace else path
    previous = _cache_instance
    _cache_instance = diskcache.Cache(directory=directory)
    if previous is not None:
        previous.close()

    logger.info(f"缓存已初始化 - 目录: {directory}")
    return _cache_instance


def reset_cache() -> None:
    """关闭并解除当前缓存存储"""
    global _cache_instance

    if _cache_instance is not None:
        _cache_instance.close()
        _cache_instance = None
        logger.debug("缓存已重置")


def get_cache() -> Optional[diskcache.Cache]:
    """返回当前缓存存储，未初始化时返回 None"""
    return _cache_instance


def serialize_args(*args: Any) -> str:
    """将位置参数序列化为以冒号连接的缓存键"""
    return ":".join(str(arg) for arg in args)


def cached(
    key_func: Callable[..., str] = serialize_args
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    异步查询缓存装饰器

    相同序列化参数的调用直接返回缓存结果；只有真值结果会被缓存，
    空结果下次调用时会重新计算。

    以关键字传入的参数会先按函数签名还原为位置参数再构建缓存键，
    无法还原的调用（仅限关键字参数、**kwargs）不会被缓存。

    Args:
        key_func: 从位置参数构建缓存键的函数

    Returns:
        装饰器
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        name = getattr(func, "__qualname__", repr(func))
        try:
            signature: Optional[inspect.Signature] = inspect.signature(func)
        except (TypeError, ValueError):
            signature = None

        def positional_args(args: tuple, kwargs: dict) -> tuple:
            if not kwargs:
                return args
            if signature is None:
                raise ValueError("无法解析函数签名")
            bound = signature.bind(*args, **kwargs)
            if bound.kwargs:
                raise ValueError(f"参数无法按位置序列化: {sorted(bound.kwargs)}")
            return bound.args

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            store = _cache_instance
            if store is None:
                return await func(*args, **kwargs)

            try:
                key = key_func(*positional_args(args, kwargs))
            except Exception as e:
                logger.warning(f"构建缓存键失败，跳过缓存 - {name}: {e}")
                return await func(*args, **kwargs)

            try:
                cached_result = store.get(key, default=_MISSING)
            except Exception as e:
                logger.warning(f"读取缓存失败 - {key}: {e}")
                cached_result = _MISSING

            if cached_result is not _MISSING:
                logger.debug(f"缓存命中: {key}")
                return cached_result

            result = await func(*args, **kwargs)
            if result:
                try:
                    store.set(key, result)
                    logger.debug(f"已缓存结果: {key}")
                except Exception as e:
                    logger.warning(f"写入缓存失败 - {key}: {e}")
            return result

        return wrapper

    return decorator
