"""
曲目元数据查询 - 通过 oEmbed 获取链接对应的标题、作者和封面

查询结果由 cached 装饰器缓存，同一链接只请求一次；
请求失败返回 None，不会被缓存。
"""

import asyncio
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import aiohttp

from voiceplayer.utils.cache import cached

logger = logging.getLogger("voiceplayer.utils.track_lookup")

OEMBED_ENDPOINTS = {
    "youtube.com": "https://www.youtube.com/oembed",
    "youtu.be": "https://www.youtube.com/oembed",
    "soundcloud.com": "https://soundcloud.com/oembed",
}

_TIMEOUT = aiohttp.ClientTimeout(total=10)


def get_oembed_endpoint(url: str) -> Optional[str]:
    """
    获取链接所属站点的 oEmbed 端点

    Args:
        url: 曲目链接

    Returns:
        端点地址，不支持的站点返回 None
    """
    host = (urlparse(url).hostname or "").lower()
    for domain, endpoint in OEMBED_ENDPOINTS.items():
        if host == domain or host.endswith(f".{domain}"):
            return endpoint
    return None


@cached()
async def fetch_track_metadata(url: str) -> Optional[Dict[str, Any]]:
    """
    查询曲目元数据

    Args:
        url: 曲目链接

    Returns:
        包含 title、author、thumbnail_url、url 的字典，失败时返回 None
    """
    endpoint = get_oembed_endpoint(url)
    if endpoint is None:
        logger.debug(f"不支持的链接: {url}")
        return None

    try:
        async with aiohttp.ClientSession(timeout=_TIMEOUT) as session:
            async with session.get(endpoint, params={"url": url, "format": "json"}) as response:
                if response.status != 200:
                    logger.warning(f"元数据请求失败，状态码: {response.status} - {url}")
                    return None
                payload = await response.json(content_type=None)
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        logger.warning(f"元数据请求出错 - {url}: {e}")
        return None

    if not isinstance(payload, dict) or not payload.get("title"):
        return None

    return {
        "title": payload["title"],
        "author": payload.get("author_name"),
        "thumbnail_url": payload.get("thumbnail_url"),
        "url": url,
    }
