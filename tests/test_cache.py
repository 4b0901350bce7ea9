"""
结果缓存测试

测试 cached 装饰器与进程级缓存存储：
- 相同参数只调用一次底层函数
- 空结果不会被缓存
- 未初始化时照常调用
- 存储出错时退化为不缓存
"""

import shutil
import tempfile
import unittest
from unittest.mock import Mock, patch

from voiceplayer.utils import cache as cache_module
from voiceplayer.utils.cache import cached, get_cache, init_cache, reset_cache, serialize_args


class CountingLookup:
    """记录调用次数的模拟查询"""

    def __init__(self, results):
        self.results = results
        self.calls = []

    async def __call__(self, *args):
        self.calls.append(args)
        return self.results.get(args)


class TestCachedDecorator(unittest.IsolatedAsyncioTestCase):
    """缓存装饰器测试类"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        reset_cache()

    def tearDown(self):
        reset_cache()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    async def test_hit_skips_lookup(self):
        """测试相同参数第二次调用命中缓存"""
        init_cache(self.temp_dir, "test")
        lookup = CountingLookup({("song", 1): {"title": "Song 1"}})
        decorated = cached()(lookup)

        first = await decorated("song", 1)
        second = await decorated("song", 1)

        self.assertEqual(first, {"title": "Song 1"})
        self.assertEqual(second, {"title": "Song 1"})
        self.assertEqual(len(lookup.calls), 1)
        self.assertEqual(get_cache().get("song:1"), {"title": "Song 1"})

    async def test_different_args_are_separate(self):
        """测试不同参数分别缓存"""
        init_cache(self.temp_dir, "test")
        lookup = CountingLookup({("a",): "A", ("b",): "B"})
        decorated = cached()(lookup)

        self.assertEqual(await decorated("a"), "A")
        self.assertEqual(await decorated("b"), "B")
        self.assertEqual(await decorated("a"), "A")
        self.assertEqual(lookup.calls, [("a",), ("b",)])

    async def test_keyword_args_are_separate(self):
        """测试以关键字传参时不同参数分别缓存"""
        init_cache(self.temp_dir, "test")
        calls = []

        @cached()
        async def lookup(url):
            calls.append(url)
            return {"url": url}

        first = await lookup(url="https://a")
        second = await lookup(url="https://b")

        self.assertEqual(first, {"url": "https://a"})
        self.assertEqual(second, {"url": "https://b"})
        self.assertEqual(calls, ["https://a", "https://b"])

    async def test_keyword_and_positional_share_key(self):
        """测试关键字传参与位置传参命中同一缓存"""
        init_cache(self.temp_dir, "test")
        calls = []

        @cached()
        async def lookup(name, page=1):
            calls.append((name, page))
            return f"{name}-{page}"

        self.assertEqual(await lookup("song", page=2), "song-2")
        self.assertEqual(await lookup("song", 2), "song-2")
        self.assertEqual(await lookup(name="song", page=3), "song-3")
        self.assertEqual(calls, [("song", 2), ("song", 3)])
        self.assertEqual(get_cache().get("song:2"), "song-2")

    async def test_keyword_only_args_not_cached(self):
        """测试仅限关键字参数的调用不被缓存"""
        init_cache(self.temp_dir, "test")
        calls = []

        @cached()
        async def lookup(name, *, source):
            calls.append((name, source))
            return f"{source}:{name}"

        self.assertEqual(await lookup("song", source="a"), "a:song")
        self.assertEqual(await lookup("song", source="b"), "b:song")
        self.assertEqual(await lookup("song", source="a"), "a:song")
        self.assertEqual(len(calls), 3)

    async def test_falsy_result_not_cached(self):
        """测试空结果不会被缓存"""
        init_cache(self.temp_dir, "test")
        lookup = CountingLookup({("missing",): []})
        decorated = cached()(lookup)

        self.assertEqual(await decorated("missing"), [])
        self.assertEqual(await decorated("missing"), [])
        self.assertEqual(len(lookup.calls), 2)
        self.assertNotIn("missing", get_cache())

    async def test_uninitialized_store_calls_through(self):
        """测试未初始化时不缓存"""
        lookup = CountingLookup({("x",): "X"})
        decorated = cached()(lookup)

        self.assertEqual(await decorated("x"), "X")
        self.assertEqual(await decorated("x"), "X")
        self.assertEqual(len(lookup.calls), 2)

    async def test_custom_key_func(self):
        """测试自定义缓存键函数"""
        init_cache(self.temp_dir, "test")
        lookup = CountingLookup({("Song",): "one", ("song",): "two"})
        decorated = cached(key_func=lambda name: name.lower())(lookup)

        self.assertEqual(await decorated("Song"), "one")
        self.assertEqual(await decorated("song"), "one")
        self.assertEqual(len(lookup.calls), 1)

    async def test_key_func_failure_degrades(self):
        """测试缓存键构建失败时照常调用"""
        init_cache(self.temp_dir, "test")
        lookup = CountingLookup({("x",): "X"})

        def broken_key(*args):
            raise TypeError("unserializable")

        decorated = cached(key_func=broken_key)(lookup)

        self.assertEqual(await decorated("x"), "X")
        self.assertEqual(await decorated("x"), "X")
        self.assertEqual(len(lookup.calls), 2)

    async def test_store_errors_degrade(self):
        """测试存储读写出错时退化为不缓存"""
        broken_store = Mock()
        broken_store.get.side_effect = OSError("disk gone")
        broken_store.set.side_effect = OSError("disk gone")
        lookup = CountingLookup({("x",): "X"})
        decorated = cached()(lookup)

        with patch.object(cache_module, "_cache_instance", broken_store):
            self.assertEqual(await decorated("x"), "X")
            self.assertEqual(await decorated("x"), "X")

        self.assertEqual(len(lookup.calls), 2)

    async def test_reinitialize_rebinds_store(self):
        """测试重复初始化替换存储"""
        first = init_cache(self.temp_dir, "first")
        lookup = CountingLookup({("x",): "X"})
        decorated = cached()(lookup)
        await decorated("x")

        second = init_cache(self.temp_dir, "second")
        await decorated("x")

        self.assertIsNot(first, second)
        self.assertIs(get_cache(), second)
        self.assertEqual(len(lookup.calls), 2)

    async def test_wraps_metadata(self):
        """测试装饰器保留函数信息"""
        @cached()
        async def lookup_song(name):
            """查询歌曲"""
            return name

        self.assertEqual(lookup_song.__name__, "lookup_song")
        self.assertEqual(lookup_song.__doc__, "查询歌曲")


class TestCacheStore(unittest.TestCase):
    """缓存存储测试类"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        reset_cache()

    def tearDown(self):
        reset_cache()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_serialize_args(self):
        self.assertEqual(serialize_args("a", 1, None), "a:1:None")
        self.assertEqual(serialize_args(), "")

    def test_reset(self):
        init_cache(self.temp_dir)
        self.assertIsNotNone(get_cache())

        reset_cache()

        self.assertIsNone(get_cache())

    def test_namespace_directory(self):
        store = init_cache(self.temp_dir, "ns")

        self.assertTrue(store.directory.endswith("ns"))


if __name__ == '__main__':
    unittest.main()
