"""
Tests for the reference cache collaborators and adapter loading.
"""

import threading
from unittest.mock import patch

import pytest

from cachepounder.adapters import (
    STORE_TYPE_ADAPTERS,
    DiskCacheAdapter,
    MemoryCacheAdapter,
    create_cache_adapter,
    load_adapter_class,
)
from cachepounder.config import STORE_TYPES, WorkloadConfig
from cachepounder.errors import CacheAdapterError, ErrorCode
from cachepounder.interfaces import CacheAdapter
from tests.fixtures import CountingCacheAdapter, create_sample_config


class TestMemoryCacheAdapter:

    def test_put_get_size(self, memory_cache):
        memory_cache.put("K1-", b"\x00\x01")
        assert memory_cache.get("K1-") == b"\x00\x01"
        assert memory_cache.size() == 1

    def test_missing_key_returns_none(self, memory_cache):
        assert memory_cache.get("K404-") is None

    def test_put_replaces(self, memory_cache):
        memory_cache.put("K1-", b"a")
        memory_cache.put("K1-", b"b")
        assert memory_cache.get("K1-") == b"b"
        assert memory_cache.size() == 1

    def test_bytearray_is_copied(self, memory_cache):
        value = bytearray(b"abc")
        memory_cache.put("K1-", value)
        value[0] = 0
        assert memory_cache.get("K1-") == b"abc"

    def test_concurrent_puts(self, memory_cache):
        def writer(offset):
            for i in range(offset, offset + 500):
                memory_cache.put(f"K{i}-", b"v")

        threads = [threading.Thread(target=writer, args=(n * 500,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert memory_cache.size() == 2000

    def test_close_clears(self, memory_cache):
        memory_cache.put("K1-", b"a")
        memory_cache.close()
        assert memory_cache.size() == 0

    def test_describe(self, memory_cache):
        description = memory_cache.describe()
        assert description['adapter'] == 'MemoryCacheAdapter'
        assert description['storeType'] == 'OFFHEAP'
        assert description['offHeapSize'] == '64M'


class TestDiskCacheAdapter:

    def test_round_trip_on_disk(self, tmp_path):
        cache = DiskCacheAdapter(base_path=str(tmp_path / "store"))
        cache.put("K7-", b"\x00\x01\x02")

        assert cache.get("K7-") == b"\x00\x01\x02"
        assert cache.size() == 1
        assert len(list((tmp_path / "store").glob("*.entry"))) == 1
        cache.close()

    def test_missing_key_returns_none(self, tmp_path):
        cache = DiskCacheAdapter(base_path=str(tmp_path))
        assert cache.get("K1-") is None

    def test_uses_config_path(self, tmp_path):
        config = WorkloadConfig.from_mapping(create_sample_config(storeType='DISK', diskStorePath=str(tmp_path)))
        cache = DiskCacheAdapter(config)
        assert cache.base_path == tmp_path
        assert cache.describe()['diskStorePath'] == str(tmp_path)

    def test_temporary_directory_without_path(self):
        cache = DiskCacheAdapter()
        base_path = cache.base_path
        cache.put("K1-", b"x")
        assert base_path.is_dir()

        cache.close()
        assert not base_path.exists()

    def test_clears_stale_entries(self, tmp_path):
        (tmp_path / "stale.entry").write_bytes(b"old")
        (tmp_path / "keep.txt").write_text("unrelated")

        DiskCacheAdapter(base_path=str(tmp_path))

        assert not (tmp_path / "stale.entry").exists()
        assert (tmp_path / "keep.txt").exists()

    def test_file_as_path_is_rejected(self, tmp_path):
        path = tmp_path / "file"
        path.write_text("")

        with pytest.raises(CacheAdapterError):
            DiskCacheAdapter(base_path=str(path))

    def test_close_removes_entries(self, tmp_path):
        cache = DiskCacheAdapter(base_path=str(tmp_path))
        cache.put("K1-", b"x")
        cache.close()

        assert cache.size() == 0
        assert not list(tmp_path.glob("*.entry"))


class TestLoadAdapterClass:

    def test_loads_subclass(self):
        assert load_adapter_class("tests.fixtures.fault_adapters:CountingCacheAdapter") is CountingCacheAdapter

    @pytest.mark.parametrize("spec", [
        "no_colon",
        ":Missing",
        "module:",
        "cachepounder.not_a_module:Thing",
        "cachepounder.adapters:NotThere",
        "builtins:dict",
    ])
    def test_rejects_bad_specs(self, spec):
        with pytest.raises(CacheAdapterError) as exc_info:
            load_adapter_class(spec)
        assert exc_info.value.code == ErrorCode.ADAPTER_LOAD_FAILED


class TestCreateCacheAdapter:

    @pytest.mark.parametrize("store_type,expected", [
        ('ONHEAP', MemoryCacheAdapter),
        ('OFFHEAP', MemoryCacheAdapter),
        ('DISK', DiskCacheAdapter),
    ])
    def test_store_type_defaults(self, store_type, expected, tmp_path):
        config = WorkloadConfig.from_mapping(
            create_sample_config(storeType=store_type, diskStorePath=str(tmp_path)))
        adapter = create_cache_adapter(config)
        assert type(adapter) is expected
        assert config.store_type is STORE_TYPES[store_type]
        adapter.close()

    def test_external_adapter(self, workload_config):
        adapter = create_cache_adapter(workload_config, "tests.fixtures.fault_adapters:CountingCacheAdapter")
        assert isinstance(adapter, CountingCacheAdapter)
        assert adapter.config is workload_config

    def test_logs_configuration(self, workload_config, capturing_logger):
        create_cache_adapter(workload_config, logger=capturing_logger)
        capturing_logger.assert_logged('status', 'Cache configuration:')
        capturing_logger.assert_logged('status', 'adapter: MemoryCacheAdapter')

    def test_constructor_failure_is_wrapped(self, workload_config):
        class Exploding(CacheAdapter):
            def __init__(self, config):
                raise OSError("no store")

            def put(self, key, value):
                pass

            def get(self, key):
                return None

            def size(self):
                return 0

        config = WorkloadConfig.from_mapping(create_sample_config(storeType='ONHEAP'))
        with patch.dict(STORE_TYPE_ADAPTERS, {STORE_TYPES.ONHEAP: Exploding}):
            with pytest.raises(CacheAdapterError) as exc_info:
                create_cache_adapter(config)

        assert exc_info.value.code == ErrorCode.ADAPTER_INIT_FAILED
        assert isinstance(exc_info.value.__cause__, OSError)
