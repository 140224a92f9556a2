"""Tests for bossdesk.schema.registry."""

import threading

import pytest

from bossdesk.core.errors import NoVersionFoundError
from bossdesk.schema.adapters import CamelCaseAdapter, SnakeCaseV10Adapter, SnakeCaseV11PlusAdapter
from bossdesk.schema.detector import SchemaDetector
from bossdesk.schema.registry import AdapterRegistry
from bossdesk.schema.version import SchemaVersion
from tests._support.fakes import FakeExecutor


class BlockingDetector(SchemaDetector):
    """Holds ``detect`` open until the test releases it."""

    def __init__(self):
        self.entered = threading.Event()
        self.release = threading.Event()

    def detect(self, executor, schema):
        self.entered.set()
        assert self.release.wait(5)
        return super().detect(executor, schema)


class TestGetAdapter:
    def test_detects_once_per_key(self, registry):
        executor = FakeExecutor(version=24)
        first = registry.get_adapter("a", "pgboss", executor)
        second = registry.get_adapter("a", "pgboss", executor)
        assert first is second
        assert isinstance(first, SnakeCaseV10Adapter)
        assert len(executor.sql_containing(".version")) == 1

    def test_keys_are_independent(self, registry):
        registry.get_adapter("a", "pgboss", FakeExecutor(version=21))
        registry.get_adapter("b", "pgboss", FakeExecutor(version=27))
        assert isinstance(registry.get_adapter("a", "pgboss", FakeExecutor()), CamelCaseAdapter)
        assert isinstance(registry.get_adapter("b", "pgboss", FakeExecutor()), SnakeCaseV11PlusAdapter)
        assert len(registry) == 2

    def test_records_detected_version(self, registry):
        registry.get_adapter("a", "jobs", FakeExecutor(version=26))
        assert registry.detected_version("a", "jobs") == SchemaVersion(26)
        assert registry.detected_version("a", "pgboss") is None

    def test_failure_is_not_cached(self, registry):
        with pytest.raises(NoVersionFoundError):
            registry.get_adapter("a", "pgboss", FakeExecutor(version=None))
        assert len(registry) == 0
        assert isinstance(registry.get_adapter("a", "pgboss", FakeExecutor(version=25)), SnakeCaseV10Adapter)

    def test_concurrent_misses_detect_once(self, registry):
        executor = FakeExecutor(version=27)
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(registry.get_adapter("a", "pgboss", executor))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len({id(adapter) for adapter in results}) == 1
        assert len(executor.sql_containing(".version")) == 1


class TestInvalidation:
    def test_clear_one_schema(self, registry):
        registry.get_adapter("a", "pgboss", FakeExecutor())
        registry.get_adapter("a", "other", FakeExecutor())
        registry.clear("a", "pgboss")
        assert registry.detected_version("a", "pgboss") is None
        assert registry.detected_version("a", "other") is not None

    def test_clear_connection(self, registry):
        registry.get_adapter("a", "pgboss", FakeExecutor())
        registry.get_adapter("a", "other", FakeExecutor())
        registry.get_adapter("b", "pgboss", FakeExecutor())
        registry.clear("a")
        assert len(registry) == 1

    def test_clear_forces_redetection(self, registry):
        registry.get_adapter("a", "pgboss", FakeExecutor(version=24))
        registry.clear("a")
        adapter = registry.get_adapter("a", "pgboss", FakeExecutor(version=27))
        assert isinstance(adapter, SnakeCaseV11PlusAdapter)

    def test_clear_all(self, registry):
        registry.get_adapter("a", "pgboss", FakeExecutor())
        registry.get_adapter("b", "pgboss", FakeExecutor())
        registry.clear_all()
        assert len(registry) == 0

    @pytest.mark.parametrize("invalidate", [lambda r: r.clear("a"), lambda r: r.clear_all()])
    def test_clear_during_detection_is_not_lost(self, invalidate):
        detector = BlockingDetector()
        registry = AdapterRegistry(detector)
        results = []
        worker = threading.Thread(
            target=lambda: results.append(registry.get_adapter("a", "pgboss", FakeExecutor(version=21)))
        )
        worker.start()
        assert detector.entered.wait(5)

        invalidate(registry)
        detector.release.set()
        worker.join(5)

        assert isinstance(results[0], CamelCaseAdapter)
        assert registry.detected_version("a", "pgboss") is None
        assert len(registry) == 0
        adapter = registry.get_adapter("a", "pgboss", FakeExecutor(version=27))
        assert isinstance(adapter, SnakeCaseV11PlusAdapter)


class TestPureHelpers:
    def test_create_adapter_without_database(self):
        adapter = AdapterRegistry.create_adapter(SchemaVersion(99), "pgboss")
        assert isinstance(adapter, SnakeCaseV11PlusAdapter)

    def test_is_supported(self):
        assert AdapterRegistry.is_supported(SchemaVersion(20))
        assert not AdapterRegistry.is_supported(SchemaVersion(99))
