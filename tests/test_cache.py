# tests/test_cache.py
import pytest

from ecsim_core.cache import CacheScope, SimulationCache, VoltageDropKey, create_topology_key


class TestSimulationCache:

    def test_run_scope_is_per_instance(self):
        first, second = SimulationCache(), SimulationCache()
        first.put(("op",), 42)
        assert first.get(("op",)) == 42
        assert second.get(("op",)) is None
        assert first.get_stats()['run'] == {'hits': 1, 'misses': 0}
        assert second.get_stats()['run'] == {'hits': 0, 'misses': 1}

    def test_process_scope_is_shared(self):
        SimulationCache().put(("nodes",), "result", CacheScope.PROCESS)
        assert SimulationCache().get(("nodes",), 'process') == "result"
        SimulationCache.clear_process_cache()
        assert SimulationCache().get(("nodes",), 'process') is None

    def test_get_or_compute_computes_once(self):
        cache = SimulationCache()
        calls = []

        def compute():
            calls.append(1)
            return "value"

        assert cache.get_or_compute(("k",), compute) == "value"
        assert cache.get_or_compute(("k",), compute) == "value"
        assert len(calls) == 1
        assert cache.get_stats()['run'] == {'hits': 1, 'misses': 1}

    def test_unknown_scope_is_rejected(self):
        with pytest.raises(ValueError):
            SimulationCache().get(("k",), scope='session')


class TestKeys:

    def test_voltage_drop_keys_are_ordered_pairs(self):
        assert VoltageDropKey(0, 1) == VoltageDropKey(0, 1)
        assert VoltageDropKey(0, 1) != VoltageDropKey(1, 0)

    def test_topology_key_ignores_component_values(self, make_buffer):
        assert create_topology_key(make_buffer(20.0)) == create_topology_key(make_buffer(5.0))
