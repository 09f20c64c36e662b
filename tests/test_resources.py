import threading
import time
from argparse import Namespace
from dataclasses import dataclass

import pytest
from trgcov.utils import Config, is_non_empty_file
from trgcov.utils.resources import RESOURCES, WorkerPool, jit


class TestWorkerPool:
    def test_runs_all_tasks(self):
        results = []
        lock = threading.Lock()

        def task(i):
            with lock: results.append(i)

        with RESOURCES.pool(4) as pool:
            for i in range(100): pool.submit(task, i)
            assert len(pool) == 100
        assert sorted(results) == list(range(100))

    def test_bounded_in_flight(self):
        running = []
        peak = []
        lock = threading.Lock()

        def task():
            with lock:
                running.append(1)
                peak.append(len(running))
            time.sleep(0.001)
            with lock: running.pop()

        with RESOURCES.pool(2) as pool:
            for _ in range(50): pool.submit(task)
        assert max(peak) <= 2

    def test_task_error_raised_on_exit(self):
        def fail(): raise KeyError('boom')

        with pytest.raises(KeyError, match='boom'):
            with RESOURCES.pool(2) as pool:
                pool.submit(fail)
                pool.submit(time.sleep, 0)

    def test_submit_outside_context(self):
        with pytest.raises(RuntimeError):
            WorkerPool(1).submit(print)

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            WorkerPool(0)

    def test_default_size(self):
        assert RESOURCES.pool().n_workers == RESOURCES.available_cpus >= 1

    def test_pending_drained(self):
        with RESOURCES.pool(2) as pool:
            pool.submit(time.sleep, 0.01)
        assert pool.pending == 0


class TestResources:
    def test_has_module(self):
        assert RESOURCES.has_module('numpy')
        assert not RESOURCES.has_module('definitely_not_a_module_xyz')

    def test_jit_bare_and_configured(self):
        @jit
        def add(a, b): return a + b

        @jit(nopython=True, cache=False)
        def mul(a, b): return a * b

        assert add(2, 3) == 5
        assert mul(2, 3) == 6


@dataclass
class _Settings(Config):
    alpha: int = 1
    beta: str = 'x'


class TestConfig:
    def test_from_args_ignores_extra(self):
        settings = _Settings.from_args(Namespace(alpha=5, gamma=True))
        assert settings == _Settings(alpha=5, beta='x')


class TestFiles:
    def test_is_non_empty_file(self, tmp_path):
        path = tmp_path / 'f'
        assert not is_non_empty_file(path)
        path.touch()
        assert not is_non_empty_file(path)
        path.write_bytes(b'x')
        assert is_non_empty_file(str(path))
        assert not is_non_empty_file(tmp_path)
