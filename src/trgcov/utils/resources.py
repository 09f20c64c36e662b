"""
Resource management: CPU discovery, scoped worker pools and optional dependencies.
"""
from functools import cached_property, lru_cache
from importlib import import_module
from concurrent.futures import ThreadPoolExecutor, Future, wait
from threading import BoundedSemaphore
import logging
import os
from typing import Callable, Optional


logger = logging.getLogger(__name__)


# Classes --------------------------------------------------------------------------------------------------------------
class WorkerPool:
    """
    A bounded pool of worker threads scoped to one processing stage.

    At most ``2 * n_workers`` tasks are in flight at any time, so a producer streaming
    sequences into the pool blocks instead of buffering the whole input.
    Leaving the context waits for every submitted task and re-raises the first task error.

    Examples:
        >>> with RESOURCES.pool(4) as pool:
        ...     for seq in sequences:
        ...         pool.submit(process, seq)
    """
    __slots__ = ('n_workers', '_executor', '_slots', '_futures')

    def __init__(self, n_workers: int):
        if n_workers < 1: raise ValueError(f'Worker pool needs at least one worker, got {n_workers}')
        self.n_workers = n_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._slots = BoundedSemaphore(2 * n_workers)
        self._futures: list[Future] = []

    def __enter__(self) -> 'WorkerPool':
        self._executor = ThreadPoolExecutor(self.n_workers, thread_name_prefix='trgcov')
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.join()

    def __len__(self) -> int:
        return len(self._futures)

    @property
    def pending(self) -> int:
        """Number of submitted tasks that have not finished yet."""
        return sum(not f.done() for f in self._futures)

    def submit(self, func: Callable, *args) -> Future:
        """Schedules ``func(*args)``, blocking while the pool is saturated."""
        if self._executor is None: raise RuntimeError('Worker pool is not running')
        self._slots.acquire()
        try: future = self._executor.submit(func, *args)
        except BaseException:
            self._slots.release()
            raise
        future.add_done_callback(self._release)
        self._futures.append(future)
        return future

    def join(self):
        """Waits for all submitted tasks, shuts the executor down and raises the first task error."""
        if self._executor is None: return
        try:
            wait(self._futures)
            for future in self._futures:
                if (error := future.exception()) is not None: raise error
        finally:
            self._executor.shutdown(wait=True)
            self._executor = None
            self._futures = []

    def _release(self, _: Future):
        self._slots.release()


class Resources:
    """
    Manages process-wide resources: CPU count, worker pools and optional dependencies.

    Attributes:
        package (str): The package name.
    """
    def __init__(self) -> None:
        self.package = __name__.partition('.')[0]

    @cached_property
    def available_cpus(self) -> int:
        """Returns the number of available CPUs."""
        try: return os.process_cpu_count() or 1
        except AttributeError: return os.cpu_count() or 1

    def pool(self, n_workers: int = None) -> WorkerPool:
        """
        Returns a new worker pool to be used as a context manager for a single stage.

        Args:
            n_workers: Number of threads, defaults to the number of available CPUs.
        """
        n_workers = n_workers or self.available_cpus
        logger.debug('Starting worker pool with %d threads', n_workers)
        return WorkerPool(n_workers)

    @staticmethod
    @lru_cache(maxsize=None)
    def has_module(module_name: str) -> bool:
        """Checks if a python package is installed."""
        try:
            import_module(module_name)
            return True
        except ImportError: return False


# Decorators -----------------------------------------------------------------------------------------------------------
def jit(signature_or_function=None, **options) -> Callable:
    """
    Conditional Numba JIT decorator.

    If 'numba' is installed (checked via RESOURCES), this applies `numba.jit`
    with the provided arguments. Otherwise, it returns the original function unmodified,
    ignoring any compilation options.

    Examples:
        >>> @jit  # Bare usage
        ... def func(): ...

        >>> @jit(nopython=True, cache=True)  # Configured usage
        ... def func(): ...
    """
    if not RESOURCES.has_module('numba'):
        if callable(signature_or_function): return signature_or_function  # Handle bare @jit
        def passthrough(func: Callable) -> Callable: return func  # Handle @jit(...)
        return passthrough
    from numba import jit as real_jit
    if callable(signature_or_function): return real_jit(signature_or_function)  # Handle bare @jit
    return real_jit(signature_or_function, **options)  # Handle @jit(...)


# Constants ------------------------------------------------------------------------------------------------------------
RESOURCES = Resources()
