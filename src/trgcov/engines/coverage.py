"""
Coverage of a trigger set across a library of sequences.
"""
from dataclasses import dataclass, field
from threading import Lock
from typing import Iterable, Iterator, Collection
import logging

from trgcov.core.alphabet import Alphabet
from trgcov.utils import RESOURCES, TRACE


logger = logging.getLogger(__name__)


# Classes --------------------------------------------------------------------------------------------------------------
@dataclass(frozen=True)
class RunResult:
    """
    Number of library sequences read and, per trigger, how many of them contain it.

    Attributes:
        total (int): Library sequences consumed.
        coverage (dict[bytes, int]): Trigger to number of sequences containing it at least once.
    """
    total: int = 0
    coverage: dict[bytes, int] = field(default_factory=dict)

    def __len__(self) -> int: return len(self.coverage)
    def __iter__(self) -> Iterator[bytes]: return iter(self.coverage)
    def __getitem__(self, trigger: bytes) -> int: return self.coverage[trigger]

    def items(self):
        return self.coverage.items()

    def percent(self, trigger: bytes) -> float:
        """Percentage of library sequences containing the trigger, NaN for an empty library."""
        if not self.total: return float('nan')
        return self.coverage[trigger] / self.total * 100


class CoverageCounter:
    """
    Counts, for every trigger, the library sequences it occurs in.

    All triggers share one length, so a trigger occurs in a sequence exactly when it equals one of
    the sequence's windows of that length. Only windows made of symbols found in the triggers can
    match, so the others are never materialised.

    Examples:
        >>> result = CoverageCounter({b'ATGCATGCAT'}).count([b'ATGCATGCATGC', b'AAAAAAAAAA'])
        >>> result.total, result[b'ATGCATGCAT']
        (2, 1)
    """
    def __init__(self, triggers: Collection[bytes], n_workers: int = None):
        self.triggers = frozenset(triggers)
        lengths = {len(trigger) for trigger in self.triggers}
        if len(lengths) > 1: raise ValueError(f'Triggers must share one length, got {sorted(lengths)}')
        self.length = lengths.pop() if lengths else 0
        self.alphabet = Alphabet(bytes(sorted(set(b''.join(self.triggers).upper())))) if self.length else None
        self.n_workers = n_workers
        self._coverage: dict[bytes, int] = {}
        self._lock = Lock()

    def count(self, library: Iterable[bytes]) -> RunResult:
        """
        Tallies trigger presence over the library.

        Args:
            library: Library sequences, consumed once.

        Returns:
            The RunResult; each sequence adds 1 to ``total`` and at most 1 to each trigger.
        """
        logger.debug('Counting number of genomes per trigger')
        self._coverage = dict.fromkeys(self.triggers, 0)
        total = 0
        with RESOURCES.pool(self.n_workers) as pool:
            for seq in library:
                total += 1
                pool.submit(self._tabulate, seq)
                if not total % 1000 and logger.isEnabledFor(logging.INFO):
                    logger.info('Queued %d library sequences, %d pending', total, pool.pending)
        result = RunResult(total, self._coverage)
        self._coverage = {}
        logger.info('Analysed %d genomes in total', total)
        return result

    def hits(self, seq: bytes) -> set[bytes]:
        """The triggers occurring in a sequence, each reported once."""
        if not self.length or len(seq) < self.length: return set()
        seq = seq.upper()
        k = self.length
        starts = self.alphabet.valid_window_starts(seq, k)
        return {seq[i:i + k] for i in starts.tolist()}.intersection(self.triggers)

    def _tabulate(self, seq: bytes):
        found = self.hits(seq)
        logger.log(TRACE, 'Sequence of length %d contains %d triggers', len(seq), len(found))
        with self._lock:
            for trigger in found:
                self._coverage[trigger] += 1


# Functions ------------------------------------------------------------------------------------------------------------
def count(triggers: Collection[bytes], library: Iterable[bytes], n_workers: int = None) -> RunResult:
    """Shortcut for ``CoverageCounter(triggers, n_workers).count(library)``."""
    return CoverageCounter(triggers, n_workers).count(library)
