"""
Generation of the trigger set: every fixed-length window of the query sequences.
"""
from threading import Lock
from typing import Iterable
import logging

import numpy as np

from trgcov.core.alphabet import AlphabetMode
from trgcov.utils import RESOURCES, TRACE


logger = logging.getLogger(__name__)


# Constants ------------------------------------------------------------------------------------------------------------
MIN_TRIGGER_LENGTH = 10
MAX_TRIGGER_LENGTH = 100
DEFAULT_TRIGGER_LENGTH = 36


# Classes --------------------------------------------------------------------------------------------------------------
class TriggerGenerator:
    """
    Collects the unique, alphabet-filtered windows of a stream of sequences.

    Each sequence is windowed by a pool worker into a task-local set, which is then folded into the
    shared set under a lock. The alphabet filter runs once, on the deduplicated set.

    Attributes:
        length (int): Trigger length.
        mode (AlphabetMode): Alphabet the triggers are filtered against.
        n_workers (int): Pool size, None for the number of available CPUs.

    Examples:
        >>> TriggerGenerator(10).generate([b'ATGCATGCAT'])
        {b'ATGCATGCAT'}
    """
    def __init__(self, length: int = DEFAULT_TRIGGER_LENGTH, mode: AlphabetMode = AlphabetMode.STANDARD,
                 n_workers: int = None):
        if not MIN_TRIGGER_LENGTH <= length <= MAX_TRIGGER_LENGTH:
            raise ValueError(f'Trigger length not in range considered: {MIN_TRIGGER_LENGTH} - {MAX_TRIGGER_LENGTH}')
        self.length = length
        self.mode = mode
        self.n_workers = n_workers
        self._triggers: set[bytes] = set()
        self._lock = Lock()

    def generate(self, sequences: Iterable[bytes]) -> set[bytes]:
        """
        Builds the trigger set of the sequences.

        Args:
            sequences: Sequences to window, consumed once.

        Returns:
            The set of unique upper case triggers made only of symbols of the active alphabet.
        """
        logger.debug('Using %s characters', self.mode.alphabet.symbols.decode())
        logger.debug('Trigger length set to: %d', self.length)
        self._triggers = set()
        n_seqs = 0
        with RESOURCES.pool(self.n_workers) as pool:
            for seq in sequences:
                pool.submit(self._add_windows, seq)
                n_seqs += 1
        triggers = self._filter(self._triggers)
        self._triggers = set()
        logger.info('Windowed %d sequences into %d unique triggers', n_seqs, len(triggers))
        return triggers

    def _add_windows(self, seq: bytes):
        local = set(windows(seq, self.length))
        logger.log(TRACE, 'Made %d unique windows from a sequence of length %d', len(local), len(seq))
        with self._lock:
            self._triggers |= local

    def _filter(self, triggers: set[bytes]) -> set[bytes]:
        if not triggers: return set()
        ordered = list(triggers)
        keep = self.mode.alphabet.valid_mask(ordered, self.length)
        logger.debug('Removed %d triggers with characters outside the %s alphabet',
                     len(ordered) - int(np.count_nonzero(keep)), self.mode.value)
        return {trigger for trigger, valid in zip(ordered, keep) if valid}


# Functions ------------------------------------------------------------------------------------------------------------
def windows(seq: bytes, length: int) -> list[bytes]:
    """
    Every overlapping window of a sequence, upper cased and in order of start position.

    Args:
        seq: The sequence.
        length: Window length.

    Returns:
        ``len(seq) - length + 1`` windows, or an empty list if the sequence is shorter than a window.
    """
    if length < 1: raise ValueError(f'Window length must be positive, got {length}')
    seq = seq.upper()
    return [seq[i:i + length] for i in range(len(seq) - length + 1)]


def generate(sequences: Iterable[bytes], length: int = DEFAULT_TRIGGER_LENGTH,
             mode: AlphabetMode = AlphabetMode.STANDARD, n_workers: int = None) -> set[bytes]:
    """Shortcut for ``TriggerGenerator(length, mode, n_workers).generate(sequences)``."""
    return TriggerGenerator(length, mode, n_workers).generate(sequences)
