"""
Module for representing the nucleotide alphabets triggers are drawn from
"""
from enum import Enum
from typing import Union, Iterable, Final, ClassVar

import numpy as np

from trgcov.utils.resources import jit


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class AlphabetError(Exception):
    """Raised when an alphabet is invalid."""


# Classes --------------------------------------------------------------------------------------------------------------
class Alphabet:
    """
    A class to represent an alphabet of ASCII residue symbols.

    Membership is case-insensitive; triggers themselves are always upper case, so
    lower case symbols only matter when reading raw sequence lines.

    Examples:
        >>> Alphabet.STANDARD.is_valid(b'ATGCN')
        False
        >>> Alphabet.IUPAC.is_valid(b'ATGCN')
        True
    """
    __slots__ = ('_symbols', '_lookup_table')
    DTYPE: Final = np.uint8
    MAX_LEN: Final = 256
    ENCODING: Final = 'ascii'

    STANDARD: ClassVar['Alphabet']
    IUPAC: ClassVar['Alphabet']

    def __init__(self, symbols: bytes):
        """
        Initializes an Alphabet.

        Args:
            symbols: The symbols in the alphabet as bytes.

        Raises:
            AlphabetError: If symbols are empty, not ASCII or contain duplicates.
        """
        if not symbols: raise AlphabetError('Alphabet must contain at least one symbol')
        if not symbols.isascii(): raise AlphabetError('Alphabet symbols must be a valid ASCII string')
        if len(set(symbols.upper())) != len(symbols): raise AlphabetError('Alphabet contains duplicate symbols')
        self._symbols = symbols.upper()
        self._lookup_table = np.zeros(self.MAX_LEN, dtype=bool)
        self._lookup_table[np.frombuffer(self._symbols, dtype=self.DTYPE)] = True
        self._lookup_table[np.frombuffer(self._symbols.lower(), dtype=self.DTYPE)] = True

    def __len__(self):
        return len(self._symbols)

    def __contains__(self, item):
        if isinstance(item, (int, np.integer)): return 0 <= item < self.MAX_LEN and bool(self._lookup_table[item])
        if isinstance(item, str): item = item.encode(self.ENCODING, errors='replace')
        if isinstance(item, bytes) and len(item) == 1: return bool(self._lookup_table[item[0]])
        return False

    def __iter__(self):
        return iter(self._symbols)

    def __repr__(self):
        return f'Alphabet({self._symbols!r})'

    def __eq__(self, other):
        if self is other: return True
        if not isinstance(other, Alphabet): return False
        return self._symbols == other._symbols

    def __hash__(self):
        return hash(self._symbols)

    @property
    def symbols(self) -> bytes:
        """The upper case symbols of the alphabet."""
        return self._symbols

    def _as_array(self, text: Union[bytes, str]) -> np.ndarray:
        if isinstance(text, str):
            text = text.encode(self.ENCODING, errors='replace')
        return np.frombuffer(text, dtype=self.DTYPE)

    def is_valid(self, text: Union[bytes, str]) -> bool:
        """
        Checks every character of the text is a member of the alphabet.

        Args:
            text: The text to check. Empty text is valid.

        Returns:
            True if no character falls outside the alphabet.
        """
        return bool(self._lookup_table[self._as_array(text)].all())

    def valid_mask(self, triggers: Iterable[bytes], length: int) -> np.ndarray:
        """
        Vectorised validity check for a collection of equal-length byte strings.

        Args:
            triggers: Byte strings, each exactly ``length`` long.
            length: The shared length.

        Returns:
            A boolean array, True where every character of the string is a member.
        """
        joined = b''.join(triggers)
        if not joined: return np.zeros(0, dtype=bool)
        if len(joined) % length: raise ValueError(f'All triggers must have length {length}')
        return self._lookup_table[np.frombuffer(joined, dtype=self.DTYPE).reshape(-1, length)].all(axis=1)

    def valid_window_starts(self, seq: bytes, k: int) -> np.ndarray:
        """
        Finds the start index of every length-k window made only of alphabet symbols.

        Args:
            seq: The sequence to scan.
            k: The window length.

        Returns:
            A sorted integer array of start indices; empty if the sequence is shorter than k.
        """
        if k < 1: raise ValueError(f'Window length must be positive, got {k}')
        return _valid_window_starts_kernel(self._lookup_table[self._as_array(seq)], k)


class AlphabetMode(Enum):
    """Selects which alphabet triggers are filtered against."""
    STANDARD = 'standard'
    EXTENDED = 'extended'

    @property
    def alphabet(self) -> Alphabet:
        return Alphabet.IUPAC if self is AlphabetMode.EXTENDED else Alphabet.STANDARD

    @classmethod
    def from_flag(cls, include_non_standard: bool) -> 'AlphabetMode':
        return cls.EXTENDED if include_non_standard else cls.STANDARD


# Kernels --------------------------------------------------------------------------------------------------------------
@jit(nopython=True, cache=True, nogil=True)
def _valid_window_starts_kernel(valid, k):
    n = len(valid)
    if n < k: return np.empty(0, dtype=np.int64)
    out = np.empty(n - k + 1, dtype=np.int64)
    count = 0
    run = 0
    for i in range(n):
        # Length of the run of valid symbols ending at i
        if valid[i]: run += 1
        else: run = 0
        if run >= k:
            out[count] = i - k + 1
            count += 1
    return out[:count]


# Constants ------------------------------------------------------------------------------------------------------------
Alphabet.STANDARD = Alphabet(b'ATGC')
Alphabet.IUPAC = Alphabet(b'ATGCUWSMKRYBDHVN')
