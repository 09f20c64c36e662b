"""
Module for validating and streaming sequences out of FASTA files.
"""
from pathlib import Path
from typing import Union, Generator, BinaryIO
import logging

from trgcov.core.alphabet import Alphabet
from trgcov.io.open import Xopen
from trgcov.utils import TRACE, is_non_empty_file


logger = logging.getLogger(__name__)


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class SeqFileError(Exception):
    """Exception raised for errors in sequence file processing."""


class FastaFormatError(SeqFileError):
    """Raised when a file does not look like FASTA."""


# Constants ------------------------------------------------------------------------------------------------------------
HEADER = b'>'


# Classes --------------------------------------------------------------------------------------------------------------
class SeqReader:
    """
    Streams the sequences of a FASTA file one record at a time.

    Headers only delimit records and are discarded. Residue lines are right-stripped and kept only
    if every character is an IUPAC nucleotide code, other lines are skipped. A header-less file is
    read as a single sequence. A read error ends the stream after flushing the pending record.

    Examples:
        >>> with open("genomes.fasta", "rb") as f:
        ...     for seq in SeqReader(f):
        ...         print(len(seq))
    """
    __slots__ = ('_handle', '_alphabet', '_iterator')

    def __init__(self, handle: BinaryIO, alphabet: Alphabet = None):
        """
        Initializes the reader.

        Args:
            handle: The open binary file handle to read from.
            alphabet: Symbols a residue line may contain, defaults to the IUPAC alphabet.
        """
        self._handle = handle
        self._alphabet = alphabet or Alphabet.IUPAC
        self._iterator = None

    def __iter__(self) -> Generator[bytes, None, None]:
        parts = []
        for line in self._lines():
            if line[:1] == HEADER:
                if parts:
                    yield b''.join(parts)
                    parts = []
                continue
            if (line := line.rstrip()) and self._alphabet.is_valid(line):
                parts.append(line)
            elif line:
                logger.log(TRACE, 'Skipping line with non-nucleotide characters: %.40r', line)
        if parts: yield b''.join(parts)

    def __next__(self) -> bytes:
        if self._iterator is None:
            self._iterator = self.__iter__()
        return next(self._iterator)

    def __enter__(self): return self
    def __exit__(self, exc_type, exc_val, exc_tb): self.close()

    def close(self):
        """Closes the underlying handle."""
        self._handle.close()

    def _lines(self) -> Generator[bytes, None, None]:
        lines = iter(self._handle)
        while True:
            try: line = next(lines)
            except StopIteration: return
            except (OSError, EOFError) as e:
                logger.warning('Read error, treating as end of input: %s', e)
                return
            yield line


# Functions ------------------------------------------------------------------------------------------------------------
def read_sequences(file: Union[str, Path, BinaryIO]) -> Generator[bytes, None, None]:
    """
    Yields every sequence of a (possibly compressed) FASTA file.

    Args:
        file: Path to the file or an open binary handle.

    Yields:
        Sequences as bytes, in file order.
    """
    with Xopen(file) as handle:
        yield from SeqReader(handle)


def validate_fasta(file: Union[str, Path]) -> Path:
    """
    Checks a file looks like FASTA before it is streamed.

    The first non-blank line must be a header or a line of IUPAC nucleotide codes; later lines are
    left to the reader, which skips what it cannot use.

    Args:
        file: Path to the file.

    Returns:
        The file as a Path.

    Raises:
        FastaFormatError: If the file is missing, empty, unreadable or does not start like FASTA.
    """
    path = Path(file)
    if not is_non_empty_file(path): raise FastaFormatError(f'{path} is not a non-empty file')
    try:
        with Xopen(path) as handle:
            for line in handle:
                if line := line.strip(): break
            else:
                raise FastaFormatError(f'{path} contains no sequence data')
    except (OSError, EOFError) as e:
        raise FastaFormatError(f'Could not read {path}: {e}') from e
    if line[:1] != HEADER and not Alphabet.IUPAC.is_valid(line):
        raise FastaFormatError(f'{path} does not start with a FASTA header or sequence: {line[:40]!r}')
    logger.info('File is in fasta format %s', path)
    return path

