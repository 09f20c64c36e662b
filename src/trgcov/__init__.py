"""
Top-level module: trigger extraction and library coverage counting for genomic sequences.
"""
from importlib.metadata import version, PackageNotFoundError

from trgcov.core.alphabet import Alphabet, AlphabetMode, AlphabetError
from trgcov.engines.windows import TriggerGenerator, generate, windows
from trgcov.engines.coverage import CoverageCounter, RunResult, count
from trgcov.io import SeqReader, SeqFileError, FastaFormatError, read_sequences, validate_fasta

try: __version__ = version(__name__)
except PackageNotFoundError: __version__ = '0+unknown'
