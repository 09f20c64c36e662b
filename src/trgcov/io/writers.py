"""
Writers for the trigger list and trigger coverage outputs.
"""
from math import isnan
from pathlib import Path
from typing import Union, Iterable, BinaryIO
import logging

import numpy as np

from trgcov.engines.coverage import RunResult
from trgcov.io.open import Xopen


logger = logging.getLogger(__name__)


# Constants ------------------------------------------------------------------------------------------------------------
TRIGGER_LIST = 'trglist'
TRIGGER_COUNT = 'trgcount'
COVERAGE_HEADER = 'Trigger,Count,%Count'


# Classes --------------------------------------------------------------------------------------------------------------
class BaseWriter:
    """Writes lines to a path or binary handle, opened lazily on context entry."""
    __slots__ = ('_file', '_xopen', '_handle')

    def __init__(self, file: Union[str, Path, BinaryIO]):
        self._file = file
        self._xopen = Xopen(file, 'wb')
        self._handle = None

    def __enter__(self):
        self._handle = self._xopen.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._xopen.__exit__(exc_type, exc_val, exc_tb)
        self._handle = None

    def write_line(self, line: Union[str, bytes]):
        if self._handle is None: raise RuntimeError(f'{type(self).__name__} is not open')
        if isinstance(line, str): line = line.encode()
        self._handle.write(line + b'\n')


class TriggerListWriter(BaseWriter):
    """
    One trigger per line.

    Examples:
        >>> with TriggerListWriter("genome.fa__output_trglist") as w:
        ...     w.write(triggers)
    """
    __slots__ = ()

    def write(self, triggers: Iterable[bytes]) -> int:
        n = 0
        for trigger in triggers:
            self.write_line(trigger)
            n += 1
        return n


class CoverageWriter(BaseWriter):
    """
    Trigger coverage table.

    The header names three comma separated columns while each row reads ``<trigger>_<count>=<percent>``;
    downstream tools parse this layout as is.
    """
    __slots__ = ()

    def write(self, result: RunResult) -> int:
        self.write_line(COVERAGE_HEADER)
        for trigger, n in result.items():
            self.write_line(b'%s_%d=%s' % (trigger, n, format_percent(result.percent(trigger)).encode()))
        return len(result)


# Functions ------------------------------------------------------------------------------------------------------------
def output_path(infile: Union[str, Path], suffix: str, kind: str) -> Path:
    """
    Builds ``<infile>_<suffix>_<kind>``.

    Args:
        infile: The input file the output derives from.
        suffix: User supplied suffix, used verbatim.
        kind: ``trglist`` or ``trgcount``.
    """
    return Path(f'{infile}_{suffix}_{kind}')


def format_percent(value: float) -> str:
    """
    Shortest positional decimal that round-trips, without a trailing ``.0``.

    Examples:
        >>> format_percent(100.0), format_percent(200 / 3)
        ('100', '66.66666666666667')
    """
    if isnan(value): return 'NaN'
    return np.format_float_positional(value, trim='-')


def write_triggers(triggers: Iterable[bytes], file: Union[str, Path, BinaryIO]) -> int:
    """Writes the trigger list, returning the number of triggers written."""
    logger.debug('Saving list of triggers to: %s', file)
    with TriggerListWriter(file) as writer:
        n = writer.write(triggers)
    logger.debug('Output created successfully: %s', file)
    return n


def write_coverage(result: RunResult, file: Union[str, Path, BinaryIO]) -> int:
    """Writes the coverage table, returning the number of triggers written."""
    logger.debug('Saving results to %s', file)
    with CoverageWriter(file) as writer:
        n = writer.write(result)
    logger.debug('Output created successfully: %s', file)
    return n
