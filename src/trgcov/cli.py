"""
Command line interface.
"""
from argparse import ArgumentParser, ArgumentTypeError, Namespace
from pathlib import Path
from typing import Optional, Sequence
import logging
import os
import sys

from trgcov import __version__
from trgcov.engines.windows import MIN_TRIGGER_LENGTH, MAX_TRIGGER_LENGTH, DEFAULT_TRIGGER_LENGTH
from trgcov.pipeline import RunConfig, run
from trgcov.utils import TRACE


logger = logging.getLogger(__name__)

LOG_ENV = 'TRGCOV_LOG'
_VERBOSITY = (logging.WARNING, logging.INFO, logging.DEBUG, TRACE)


# Functions ------------------------------------------------------------------------------------------------------------
def trigger_length(value: str) -> int:
    try: length = int(value)
    except ValueError: length = DEFAULT_TRIGGER_LENGTH
    if not MIN_TRIGGER_LENGTH <= length <= MAX_TRIGGER_LENGTH:
        raise ArgumentTypeError(f'Trigger length not in range considered: {MIN_TRIGGER_LENGTH} - {MAX_TRIGGER_LENGTH}')
    return length


def positive_int(value: str) -> int:
    try: n = int(value)
    except ValueError: raise ArgumentTypeError(f'Expected an integer, got {value!r}') from None
    if n < 1: raise ArgumentTypeError(f'Expected a positive integer, got {n}')
    return n


def parser() -> ArgumentParser:
    p = ArgumentParser(
        prog='trgcov',
        description='Extract every fixed-length trigger from query genomes and count the library genomes '
                    'each trigger occurs in.'
    )
    p.add_argument('-l', '--length_trigger', dest='trigger_length', type=trigger_length,
                   default=DEFAULT_TRIGGER_LENGTH, metavar='INT',
                   help=f'Size of trigger, default {DEFAULT_TRIGGER_LENGTH} nucleotides. '
                        f'Range {MIN_TRIGGER_LENGTH} to {MAX_TRIGGER_LENGTH}.')
    p.add_argument('-i', '--infile', dest='inputs', type=Path, action='append', required=True, metavar='FASTA',
                   help='Path to file(s) with at least one genome in fasta format, repeat for several files')
    p.add_argument('--include-non-standard', dest='include_non_standard', action='store_true',
                   help='Keep triggers with non standard IUPAC nucleic acid codes')
    p.add_argument('--threads', type=positive_int, metavar='INT',
                   help='Number of threads, defaults to all available CPUs')
    p.add_argument('--library', type=Path, metavar='FASTA', help='Path to library to search against')
    p.add_argument('--save-trg-list', dest='save_trg_list', action='store_true',
                   help='Save intermediate results, list of all triggers')
    p.add_argument('-o', '--output', dest='save_trg_count', action='store_true',
                   help='Save final results, catalogue of genomes covered per trigger (requires --library)')
    p.add_argument('-s', '--output-suffix', dest='output_suffix', default='_output', metavar='STR',
                   help='Suffix added to output file names, default "_output"')
    p.add_argument('-v', '--verbose', dest='verbosity', action='count', default=0,
                   help=f'Increase logging (-v info, -vv debug, -vvv trace); {LOG_ENV} overrides')
    p.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return p


def parse_args(argv: Optional[Sequence[str]] = None) -> Namespace:
    p = parser()
    args = p.parse_args(argv)
    if args.save_trg_count and args.library is None:
        p.error('the following arguments are required when using -o/--output: --library')
    return args


def setup_logging(verbosity: int = 0):
    """
    Configures the root logger on stderr.

    The level comes from the ``TRGCOV_LOG`` environment variable (a level name such as DEBUG or
    TRACE) if set, otherwise from the number of ``-v`` flags.
    """
    level = _VERBOSITY[min(verbosity, len(_VERBOSITY) - 1)]
    if name := os.environ.get(LOG_ENV):
        if isinstance(resolved := logging.getLevelName(name.upper()), int): level = resolved
        else: print(f'Ignoring unknown log level {LOG_ENV}={name}', file=sys.stderr)
    logging.basicConfig(level=level, format='[%(asctime)s %(levelname)s %(name)s] %(message)s', stream=sys.stderr)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbosity)
    logger.debug('Parsed commandline arguments: %s', args)
    try:
        run(RunConfig.from_args(args))
    except OSError as e:
        logger.critical('Unable to write output: %s', e)
        return 1
    return 0
