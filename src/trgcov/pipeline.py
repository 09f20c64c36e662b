"""
Runs each input file through trigger generation and, given a library, coverage counting.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging

from trgcov.core.alphabet import AlphabetMode
from trgcov.engines.coverage import CoverageCounter, RunResult
from trgcov.engines.windows import TriggerGenerator, DEFAULT_TRIGGER_LENGTH
from trgcov.io import SeqFileError, read_sequences, validate_fasta
from trgcov.io.writers import (output_path, write_triggers, write_coverage, format_percent, COVERAGE_HEADER,
                               TRIGGER_LIST, TRIGGER_COUNT)
from trgcov.utils import Config, TRACE


logger = logging.getLogger(__name__)


# Classes --------------------------------------------------------------------------------------------------------------
@dataclass
class RunConfig(Config):
    """
    Settings for a run, usually built with ``RunConfig.from_args``.

    Attributes:
        inputs: Query FASTA files, each processed independently and in order.
        trigger_length: Length of the triggers, 10 to 100.
        include_non_standard: Keep triggers with IUPAC ambiguity codes.
        threads: Worker threads per stage, None for all available CPUs.
        library: FASTA file to count coverage against; without it only triggers are generated.
        save_trg_list: Write the trigger list instead of tracing it.
        save_trg_count: Write the coverage table instead of tracing it.
        output_suffix: Inserted into output file names.
    """
    inputs: list[Path] = field(default_factory=list)
    trigger_length: int = DEFAULT_TRIGGER_LENGTH
    include_non_standard: bool = False
    threads: Optional[int] = None
    library: Optional[Path] = None
    save_trg_list: bool = False
    save_trg_count: bool = False
    output_suffix: str = '_output'

    @property
    def mode(self) -> AlphabetMode:
        return AlphabetMode.from_flag(self.include_non_standard)


# Functions ------------------------------------------------------------------------------------------------------------
def run(config: RunConfig) -> int:
    """
    Processes every input file in turn.

    A file failing validation is reported and skipped; the others still run. Errors writing
    output propagate.

    Returns:
        The number of input files that were skipped.
    """
    failed = 0
    for infile in config.inputs:
        logger.debug('Processing input file %s', infile)
        try:
            process_file(Path(infile), config)
        except SeqFileError as e:
            logger.error('%s', e)
            failed += 1
    return failed


def process_file(infile: Path, config: RunConfig) -> Optional[RunResult]:
    """
    Generates the triggers of one input file and counts them across the library, if any.

    Returns:
        The coverage result, or None when no library is configured.

    Raises:
        SeqFileError: If the input file or the library is not FASTA. Triggers are already saved
            when the library fails.
    """
    validate_fasta(infile)
    triggers = TriggerGenerator(config.trigger_length, config.mode, config.threads).generate(
        read_sequences(infile))
    logger.debug('# of unique triggers: %d', len(triggers))
    if config.save_trg_list:
        write_triggers(triggers, output_path(infile, config.output_suffix, TRIGGER_LIST))
    else:
        logger.debug('Printing list of triggers to trace. Enable trace to see triggers on terminal.')
        if logger.isEnabledFor(TRACE):
            for trigger in triggers: logger.log(TRACE, '%s', trigger.decode())

    if config.library is None:
        logger.debug('End: no library specified.')
        return None
    library = validate_fasta(config.library)
    logger.debug('Given library is in expected fasta format. Checking the coverage of triggers identified.')
    result = CoverageCounter(triggers, config.threads).count(read_sequences(library))
    logger.debug('Analysed %d genomes in total', result.total)
    if config.save_trg_count:
        write_coverage(result, output_path(infile, config.output_suffix, TRIGGER_COUNT))
    else:
        logger.debug('Printing trigger coverage across library to trace. Enable trace to see output on terminal.')
        if logger.isEnabledFor(TRACE):
            logger.log(TRACE, COVERAGE_HEADER)
            for trigger, n in result.items():
                logger.log(TRACE, '%s,%d,%s', trigger.decode(), n, format_percent(result.percent(trigger)))
    return result
