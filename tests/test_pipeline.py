import logging
from pathlib import Path

import pytest
from trgcov.cli import main, parse_args, setup_logging, LOG_ENV
from trgcov.pipeline import RunConfig, run, process_file
from trgcov.core.alphabet import AlphabetMode
from trgcov.utils import TRACE


@pytest.fixture
def query(tmp_path) -> Path:
    path = tmp_path / 'query.fa'
    path.write_bytes(b'>q1\nATGCATGCAT\n>q2\natgcatgcat\n')
    return path


@pytest.fixture
def library(tmp_path) -> Path:
    path = tmp_path / 'library.fa'
    path.write_bytes(b'>g1\nGGATGCATGCATGG\n>g2\nCCCCCCCCCCCCCC\n>g3\nATGCATGCATATGCATGCAT\n')
    return path


def read_lines(path: Path) -> list[str]:
    return path.read_text().splitlines()


class TestRun:
    def test_triggers_and_coverage_files(self, query, library):
        config = RunConfig(inputs=[query], trigger_length=10, library=library, save_trg_list=True,
                           save_trg_count=True, threads=2)
        assert run(config) == 0
        assert read_lines(Path(f'{query}__output_trglist')) == ['ATGCATGCAT']
        assert read_lines(Path(f'{query}__output_trgcount')) == ['Trigger,Count,%Count',
                                                                 'ATGCATGCAT_2=66.66666666666666']

    def test_result_returned(self, query, library):
        result = process_file(query, RunConfig(inputs=[query], trigger_length=10, library=library))
        assert result.total == 3
        assert result.coverage == {b'ATGCATGCAT': 2}

    def test_headerless_library_is_one_record(self, query, tmp_path):
        library = tmp_path / 'bare.fa'
        library.write_bytes(b'GGATGCATG\nCATGG\nCCCC\n')
        result = process_file(query, RunConfig(inputs=[query], trigger_length=10, library=library))
        assert result.total == 1
        assert result.coverage == {b'ATGCATGCAT': 1}

    def test_library_without_final_newline(self, query, tmp_path):
        library = tmp_path / 'library.fa'
        library.write_bytes(b'>g1\nCCCCCCCCCCCC\n>g2\nGGATGCATGCAT')
        result = process_file(query, RunConfig(inputs=[query], trigger_length=10, library=library))
        assert result.total == 2
        assert result.coverage == {b'ATGCATGCAT': 1}

    def test_no_library_skips_counting(self, query):
        assert process_file(query, RunConfig(inputs=[query], trigger_length=10)) is None

    def test_nothing_saved_by_default(self, query, library, tmp_path):
        run(RunConfig(inputs=[query], trigger_length=10, library=library))
        assert sorted(p.name for p in tmp_path.iterdir()) == ['library.fa', 'query.fa']

    def test_trace_output(self, query, library, caplog):
        caplog.set_level(TRACE)
        run(RunConfig(inputs=[query], trigger_length=10, library=library))
        messages = [r.getMessage() for r in caplog.records if r.levelno == TRACE]
        assert 'ATGCATGCAT' in messages
        assert 'Trigger,Count,%Count' in messages
        assert 'ATGCATGCAT,2,66.66666666666666' in messages

    def test_bad_input_does_not_stop_siblings(self, query, tmp_path, caplog):
        bad = tmp_path / 'bad.fa'
        bad.write_bytes(b'not,a,fasta\n')
        config = RunConfig(inputs=[bad, tmp_path / 'missing.fa', query], trigger_length=10, save_trg_list=True,
                           output_suffix='run')
        assert run(config) == 2
        assert Path(f'{query}_run_trglist').exists()
        assert not Path(f'{bad}_run_trglist').exists()
        assert sum(r.levelno == logging.ERROR for r in caplog.records) == 2

    def test_bad_library(self, query, tmp_path):
        bad = tmp_path / 'lib.fa'
        bad.write_bytes(b'')
        config = RunConfig(inputs=[query], trigger_length=10, library=bad, save_trg_list=True, save_trg_count=True)
        assert run(config) == 1
        assert Path(f'{query}__output_trglist').exists()
        assert not Path(f'{query}__output_trgcount').exists()

    def test_extended_mode(self, tmp_path):
        query = tmp_path / 'q.fa'
        query.write_bytes(b'>q\nATGCANGCAT\n')
        config = RunConfig(inputs=[query], trigger_length=10, save_trg_list=True)
        run(config)
        assert read_lines(Path(f'{query}__output_trglist')) == []
        config.include_non_standard = True
        assert config.mode is AlphabetMode.EXTENDED
        run(config)
        assert read_lines(Path(f'{query}__output_trglist')) == ['ATGCANGCAT']

    def test_write_error_propagates(self, query, tmp_path):
        config = RunConfig(inputs=[query], trigger_length=10, save_trg_list=True, output_suffix='x/y')
        with pytest.raises(OSError):
            run(config)


class TestCli:
    def test_defaults(self):
        args = parse_args(['-i', 'a.fa'])
        config = RunConfig.from_args(args)
        assert config == RunConfig(inputs=[Path('a.fa')])
        assert config.trigger_length == 36
        assert config.output_suffix == '_output'
        assert config.mode is AlphabetMode.STANDARD

    def test_all_flags(self):
        args = parse_args(['-i', 'a.fa', '--infile', 'b.fa', '-l', '20', '--include-non-standard', '--threads', '3',
                           '--library', 'lib.fa', '--save-trg-list', '-o', '-s', 'run1', '-vv'])
        config = RunConfig.from_args(args)
        assert config.inputs == [Path('a.fa'), Path('b.fa')]
        assert config.trigger_length == 20
        assert config.include_non_standard
        assert config.threads == 3
        assert config.library == Path('lib.fa')
        assert config.save_trg_list and config.save_trg_count
        assert config.output_suffix == 'run1'
        assert args.verbosity == 2

    @pytest.mark.parametrize('argv', [
        [], ['-i', 'a.fa', '-l', '9'], ['-i', 'a.fa', '-l', '101'], ['-i', 'a.fa', '-o'], ['-i', 'a.fa', '--threads', '0']
    ])
    def test_usage_errors(self, argv):
        with pytest.raises(SystemExit) as e:
            parse_args(argv)
        assert e.value.code == 2

    def test_trigger_length_message(self, capsys):
        with pytest.raises(SystemExit):
            parse_args(['-i', 'a.fa', '-l', '5'])
        assert 'Trigger length not in range considered: 10 - 100' in capsys.readouterr().err

    def test_main(self, query, library):
        assert main(['-i', str(query), '-l', '10', '--library', str(library), '-o']) == 0
        assert read_lines(Path(f'{query}__output_trgcount'))[1] == 'ATGCATGCAT_2=66.66666666666666'

    def test_main_write_error(self, query):
        assert main(['-i', str(query), '-l', '10', '--save-trg-list', '-s', 'no/such/dir']) == 1

    def test_log_level_from_environment(self, monkeypatch):
        root = logging.getLogger()
        monkeypatch.setattr(root, 'handlers', [])
        monkeypatch.setattr(root, 'level', logging.WARNING)
        monkeypatch.setenv(LOG_ENV, 'trace')
        setup_logging(0)
        assert root.level == TRACE

    def test_log_level_from_verbosity(self, monkeypatch):
        root = logging.getLogger()
        monkeypatch.setattr(root, 'handlers', [])
        monkeypatch.setattr(root, 'level', logging.WARNING)
        monkeypatch.delenv(LOG_ENV, raising=False)
        setup_logging(5)
        assert root.level == TRACE
