"""
Tests for storyteller.cli

All tests use Click's CliRunner and patch ``configure_logging`` so no
handlers are attached to the root logger.

Test coverage:
    beautify:
        exit code 0 when every record is beautified
        exit code 1 when a record is passed through
        -o writes the JSON result list
        --json prints the JSON result list
        stdin input via "-"
        invalid JSON / non-list input → exit 2
        bad rules file → exit 2
        bad environment config → exit 2

    analyze:
        --json output fields, --title honoured, formatted report

    clean:
        cleaned text, --narrative reflow

    input that is not valid UTF-8 → exit 2 for every command

    --version
"""

import json
from unittest.mock import patch

import pytest
import structlog
from click.testing import CliRunner

from storyteller import __version__
from storyteller.cli import cli


# ---------------------------------------------------------------------------
# Fixtures & helpers
# ---------------------------------------------------------------------------

_PATCH_LOGGING = "storyteller.cli.configure_logging"

# Variables the global options set; CliRunner restores them after each run.
_CLEAN_ENV = {
    "STORYTELLER_LOG_LEVEL": None,
    "STORYTELLER_RULES_FILE": None,
}


@pytest.fixture(autouse=True)
def _no_logging():
    """Keep log events out of the captured command output."""
    structlog.configure(logger_factory=structlog.ReturnLoggerFactory())
    with patch(_PATCH_LOGGING) as mock_logging:
        yield mock_logging


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def _invoke(runner: CliRunner, args, **kwargs):
    env = dict(_CLEAN_ENV)
    env.update(kwargs.pop("env", {}))
    return runner.invoke(cli, args, env=env, **kwargs)


@pytest.fixture()
def records_file(tmp_path, records):
    path = tmp_path / "stories.json"
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


@pytest.fixture()
def transcript_file(tmp_path, speaker_transcript):
    path = tmp_path / "transcript.txt"
    path.write_text(speaker_transcript, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# beautify
# ---------------------------------------------------------------------------

class TestBeautify:
    def test_writes_output_and_exits_1_on_passthrough(self, runner, records_file, records, tmp_path):
        out = tmp_path / "out.json"
        result = _invoke(runner, ["beautify", str(records_file), "-o", str(out)])

        assert result.exit_code == 1, result.output
        data = json.loads(out.read_text(encoding="utf-8"))
        assert len(data) == 3
        assert data[1] == records[1]
        assert data[0]["raw_content"] == records[0]["content"]
        assert "b2" in result.output
        assert "Beautification Complete" in result.output

    def test_exit_0_when_all_beautified(self, runner, tmp_path, records):
        path = tmp_path / "good.json"
        path.write_text(json.dumps([records[0], records[2]]), encoding="utf-8")
        result = _invoke(runner, ["beautify", str(path)])
        assert result.exit_code == 0, result.output
        assert "2/2 beautified" in result.output

    def test_json_output(self, runner, records_file):
        result = _invoke(runner, ["beautify", str(records_file), "--json"])
        assert result.exit_code == 1
        data = json.loads(result.output)
        assert [r["id"] for r in data] == ["a1", "b2", "c3"]
        assert data[2]["title"] == "The Overdose Years"

    def test_stdin(self, runner, records):
        result = _invoke(
            runner,
            ["beautify", "-", "--json", "--concurrency", "1"],
            input=json.dumps(records[:1]),
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)[0]["beautification_version"] == "1.0"

    def test_invalid_json(self, runner, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        result = _invoke(runner, ["beautify", str(path)])
        assert result.exit_code == 2
        assert "Cannot read input" in result.output

    def test_not_a_list(self, runner, tmp_path):
        path = tmp_path / "obj.json"
        path.write_text('{"content": "x"}', encoding="utf-8")
        result = _invoke(runner, ["beautify", str(path)])
        assert result.exit_code == 2

    def test_bad_rules_file(self, runner, records_file, tmp_path):
        rules = tmp_path / "rules.yaml"
        rules.write_text("caps:\n  bogus: 1\n", encoding="utf-8")
        result = _invoke(runner, ["--rules", str(rules), "beautify", str(records_file)])
        assert result.exit_code == 2
        assert "Config error" in result.output

    def test_rules_file_applied(self, runner, records_file, tmp_path):
        rules = tmp_path / "rules.yaml"
        rules.write_text("themes:\n  kin: [brother]\n", encoding="utf-8")
        result = _invoke(
            runner, ["--rules", str(rules), "beautify", str(records_file), "--json"]
        )
        data = json.loads(result.output)
        assert data[2]["themes"] == ["kin"]

    def test_bad_env_config(self, runner, records_file):
        result = _invoke(
            runner,
            ["beautify", str(records_file)],
            env={"STORYTELLER_MAX_CONCURRENCY": "0"},
        )
        assert result.exit_code == 2
        assert "Config error" in result.output

    def test_invalid_concurrency_option(self, runner, records_file):
        result = _invoke(runner, ["beautify", str(records_file), "--concurrency", "0"])
        assert result.exit_code == 2


# ---------------------------------------------------------------------------
# analyze
# ---------------------------------------------------------------------------

class TestAnalyze:
    def test_json(self, runner, transcript_file):
        result = _invoke(runner, ["analyze", str(transcript_file), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["themes"] == ["housing", "community"]
        assert data["emotions"] == ["grateful"]
        assert data["is_fallback"] is False
        assert data["word_count"] == 11

    def test_title_option(self, runner, transcript_file):
        result = _invoke(
            runner, ["analyze", str(transcript_file), "--title", "Moving Home", "--json"]
        )
        assert json.loads(result.output)["title"] == "Moving Home"

    def test_report(self, runner, transcript_file):
        result = _invoke(runner, ["analyze", str(transcript_file)])
        assert result.exit_code == 0, result.output
        assert "housing, community" in result.output
        assert "Key Quotes" in result.output


# ---------------------------------------------------------------------------
# clean
# ---------------------------------------------------------------------------

class TestClean:
    def test_clean(self, runner, tmp_path):
        path = tmp_path / "t.txt"
        path.write_text("[00:00:01] hello . world\n\n\n\nok", encoding="utf-8")
        result = _invoke(runner, ["clean", str(path)])
        assert result.exit_code == 0
        assert result.output == " hello. world\n\nok\n"

    def test_narrative(self, runner, tmp_path):
        path = tmp_path / "t.txt"
        path.write_text("[00:00:01] hello . world\n\n\n\nok", encoding="utf-8")
        result = _invoke(runner, ["clean", str(path), "--narrative"])
        assert result.output == "Hello. world\n"


@pytest.mark.parametrize("command", ["beautify", "analyze", "clean"])
def test_undecodable_input_exits_2(runner, tmp_path, command):
    path = tmp_path / "latin1.txt"
    path.write_bytes(b"caf\xe9")
    result = _invoke(runner, [command, str(path)])
    assert result.exit_code == 2, result.output
    assert "Cannot read input" in result.output


def test_version(runner):
    result = _invoke(runner, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output
