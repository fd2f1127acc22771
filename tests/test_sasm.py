# =============================================================================
# test_sasm.py - Command-Line Interface Tests
# =============================================================================
# Tests for the sasm command, run through click's CliRunner in a tmp_path.
#
# Test coverage includes:
#   - JSON output to stdout and to a file
#   - Entry point selection
#   - Symbol file generation and program printing
#   - Exit codes for build errors and invalid arguments
# =============================================================================

import base64
import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from sembler import __version__
from sembler.cli.errors import ExitCode
from sembler.cli.sasm import main


PROGRAM = """
bss {
msg:    .asciz "hi"
}
raw {
start:  PSH
main:   IMM msg
        RET
}
"""


# Arguments naming files are resolved inside the test's temporary directory
FILE_SUFFIXES = (".s", ".json", ".sym")


@pytest.fixture
def run(tmp_path: Path):
    """Return a helper that writes the source into tmp_path and invokes sasm."""
    def invoke(args, source=PROGRAM, filename="prog.s"):
        if source is not None:
            (tmp_path / filename).write_text(source)
        args = [str(tmp_path / arg) if arg.endswith(FILE_SUFFIXES) else arg for arg in args]
        result = CliRunner().invoke(main, args)
        files = {
            path.name: path.read_text()
            for path in tmp_path.iterdir()
            if path.name != filename
        }
        return result, files

    return invoke


# =============================================================================
# Successful Assembly
# =============================================================================

class TestSuccess:
    """Test successful sasm runs."""

    def test_json_to_stdout(self, run):
        result, _ = run(["prog.s"])
        assert result.exit_code == 0, result.output
        document = json.loads(result.output)
        assert document["ok"] is True
        assert base64.b64decode(document["bss"]) == b"hi\x00"
        assert base64.b64decode(document["raw"]) == b"\x10\x01\x00\x00\x00\x00\x18"
        assert document["ep"] == 1

    def test_stdout_is_pretty_printed(self, run):
        result, _ = run(["prog.s"])
        assert result.output.startswith("{\n    ")

    def test_entry_point_option(self, run):
        result, _ = run(["prog.s", "-e", "start"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["ep"] == 0

    def test_long_entry_point_option(self, run):
        result, _ = run(["--entry-point", "msg", "prog.s"])
        assert json.loads(result.output)["ep"] == 0

    def test_output_file(self, run):
        result, files = run(["prog.s", "-o", "prog.json"])
        assert result.exit_code == 0, result.output
        assert result.output == ""
        document = json.loads(files["prog.json"])
        assert document == {
            "ok": True,
            "bss": base64.b64encode(b"hi\x00").decode("ascii"),
            "raw": base64.b64encode(b"\x10\x01\x00\x00\x00\x00\x18").decode("ascii"),
            "ep": 1,
        }

    def test_symbols_file(self, run):
        result, files = run(["prog.s", "-o", "prog.json", "-s", "prog.sym"])
        assert result.exit_code == 0, result.output
        assert files["prog.sym"].splitlines()[2:] == [
            "msg bss 0x00000000",
            "start raw 0x00000000",
            "main raw 0x00000001",
        ]

    def test_print_program(self, run):
        result, _ = run(["prog.s", "-p", "-o", "prog.json"])
        assert result.exit_code == 0, result.output
        assert "main:   IMM msg" in result.output
        assert 'msg:    .asciz "hi"' in result.output

    def test_verbose_summary(self, run):
        result, _ = run(["prog.s", "-v", "-o", "prog.json"])
        assert result.exit_code == 0, result.output
        assert "Assembly complete" in result.output
        assert "Defined 3 symbols" in result.output

    def test_version(self, run):
        result, _ = run(["--version"], source=None)
        assert result.exit_code == 0
        assert __version__ in result.output


# =============================================================================
# Failures and Exit Codes
# =============================================================================

class TestFailures:
    """Test error reporting and exit codes."""

    def test_parse_error(self, run):
        result, files = run(["prog.s", "-o", "prog.json"], source="bss { } raw { FOO }")
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "Assembly error:" in result.output
        assert "unknown mnemonic 'FOO'" in result.output
        assert "prog.json" not in files

    def test_undefined_symbol(self, run):
        result, _ = run(["prog.s"], source="bss { } raw { main: JMP away }")
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "undefined symbol 'away'" in result.output

    def test_duplicate_symbol(self, run):
        result, _ = run(["prog.s"], source="bss { a: .db 0 } raw { a: RET }")
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "duplicate symbol 'a'" in result.output

    def test_missing_entry_point(self, run):
        result, _ = run(["prog.s", "-e", "nowhere"])
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "missing entry point 'nowhere'" in result.output

    def test_no_output_written_on_failure(self, run):
        result, files = run(
            ["prog.s", "-o", "prog.json", "-s", "prog.sym"],
            source="bss { } raw { }",
        )
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert files == {}

    def test_print_program_on_assembly_error(self, run):
        """The parsed program is still shown when a later pass fails."""
        result, _ = run(["prog.s", "-p"], source="bss { } raw { JMP away }")
        assert result.exit_code == ExitCode.BUILD_ERROR
        assert "JMP away" in result.output

    def test_missing_input_file(self, run):
        result, _ = run(["absent.s"], source=None)
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_missing_argument(self, run):
        result, _ = run([], source=None)
        assert result.exit_code == ExitCode.INVALID_ARGS

    def test_unknown_option(self, run):
        result, _ = run(["prog.s", "--bogus"])
        assert result.exit_code == ExitCode.INVALID_ARGS
