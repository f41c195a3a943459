"""
Tests for CLI output formatting and the interactive flow.

Shows sample output for each scenario. Run with:
    pytest tests/test_display.py -v
    pytest tests/test_display.py -v -s   # see actual terminal output
"""

import json
import re

import pytest

import gac.output as output
from gac.cli import main as cli_main
from gac.cli.args import build_parser
from gac.cli.commands import _mask, display_config, run_init
from gac.cli.utils import apply_prefix, confirm, detect_ticket_prefix, display_options, normalize_prefix
from gac.config import Config
from gac.output import CHECK, WARN, colorize_commit_type, format_candidate, length_indicator

ANSI_RE = re.compile(r'\033\[[0-9;]*m')


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def strip_ansi():
    """Return a function that removes ANSI escape codes."""
    def _strip(text: str) -> str:
        return ANSI_RE.sub('', text)
    return _strip


@pytest.fixture
def answers(monkeypatch):
    """Feed canned responses to input(); EOF once they run out."""
    def _feed(*values):
        queue = list(values)

        def fake_input(prompt=""):
            if not queue:
                raise EOFError
            return queue.pop(0)

        monkeypatch.setattr("builtins.input", fake_input)
    return _feed


@pytest.fixture
def colors_on(monkeypatch):
    monkeypatch.setattr(output, "COLORS_ENABLED", True)


# ---------------------------------------------------------------------------
# Candidate lines
# ---------------------------------------------------------------------------

class TestLengthIndicator:

    def test_within_limit(self, strip_ansi):
        mark, label = length_indicator("feat: add flag", 72)
        assert strip_ansi(mark) == CHECK
        assert label == "(14/72 chars)"

    def test_over_limit(self, strip_ansi):
        mark, label = length_indicator("x" * 80, 72)
        assert strip_ansi(mark) == WARN
        assert label == "(80/72 chars)"

    def test_exactly_at_limit_is_ok(self, strip_ansi):
        mark, _ = length_indicator("x" * 72, 72)
        assert strip_ansi(mark) == CHECK

    def test_no_limit(self):
        _, label = length_indicator("abc", None)
        assert label == "(3 chars)"


class TestFormatCandidate:

    def test_numbered_line(self, strip_ansi):
        line = strip_ansi(format_candidate("feat(cli): add verbose flag", 2, 72))
        assert line == f"{CHECK} 2. feat(cli): add verbose flag (27/72 chars)"

    def test_colorizes_conventional_type(self, colors_on):
        colored = colorize_commit_type("fix(api): handle null response")
        assert colored.startswith(output.Colors.BOLD + output.Colors.RED + "fix(api):")
        assert colored.endswith(" handle null response")

    @pytest.mark.parametrize("message", ["Add verbose flag", "✨ add verbose flag", "unknown: thing"])
    def test_leaves_other_subjects_alone(self, colors_on, message):
        assert colorize_commit_type(message) == message

    def test_plain_when_colors_disabled(self, monkeypatch):
        monkeypatch.setattr(output, "COLORS_ENABLED", False)
        assert colorize_commit_type("feat: add x") == "feat: add x"


class TestPrintHelpers:

    def test_error_goes_to_stderr(self, capsys, strip_ansi):
        output.print_error("Not inside a git repository")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Not inside a git repository" in strip_ansi(captured.err)

    def test_success_and_warning_go_to_stdout(self, capsys, strip_ansi):
        output.print_success("Committed")
        output.print_warning("No staged changes found")
        out = strip_ansi(capsys.readouterr().out)
        assert f"{CHECK} Committed" in out
        assert f"{WARN} No staged changes found" in out


# ---------------------------------------------------------------------------
# Prefix handling
# ---------------------------------------------------------------------------

class TestPrefix:

    @pytest.mark.parametrize("branch, expected", [
        ("feature/ABC-123-login", "ABC-123: "),
        ("PROJ-42", "PROJ-42: "),
        ("fix/crash-on-start", ""),
        ("main", ""),
        ("", ""),
    ])
    def test_detect_ticket_prefix(self, branch, expected):
        assert detect_ticket_prefix(branch) == expected

    @pytest.mark.parametrize("raw, expected", [
        ("JIRA-1", "JIRA-1: "),
        ("JIRA-1:", "JIRA-1: "),
        ("  [WIP]  ", "[WIP]: "),
        ("", ""),
        ("   ", ""),
    ])
    def test_normalize_prefix(self, raw, expected):
        assert normalize_prefix(raw) == expected

    def test_apply_prefix_is_idempotent(self):
        assert apply_prefix("ABC-1: ", "fix: crash") == "ABC-1: fix: crash"
        assert apply_prefix("ABC-1: ", "ABC-1: fix: crash") == "ABC-1: fix: crash"
        assert apply_prefix("", "fix: crash") == "fix: crash"


# ---------------------------------------------------------------------------
# Interactive prompts
# ---------------------------------------------------------------------------

OPTIONS = ["feat(cli): add verbose flag", "Add verbose flag", "✨ cli: add verbose flag"]


class TestDisplayOptions:

    def test_lists_candidates_and_actions(self, capsys, answers, strip_ansi):
        answers("1")
        display_options(OPTIONS, prefix="ABC-1: ", limit=72)
        out = strip_ansi(capsys.readouterr().out)

        assert "1. ABC-1: feat(cli): add verbose flag" in out
        assert "3. ABC-1: ✨ cli: add verbose flag" in out
        assert "r regenerate" in out
        assert "q quit" in out

    @pytest.mark.parametrize("typed, expected", [
        ("2", 1),
        ("r", "regenerate"),
        ("P", "prefix"),
        ("q", "quit"),
    ])
    def test_choices(self, answers, typed, expected):
        answers(typed)
        assert display_options(OPTIONS) == expected

    def test_invalid_choice_reprompts(self, capsys, answers):
        answers("7", "x", "3")
        assert display_options(OPTIONS) == 2
        assert capsys.readouterr().out.count("Enter 1-3, r, p or q") == 2

    def test_eof_quits(self, answers):
        answers()
        assert display_options(OPTIONS) == "quit"


class TestConfirm:

    @pytest.mark.parametrize("typed, default, expected", [
        ("", True, True),
        ("", False, False),
        ("y", False, True),
        ("YES", False, True),
        ("n", True, False),
    ])
    def test_answers(self, answers, typed, default, expected):
        answers(typed)
        assert confirm("Commit?", default=default) is expected

    def test_eof_declines(self, answers):
        answers()
        assert confirm("Commit?") is False


# ---------------------------------------------------------------------------
# Argument parsing and config resolution
# ---------------------------------------------------------------------------

class TestArgs:

    def test_defaults_are_none(self):
        args = build_parser().parse_args([])
        assert args.style is None
        assert args.engine is None
        assert args.regen is None
        assert args.all is False

    def test_short_flags(self):
        args = build_parser().parse_args(["-s", "conv", "-e", "none", "-m", "llama3:8b", "-a"])
        assert (args.style, args.engine, args.model, args.all) == ("conv", "none", "llama3:8b", True)

    @pytest.mark.parametrize("argv", [
        ["--style", "fancy"],
        ["--engine", "gpt"],
        ["--regen", "-1"],
        ["--max-len", "0"],
        ["--max-len", "abc"],
    ])
    def test_rejects_invalid_values(self, argv, capsys):
        with pytest.raises(SystemExit):
            build_parser().parse_args(argv)


class TestResolveConfig:

    def test_precedence(self):
        args = build_parser().parse_args(["--style", "conv"])
        config = Config(style="plain", engine="openai", openai_api_key="from-file")
        environ = {"GAC_STYLE": "gitmoji", "GAC_ENGINE": "gemini", "GEMINI_API_KEY": "g", "OPENAI_API_KEY": "o"}

        resolved = cli_main.resolve_config(args, config, environ)
        assert resolved.style == "conv"
        assert resolved.engine == "gemini"
        assert resolved.gemini_api_key == "g"
        assert resolved.openai_api_key == "o"

    def test_google_key_fallback(self):
        args = build_parser().parse_args([])
        resolved = cli_main.resolve_config(args, Config(), {"GOOGLE_API_KEY": "gk"})
        assert resolved.api_key_for("gemini") == "gk"

    def test_invalid_env_value_reset_with_warning(self, capsys):
        args = build_parser().parse_args(["--dry-run", "--regen", "2"])
        resolved = cli_main.resolve_config(args, Config(), {"GAC_STYLE": "fancy"})
        assert resolved.style == "mix"
        assert resolved.dry_run is True
        assert resolved.regen == 2
        assert "Config warning" in capsys.readouterr().err


# ---------------------------------------------------------------------------
# Commit flow
# ---------------------------------------------------------------------------

class FakeAnalyzer:
    """Stand-in for GitAnalyzer that serves a fixed ChangeSet."""
    changes = None
    commits = []
    staged_all = False

    def __init__(self, ignored_patterns=None):
        self.ignored_patterns = ignored_patterns

    def stage_all_tracked(self):
        FakeAnalyzer.staged_all = True

    def get_staged_changes(self):
        return FakeAnalyzer.changes

    def commit(self, message):
        FakeAnalyzer.commits.append(message)


@pytest.fixture
def fake_git(monkeypatch, make_changes):
    def _install(specs, diff="", branch="main"):
        FakeAnalyzer.changes = make_changes(specs, diff, branch=branch)
        FakeAnalyzer.commits = []
        FakeAnalyzer.staged_all = False
        monkeypatch.setattr(cli_main, "GitAnalyzer", FakeAnalyzer)
    return _install


def _offline(argv):
    args = build_parser().parse_args(["--engine", "none", *argv])
    return args, cli_main.resolve_config(args, Config(), environ={})


class TestCommitFlow:

    def test_pipe_mode_prints_first_candidate(self, capsys, fake_git, readme_changes):
        fake_git([("README.md", "M", 3, 0)], readme_changes.diff, branch="docs/DOC-7-install")
        args, config = _offline([])

        assert cli_main._generate_commit_flow(args, config) == 0
        out = capsys.readouterr().out.strip()
        assert out.startswith("DOC-7: docs: ")
        assert "\n" not in out

    def test_no_staged_changes(self, capsys, fake_git):
        fake_git([])
        args, config = _offline([])

        assert cli_main._generate_commit_flow(args, config) == 0
        assert "No staged changes found" in capsys.readouterr().out

    def test_stage_all_flag(self, fake_git):
        fake_git([("src/app.py", "M", 1, 0)])
        args, config = _offline(["--all"])
        cli_main._generate_commit_flow(args, config)
        assert FakeAnalyzer.staged_all is True

    def test_select_regenerate_then_pick(self, answers, make_changes):
        changes = make_changes([("src/app.py", "M", 4, 1)])
        _, config = _offline([])
        answers("r", "2")

        message = cli_main._select_message(changes, config, prefix="")
        assert config.regen == 1
        assert message == cli_main.generate_candidates(changes, config)[0][1]

    def test_select_set_prefix(self, answers, make_changes):
        changes = make_changes([("src/app.py", "M", 4, 1)])
        _, config = _offline([])
        answers("p", "JIRA-9", "1")

        message = cli_main._select_message(changes, config, prefix="")
        assert message.startswith("JIRA-9: ")

    def test_select_quit(self, answers, make_changes):
        _, config = _offline([])
        answers("q")
        assert cli_main._select_message(make_changes([("src/app.py", "M", 1, 0)]), config, "") is None


# ---------------------------------------------------------------------------
# Setup commands
# ---------------------------------------------------------------------------

class TestCommands:

    def test_mask(self):
        assert _mask(None) == "not set"
        assert _mask("short") == "set"
        assert _mask("sk-1234567890") == "sk-1…"

    def test_display_config(self, capsys, monkeypatch, strip_ansi):
        monkeypatch.setattr("gac.cli.commands.load_config", lambda: Config(engine="none", prefix="X: "))
        monkeypatch.setattr("gac.cli.commands.get_config_path", lambda: None)
        monkeypatch.setenv("GAC_STYLE", "conv")

        assert display_config() == 0
        out = strip_ansi(capsys.readouterr().out)
        assert "defaults (no .gacrc found)" in out
        assert "GAC_STYLE=conv" in out
        assert "engine:        none" in out
        assert "openai_api_key: not set" in out

    def test_init_writes_local_rc(self, tmp_path, answers):
        # engine 5 = none, style default, max length 60, prefix
        answers("5", "", "60", "ABC-1: ")
        assert run_init(cwd=tmp_path) == 0

        written = Config.from_dict(json.loads((tmp_path / ".gacrc").read_text()))
        assert written.engine == "none"
        assert written.style == "mix"
        assert written.max_len == 60
        assert written.prefix == "ABC-1:"

    def test_init_keeps_existing_file_unless_confirmed(self, tmp_path, answers, capsys):
        (tmp_path / ".gacrc").write_text("{}")
        answers("n")
        assert run_init(cwd=tmp_path) == 0
        assert (tmp_path / ".gacrc").read_text() == "{}"
        assert "Operation cancelled" in capsys.readouterr().out
