"""
Unit tests for core modules: GitAnalyzer, DiffProcessor, PromptBuilder, Config.

Run with:
    pytest tests/test_core.py -v
"""

import json

import pytest

from gac.config import Config, ConfigManager, read_ignore_file
from gac.git import (
    ChangeSet, ChangeStatus, DiffProcessor, FileChange, GitAnalyzer, GitError,
    Priority, ProcessedDiff, ProcessorConfig, split_diff_by_file,
)
from gac.git.analyzer import is_ignored_path, summarize_identifiers
from gac.git.patch import added_lines, diff_slice
from gac.prompts import PromptBuilder, PromptConfig


# ---------------------------------------------------------------------------
# FileChange / ChangeSet
# ---------------------------------------------------------------------------

class TestFileChange:

    def test_total_changes(self):
        fc = FileChange(path="src/app.py", additions=10, deletions=3)
        assert fc.total_changes == 13

    def test_directory_src_layout(self):
        assert FileChange(path="src/cli/main.py").directory == "cli"

    def test_directory_top_level(self):
        assert FileChange(path="README.md").directory == "README.md"

    def test_directory_tests(self):
        assert FileChange(path="tests/test_main.py").directory == "tests"

    def test_stem_strips_compound_suffix(self):
        assert FileChange(path="src/app.test.ts").stem == "app"

    def test_status_label(self):
        assert FileChange(path="a.py", status="R").status.label == "Renamed"

    def test_is_doc(self):
        assert FileChange(path="docs/GUIDE.MD").is_doc
        assert not FileChange(path="src/app.py").is_doc


class TestChangeSet:

    def test_totals(self, make_changes):
        changes = make_changes([("a.py", "M", 3, 1), ("b.py", "A", 7, 0)])
        assert changes.total_files == 2
        assert changes.total_additions == 10
        assert changes.total_deletions == 1
        assert not changes.is_empty

    def test_active_files_skip_ignored(self):
        changes = ChangeSet(files=[FileChange(path="a.py"), FileChange(path="dist/b.js", is_ignored=True)])
        assert [f.path for f in changes.active_files] == ["a.py"]

    def test_empty(self):
        assert ChangeSet().is_empty


# ---------------------------------------------------------------------------
# Diff helpers
# ---------------------------------------------------------------------------

class TestDiffSplitByFile:

    def test_splits_multi_file_diff(self):
        diff = (
            "diff --git a/src/foo.py b/src/foo.py\n"
            "+added line in foo\n"
            "diff --git a/src/bar.py b/src/bar.py\n"
            "+added line in bar\n"
        )
        result = split_diff_by_file(diff)

        assert "added line in foo" in result["src/foo.py"]
        assert "added line in bar" in result["src/bar.py"]

    def test_rename_keyed_by_destination(self):
        diff = "diff --git a/src/old.py b/src/new.py\n+x\n"
        assert list(split_diff_by_file(diff)) == ["src/new.py"]

    def test_headerless_text_yields_nothing(self):
        assert split_diff_by_file("+just a line") == {}

    def test_added_lines_skip_file_headers(self):
        diff = "--- a/x.py\n+++ b/x.py\n@@ -1 +1 @@\n-old\n+new\n context"
        assert added_lines(diff) == ["new"]

    def test_diff_slice_keeps_requested_files(self):
        diff = "diff --git a/a.py b/a.py\n+a\ndiff --git a/b.md b/b.md\n+b"
        sliced = diff_slice(diff, ["a.py"])
        assert "+a" in sliced
        assert "+b" not in sliced


# ---------------------------------------------------------------------------
# GitAnalyzer
# ---------------------------------------------------------------------------

STAGED_DIFF = "\n".join([
    "diff --git a/src/app.py b/src/app.py",
    "--- a/src/app.py",
    "+++ b/src/app.py",
    "@@ -1,2 +1,4 @@",
    "+def load_settings(path):",
    "+    return path",
    "-VALUE = 1",
    "diff --git a/src/widgets.py b/src/widgets.py",
    "new file mode 100644",
    "--- /dev/null",
    "+++ b/src/widgets.py",
    "@@ -0,0 +1,2 @@",
    "+class Widget:",
    "+    pass",
])

GIT_OUTPUTS = {
    ("--version",): "git version 2.43.0\n",
    ("rev-parse", "--git-dir"): ".git\n",
    ("diff", "--cached", "--name-status"): (
        "M\tsrc/app.py\n"
        "A\tsrc/widgets.py\n"
        "R087\tsrc/old.py\tsrc/renamed.py\n"
        "M\tpackage-lock.json\n"
    ),
    ("diff", "--cached", "--unified=3"): STAGED_DIFF,
    ("diff", "--cached", "--numstat"): (
        "2\t1\tsrc/app.py\n"
        "2\t0\tsrc/widgets.py\n"
        "4\t4\tsrc/{old.py => renamed.py}\n"
        "-\t-\tpackage-lock.json\n"
    ),
    ("config", "--get", "remote.origin.url"): "git@github.com:acme/widgets.git\n",
    ("rev-parse", "--abbrev-ref", "HEAD"): "feature/ABC-123-login\n",
}


@pytest.fixture
def git_calls(monkeypatch):
    """Replace git with canned output; returns the list of invocations."""
    calls = []

    def fake_run_git(self, *args):
        calls.append(args)
        if args and args[0] in ("commit", "add"):
            return ""
        if args not in GIT_OUTPUTS:
            raise GitError(f"Git command failed: git {' '.join(args)}")
        return GIT_OUTPUTS[args]

    monkeypatch.setattr(GitAnalyzer, "_run_git", fake_run_git)
    return calls


class TestGitAnalyzer:

    def test_staged_changes(self, git_calls):
        changes = GitAnalyzer(ignored_patterns=["package-lock.json"]).get_staged_changes()

        assert [f.path for f in changes.files] == [
            "src/app.py", "src/widgets.py", "src/renamed.py", "package-lock.json",
        ]
        app, widgets, renamed, lock = changes.files
        assert (app.additions, app.deletions) == (2, 1)
        assert app.summary == "load_settings"
        assert widgets.status is ChangeStatus.ADDED
        assert widgets.summary == "Widget"
        assert renamed.status is ChangeStatus.RENAMED
        assert (renamed.additions, renamed.deletions) == (4, 4)
        assert lock.is_ignored
        assert (lock.additions, lock.deletions) == (0, 0)
        assert changes.repo_name == "widgets"
        assert changes.branch == "feature/ABC-123-login"

    def test_no_staged_changes(self, git_calls, monkeypatch):
        monkeypatch.setitem(GIT_OUTPUTS, ("diff", "--cached", "--name-status"), "")
        assert GitAnalyzer().get_staged_changes().is_empty

    def test_typechange_is_modification_and_unmerged_is_skipped(self, git_calls, monkeypatch):
        monkeypatch.setitem(GIT_OUTPUTS, ("diff", "--cached", "--name-status"), (
            "T\tbin/run\n"
            "U\tsrc/conflicted.py\n"
            "M\tsrc/app.py\n"
        ))
        changes = GitAnalyzer().get_staged_changes()

        assert [f.path for f in changes.files] == ["bin/run", "src/app.py"]
        assert changes.files[0].status is ChangeStatus.MODIFIED

    def test_not_a_repository(self, monkeypatch):
        def fake_run_git(self, *args):
            if args == ("--version",):
                return "git version 2.43.0"
            raise GitError("fatal: not a git repository")

        monkeypatch.setattr(GitAnalyzer, "_run_git", fake_run_git)
        with pytest.raises(GitError, match="Not inside a git repository"):
            GitAnalyzer()

    def test_commit_and_stage(self, git_calls):
        analyzer = GitAnalyzer()
        analyzer.stage_all_tracked()
        analyzer.commit("feat: add widgets")
        assert ("add", "-u") in git_calls
        assert ("commit", "-m", "feat: add widgets") in git_calls

    def test_repo_name_falls_back_to_toplevel(self, git_calls, monkeypatch):
        monkeypatch.delitem(GIT_OUTPUTS, ("config", "--get", "remote.origin.url"))
        monkeypatch.setitem(GIT_OUTPUTS, ("rev-parse", "--show-toplevel"), "/home/dev/gadgets\n")
        assert GitAnalyzer()._get_repo_name() == "gadgets"

    @pytest.mark.parametrize("path, patterns, expected", [
        ("dist/bundle.js", ["dist/"], True),
        ("src/gen/api.pb.go", ["*.pb.go"], True),
        ("src/app.py", ["*.lock", "dist/"], False),
    ])
    def test_ignored_paths(self, path, patterns, expected):
        assert is_ignored_path(path, patterns) is expected

    def test_summarize_identifiers_caps_names(self):
        diff = "\n".join(f"+def f{i}():" for i in range(8))
        assert summarize_identifiers(diff) == "f0, f1, f2, f3, f4"


# ---------------------------------------------------------------------------
# DiffProcessor: file classification
# ---------------------------------------------------------------------------

class TestDiffProcessorClassify:
    """DiffProcessor._get_priority() file classification."""

    @pytest.fixture
    def processor(self):
        return DiffProcessor()

    @pytest.mark.parametrize("path", ["src/cli/main.py", "app/models/user.rb", "lib/utils.ts", "index.js"])
    def test_source_files(self, processor, path):
        assert processor._get_priority(path) == Priority.SOURCE

    @pytest.mark.parametrize("path", [
        "package-lock.json",
        "yarn.lock",
        "poetry.lock",
        "dist/bundle.js",
        "node_modules/pkg/index.js",
        "assets/app.min.js",
        "__pycache__/mod.pyc",
    ])
    def test_noise_files(self, processor, path):
        assert processor._get_priority(path) == Priority.NOISE

    @pytest.mark.parametrize("path", [
        "tests/test_main.py",
        "spec/models/user_spec.rb",
        "__tests__/App.test.js",
        "src/utils.test.ts",
    ])
    def test_test_files(self, processor, path):
        assert processor._get_priority(path) == Priority.TEST

    @pytest.mark.parametrize("path", ["config.json", "settings.yaml", "pyproject.toml", "Dockerfile", "Makefile"])
    def test_config_files(self, processor, path):
        assert processor._get_priority(path) == Priority.CONFIG

    @pytest.mark.parametrize("path", ["README.md", "CHANGELOG.rst", "docs/guide.md", "notes.txt"])
    def test_docs_files(self, processor, path):
        assert processor._get_priority(path) == Priority.DOCS


# ---------------------------------------------------------------------------
# DiffProcessor: processing
# ---------------------------------------------------------------------------

class TestDiffProcessorProcess:
    """DiffProcessor.process() end-to-end."""

    def _make_changes(self, file_paths, diff=""):
        files = [FileChange(path=p, additions=10, deletions=2) for p in file_paths]
        return ChangeSet(files=files, diff=diff, repo_name="widgets", branch="main")

    def test_filters_noise_files(self):
        changes = self._make_changes(["src/app.py", "package-lock.json", "yarn.lock"])
        result = DiffProcessor().process(changes)

        assert result.total_files == 3
        assert result.filtered_files == 2
        assert "package-lock" not in result.summary
        assert "[Filtered: 2 files (lock files, generated code, ignored)]" in result.summary

    def test_ignored_files_count_as_filtered(self):
        changes = self._make_changes(["src/app.py"])
        changes.files.append(FileChange(path="generated/api.py", additions=500, is_ignored=True))
        result = DiffProcessor().process(changes)
        assert result.filtered_files == 1
        assert "generated/api.py" not in result.summary

    def test_summary_line_format(self):
        changes = ChangeSet(files=[
            FileChange(path="src/app.py", status="A", additions=150, deletions=3, summary="load, save"),
        ])
        summary = DiffProcessor().process(changes).summary
        assert summary.split("\n") == [
            "Added: src/app.py (+150/-3) (large)",
            "  Key changes: load, save",
        ]

    def test_groups_by_priority(self):
        changes = self._make_changes(["tests/test_app.py", "README.md", "src/app.py"])
        lines = DiffProcessor().process(changes).summary.split("\n")
        assert [line.split(": ")[1].split(" ")[0] for line in lines] == [
            "src/app.py", "tests/test_app.py", "README.md",
        ]

    def test_summary_file_limit(self):
        changes = self._make_changes([f"src/m{i}.py" for i in range(12)])
        result = DiffProcessor(ProcessorConfig(max_summary_files=10)).process(changes)
        assert result.summary.endswith("... and 2 more files")

    def test_carries_repo_and_branch(self):
        result = DiffProcessor().process(self._make_changes(["src/app.py"]))
        assert (result.repo_name, result.branch) == ("widgets", "main")

    def test_empty_diff_returns_empty_detailed(self):
        result = DiffProcessor().process(self._make_changes(["src/app.py"], diff=""))
        assert result.detailed_diff == ""
        assert result.truncated is False

    def test_truncation_with_token_limit(self):
        big_diff = "diff --git a/src/big.py b/src/big.py\n" + "+" * 5000 + "\n"
        changes = self._make_changes(["src/big.py"], diff=big_diff)
        result = DiffProcessor(config=ProcessorConfig(max_tokens=100)).process(changes)
        assert result.truncated is True
        assert result.included_files == 0

    def test_long_file_diff_is_clipped(self):
        body = "\n".join(f"+line {i}" for i in range(30))
        changes = self._make_changes(["src/long.py"], diff=f"diff --git a/src/long.py b/src/long.py\n{body}")
        result = DiffProcessor(ProcessorConfig(max_lines_per_file=10)).process(changes)
        assert "more lines truncated from src/long.py" in result.detailed_diff
        assert result.included_files == 1

    def test_estimated_tokens(self):
        diff = ProcessedDiff(summary="a" * 100, detailed_diff="b" * 300, total_files=1)
        assert diff.estimated_tokens == 100


# ---------------------------------------------------------------------------
# PromptBuilder
# ---------------------------------------------------------------------------

class TestPromptBuilder:

    @pytest.fixture
    def builder(self):
        return PromptBuilder()

    @pytest.fixture
    def diff(self):
        return ProcessedDiff(
            summary="Modified: src/app.py (+10/-2)",
            detailed_diff="+added line",
            repo_name="widgets",
            branch="feature/login",
            total_files=1,
            included_files=1,
        )

    def test_context_section(self, builder, diff):
        result = builder.build(diff)
        assert result.startswith("Repo: widgets\nBranch: feature/login")
        assert "Modified: src/app.py (+10/-2)" in result
        assert "Diff details:\n+added line" in result

    def test_mix_requests_one_line_per_style(self, builder, diff):
        result = builder.build(diff, PromptConfig(style="mix"))
        assert "Generate exactly 3 commit message subjects (one per line):" in result
        assert "1. Conventional Commits format" in result
        assert "2. Plain imperative format" in result
        assert "3. Gitmoji format" in result

    def test_single_style_asks_for_different_subjects(self, builder, diff):
        result = builder.build(diff, PromptConfig(style="gitmoji"))
        assert "Generate exactly 3 different commit message subjects" in result
        assert result.count("Gitmoji format") == 3

    @pytest.mark.parametrize("style, expected", [("conv", True), ("mix", True), ("plain", False), ("gitmoji", False)])
    def test_type_list_only_for_conventional(self, builder, diff, style, expected):
        result = builder.build(diff, PromptConfig(style=style))
        assert ("Choose the most appropriate type:" in result) is expected

    def test_length_rule(self, builder, diff):
        assert "Max 50 characters per line" in builder.build(diff, PromptConfig(max_subject_length=50))

    def test_truncated_diff_note(self, builder):
        diff = ProcessedDiff(summary="Modified: src/app.py (+10/-2)", detailed_diff="+added", truncated=True)
        assert "truncated due to size" in builder.build(diff)


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

class TestConfig:

    def test_defaults(self):
        config = Config()
        assert config.engine == "ollama"
        assert config.model == "mistral:7b"
        assert config.style == "mix"
        assert config.max_len == 72
        assert config.prefix == ""
        assert config.dry_run is False

    def test_to_dict_excludes_none(self):
        d = Config().to_dict()
        assert "openai_api_key" not in d
        assert "engine" in d

    def test_from_dict_ignores_unknown_keys(self):
        config = Config.from_dict({"engine": "gemini", "unknown_key": "value"})
        assert config.engine == "gemini"
        assert not hasattr(config, "unknown_key")

    def test_from_dict_accepts_camel_case(self):
        config = Config.from_dict({"maxLen": 50, "dryRun": True, "ignoredFiles": ["*.snap"]})
        assert config.max_len == 50
        assert config.dry_run is True
        assert config.ignored_files == ["*.snap"]

    @pytest.mark.parametrize("field_name, value", [
        ("engine", "gpt4"),
        ("style", "fancy"),
        ("max_len", -1),
        ("max_len", "72"),
        ("regen", -2),
        ("dry_run", "yes"),
        ("ignored_files", "dist/"),
    ])
    def test_validate_resets_invalid_values(self, field_name, value):
        config = Config(**{field_name: value})
        warnings = config.validate()
        assert len(warnings) == 1
        assert getattr(config, field_name) == getattr(Config(), field_name)

    def test_validate_valid_config_no_warnings(self):
        assert Config().validate() == []

    def test_from_dict_triggers_validation(self, capsys):
        Config.from_dict({"engine": "invalid"})
        assert "Config warning" in capsys.readouterr().err

    def test_api_key_for(self):
        config = Config(gemini_api_key="g-key")
        assert config.api_key_for("gemini") == "g-key"
        assert config.api_key_for("openai") is None
        assert config.api_key_for("ollama") is None


class TestConfigManager:

    @pytest.fixture
    def dirs(self, tmp_path):
        cwd, home = tmp_path / "project", tmp_path / "home"
        cwd.mkdir()
        home.mkdir()
        return cwd, home

    def test_load_returns_defaults_when_no_file(self, dirs):
        manager = ConfigManager(*dirs)
        config = manager.load()
        assert config.engine == "ollama"
        assert manager.get_config_path() is None

    def test_local_file_wins_over_home(self, dirs):
        cwd, home = dirs
        (cwd / ".gacrc").write_text(json.dumps({"engine": "none", "style": "plain"}))
        (home / ".gacrc").write_text(json.dumps({"engine": "openai"}))

        manager = ConfigManager(cwd, home)
        config = manager.load()
        assert (config.engine, config.style) == ("none", "plain")
        assert manager.get_config_path() == cwd / ".gacrc"

    def test_home_file_used_when_no_local(self, dirs):
        cwd, home = dirs
        (home / ".gacrc").write_text(json.dumps({"engine": "anthropic"}))
        assert ConfigManager(cwd, home).load().engine == "anthropic"

    def test_package_json_section_merged(self, dirs):
        cwd, home = dirs
        (cwd / ".gacrc").write_text(json.dumps({"engine": "none", "maxLen": 60}))
        (cwd / "package.json").write_text(json.dumps({"name": "app", "gac": {"style": "conv", "maxLen": 50}}))

        config = ConfigManager(cwd, home).load()
        assert config.engine == "none"
        assert config.style == "conv"
        assert config.max_len == 50

    def test_gacignore_patterns_appended(self, dirs):
        cwd, home = dirs
        (cwd / ".gacrc").write_text(json.dumps({"ignoredFiles": ["*.snap"]}))
        (cwd / ".gacignore").write_text("# generated\ndist/\n\n*.pb.go\n")

        config = ConfigManager(cwd, home).load()
        assert config.ignored_files == ["*.snap", "dist/", "*.pb.go"]

    def test_read_ignore_file(self, tmp_path):
        path = tmp_path / ".gacignore"
        path.write_text("  build/  \n#comment\n")
        assert read_ignore_file(path) == ["build/"]

    def test_malformed_json_returns_defaults(self, dirs, capsys):
        cwd, home = dirs
        (cwd / ".gacrc").write_text("not valid json {{{")

        config = ConfigManager(cwd, home).load()
        assert config.engine == "ollama"
        assert "Could not load" in capsys.readouterr().err

    def test_save_excludes_secrets(self, dirs):
        cwd, home = dirs
        manager = ConfigManager(cwd, home)
        path = manager.save(Config(engine="openai", openai_api_key="sk-secret"), global_config=False)

        assert path == cwd / ".gacrc"
        data = json.loads(path.read_text())
        assert data["engine"] == "openai"
        assert "openai_api_key" not in data

    def test_save_and_load_roundtrip(self, dirs):
        cwd, home = dirs
        ConfigManager(cwd, home).save(Config(engine="gemini", style="gitmoji"), global_config=True)

        loaded = ConfigManager(cwd, home).load()
        assert (loaded.engine, loaded.style) == ("gemini", "gitmoji")
