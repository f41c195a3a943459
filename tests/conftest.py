"""Shared builders for change sets used across the test modules."""

import pytest

from gac.git import ChangeSet, FileChange


def file_diff(path: str, *lines: str, new: bool = False) -> str:
    """Minimal unified diff section for one file."""
    header = [f"diff --git a/{path} b/{path}"]
    if new:
        header.append("new file mode 100644")
    header += [
        "--- /dev/null" if new else f"--- a/{path}",
        f"+++ b/{path}",
        f"@@ -1,{len(lines)} +1,{len(lines)} @@",
    ]
    return "\n".join(header + list(lines))


@pytest.fixture
def make_changes():
    """Return a factory: make_changes([(path, status, additions, deletions), ...], diff)."""
    def _make(specs, diff="", repo_name="repo", branch="main"):
        files = [FileChange(path=p, status=s, additions=a, deletions=d) for p, s, a, d in specs]
        return ChangeSet(files=files, diff=diff, repo_name=repo_name, branch=branch)
    return _make


@pytest.fixture
def new_engine_changes(make_changes):
    """One new engine module next to two modified peers."""
    diff = "\n".join([
        file_diff(
            "src/engines/gemini.ts",
            "+export class GeminiEngine {",
            "+  async generate(prompt: string) {",
            "+  }",
            "+}",
            new=True,
        ),
        file_diff("src/engines/ollama.ts", "-  timeout = 10", "+  timeout = 30"),
        file_diff("src/engines/openai.ts", "-  model = 'gpt-4'", "+  model = 'gpt-4o-mini'"),
    ])
    return make_changes([
        ("src/engines/gemini.ts", "A", 40, 0),
        ("src/engines/ollama.ts", "M", 5, 2),
        ("src/engines/openai.ts", "M", 5, 2),
    ], diff)


@pytest.fixture
def readme_changes(make_changes):
    """A README-only change that adds an Installation section."""
    diff = file_diff(
        "README.md",
        " # gac",
        "+## Installation",
        "+Run npm install -g gac to get started.",
        "+",
    )
    return make_changes([("README.md", "M", 3, 0)], diff)


@pytest.fixture
def dependency_changes(make_changes):
    """package.json with one dependency added inside the dependencies block."""
    diff = "\n".join([
        "diff --git a/package.json b/package.json",
        "index 3b18e51..a1c2d3f 100644",
        "--- a/package.json",
        "+++ b/package.json",
        "@@ -10,6 +10,7 @@",
        '   "dependencies": {',
        '     "chalk": "^5.0.0",',
        '+    "zod": "^3.22.0",',
        '     "commander": "^11.0.0"',
        "   },",
    ])
    return make_changes([("package.json", "M", 1, 0)], diff)
