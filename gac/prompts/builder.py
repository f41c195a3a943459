"""Prompt Builder - Construct LLM prompts for commit subject generation."""

from dataclasses import dataclass

from gac import COMMIT_TYPES
from gac.git import ProcessedDiff

# One line per requested subject, in the order the model must answer
STYLE_LINES = {
    "conv": "Conventional Commits format (type(scope): subject)",
    "plain": "Plain imperative format (no type prefix)",
    "gitmoji": "Gitmoji format (emoji + subject)",
}


@dataclass
class PromptConfig:
    """User-provided settings that shape the prompt."""
    style: str = "mix"
    max_subject_length: int = 72
    num_options: int = 3


class PromptBuilder:
    """Constructs the three-subject prompt shared by every network engine."""

    def build(self, diff: ProcessedDiff, config: PromptConfig | None = None) -> str:
        config = config or PromptConfig()
        sections = [
            self._build_context_section(diff),
            self._build_format_section(config),
            self._build_type_section(config),
            self._build_rules_section(config),
        ]
        return "\n\n".join(filter(None, sections))

    def _build_context_section(self, diff: ProcessedDiff) -> str:
        parts = [
            f"Repo: {diff.repo_name or 'repo'}",
            f"Branch: {diff.branch or 'HEAD'}",
            "",
            "Staged changes:",
            diff.summary or "(no file summary)",
        ]

        if diff.detailed_diff:
            parts.extend(["", "Diff details:", diff.detailed_diff])

        if diff.truncated:
            parts.append("\n[Note: Diff was truncated due to size. Focus on the file summary above.]")

        return "\n".join(parts)

    def _style_lines(self, config: PromptConfig) -> list[str]:
        if config.style in STYLE_LINES:
            return [STYLE_LINES[config.style]] * config.num_options
        return list(STYLE_LINES.values())[:config.num_options]

    def _build_format_section(self, config: PromptConfig) -> str:
        lines = self._style_lines(config)
        numbered = "\n".join(f"{i}. {line}" for i, line in enumerate(lines, start=1))
        different = " different" if len(set(lines)) < len(lines) else ""
        return f"Generate exactly {len(lines)}{different} commit message subjects (one per line):\n{numbered}"

    def _build_type_section(self, config: PromptConfig) -> str:
        if config.style not in ("conv", "mix"):
            return ""
        types_list = "\n".join(f"  - {t}: {desc}" for t, desc in COMMIT_TYPES.items())
        return f"Choose the most appropriate type:\n{types_list}"

    def _build_rules_section(self, config: PromptConfig) -> str:
        return f"""Rules:
- Max {config.max_subject_length} characters per line
- Imperative mood (add, fix, update - not added, fixed, updated)
- No trailing period
- No quotes, no numbering, no markdown
- Be specific and concise"""
