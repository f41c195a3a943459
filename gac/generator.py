"""Candidate generation - pick an engine, fall back to the heuristic engine on failure."""

from gac.config import Config
from gac.git import ChangeSet, DiffProcessor
from gac.heuristic import generate_heuristic, sanitize_candidate
from gac.llm import LLMError, get_client
from gac.logging import get_logger
from gac.prompts import PromptBuilder, PromptConfig

logger = get_logger("generator")

MAX_CANDIDATES = 3


def finalize_candidates(candidates: list[str]) -> list[str]:
    """Sanitize, drop empties and duplicates, cap at three."""
    cleaned = []
    for candidate in candidates:
        candidate = sanitize_candidate(candidate)
        if candidate and candidate not in cleaned:
            cleaned.append(candidate)
    return cleaned[:MAX_CANDIDATES]


def build_prompt(changes: ChangeSet, config: Config) -> str:
    processed = DiffProcessor().process(changes)
    prompt_config = PromptConfig(style=config.style, max_subject_length=config.max_len)
    return PromptBuilder().build(processed, prompt_config)


def generate_with_engine(changes: ChangeSet, config: Config) -> list[str]:
    """Ask a network engine for subjects; raises LLMError on any failure."""
    api_key = config.api_key_for(config.engine)
    client = get_client(config.engine, model=config.model, api_key=api_key)
    prompt = build_prompt(changes, config)
    logger.debug("prompt for %s: ~%d chars", client.name, len(prompt))

    response = client.generate(prompt)
    logger.debug("%s returned %d candidates (%d tokens)", client.name, len(response.candidates),
                 response.tokens_used)
    if not response.candidates:
        raise LLMError(f"{client.name} returned no commit subjects")
    return response.candidates


def generate_candidates(changes: ChangeSet, config: Config) -> tuple[list[str], str]:
    """Return (candidates, engine actually used)."""
    if config.engine != "none":
        try:
            candidates = finalize_candidates(generate_with_engine(changes, config))
            if candidates:
                return candidates, config.engine
        except LLMError as e:
            logger.warning("%s engine failed, using heuristic fallback: %s", config.engine, e)

    candidates = finalize_candidates(generate_heuristic(changes, config.style, config.regen))
    return candidates, "none"
