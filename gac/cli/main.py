"""CLI Main Entry Point"""

import os
import sys

from gac.config import Config, load_config
from gac.generator import generate_candidates
from gac.git import GitAnalyzer, GitError, InvalidInputError, ChangeSet
from gac.logging import configure_logging, get_logger
from gac.output import bold, dim, info, print_error, print_success, print_warning, Spinner

from gac.cli.args import parse_args
from gac.cli.commands import display_config, run_init, run_install_completion
from gac.cli.utils import apply_prefix, confirm, detect_ticket_prefix, display_options, normalize_prefix

logger = get_logger("cli")


def _handle_subcommands(args):
    """Handle subcommands that exit early.

    Returns:
        tuple: (exit_code, should_exit) - exit_code if should_exit is True
    """
    if args.install_completion:
        return run_install_completion(), True
    if args.display_config:
        return display_config(), True
    if args.init:
        return run_init(), True
    return 0, False


def resolve_config(args, config: Config, environ=None) -> Config:
    """Apply overrides to the loaded config.

    Precedence: CLI args > environment variables > config file > defaults
    """
    environ = os.environ if environ is None else environ
    env_values = {
        'prefix': environ.get('GAC_PREFIX'),
        'style': environ.get('GAC_STYLE'),
        'engine': environ.get('GAC_ENGINE'),
        'model': environ.get('GAC_MODEL'),
    }
    for name, value in env_values.items():
        if value:
            setattr(config, name, value)

    config.openai_api_key = environ.get('OPENAI_API_KEY') or config.openai_api_key
    config.anthropic_api_key = environ.get('ANTHROPIC_API_KEY') or config.anthropic_api_key
    config.gemini_api_key = environ.get('GEMINI_API_KEY') or environ.get('GOOGLE_API_KEY') or config.gemini_api_key

    for name in ('prefix', 'style', 'engine', 'model', 'max_len', 'regen'):
        value = getattr(args, name, None)
        if value is not None:
            setattr(config, name, value)
    if args.dry_run:
        config.dry_run = True

    for warning_text in config.validate():
        print(f"Config warning: {warning_text}", file=sys.stderr)
    return config


def _prepare_staged_changes(args, config: Config) -> tuple[GitAnalyzer, ChangeSet] | None:
    """Get staged changes from git; None when there is nothing to commit."""
    analyzer = GitAnalyzer(ignored_patterns=config.ignored_files)
    if args.all:
        analyzer.stage_all_tracked()

    changes = analyzer.get_staged_changes()
    if changes.is_empty:
        print_warning("No staged changes found")
        print(dim("  Stage your changes first: git add <files>"))
        return None
    return analyzer, changes


def _generate(changes: ChangeSet, config: Config, is_pipe: bool) -> list[str]:
    label = f"Generating with {config.engine}"
    if is_pipe:
        candidates, used = generate_candidates(changes, config)
    else:
        with Spinner(label):
            candidates, used = generate_candidates(changes, config)
    if used != config.engine and not is_pipe:
        print(dim(f"{config.engine} unavailable, used heuristic fallback"))
    logger.debug("engine=%s regen=%d candidates=%s", used, config.regen, candidates)
    return candidates


def _ask_prefix(current: str) -> str:
    try:
        value = input(f"Enter prefix (leave empty to clear) [{current.strip()}]: ")
    except (KeyboardInterrupt, EOFError):
        return current
    return normalize_prefix(value)


def _select_message(changes: ChangeSet, config: Config, prefix: str) -> str | None:
    """Interactive selection loop; returns the final message or None when cancelled."""
    candidates = _generate(changes, config, is_pipe=False)

    while True:
        choice = display_options(candidates, prefix, config.max_len)
        if choice == 'quit':
            return None
        if choice == 'regenerate':
            config.regen += 1
            candidates = _generate(changes, config, is_pipe=False)
            continue
        if choice == 'prefix':
            prefix = _ask_prefix(prefix)
            continue
        return apply_prefix(prefix, candidates[choice])


def _generate_commit_flow(args, config: Config) -> int:
    """Main commit message generation flow.

    Returns:
        int: Exit code
    """
    is_pipe = not sys.stdout.isatty()

    prepared = _prepare_staged_changes(args, config)
    if prepared is None:
        return 0
    analyzer, changes = prepared

    prefix = normalize_prefix(config.prefix) or detect_ticket_prefix(changes.branch)

    # Pipe mode: output the first candidate and exit
    if is_pipe:
        candidates = _generate(changes, config, is_pipe=True)
        print(apply_prefix(prefix, candidates[0]))
        return 0

    print(f"Found changes in {bold(str(changes.total_files))} file(s) on {info(changes.branch or 'HEAD')}")
    message = _select_message(changes, config, prefix)
    if message is None:
        print(dim("Cancelled."))
        return 0

    if config.dry_run:
        print(f"\n{dim('Would commit with:')}\n  {bold(message)}\n")
        print_success("Dry run complete")
        return 0

    if not confirm(f"Commit with \"{message}\"?"):
        print(dim("Cancelled."))
        return 0

    analyzer.commit(message)
    print_success("Committed")
    return 0


def main() -> int:
    """Main entry point for the CLI."""
    args = parse_args()
    configure_logging(verbose=args.verbose)

    # Handle subcommands that exit early
    exit_code, should_exit = _handle_subcommands(args)
    if should_exit:
        return exit_code

    config = resolve_config(args, load_config())

    try:
        return _generate_commit_flow(args, config)
    except (GitError, InvalidInputError) as e:
        print_error(str(e))
        return 1
    except KeyboardInterrupt:
        print()
        print(dim("Cancelled."))
        return 130
