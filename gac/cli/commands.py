"""CLI Commands"""

import os
import sys
from pathlib import Path

from gac import ENGINES, STYLES
from gac.config import Config, ConfigManager, load_config, get_config_path
from gac.output import bold, dim, info, print_success, print_warning

ENV_OVERRIDES = ('GAC_PREFIX', 'GAC_STYLE', 'GAC_ENGINE', 'GAC_MODEL')

DEFAULT_MODELS = {
    'ollama': 'mistral:7b',
    'openai': 'gpt-4o-mini',
    'anthropic': 'claude-sonnet-4-20250514',
    'gemini': 'gemini-1.5-flash',
}


def _mask(secret: str | None) -> str:
    if not secret:
        return 'not set'
    return f"{secret[:4]}…" if len(secret) > 8 else 'set'


def display_config() -> int:
    """Display current configuration."""
    config = load_config()
    config_path = get_config_path()

    print(f"\n{bold('Current Configuration')}\n")

    if config_path:
        print(f"  {dim('Loaded from:')} {config_path}")
    else:
        print(f"  {dim('Loaded from:')} defaults (no .gacrc found)")

    overrides = [(name, os.environ[name]) for name in ENV_OVERRIDES if os.environ.get(name)]
    if overrides:
        print(f"  {dim('Environment overrides:')}")
        for name, value in overrides:
            print(f"    {name}={value}")

    print()
    print(f"  {bold('Settings:')}")
    print(f"    engine:        {info(config.engine)}")
    print(f"    model:         {info(config.model)}")
    print(f"    style:         {info(config.style)}")
    print(f"    prefix:        {info(repr(config.prefix))}")
    print(f"    max_len:       {info(str(config.max_len))}")
    print(f"    dry_run:       {info(str(config.dry_run).lower())}")
    print(f"    ignored_files: {info(', '.join(config.ignored_files) or 'none')}")
    for engine in ('openai', 'anthropic', 'gemini'):
        print(f"    {engine}_api_key: {dim(_mask(config.api_key_for(engine)))}")

    print(f"\n  {dim('Config locations:')}")
    print(f"    Local:  .gacrc (in current directory), package.json \"gac\" key, .gacignore")
    print(f"    Global: ~/.gacrc")
    print(f"\n  {dim('Run')} gac --init {dim('to configure')}\n")

    return 0


def _select(title: str, options: list[str], default: str) -> str:
    print(f"{title}\n")
    for i, option in enumerate(options, 1):
        marker = dim(' (default)') if option == default else ''
        print(f"  {i}. {option}{marker}")
    print()
    while True:
        choice = input(f"Select [1-{len(options)}] (Enter for default): ").strip()
        if not choice:
            return default
        if choice.isdigit() and 1 <= int(choice) <= len(options):
            return options[int(choice) - 1]


def run_init(cwd: Path | None = None) -> int:
    """Quick setup wizard that writes ./.gacrc."""
    manager = ConfigManager(cwd=cwd)
    path = manager.cwd / ConfigManager.CONFIG_FILENAME

    try:
        if path.exists():
            answer = input(f".gacrc already exists at {path}. Overwrite? [y/N] ").strip().lower()
            if answer not in ('y', 'yes'):
                print_warning("Operation cancelled")
                return 0

        print(f"\n{bold('gac init')}\n")
        engine = _select("Select a generation engine:", list(ENGINES), 'ollama')

        model = DEFAULT_MODELS.get(engine, Config().model)
        if engine != 'none':
            model = input(f"\nModel (Enter for {model}): ").strip() or model

        print()
        style = _select("Select commit message style:", list(STYLES), 'mix')

        max_len_input = input("\nMax subject line length (Enter for 72): ").strip()
        max_len = int(max_len_input) if max_len_input.isdigit() and int(max_len_input) > 0 else 72

        prefix = input('Subject prefix (optional, e.g. "JIRA-123: "): ').strip()
    except (KeyboardInterrupt, EOFError):
        print()
        print_warning("Operation cancelled")
        return 0

    config = Config(engine=engine, model=model, style=style, max_len=max_len, prefix=prefix)
    path = manager.save(config, global_config=False)

    print_success(f"Saved to {path}")
    return 0


def run_install_completion() -> int:
    """Install shell tab completion."""
    shell = os.environ.get('SHELL', '')

    print(f"\n{bold('Tab Completion Setup')}\n")

    line = 'eval "$(register-python-argcomplete gac)"'
    if 'zsh' in shell or 'bash' in shell:
        rc_file = os.path.expanduser('~/.zshrc' if 'zsh' in shell else '~/.bashrc')
        print(f"Add this line to {dim(rc_file)}:\n")
        print(f"  {line}\n")
        print(f"Then run: {dim('source ' + rc_file)}")
    elif sys.platform == 'win32':
        print("For PowerShell, run:\n")
        print("  register-python-argcomplete --shell powershell gac | Out-String | Invoke-Expression\n")
        print("To make it permanent, add it to your $PROFILE.")
    else:
        print("Run one of these based on your shell:\n")
        print(f"  {dim('# Bash/Zsh')}")
        print(f"  {line}\n")
        print(f"  {dim('# Fish')}")
        print("  register-python-argcomplete --shell fish gac | source")

    print(f"\n{dim('After setup, press TAB to autocomplete flags.')}")
    return 0
