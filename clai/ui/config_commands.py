"""
Configuration Management Commands

Interactive settings wizard, table view and editor launcher behind
`clai settings`. Imported lazily by the CLI so `clai run` never pays for it.
"""

import configparser
import os
import subprocess
from pathlib import Path
from typing import Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from clai.ai.providers import mistral, openrouter
from clai.core.configs import CONFIG_PATH, DEFAULT_PROVIDER, load_file_config
from clai.core.errors import UsageError

console = Console(stderr=True)

# Providers the chain can build, with suggested models (first is the default).
PROVIDERS = {
    "openrouter": {
        "models": [
            openrouter.DEFAULT_OPENROUTER_MODEL,
            "openai/gpt-4o-mini",
            "anthropic/claude-3.5-haiku",
        ],
        "api_key_env": openrouter.API_KEY_ENV,
    },
    "mistralai": {
        "models": [
            mistral.DEFAULT_MISTRAL_MODEL,
            "mistral-small-latest",
            "devstral-medium-latest",
        ],
        "api_key_env": mistral.API_KEY_ENV,
    },
}

TEMPLATE = """[provider]
default = openrouter
fallback =

[safety]
confirm_dangerous = true
# One regex per line; empty means the built-in defaults.
dangerous_patterns =

[context]
max_files = 10
max_history = 3

[ui]
color = auto

[openrouter]
api_key_env = OPENROUTER_API_KEY
model = qwen/qwen3-coder
"""


def mask_key(value: str) -> str:
    if len(value) > 8:
        return f"{value[:4]}...{value[-4:]}"
    return "***"


def handle_config(action: str, path: Optional[Path] = None) -> None:
    """
    Route to the settings action.

    Args:
        action: One of 'init', 'show', or 'edit'
        path: Config file location (defaults to CONFIG_PATH)

    Raises:
        UsageError: Unknown action
    """
    actions = {
        "init": init_config,
        "show": show_config,
        "edit": edit_config,
    }

    handler = actions.get(action)
    if handler is None:
        raise UsageError(f"Unknown action: {action}. Available actions: init, show, edit")

    handler(path or CONFIG_PATH)


def _read_raw(path: Path) -> configparser.ConfigParser:
    cfg = configparser.ConfigParser(interpolation=None)
    if path.exists():
        cfg.read(path, encoding="utf-8")
    return cfg


def init_config(path: Path) -> None:
    """Interactive wizard. Works on both new and existing configurations."""
    console.print(Panel.fit("[bold blue]clai configuration[/bold blue]", title="Setup"))

    cfg = _read_raw(path)
    current_provider = cfg.get("provider", "default", fallback=None)
    current_model = cfg.get(current_provider, "model", fallback=None) if current_provider else None

    provider, model = configure_provider_model(current_provider, current_model)
    api_key = configure_api_key(provider, cfg.get(provider, "api_key", fallback=None))
    confirm = configure_safety(cfg.getboolean("safety", "confirm_dangerous", fallback=True))

    for section in ("provider", "safety", provider):
        if not cfg.has_section(section):
            cfg.add_section(section)

    cfg["provider"]["default"] = provider
    cfg["safety"]["confirm_dangerous"] = "true" if confirm else "false"
    cfg[provider]["model"] = model
    if api_key:
        cfg[provider]["api_key"] = api_key
    else:
        cfg[provider]["api_key_env"] = PROVIDERS[provider]["api_key_env"]

    save_config_file(cfg, path)
    console.print(
        Panel.fit(f"[green]Configuration saved![/green]\nLocation: {path}", title="Success")
    )


def configure_provider_model(
    current_provider: Optional[str], current_model: Optional[str]
) -> Tuple[str, str]:
    """
    Ask for the default provider and its model.

    Returns:
        tuple: (provider, model)
    """
    console.print("\n[bold cyan]Provider & Model[/bold cyan]")

    if current_provider in PROVIDERS and current_model:
        console.print(f"Current: {current_provider} / {current_model}")
        if not Confirm.ask("Change provider/model?", default=False, console=console):
            return current_provider, current_model

    provider_list = list(PROVIDERS)
    console.print("\nAvailable providers:")
    for idx, name in enumerate(provider_list, 1):
        console.print(f"  {idx}. {name}: {', '.join(PROVIDERS[name]['models'])}")

    choice = Prompt.ask(
        "Select provider",
        choices=[str(i) for i in range(1, len(provider_list) + 1)],
        default=str(provider_list.index(DEFAULT_PROVIDER) + 1),
        console=console,
    )
    provider = provider_list[int(choice) - 1]

    models = PROVIDERS[provider]["models"]
    console.print(f"\nSuggested models for {provider}:")
    for idx, name in enumerate(models, 1):
        console.print(f"  {idx}. {name}")

    model = Prompt.ask(
        "Model (number or any model id)", default="1", console=console
    ).strip()
    if model.isdigit() and 1 <= int(model) <= len(models):
        model = models[int(model) - 1]
    return provider, model


def configure_api_key(provider: str, current_key: Optional[str]) -> Optional[str]:
    """
    Ask for an API key; an empty answer keeps using the environment variable.
    """
    console.print("\n[bold cyan]API Key[/bold cyan]")
    env_name = PROVIDERS[provider]["api_key_env"]

    if current_key:
        console.print(f"Current {provider} API key: {mask_key(current_key)}")
        if not Confirm.ask("Update API key?", default=False, console=console):
            return current_key

    new_key = Prompt.ask(
        f"Enter {provider} API key (leave empty to use ${env_name})",
        password=True,
        default="",
        show_default=False,
        console=console,
    )
    return new_key.strip() or None


def configure_safety(current: bool) -> bool:
    console.print("\n[bold cyan]Safety[/bold cyan]")
    return Confirm.ask("Confirm dangerous commands before emitting them?", default=current, console=console)


def show_config(path: Path) -> None:
    """Display the effective configuration with credentials masked."""
    if not path.exists():
        console.print("[yellow]No configuration found. Run 'clai settings init'[/yellow]")
        return

    config = load_file_config(path)

    table = Table(title="clai configuration", show_header=True)
    table.add_column("Setting", style="cyan", width=28)
    table.add_column("Value", style="green")

    table.add_row("provider.default", config.provider.default)
    table.add_row("provider.fallback", ", ".join(config.provider.fallback) or "-")
    table.add_row("safety.confirm_dangerous", str(config.safety.confirm_dangerous).lower())
    table.add_row(
        "safety.dangerous_patterns",
        "\n".join(config.safety.dangerous_patterns) or "(built-in defaults)",
    )
    table.add_row("context.max_files", str(config.context.max_files))
    table.add_row("context.max_history", str(config.context.max_history))
    table.add_row("ui.color", config.ui.color)
    table.add_row("ui.debug_log_file", config.ui.debug_log_file or "-")

    for name, settings in sorted(config.providers.items()):
        if settings.api_key:
            table.add_row(f"{name}.api_key", mask_key(settings.api_key))
        if settings.api_key_env:
            table.add_row(f"{name}.api_key_env", settings.api_key_env)
        if settings.model:
            table.add_row(f"{name}.model", settings.model)
        if settings.endpoint:
            table.add_row(f"{name}.endpoint", settings.endpoint)

    console.print(table)
    console.print(f"\n[dim]Config file: {path}[/dim]")


def edit_config(path: Path) -> None:
    """Open the config file in $EDITOR, creating it from a template first."""
    if not path.exists():
        console.print("[yellow]No configuration found. Creating template...[/yellow]")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(TEMPLATE, encoding="utf-8")

    editor = os.environ.get("EDITOR", "vi")

    try:
        console.print(f"[dim]Opening {path} with {editor}...[/dim]")
        subprocess.run([editor, str(path)], check=True)
        console.print("[green]Config file updated[/green]")
    except subprocess.CalledProcessError:
        console.print(f"[red]Failed to open editor: {editor}[/red]")
        console.print(f"Edit manually: {path}")
    except FileNotFoundError:
        console.print(f"[red]Editor not found: {editor}[/red]")
        console.print(f"Set EDITOR environment variable or edit manually: {path}")


def save_config_file(cfg: configparser.ConfigParser, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        cfg.write(f)
    # The file may hold API keys.
    os.chmod(path, 0o600)
