"""Main CLI entry point - `run` and `settings` subcommands."""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Optional

import typer

from clai.core.configs import CONFIG_PATH, MAX_OPTIONS, MIN_OPTIONS, RunConfig, load_file_config
from clai.core.errors import ClaiError, UsageError
from clai.core.logs import configure_logging
from clai.core.pipeline import Pipeline
from clai.core.signals import install_signal_handlers
from clai.ui.output import make_console, print_error

logger = logging.getLogger(__name__)

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="clai - turn natural language into shell commands.",
)


class ColorChoice(str, Enum):
    auto = "auto"
    always = "always"
    never = "never"


def _fail(error: ClaiError, verbose: int, color: bool) -> None:
    print_error(error, make_console(color), verbose)
    raise typer.Exit(error.exit_code)


@app.command()
def run(
    instruction: str = typer.Argument(..., help="What the command should do, in plain words"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model id, optionally provider/model"),
    provider: Optional[str] = typer.Option(None, "--provider", "-p", help="Provider to try first"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only report errors"),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="More diagnostics (-vv for debug)"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colored output"),
    color: Optional[ColorChoice] = typer.Option(None, "--color", help="When to use colors"),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Pick and execute interactively"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip the dangerous-command confirmation"),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Print every candidate, never prompt"),
    offline: bool = typer.Option(False, "--offline", help="Offline mode (not supported)"),
    num_options: int = typer.Option(
        3, "--options", "-o", min=MIN_OPTIONS, max=MAX_OPTIONS, help="Candidates to request with -i"
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Print the request sent to the model"),
    debug_file: Optional[Path] = typer.Option(None, "--debug-file", help="Append model traffic as JSON lines"),
) -> None:
    """
    Generate a shell command and print, confirm or execute it.

    Example: clai run "find all python files modified today"
    """
    configure_logging(verbose=verbose, quiet=quiet, color=not no_color)

    try:
        if not instruction.strip():
            raise UsageError("Instruction must not be empty")

        file_config = load_file_config()
        if not CONFIG_PATH.exists():
            logger.info("No config file found, using defaults")

        if no_color:
            color_mode = "never"
        elif color is not None:
            color_mode = color.value
        else:
            color_mode = file_config.ui.color

        log_path = debug_file
        if log_path is None and file_config.ui.debug_log_file:
            log_path = Path(file_config.ui.debug_log_file)

        run_config = RunConfig(
            instruction=instruction.strip(),
            model=model,
            provider=provider.lower() if provider else None,
            quiet=quiet,
            verbose=verbose,
            color=color_mode,
            interactive=interactive,
            force=force,
            dry_run=dry_run,
            offline=offline,
            num_options=num_options,
            debug=debug,
            debug_log_file=log_path,
        )
        configure_logging(verbose=verbose, quiet=quiet, color=run_config.use_color(sys.stderr))

        interrupt = install_signal_handlers()
        exit_code = Pipeline(run_config, file_config, interrupt=interrupt).run()
        interrupt.check()
    except ClaiError as e:
        _fail(e, verbose, color=not no_color)
        return

    raise typer.Exit(exit_code)


@app.command()
def settings(
    action: str = typer.Argument(..., help="Action: init, show, or edit"),
) -> None:
    """
    Manage clai configuration.

    Actions:
        init - Interactive configuration wizard
        show - Display current configuration
        edit - Open config file in $EDITOR
    """
    from clai.ui.config_commands import handle_config

    try:
        handle_config(action)
    except ClaiError as e:
        _fail(e, verbose=0, color=True)


def main() -> None:
    """Entry point for console script mapping."""
    app()


if __name__ == "__main__":
    main()
