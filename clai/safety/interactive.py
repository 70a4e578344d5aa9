"""Interactive selection between candidate commands.

Tab cycles through the candidates, Enter executes the one on screen, Esc or
Ctrl+C aborts. The prompt is rendered on stderr; stdout stays reserved for
the command that is finally emitted.
"""

import sys
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from prompt_toolkit.application import Application
from prompt_toolkit.input import Input
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import Layout
from prompt_toolkit.layout.containers import HSplit, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.output import ColorDepth, Output, create_output
from prompt_toolkit.styles import Style


class CommandAction(Enum):
    EXECUTE = "execute"
    OUTPUT = "output"
    ABORT = "abort"


class SelectionError(Exception):
    """The selection prompt could not run."""


HINT = "Tab: next  Enter: execute  Esc: abort"

STYLE = Style.from_dict(
    {
        "index": "ansicyan",
        "command": "bold",
        "hint": "ansibrightblack",
    }
)


class CommandSelector:
    """Cycling prompt over an ordered list of candidate commands."""

    def __init__(
        self,
        commands: Sequence[str],
        input: Optional[Input] = None,
        output: Optional[Output] = None,
        color: bool = True,
    ):
        if not commands:
            raise SelectionError("No commands to select from")
        self.commands: List[str] = list(commands)
        self.index = 0
        self.input = input
        self.output = output
        self.color = color

    @property
    def current(self) -> str:
        return self.commands[self.index]

    def next(self) -> str:
        self.index = (self.index + 1) % len(self.commands)
        return self.current

    def _fragments(self):
        fragments = []
        if len(self.commands) > 1:
            fragments.append(("class:index", f"[{self.index + 1}/{len(self.commands)}] "))
        fragments.append(("class:command", self.current))
        return fragments

    def _bindings(self) -> KeyBindings:
        kb = KeyBindings()

        @kb.add("tab")
        def _(event):
            self.next()

        @kb.add("enter")
        def _(event):
            event.app.exit(result=(CommandAction.EXECUTE, self.current))

        @kb.add("escape", eager=True)
        @kb.add("c-c")
        def _(event):
            event.app.exit(result=(CommandAction.ABORT, self.current))

        @kb.add("<any>")
        def _(event):
            pass

        return kb

    def build_application(self) -> Application:
        layout = Layout(
            HSplit(
                [
                    Window(FormattedTextControl(self._fragments), height=1),
                    Window(FormattedTextControl([("class:hint", HINT)]), height=1),
                ]
            )
        )
        return Application(
            layout=layout,
            key_bindings=self._bindings(),
            style=STYLE,
            full_screen=False,
            erase_when_done=True,
            color_depth=None if self.color else ColorDepth.DEPTH_1_BIT,
            input=self.input,
            output=self.output or create_output(stdout=sys.stderr),
        )

    def run(self) -> Tuple[CommandAction, str]:
        """
        Show the prompt until Enter, Esc or Ctrl+C.

        The application owns the terminal while it runs and puts it back in
        cooked mode on every exit path, errors included.
        """
        try:
            return self.build_application().run()
        except (OSError, EOFError) as e:
            raise SelectionError(f"Selection prompt failed: {e}") from e


def select_command(
    commands: Sequence[str],
    stderr_is_tty: bool,
    input: Optional[Input] = None,
    output: Optional[Output] = None,
    color: bool = True,
) -> Tuple[CommandAction, str]:
    """
    Let the user pick one of `commands`.

    Without a terminal on stderr the prompt cannot be shown; the first
    candidate is returned for output, never for execution.

    Raises:
        SelectionError: Empty candidate list or a terminal failure
    """
    if not commands:
        raise SelectionError("No commands to select from")
    if not stderr_is_tty:
        return CommandAction.OUTPUT, commands[0]
    return CommandSelector(commands, input=input, output=output, color=color).run()
