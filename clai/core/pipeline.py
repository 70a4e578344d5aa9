"""The generation-to-execution pipeline behind `clai run`.

    gather context -> build prompt -> provider chain -> parse reply
    -> classify danger -> pick interaction -> emit or execute

Interrupt checkpoints sit before context gathering, after the run is logged,
and before anything is written to stdout.
"""

import logging
import sys
import time
from typing import Callable, List, Optional, TextIO

from prompt_toolkit.input import Input
from prompt_toolkit.output import Output

from clai.ai.chain import ProviderChain
from clai.ai.handler import CommandGenerator, build_context_prompt
from clai.context import gather_context
from clai.core.configs import FileConfig, RunConfig
from clai.core.errors import GeneralError, SafetyError
from clai.core.executor import execute_command
from clai.core.logs import FileLogger
from clai.core.signals import InterruptFlag
from clai.safety.confirmation import ConfirmationError, Decision, prompt_dangerous_confirmation
from clai.safety.controller import Interaction, TerminalState, select_interaction, should_prompt
from clai.safety.detector import is_dangerous, matching_pattern
from clai.safety.interactive import CommandAction, SelectionError, select_command
from clai.safety.patterns import DangerousPatternSet
from clai.ui.output import make_console, print_command, print_commands

logger = logging.getLogger(__name__)


class Pipeline:
    """
    One `clai run` invocation.

    Everything with process-wide reach (streams, terminal state, signal flag,
    provider chain, compiled patterns) is injected so tests can build an
    isolated pipeline. Defaults are taken from the running process.
    """

    def __init__(
        self,
        run_config: RunConfig,
        file_config: FileConfig,
        chain: Optional[ProviderChain] = None,
        patterns: Optional[DangerousPatternSet] = None,
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        terminal: Optional[TerminalState] = None,
        interrupt: Optional[InterruptFlag] = None,
        executor: Callable[[str], int] = execute_command,
        context_gatherer: Callable = gather_context,
        selector_input: Optional[Input] = None,
        selector_output: Optional[Output] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.run_config = run_config
        self.file_config = (
            file_config.with_default_provider(run_config.provider)
            if run_config.provider
            else file_config
        )
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.terminal = terminal or TerminalState.detect(self.stdin, self.stdout, self.stderr)
        self.interrupt = interrupt or InterruptFlag()
        self.executor = executor
        self.context_gatherer = context_gatherer
        self.selector_input = selector_input
        self.selector_output = selector_output

        self.color = run_config.use_color(self.stderr)
        self.console = make_console(self.color, file=self.stderr)

        self.file_logger = None if chain is not None else self._open_file_logger()
        self.chain = chain or ProviderChain(self.file_config, file_logger=self.file_logger, sleep=sleep)
        self.patterns = patterns or DangerousPatternSet.from_config(self.file_config.safety)
        self.generator = CommandGenerator(self.chain, console=self.console, debug=run_config.debug)

    def _open_file_logger(self) -> Optional[FileLogger]:
        path = self.run_config.debug_log_file
        if path is None:
            return None
        try:
            file_logger = FileLogger(path)
        except OSError as e:
            logger.warning("Could not initialize debug log: %s", e)
            return None
        logger.info("Debug logging enabled: %s", file_logger.path)
        return file_logger

    def run(self) -> int:
        """
        Execute the pipeline.

        Returns:
            0 on success

        Raises:
            ClaiError: Any failure, carrying the process exit code
        """
        try:
            return self._run()
        finally:
            if self.file_logger:
                self.file_logger.close()

    def _run(self) -> int:
        config = self.run_config
        if config.offline:
            raise GeneralError(
                "Offline mode is not yet supported. Remove --offline or configure a reachable provider."
            )

        self.interrupt.check()
        logger.info("Run config: %s", config)
        logger.debug("Provider chain: %s", self.chain)
        self.interrupt.check()

        commands = self._generate()
        self.interrupt.check()

        if config.dry_run:
            self._emit_all(commands)
            return 0

        first = commands[0]
        dangerous = is_dangerous(first, self.patterns)
        if dangerous:
            self._log_match(first)

        interaction = select_interaction(
            dangerous,
            self.terminal,
            interactive_flag=config.interactive,
            confirm_dangerous=self.file_config.safety.confirm_dangerous,
            force=config.force,
        )
        logger.debug("Interaction: %s", interaction.name)

        if interaction is Interaction.DANGER_PROMPT:
            self._confirm(first)
            self._emit(first)
        elif interaction is Interaction.SELECTION_PROMPT:
            self._select(commands)
        else:
            self._emit(first)
        return 0

    def _generate(self) -> List[str]:
        config = self.run_config
        context = self.context_gatherer(
            max_files=self.file_config.context.max_files,
            max_history=self.file_config.context.max_history,
            stdin=self.stdin,
        )
        prompt = build_context_prompt(context, config.instruction)

        if config.wants_multiple:
            return self.generator.generate_commands(prompt, config.num_options, config.model)
        return [self.generator.generate_command(prompt, config.model)]

    def _log_match(self, command: str) -> None:
        match = matching_pattern(command, self.patterns)
        if match is None:
            logger.info("Command treated as dangerous: patterns could not be checked")
        else:
            index, source = match
            logger.info("Command matched dangerous pattern %d: %s", index, source)

    def _confirm(self, command: str) -> Decision:
        try:
            decision = prompt_dangerous_confirmation(command, self.stdin, self.console)
        except ConfirmationError as e:
            raise SafetyError(f"Error during confirmation: {e}. Command rejected.") from e

        if decision is Decision.ABORT:
            raise SafetyError("Command rejected by user")
        return decision

    def _select(self, commands: List[str]) -> None:
        try:
            action, selected = select_command(
                commands,
                self.terminal.stderr_tty,
                input=self.selector_input,
                output=self.selector_output,
                color=self.color,
            )
        except SelectionError as e:
            logger.warning("%s. Outputting command.", e)
            self._emit(commands[0])
            return

        if action is CommandAction.ABORT:
            raise SafetyError("Command rejected by user")
        if action is CommandAction.OUTPUT:
            self._emit(selected)
            return

        # Tab may have landed on a candidate the first-candidate check never saw.
        if is_dangerous(selected, self.patterns) and should_prompt(
            self.terminal, self.file_config.safety.confirm_dangerous, self.run_config.force
        ):
            self._log_match(selected)
            if self._confirm(selected) is Decision.COPY:
                self._emit(selected)
                return

        self.interrupt.check()
        exit_code = self.executor(selected)
        # A signal delivered while the child ran takes precedence over its status.
        self.interrupt.check()
        if exit_code != 0:
            raise GeneralError(f"Command exited with code {exit_code}")

    def _emit(self, command: str) -> None:
        self.interrupt.check()
        print_command(command, self.stdout)

    def _emit_all(self, commands: List[str]) -> None:
        self.interrupt.check()
        print_commands(commands, self.stdout)
