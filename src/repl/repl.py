"""REPL interface for interactive Trefoil sessions."""
import logging
import os
import sys
from typing import Callable, Optional

from src.dispatcher import run_source
from src.sexp_evaluator.sexp_environment import Environment
from src.sexp_evaluator.sexp_evaluator import TrefoilEvaluator
from src.system.errors import TrefoilError

logger = logging.getLogger(__name__)

PROMPT = "trefoil> "
CONTINUATION_PROMPT = "....... "


def paren_depth(text: str) -> int:
    """Open minus close parentheses in text, ignoring ';' comments."""
    depth = 0
    for line in text.splitlines():
        code = line.split(";", 1)[0]
        depth += code.count("(") - code.count(")")
    return depth


class Repl:
    """Interactive REPL (Read-Eval-Print Loop) interface.

    Reads one binding at a time (continuing over several lines until the
    parentheses balance), executes it, and prints what it reports. The
    environment carries over from one input to the next.
    """

    def __init__(
        self,
        evaluator: Optional[TrefoilEvaluator] = None,
        env: Optional[Environment] = None,
        output_stream=None,
        input_func: Callable[[str], str] = input,
    ):
        """Initialize the REPL interface.

        Args:
            evaluator: The evaluator to run bindings with
            env: Starting environment (defaults to the empty environment)
            output_stream: Optional output stream (defaults to sys.stdout)
            input_func: Reads one line given a prompt (defaults to input)
        """
        self.evaluator = evaluator or TrefoilEvaluator()
        self.env = env if env is not None else Environment.empty()
        self.output = output_stream or sys.stdout
        self.input_func = input_func
        self.commands = {
            "/help": self._cmd_help,
            "/env": self._cmd_env,
            "/reset": self._cmd_reset,
            "/load": self._cmd_load,
            "/exit": self._cmd_exit,
        }

    def start(self) -> None:
        """Start the REPL interface, reading inputs until EOF, interrupt or /exit."""
        print("Trefoil REPL. Type /help for help.", file=self.output)

        while True:
            try:
                user_input = self._read_input()
                self._process_input(user_input)
            except (KeyboardInterrupt, EOFError):
                print("\nExiting...", file=self.output)
                break

    def _read_input(self) -> str:
        lines = [self.input_func(PROMPT)]
        while not lines[0].strip().startswith("/") and paren_depth("\n".join(lines)) > 0:
            lines.append(self.input_func(CONTINUATION_PROMPT))
        return "\n".join(lines)

    def _process_input(self, user_input: str) -> None:
        """Process user input: a /command or Trefoil source.

        Args:
            user_input: Input from the user
        """
        user_input = user_input.strip()

        if not user_input:
            return

        if user_input.startswith("/"):
            self._handle_command(user_input)
        else:
            self._handle_source(user_input)

    def _handle_command(self, command: str) -> None:
        parts = command.split(maxsplit=1)
        cmd = parts[0].lower()
        args = parts[1] if len(parts) > 1 else ""

        if cmd in self.commands:
            self.commands[cmd](args)
        else:
            print(f"Unknown command: {cmd}", file=self.output)
            print("Type /help for available commands", file=self.output)

    def _handle_source(self, source: str) -> None:
        """Runs source in the session environment, keeping whatever succeeded."""
        result = run_source(
            source,
            self.env,
            evaluator=self.evaluator,
            report=self._print_report,
            on_error=self._print_error,
            stop_on_error=True,
        )
        self.env = result.environment

    def _print_report(self, message: str) -> None:
        print(message, file=self.output)

    def _print_error(self, error: TrefoilError) -> None:
        print(f"error: {error}", file=self.output)

    def _cmd_help(self, args: str) -> None:
        print("Enter a definition, a (test ...) or an expression to evaluate.", file=self.output)
        print("Available commands:", file=self.output)
        print("  /help - Show this help", file=self.output)
        print("  /env - List the names bound in the current environment", file=self.output)
        print("  /reset - Start over with an empty environment", file=self.output)
        print("  /load FILE - Run a Trefoil file in the current environment", file=self.output)
        print("  /exit - Exit the REPL", file=self.output)

    def _cmd_env(self, args: str) -> None:
        entries = self.env.as_dict()
        if not entries:
            print("Environment is empty", file=self.output)
            return
        for name in sorted(entries):
            entry = entries[name]
            if self.env.contains_function(name):
                print(f"  {name}: function of {len(entry.param_names)} parameter(s)", file=self.output)
            else:
                print(f"  {name} = {entry.value}", file=self.output)

    def _cmd_reset(self, args: str) -> None:
        self.env = Environment.empty()
        print("Environment reset", file=self.output)

    def _cmd_load(self, args: str) -> None:
        if not args:
            print("Error: File path required", file=self.output)
            print("Usage: /load FILE", file=self.output)
            return

        path = os.path.expanduser(args)
        try:
            with open(path, "r") as f:
                source = f.read()
        except OSError as e:
            print(f"Failed to read {path}: {e}", file=self.output)
            return
        logger.info(f"Loading {path} into the REPL session")
        self._handle_source(source)

    def _cmd_exit(self, args: str) -> None:
        print("Exiting...", file=self.output)
        sys.exit(0)
