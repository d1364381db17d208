"""Interactive REPL (Read-Eval-Print Loop) for the simulators.

The REPL is the terminal interface.  It builds the configuration from
the command line, creates a shell, and enters the classic loop:

    1. **Read** — display a prompt and read user input.
    2. **Eval** — pass the command to ``shell.execute()``.
    3. **Print** — display the result.
    4. **Loop** — repeat until the shell returns the exit sentinel.

The helpers (``parse_args``, ``build_config``, ``format_banner``) are
pure and testable.  ``run()`` is the I/O entrypoint.
"""

import argparse
import readline
from collections.abc import Sequence
from pathlib import Path

from memsim.config import ConfigError, SimulatorConfig, load_config
from memsim.shell import Shell

_BANNER_WIDTH = 38
PROMPT = "memsim $ "


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse the REPL command line."""
    parser = argparse.ArgumentParser(
        prog="memsim",
        description="Clock page replacement and segmentation simulators.",
    )
    parser.add_argument("--config", type=Path, help="JSON file with frames and memory_size")
    parser.add_argument("--frames", type=int, help="number of clock frames")
    parser.add_argument("--memory", type=int, help="segmentation address-space size")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> SimulatorConfig:
    """Combine the config file (if any) with command-line overrides.

    Raises:
        ConfigError: If the file is unusable or a value is not positive.

    """
    config = load_config(args.config) if args.config is not None else SimulatorConfig()
    return SimulatorConfig(
        frames=args.frames if args.frames is not None else config.frames,
        memory_size=args.memory if args.memory is not None else config.memory_size,
    )


def format_banner(config: SimulatorConfig) -> str:
    """Format the start-up banner."""
    border = "=" * _BANNER_WIDTH
    return (
        f"\n  {border}\n            memsim v0.1.0\n    Memory-management simulators\n  {border}\n\n"
        f"  Clock: {config.frames} frames\n"
        f"  Segmentation: {config.memory_size} bytes\n"
        "\nType 'help' for commands, 'exit' to quit.\n"
    )


def run(argv: Sequence[str] | None = None) -> None:
    """Run the interactive REPL.

    Handles Ctrl+C and Ctrl+D as a graceful exit.  An unusable
    configuration is reported and the session starts from the defaults.
    """
    try:
        config = build_config(parse_args(argv))
    except ConfigError as e:
        print(f"Error: {e}. Using defaults.")  # noqa: T201
        config = SimulatorConfig()
    shell = Shell(config=config)

    names = shell.command_names

    def complete(text: str, state: int) -> str | None:
        matches = [n for n in names if n.startswith(text)]
        return matches[state] if state < len(matches) else None

    readline.set_completer(complete)
    readline.parse_and_bind("tab: complete")

    print(format_banner(config))  # noqa: T201

    try:
        while True:
            try:
                command = input(PROMPT)
            except EOFError:
                # Ctrl+D
                print()  # noqa: T201
                break

            result = shell.execute(command)
            if result == Shell.EXIT_SENTINEL:
                break
            if result:
                print(result)  # noqa: T201

    except KeyboardInterrupt:
        print("\nInterrupted.")  # noqa: T201

    finally:
        print("Goodbye.")  # noqa: T201
