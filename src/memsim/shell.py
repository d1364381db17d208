"""The shell — command interpreter for both simulators.

The shell is the boundary between a human and the engines.  It reads a
command string, parses it into a command name and arguments, checks the
arguments, and calls into ``ClockReplacer`` or ``SegmentAllocator``.

Design choices:
    - **Returns strings, not prints.**  This keeps the shell fully
      testable; the REPL and the web UI decide how to display output.
    - **Command dispatch via a dict.**  Adding a command means writing
      a ``_cmd_*`` method and adding one dict entry.
    - **Engine errors become messages.**  The engines raise typed
      exceptions; the shell catches them and returns ``Error: ...`` so
      a bad request never ends the session.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, TypeAlias

from memsim.clock import ClockReplacer, InvalidConfigurationError
from memsim.config import SimulatorConfig
from memsim.logging import Logger
from memsim.segmentation import (
    FitPolicy,
    NoFitError,
    PlacementError,
    SegmentAllocator,
)

if TYPE_CHECKING:
    from memsim.clock import Outcome

_Handler: TypeAlias = Callable[[list[str]], str]

_ALLOC_MIN_ARGS = 3


class Shell:
    """Command interpreter that owns one replacer and one allocator."""

    EXIT_SENTINEL = "__EXIT__"

    def __init__(
        self,
        *,
        config: SimulatorConfig | None = None,
        logger: Logger | None = None,
    ) -> None:
        """Create a shell and the engines it drives.

        Args:
            config: Frame count and memory size (defaults if omitted).
            logger: Shared event log (a fresh one if omitted).

        """
        self._config = config or SimulatorConfig()
        self._logger = logger or Logger()
        self._clock = ClockReplacer(self._config.frames, logger=self._logger)
        self._allocator = SegmentAllocator(self._config.memory_size, logger=self._logger)

        self._commands: dict[str, _Handler] = {
            "help": self._cmd_help,
            "frames": self._cmd_frames,
            "request": self._cmd_request,
            "clock": self._cmd_clock,
            "stats": self._cmd_stats,
            "alloc": self._cmd_alloc,
            "remove": self._cmd_remove,
            "compact": self._cmd_compact,
            "mem": self._cmd_mem,
            "segments": self._cmd_segments,
            "log": self._cmd_log,
            "reset": self._cmd_reset,
            "exit": self._cmd_exit,
        }

    @property
    def clock(self) -> ClockReplacer:
        """Return the page replacer."""
        return self._clock

    @property
    def allocator(self) -> SegmentAllocator:
        """Return the segment allocator."""
        return self._allocator

    @property
    def logger(self) -> Logger:
        """Return the shared event log."""
        return self._logger

    @property
    def command_names(self) -> list[str]:
        """Return the sorted command names (used for tab completion)."""
        return sorted(self._commands)

    def execute(self, command: str) -> str:
        """Parse and execute a single command.

        Args:
            command: The raw command string (e.g. ``"request 1 2 3"``).

        Returns:
            The command output, or an error message.

        """
        parts = command.strip().split()
        if not parts:
            return ""

        handler = self._commands.get(parts[0])
        if handler is None:
            return f"Unknown command: {parts[0]}"
        return handler(parts[1:])

    # -- Command handlers ------------------------------------------------

    def _cmd_help(self, _args: list[str]) -> str:
        """List available commands."""
        return "Available commands: " + ", ".join(self.command_names)

    def _cmd_frames(self, args: list[str]) -> str:
        """Rebuild the clock ring with a new frame count."""
        if not args:
            return f"Frames: {self._clock.capacity}"
        try:
            clock = ClockReplacer(int(args[0]), logger=self._logger)
        except ValueError:
            return "Error: Please enter a valid positive integer."
        except InvalidConfigurationError as e:
            return f"Error: {e}"
        self._clock = clock
        return f"Clock reset with {clock.capacity} frames"

    def _cmd_request(self, args: list[str]) -> str:
        """Request one or more pages and report each outcome."""
        if not args:
            return "Error: Please enter a page number."
        pages: list[int] = []
        for arg in args:
            try:
                page = int(arg)
            except ValueError:
                return "Error: Invalid input. Please enter an integer page number."
            if page < 0:
                return "Error: Page number cannot be negative."
            pages.append(page)
        outcomes: list[Outcome] = self._clock.request_many(pages)
        return "\n".join(str(o) for o in outcomes)

    def _cmd_clock(self, _args: list[str]) -> str:
        """Draw the frame ring and the status line."""
        lines: list[str] = []
        for i, frame in enumerate(self._clock.frames):
            page = "-" if frame.page is None else str(frame.page)
            marker = "  <- hand" if i == self._clock.hand else ""
            lines.append(f"[{i}] P: {page:<5} R: {int(frame.referenced)}{marker}")
        lines.append(self._clock.stats_line())
        return "\n".join(lines)

    def _cmd_stats(self, _args: list[str]) -> str:
        """Show hits, faults and the hit ratio."""
        return self._clock.stats_line()

    def _cmd_alloc(self, args: list[str]) -> str:
        """Allocate a segment: ``alloc NAME SIZE POLICY [BASE]``."""
        if len(args) < _ALLOC_MIN_ARGS:
            return "Usage: alloc <name> <size> <First-Fit|Best-Fit|Worst-Fit|Manual> [base]"
        name, size_text, policy_text = args[:_ALLOC_MIN_ARGS]
        try:
            size = int(size_text)
        except ValueError:
            return "Error: Size must be an integer."
        try:
            policy = FitPolicy.parse(policy_text)
        except ValueError as e:
            return f"Error: {e}"

        try:
            if policy is FitPolicy.MANUAL:
                if len(args) <= _ALLOC_MIN_ARGS:
                    return "Error: Manual placement needs a base address."
                try:
                    base = int(args[_ALLOC_MIN_ARGS])
                except ValueError:
                    return "Error: Base address must be a valid integer."
                segment = self._allocator.allocate_manual(name, size, base)
            else:
                segment = self._allocator.allocate(name, size, policy)
        except NoFitError as e:
            return f"Error: {e}"
        except PlacementError as e:
            return f"Error: Invalid manual allocation: overlaps or out of bounds. {e}."
        except ValueError as e:
            return f"Error: {e}"
        return f"Allocated {segment.name} at {segment.base} (size {segment.size})"

    def _cmd_remove(self, args: list[str]) -> str:
        """Remove the first segment with the given name."""
        if not args:
            return "Usage: remove <name>"
        if not self._allocator.remove(args[0]):
            return f"Error: no segment named {args[0]}"
        return f"Removed {args[0]}"

    def _cmd_compact(self, _args: list[str]) -> str:
        """Pack all segments at the bottom of memory."""
        self._allocator.compact()
        return f"Memory compacted: {self._allocator.free} bytes free at {self._allocator.used}"

    def _cmd_mem(self, _args: list[str]) -> str:
        """Show the memory map in address order, plus totals."""
        lines = ["START  END    CONTENTS"]
        lines.extend(
            f"{row.base:<6} {row.base + row.size:<6} {row.label}"
            for row in self._allocator.memory_map()
        )
        alloc = self._allocator
        lines.append(
            f"Used: {alloc.used} | Free: {alloc.free} | Largest hole: {alloc.largest_free_block}"
            f" | Fragmentation: {alloc.external_fragmentation:.0%}"
        )
        return "\n".join(lines)

    def _cmd_segments(self, _args: list[str]) -> str:
        """List segment names (the removal choices)."""
        names = self._allocator.segment_names()
        return "\n".join(names) if names else "No segments."

    def _cmd_log(self, args: list[str]) -> str:
        """Show log entries, optionally only those from one engine."""
        source = args[0] if args else None
        entries = self._logger.filter(source=source)
        return "\n".join(str(e) for e in entries) if entries else "No log entries."

    def _cmd_reset(self, _args: list[str]) -> str:
        """Reset both engines to their initial state."""
        self._clock.reset()
        self._allocator.reset()
        return "Simulators reset."

    def _cmd_exit(self, _args: list[str]) -> str:
        """Signal the REPL to stop."""
        return self.EXIT_SENTINEL
