"""Tests for the shell boundary.

The shell parses user text, rejects malformed input with the messages a
student sees, and turns engine errors into ``Error: ...`` strings.
"""

from memsim.config import SimulatorConfig
from memsim.segmentation import MEMORY_SIZE
from memsim.shell import Shell

FRAMES = 3


def _shell() -> Shell:
    """Create a shell with a three-frame clock."""
    return Shell(config=SimulatorConfig(frames=FRAMES))


class TestDispatch:
    """Verify command lookup."""

    def test_help_lists_commands(self) -> None:
        """Help names every command."""
        result = _shell().execute("help")
        for name in ("request", "alloc", "compact", "exit"):
            assert name in result

    def test_unknown_command(self) -> None:
        """Unknown names are reported, not raised."""
        assert _shell().execute("frobnicate") == "Unknown command: frobnicate"

    def test_blank_line(self) -> None:
        """An empty line produces no output."""
        assert _shell().execute("   ") == ""

    def test_exit_returns_sentinel(self) -> None:
        """Exit hands the sentinel back to the REPL."""
        assert _shell().execute("exit") == Shell.EXIT_SENTINEL


class TestClockCommands:
    """Verify the page-request boundary."""

    def test_request_outcomes(self) -> None:
        """Each requested page produces one outcome line."""
        result = _shell().execute("request 1 2 3 1 4")
        assert result.splitlines() == [
            "Fault - Loaded page 1 into empty frame 0",
            "Fault - Loaded page 2 into empty frame 1",
            "Fault - Loaded page 3 into empty frame 2",
            "Hit for page 1",
            "Fault - Replaced page 1 with page 4 at frame 0",
        ]

    def test_request_without_page(self) -> None:
        """An empty request asks for a page number."""
        assert _shell().execute("request") == "Error: Please enter a page number."

    def test_negative_page(self) -> None:
        """Negative pages never reach the engine."""
        shell = _shell()
        assert shell.execute("request -3") == "Error: Page number cannot be negative."
        assert shell.clock.requests == 0

    def test_non_integer_page(self) -> None:
        """Text that is not an integer is rejected before any request runs."""
        shell = _shell()
        result = shell.execute("request 1 two")
        assert result == "Error: Invalid input. Please enter an integer page number."
        assert shell.clock.requests == 0

    def test_frames_rebuilds_clock(self) -> None:
        """frames N replaces the ring with N empty frames."""
        shell = _shell()
        shell.execute("request 1")
        assert shell.execute("frames 5") == "Clock reset with 5 frames"
        assert shell.clock.capacity == 5
        assert shell.clock.requests == 0

    def test_frames_rejects_zero(self) -> None:
        """A non-positive count keeps the old ring."""
        shell = _shell()
        assert shell.execute("frames 0").startswith("Error:")
        assert shell.execute("frames abc").startswith("Error:")
        assert shell.clock.capacity == FRAMES

    def test_clock_view_marks_hand(self) -> None:
        """The clock view shows pages, bits, the hand and the stats."""
        shell = _shell()
        shell.execute("request 7")
        lines = shell.execute("clock").splitlines()
        assert lines[0] == "[0] P: 7     R: 1"
        assert lines[1] == "[1] P: -     R: 0  <- hand"
        assert lines[-1] == "Hits: 0 | Faults: 1 | Ratio: 0.00"

    def test_stats(self) -> None:
        """stats shows the status line."""
        shell = _shell()
        shell.execute("request 1 1")
        assert shell.execute("stats") == "Hits: 1 | Faults: 1 | Ratio: 0.50"


class TestSegmentationCommands:
    """Verify the allocation boundary."""

    def test_alloc_first_fit(self) -> None:
        """A fit-policy allocation reports the chosen base."""
        shell = _shell()
        assert shell.execute("alloc A 2000 First-Fit") == "Allocated A at 0 (size 2000)"
        shell.allocator.check_invariants()

    def test_alloc_short_policy_name(self) -> None:
        """Short policy aliases work too."""
        assert _shell().execute("alloc A 10 worst").startswith("Allocated A")

    def test_alloc_manual(self) -> None:
        """Manual placement takes a base address."""
        shell = _shell()
        assert shell.execute("alloc M 100 Manual 250") == "Allocated M at 250 (size 100)"
        shell.allocator.check_invariants()

    def test_alloc_bad_size(self) -> None:
        """A non-integer size is reported."""
        assert _shell().execute("alloc A big First-Fit") == "Error: Size must be an integer."

    def test_alloc_bad_base(self) -> None:
        """A non-integer base is reported."""
        result = _shell().execute("alloc M 10 Manual here")
        assert result == "Error: Base address must be a valid integer."

    def test_alloc_manual_needs_base(self) -> None:
        """Manual without a base is an error, not a crash."""
        assert _shell().execute("alloc M 10 Manual").startswith("Error:")

    def test_alloc_overlap(self) -> None:
        """Overlapping manual placement gives the placement message."""
        shell = _shell()
        shell.execute("alloc A 100 first")
        result = shell.execute("alloc M 100 manual 50")
        assert result == (
            "Error: Invalid manual allocation: overlaps or out of bounds."
            " [50, 150) overlaps segment A."
        )

    def test_alloc_out_of_bounds_gives_reason(self) -> None:
        """Placement past the end says so, not just that it failed."""
        result = _shell().execute(f"alloc M 100 manual {MEMORY_SIZE - 50}")
        assert result.endswith(f"[{MEMORY_SIZE - 50}, {MEMORY_SIZE + 50}) is out of bounds.")

    def test_alloc_no_fit(self) -> None:
        """A request that does not fit suggests compacting."""
        result = _shell().execute(f"alloc X {MEMORY_SIZE + 1} best")
        assert result == "Error: No suitable block found for X. Try again after compacting."

    def test_alloc_negative_size(self) -> None:
        """Non-positive sizes are reported."""
        assert _shell().execute("alloc X -5 first").startswith("Error:")

    def test_alloc_unknown_policy(self) -> None:
        """Unknown policies are reported."""
        assert "Unknown policy" in _shell().execute("alloc X 5 next-fit")

    def test_alloc_usage(self) -> None:
        """Too few arguments prints usage."""
        assert _shell().execute("alloc A").startswith("Usage:")

    def test_remove_and_segments(self) -> None:
        """segments lists names; remove frees one."""
        shell = _shell()
        shell.execute("alloc A 100 first")
        shell.execute("alloc B 100 first")
        assert shell.execute("segments") == "A\nB"
        assert shell.execute("remove A") == "Removed A"
        assert shell.execute("segments") == "B"
        assert shell.execute("remove A").startswith("Error:")

    def test_compact_and_mem(self) -> None:
        """After compaction the map has one segment row and one hole."""
        shell = _shell()
        shell.execute("alloc A 2000 first")
        shell.execute("alloc B 1000 first")
        shell.execute("remove A")
        shell.execute("compact")
        lines = shell.execute("mem").splitlines()
        assert lines[1].split() == ["0", "1000", "B", "(1000)"]
        assert lines[2].split() == ["1000", "5000", "Free", "(4000)"]
        assert lines[3].startswith("Used: 1000 | Free: 4000")


class TestSessionCommands:
    """Verify log and reset."""

    def test_log_by_source(self) -> None:
        """log SOURCE shows only that engine's entries."""
        shell = _shell()
        shell.execute("request 1")
        shell.execute("alloc A 10 first")
        clock_log = shell.execute("log clock")
        assert "clock" in clock_log
        assert "segmentation" not in clock_log

    def test_log_empty(self) -> None:
        """A fresh session has no log."""
        assert _shell().execute("log") == "No log entries."

    def test_reset(self) -> None:
        """reset clears both engines."""
        shell = _shell()
        shell.execute("request 1 2")
        shell.execute("alloc A 10 first")
        assert shell.execute("reset") == "Simulators reset."
        assert shell.clock.requests == 0
        assert shell.allocator.segments == ()
