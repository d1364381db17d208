"""Clock page replacement — the second-chance algorithm over fixed frames.

Physical memory holds a fixed number of **frames**.  When a process
references a page that is already resident the reference is a **hit**.
Otherwise it is a **fault**: the page must be loaded, and if every frame
is occupied some resident page has to be evicted.

The Clock algorithm approximates LRU cheaply:

    - Frames form a circular buffer with one **reference bit** each.
    - A **hand** points at the next eviction candidate.
    - On a fault the hand sweeps: bit = 1 → clear it and move on
      (second chance); bit = 0 → this frame is the victim.
    - Loading or hitting a page sets its bit to 1.

The sweep always terminates: every set bit it meets is cleared, so after
at most one full revolution the hand finds a frame with bit 0.  With N
frames that is at most 2 × N steps.

The engine is a pure state machine — no I/O.  The shell (``shell.py``)
parses user input and renders outcomes; it never touches the frames.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias

from memsim.logging import LogLevel

if TYPE_CHECKING:
    from collections.abc import Iterable

    from memsim.logging import Logger

_LOG_SOURCE = "clock"


class InvalidConfigurationError(Exception):
    """Raise when a replacer is built with an unusable frame count."""


# ---------------------------------------------------------------------------
# Frames and outcomes
# ---------------------------------------------------------------------------


@dataclass
class Frame:
    """One slot in the clock ring.

    Attributes:
        page: The resident page number, or None if the frame is empty.
        referenced: The reference bit.

    """

    page: int | None = None
    referenced: bool = False

    @property
    def is_empty(self) -> bool:
        """Return True if no page occupies this frame."""
        return self.page is None


@dataclass(frozen=True)
class Hit:
    """The requested page was already resident."""

    page: int

    def __str__(self) -> str:
        """Format as ``Hit for page P``."""
        return f"Hit for page {self.page}"


@dataclass(frozen=True)
class FaultEmptyLoad:
    """The page was loaded into a frame that had never been used."""

    page: int
    frame: int

    def __str__(self) -> str:
        """Format as ``Fault - Loaded page P into empty frame F``."""
        return f"Fault - Loaded page {self.page} into empty frame {self.frame}"


@dataclass(frozen=True)
class FaultEvict:
    """The page replaced a victim chosen by the clock hand."""

    old_page: int
    page: int
    frame: int

    def __str__(self) -> str:
        """Format as ``Fault - Replaced page O with page P at frame F``."""
        return f"Fault - Replaced page {self.old_page} with page {self.page} at frame {self.frame}"


Outcome: TypeAlias = Hit | FaultEmptyLoad | FaultEvict


# ---------------------------------------------------------------------------
# Replacer
# ---------------------------------------------------------------------------


class ClockReplacer:
    """Fixed-size frame ring driven by the second-chance policy.

    The replacer owns four pieces of state: the frames, the hand, and
    the hit and fault counters.  Only ``request`` (and ``reset``)
    mutate them.
    """

    def __init__(self, capacity: int, *, logger: Logger | None = None) -> None:
        """Create a replacer with ``capacity`` empty frames.

        Args:
            capacity: Number of frames in the ring (at least 1).
            logger: Optional log buffer for hit/fault events.

        Raises:
            InvalidConfigurationError: If capacity is not a positive integer.

        """
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            msg = f"Number of frames must be positive (got {capacity!r})"
            raise InvalidConfigurationError(msg)
        self._capacity = capacity
        self._logger = logger
        self._frames: list[Frame] = [Frame() for _ in range(capacity)]
        self._hand = 0
        self._hits = 0
        self._faults = 0

    @property
    def capacity(self) -> int:
        """Return the number of frames in the ring."""
        return self._capacity

    @property
    def frames(self) -> list[Frame]:
        """Return copies of the frames in ring order."""
        return [dataclasses.replace(f) for f in self._frames]

    @property
    def hand(self) -> int:
        """Return the index of the frame the hand points at."""
        return self._hand

    @property
    def hits(self) -> int:
        """Return the number of requests that found their page resident."""
        return self._hits

    @property
    def faults(self) -> int:
        """Return the number of requests that had to load their page."""
        return self._faults

    @property
    def requests(self) -> int:
        """Return the total number of requests served."""
        return self._hits + self._faults

    @property
    def hit_ratio(self) -> float:
        """Return hits / requests, or 0.0 before the first request."""
        if self.requests == 0:
            return 0.0
        return self._hits / self.requests

    @property
    def resident_pages(self) -> frozenset[int]:
        """Return the set of pages currently held in frames."""
        return frozenset(f.page for f in self._frames if f.page is not None)

    def stats_line(self) -> str:
        """Return the status bar text, e.g. ``Hits: 1 | Faults: 4 | Ratio: 0.20``."""
        return f"Hits: {self._hits} | Faults: {self._faults} | Ratio: {self.hit_ratio:.2f}"

    def request(self, page: int) -> Outcome:
        """Reference a page, loading it on a fault.

        Args:
            page: A non-negative page number (validated by the caller).

        Returns:
            Hit, FaultEmptyLoad, or FaultEvict describing what happened.

        """
        index = self._find(page)
        if index is not None:
            self._frames[index].referenced = True
            self._hits += 1
            self._log(LogLevel.DEBUG, f"hit page {page} in frame {index}")
            return Hit(page)

        self._faults += 1
        while True:
            frame = self._frames[self._hand]
            if frame.referenced:
                # Second chance: clear the bit, move on
                frame.referenced = False
                self._advance()
                continue

            victim = self._hand
            old_page = frame.page
            frame.page = page
            frame.referenced = True
            self._advance()
            if old_page is None:
                self._log(LogLevel.INFO, f"fault: page {page} loaded into empty frame {victim}")
                return FaultEmptyLoad(page=page, frame=victim)
            self._log(LogLevel.INFO, f"fault: page {old_page} evicted for page {page} at frame {victim}")
            return FaultEvict(old_page=old_page, page=page, frame=victim)

    def request_many(self, pages: Iterable[int]) -> list[Outcome]:
        """Request each page in order and collect the outcomes."""
        return [self.request(page) for page in pages]

    def reset(self) -> None:
        """Empty every frame and zero the hand and counters."""
        self._frames = [Frame() for _ in range(self._capacity)]
        self._hand = 0
        self._hits = 0
        self._faults = 0
        self._log(LogLevel.INFO, f"reset ({self._capacity} frames)")

    def _find(self, page: int) -> int | None:
        """Return the index of the frame holding ``page``, if any."""
        for i, frame in enumerate(self._frames):
            if frame.page == page:
                return i
        return None

    def _advance(self) -> None:
        self._hand = (self._hand + 1) % self._capacity

    def _log(self, level: LogLevel, message: str) -> None:
        if self._logger is not None:
            self._logger.log(level, message, source=_LOG_SOURCE)
