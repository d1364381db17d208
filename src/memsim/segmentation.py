"""Segmentation — variable-size allocation in a fixed address space.

Where paging chops memory into equal frames, segmentation hands out
**segments**: named, contiguous regions whose size is whatever the
program asked for.  The allocator tracks two things:

    - **Segments** — the allocated ranges ``[base, base + size)``.
    - **Free blocks** (holes) — the unallocated ranges between them.

Together they partition the address space exactly: every address is
either in one segment or in one hole, never both and never neither.

Placing a new segment means choosing a hole.  The classic policies:

    - **First-Fit** — the lowest-addressed hole that is big enough.
    - **Best-Fit** — the smallest hole that is big enough (least waste
      now, but leaves many slivers behind).
    - **Worst-Fit** — the largest hole (keeps the leftover usable).

Holes scattered between segments are **external fragmentation**: there
may be plenty of free memory in total and still no single hole large
enough.  **Compaction** fixes that by sliding every segment down to
address 0 and leaving one hole at the top.

First-Fit sorts the hole list by address before scanning; Best-Fit and
Worst-Fit scan it in whatever order it currently holds, and the first
hole seen wins a tie.  Only manual placement leaves the list out of
address order, so the difference shows up after a manual allocation.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import TYPE_CHECKING

from memsim.config import DEFAULT_MEMORY_SIZE
from memsim.logging import LogLevel

if TYPE_CHECKING:
    from memsim.logging import Logger

MEMORY_SIZE = DEFAULT_MEMORY_SIZE

_LOG_SOURCE = "segmentation"


class SegmentationError(Exception):
    """Base class for allocator failures."""


class NoFitError(SegmentationError):
    """Raise when no free block is large enough for a fit policy."""


class PlacementError(SegmentationError):
    """Raise when a manual placement overlaps or leaves the address space."""


class FitPolicy(StrEnum):
    """Rules for choosing a free block, plus fixed-address placement."""

    FIRST_FIT = "First-Fit"
    BEST_FIT = "Best-Fit"
    WORST_FIT = "Worst-Fit"
    MANUAL = "Manual"

    @classmethod
    def parse(cls, text: str) -> FitPolicy:
        """Return the policy named by ``text``.

        Accepts the display values (``First-Fit``) and the short
        aliases ``first``, ``best``, ``worst`` and ``manual``, in any case.

        Raises:
            ValueError: If the text names no policy.

        """
        key = text.strip().lower()
        for policy in cls:
            if key in (policy.value.lower(), policy.value.split("-")[0].lower()):
                return policy
        choices = ", ".join(p.value for p in cls)
        msg = f"Unknown policy: {text!r} (choose from {choices})"
        raise ValueError(msg)


@dataclass(frozen=True)
class Segment:
    """A named, contiguous allocation.

    Attributes:
        name: Caller-supplied label, also used as the removal key.
        base: First address of the segment.
        size: Number of bytes (the segment's limit).

    """

    name: str
    base: int
    size: int

    @property
    def end(self) -> int:
        """Return the first address past the segment."""
        return self.base + self.size


@dataclass(frozen=True)
class FreeBlock:
    """An unallocated range ``[base, base + size)``."""

    base: int
    size: int

    @property
    def end(self) -> int:
        """Return the first address past the block."""
        return self.base + self.size


@dataclass(frozen=True)
class MapRow:
    """One row of the address-ordered memory map."""

    label: str
    base: int
    size: int
    free: bool


def _check_size(size: int) -> None:
    if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
        msg = f"Segment size must be a positive integer (got {size!r})"
        raise ValueError(msg)


class SegmentAllocator:
    """Segment table and free list over ``[0, memory_size)``.

    Every mutating operation validates first and mutates second, so a
    raised error always leaves the allocator as it was.
    """

    def __init__(self, memory_size: int = MEMORY_SIZE, *, logger: Logger | None = None) -> None:
        """Create an allocator with one free block spanning all of memory.

        Args:
            memory_size: Total addressable bytes.
            logger: Optional log buffer for allocator events.

        Raises:
            ValueError: If memory_size is not a positive integer.

        """
        if isinstance(memory_size, bool) or not isinstance(memory_size, int) or memory_size < 1:
            msg = f"Memory size must be a positive integer (got {memory_size!r})"
            raise ValueError(msg)
        self._memory_size = memory_size
        self._logger = logger
        self._segments: list[Segment] = []
        self._free: list[FreeBlock] = [FreeBlock(0, memory_size)]

    # -- Observers ------------------------------------------------------

    @property
    def memory_size(self) -> int:
        """Return the size of the address space."""
        return self._memory_size

    @property
    def segments(self) -> tuple[Segment, ...]:
        """Return the segments in table order."""
        return tuple(self._segments)

    @property
    def free_blocks(self) -> tuple[FreeBlock, ...]:
        """Return the free blocks in their current list order."""
        return tuple(self._free)

    @property
    def used(self) -> int:
        """Return the number of allocated bytes."""
        return sum(s.size for s in self._segments)

    @property
    def free(self) -> int:
        """Return the number of unallocated bytes."""
        return sum(b.size for b in self._free)

    @property
    def largest_free_block(self) -> int:
        """Return the size of the biggest hole, or 0 if memory is full."""
        return max((b.size for b in self._free), default=0)

    @property
    def external_fragmentation(self) -> float:
        """Return the share of free memory outside the largest hole.

        0.0 means all free space is one contiguous block (or there is
        none); values near 1.0 mean free space is scattered in slivers.
        """
        total = self.free
        if total == 0:
            return 0.0
        return 1 - self.largest_free_block / total

    def segment_names(self) -> list[str]:
        """Return the distinct segment names in table order."""
        return list(dict.fromkeys(s.name for s in self._segments))

    def find(self, name: str) -> Segment | None:
        """Return the first segment called ``name``, if any."""
        for segment in self._segments:
            if segment.name == name:
                return segment
        return None

    def memory_map(self) -> list[MapRow]:
        """Return segments and holes in address order.

        Segments are labelled ``name (size)`` and holes ``Free (size)``.
        """
        rows = [MapRow(f"{s.name} ({s.size})", s.base, s.size, free=False) for s in self._segments]
        rows.extend(MapRow(f"Free ({b.size})", b.base, b.size, free=True) for b in self._free)
        return sorted(rows, key=lambda r: r.base)

    def check_invariants(self) -> None:
        """Verify that segments and holes partition the address space.

        Raises:
            SegmentationError: On a gap, an overlap, an empty range, or
                a range outside ``[0, memory_size)``.

        """
        ranges = [(s.base, s.size) for s in self._segments]
        ranges.extend((b.base, b.size) for b in self._free)
        cursor = 0
        for base, size in sorted(ranges):
            if size <= 0:
                msg = f"Empty range at {base}"
                raise SegmentationError(msg)
            if base < cursor:
                msg = f"Overlap at address {base}"
                raise SegmentationError(msg)
            if base > cursor:
                msg = f"Unaccounted addresses [{cursor}, {base})"
                raise SegmentationError(msg)
            cursor = base + size
        if cursor != self._memory_size:
            msg = f"Ranges end at {cursor}, expected {self._memory_size}"
            raise SegmentationError(msg)

    # -- Allocation -----------------------------------------------------

    def allocate(self, name: str, size: int, policy: FitPolicy | str = FitPolicy.FIRST_FIT) -> Segment:
        """Place a segment in a free block chosen by ``policy``.

        Args:
            name: Label for the new segment.
            size: Requested size in bytes.
            policy: First-Fit, Best-Fit or Worst-Fit (or its text form).

        Returns:
            The new segment.

        Raises:
            ValueError: If size is not positive, or the policy is Manual
                or unknown.
            NoFitError: If no free block is large enough.

        """
        _check_size(size)
        if not isinstance(policy, FitPolicy):
            policy = FitPolicy.parse(policy)
        if policy is FitPolicy.MANUAL:
            msg = "Manual placement needs a base address; use allocate_manual()"
            raise ValueError(msg)

        index = self._choose(size, policy)
        if index is None:
            self._log(LogLevel.WARNING, f"{policy}: no block of {size} for {name}")
            msg = f"No suitable block found for {name}. Try again after compacting."
            raise NoFitError(msg)

        block = self._free[index]
        segment = Segment(name, block.base, size)
        self._segments.append(segment)
        if block.size == size:
            del self._free[index]
        else:
            self._free[index] = FreeBlock(block.base + size, block.size - size)
        self._log(LogLevel.INFO, f"{policy}: {name} at {segment.base} (size {size})")
        return segment

    def allocate_manual(self, name: str, size: int, base: int) -> Segment:
        """Place a segment at a fixed base address.

        The range is carved out of every free block it touches; the
        leftovers before and after it stay free.

        Raises:
            ValueError: If size is not positive.
            PlacementError: If the range overlaps a segment, starts below
                0, ends past the address space, or is not entirely free.

        """
        _check_size(size)
        end = base + size
        if base < 0 or end > self._memory_size:
            msg = f"[{base}, {end}) is out of bounds"
            raise PlacementError(msg)
        for segment in self._segments:
            if base < segment.end and segment.base < end:
                msg = f"[{base}, {end}) overlaps segment {segment.name}"
                raise PlacementError(msg)

        touched = [b for b in self._free if b.base < end and base < b.end]
        covered = sum(min(b.end, end) - max(b.base, base) for b in touched)
        if covered != size:
            msg = f"[{base}, {end}) is not free"
            raise PlacementError(msg)

        segment = Segment(name, base, size)
        self._segments.append(segment)
        remaining = [b for b in self._free if b not in touched]
        for block in touched:
            if block.base < base:
                remaining.append(FreeBlock(block.base, base - block.base))
            if end < block.end:
                remaining.append(FreeBlock(end, block.end - end))
        self._free = remaining
        self._log(LogLevel.INFO, f"Manual: {name} at {base} (size {size})")
        return segment

    def _choose(self, size: int, policy: FitPolicy) -> int | None:
        """Return the index of the free block ``policy`` selects."""
        if policy is FitPolicy.FIRST_FIT:
            ordered = sorted(self._free, key=lambda b: b.base)
            for i, block in enumerate(ordered):
                if block.size >= size:
                    # Keep the sorted order only once a block is taken
                    self._free = ordered
                    return i
            return None

        chosen: int | None = None
        for i, block in enumerate(self._free):
            if block.size < size:
                continue
            if chosen is None:
                chosen = i
            elif policy is FitPolicy.BEST_FIT and block.size < self._free[chosen].size:
                chosen = i
            elif policy is FitPolicy.WORST_FIT and block.size > self._free[chosen].size:
                chosen = i
        return chosen

    # -- Removal and reorganisation --------------------------------------

    def remove(self, name: str) -> bool:
        """Free the first segment called ``name``.

        Returns:
            True if a segment was removed, False if none matched.

        """
        segment = self.find(name)
        if segment is None:
            return False
        self._segments.remove(segment)
        self._free.append(FreeBlock(segment.base, segment.size))
        self.merge_adjacent_free()
        self._log(LogLevel.INFO, f"removed {name} from {segment.base} (size {segment.size})")
        return True

    def merge_adjacent_free(self) -> None:
        """Sort the free list by address and coalesce touching blocks."""
        self._free.sort(key=lambda b: b.base)
        i = 0
        while i < len(self._free) - 1:
            current, following = self._free[i], self._free[i + 1]
            if current.end == following.base:
                # Stay on i: the grown block may touch the next one too
                self._free[i] = replace(current, size=current.size + following.size)
                del self._free[i + 1]
            else:
                i += 1

    def compact(self) -> None:
        """Slide every segment down to address 0, leaving one hole at the top."""
        self._segments.sort(key=lambda s: s.base)
        cursor = 0
        packed: list[Segment] = []
        for segment in self._segments:
            packed.append(replace(segment, base=cursor))
            cursor += segment.size
        self._segments = packed
        self._free = [FreeBlock(cursor, self._memory_size - cursor)] if cursor < self._memory_size else []
        self._log(LogLevel.INFO, f"compacted: {cursor} used, {self._memory_size - cursor} free")

    def reset(self) -> None:
        """Drop every segment and restore one free block spanning memory."""
        self._segments = []
        self._free = [FreeBlock(0, self._memory_size)]
        self._log(LogLevel.INFO, f"reset ({self._memory_size} bytes)")

    def _log(self, level: LogLevel, message: str) -> None:
        if self._logger is not None:
            self._logger.log(level, message, source=_LOG_SOURCE)
