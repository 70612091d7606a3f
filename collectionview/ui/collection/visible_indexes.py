"""
VisibleIndexes - which item indexes intersect the active rectangle.

Two strategies share one entry point:

- full scan: test every frame, O(n), always correct.
- incremental: keep the contiguous index range found last time and walk its
  ends forward/backward as the rectangle moves, O(visible + distance moved).

The incremental walk needs frames that are ordered along a scroll axis:
frame top and bottom (or left and right) never decrease as the index
grows. Then the items overlapping the rectangle along that axis form one
contiguous index range, and every intersecting item lies inside it. The
axis is detected on reload; layouts without one always use the full scan.
"""
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from loguru import logger
from PySide6.QtCore import QRectF


class ScrollAxis(str, Enum):
    """Axis along which frames are monotonically ordered."""
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


def detect_axis(frames: Sequence[QRectF]) -> Optional[ScrollAxis]:
    """Return the axis frames are ordered along, or None for scattered layouts."""
    vertical = horizontal = True
    for previous, current in zip(frames, frames[1:]):
        if vertical and (current.top() < previous.top() or current.bottom() < previous.bottom()):
            vertical = False
        if horizontal and (current.left() < previous.left() or current.right() < previous.right()):
            horizontal = False
        if not vertical and not horizontal:
            return None
    if vertical:
        return ScrollAxis.VERTICAL
    if horizontal:
        return ScrollAxis.HORIZONTAL
    return None


class VisibleIndexes:
    """
    Visibility index over the frames of the last reload.

    Example:
        index = VisibleIndexes()
        index.reload(frames)
        visible = index.visible_indexes(active_rect, floating={dragged_index})
    """

    def __init__(self, optimize_for_continuous_layout: bool = True, max_reseeds: int = 1):
        self.optimize_for_continuous_layout = optimize_for_continuous_layout
        self.max_reseeds = max_reseeds
        self._frames: List[QRectF] = []
        self._axis: Optional[ScrollAxis] = None
        # inclusive range of indexes overlapping the last rect along the axis
        self._start: Optional[int] = None
        self._end: Optional[int] = None
        self.full_scan_count = 0

    @property
    def axis(self) -> Optional[ScrollAxis]:
        return self._axis

    @property
    def tracked_range(self) -> Optional[tuple[int, int]]:
        if self._start is None or self._end is None:
            return None
        return (self._start, self._end)

    @property
    def frame_count(self) -> int:
        return len(self._frames)

    def reload(self, frames: Iterable[QRectF]):
        """Replace the frame list and forget the tracked range."""
        self._frames = [QRectF(frame).normalized() for frame in frames]
        self._axis = detect_axis(self._frames)
        self._start = self._end = None
        logger.trace(f"VisibleIndexes reloaded: {len(self._frames)} frames, axis={self._axis}")

    def full_scan(self, rect: QRectF) -> set[int]:
        self.full_scan_count += 1
        return {index for index, frame in enumerate(self._frames) if frame.intersects(rect)}

    def visible_indexes(self, rect: QRectF, floating: Iterable[int] = ()) -> set[int]:
        """
        Indexes whose frame intersects rect, plus every floating index.

        Floating indexes are included even when they are off the rect so a
        dragged item is never virtualized away.
        """
        if self.optimize_for_continuous_layout and self._axis is not None:
            indexes = self._incremental(rect)
        else:
            indexes = self.full_scan(rect)
        indexes.update(index for index in floating if 0 <= index < len(self._frames))
        return indexes

    # --- Incremental scan ---

    def _in_band(self, index: int, rect: QRectF) -> bool:
        frame = self._frames[index]
        if self._axis is ScrollAxis.VERTICAL:
            return frame.top() < rect.bottom() and rect.top() < frame.bottom()
        return frame.left() < rect.right() and rect.left() < frame.right()

    def _walk(self, rect: QRectF) -> bool:
        """
        Move the tracked range onto the band of indexes overlapping rect.

        Returns False when the range collapsed (rect moved past the range
        without touching it) and has to be reseeded.
        """
        count = len(self._frames)
        start = min(self._start, count - 1)
        end = min(self._end, count - 1)

        while end + 1 < count and self._in_band(end + 1, rect):
            end += 1
        while start > 0 and self._in_band(start - 1, rect):
            start -= 1

        while start <= end and not self._in_band(start, rect):
            start += 1
        while end >= start and not self._in_band(end, rect):
            end -= 1

        if start > end:
            self._start = self._end = None
            return False
        self._start, self._end = start, end
        return True

    def _reseed(self, rect: QRectF) -> bool:
        """Linear scan for the first index in the band."""
        self.full_scan_count += 1
        for index in range(len(self._frames)):
            if self._in_band(index, rect):
                self._start = self._end = index
                return True
        self._start = self._end = None
        return False

    def _incremental(self, rect: QRectF) -> set[int]:
        if not self._frames:
            return set()

        found = self._start is not None and self._walk(rect)
        attempts = 0
        while not found and attempts < self.max_reseeds:
            attempts += 1
            if not self._reseed(rect):
                # nothing overlaps the rect along the axis at all
                return set()
            found = self._walk(rect)

        if not found:
            logger.debug("Incremental visibility walk did not settle, using full scan")
            return self.full_scan(rect)

        return {
            index for index in range(self._start, self._end + 1)
            if self._frames[index].intersects(rect)
        }
