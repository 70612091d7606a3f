"""
Frame layouts for ArrayCollectionProvider.

The engine only consumes frames. These helpers compute them for the two
common arrangements: a single column list and a wrapping flow grid.
"""
from typing import Callable, List

from PySide6.QtCore import QPointF, QRectF, QSizeF


SizeFn = Callable[[int, QSizeF], QSizeF]


class CollectionLayout:
    """
    Base frame layout.

    Subclasses fill self._frames in prepare().
    """

    def __init__(self):
        self._frames: List[QRectF] = []

    def prepare(self, container: QSizeF, count: int, size_for: SizeFn):
        """
        Compute frames for count items.

        Args:
            container: Viewport size available to the layout
            count: Number of items
            size_for: Function (index, container) -> item size
        """
        raise NotImplementedError

    def frame(self, index: int) -> QRectF:
        return QRectF(self._frames[index])

    @property
    def frames(self) -> List[QRectF]:
        return [QRectF(frame) for frame in self._frames]

    def content_size(self) -> QSizeF:
        right = bottom = 0.0
        for frame in self._frames:
            right = max(right, frame.right())
            bottom = max(bottom, frame.bottom())
        return QSizeF(right, bottom)


class ListLayout(CollectionLayout):
    """
    Single column (or single row when horizontal) of items.

    Items in a vertical list are stretched to the container width unless
    stretch is False.
    """

    def __init__(self, spacing: float = 0.0, horizontal: bool = False, stretch: bool = True):
        super().__init__()
        self.spacing = spacing
        self.horizontal = horizontal
        self.stretch = stretch

    def prepare(self, container: QSizeF, count: int, size_for: SizeFn):
        self._frames = []
        position = 0.0
        for index in range(count):
            size = size_for(index, container)
            if self.horizontal:
                height = container.height() if self.stretch else size.height()
                self._frames.append(QRectF(position, 0.0, size.width(), height))
                position += size.width() + self.spacing
            else:
                width = container.width() if self.stretch else size.width()
                self._frames.append(QRectF(0.0, position, width, size.height()))
                position += size.height() + self.spacing


class FlowLayout(CollectionLayout):
    """
    Flow layout that arranges items in rows, wrapping to next row when full.

    Example:
        layout = FlowLayout(h_spacing=8, v_spacing=8)
        provider = ArrayCollectionProvider(data, TileView, layout=layout)
    """

    def __init__(self, h_spacing: float = 8.0, v_spacing: float = 8.0):
        super().__init__()
        self.h_spacing = h_spacing
        self.v_spacing = v_spacing

    def prepare(self, container: QSizeF, count: int, size_for: SizeFn):
        self._frames = []
        x = 0.0
        y = 0.0
        line_height = 0.0
        right_edge = container.width()

        for index in range(count):
            item_size = size_for(index, container)
            next_x = x + item_size.width() + self.h_spacing

            # Wrap to next line if needed
            if next_x - self.h_spacing > right_edge and line_height > 0:
                x = 0.0
                y = y + line_height + self.v_spacing
                next_x = x + item_size.width() + self.h_spacing
                line_height = 0.0

            self._frames.append(QRectF(QPointF(x, y), item_size))

            x = next_x
            line_height = max(line_height, item_size.height())
