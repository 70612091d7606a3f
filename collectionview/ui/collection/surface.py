"""
ScrollSurface - the scrollable host a CollectionView renders into.

The engine only needs a handful of things from its host: the scroll
offset, the viewport size, a content layer and an overlay layer for item
views, velocity decay for autoscroll, and press/tap signals. ScrollSurface
declares that contract; QtScrollSurface implements it on a QScrollArea.

Coordinates:
    content  - item frames, origin at the top-left of the scrollable content
    overlay  - viewport coordinates, origin at the top-left of the viewport
    overlay = content - content_offset
"""
import math

from loguru import logger
from PySide6.QtCore import (
    QElapsedTimer, QEvent, QObject, QPointF, QRectF, QSizeF, Qt, QTimer, Signal
)
from PySide6.QtWidgets import QFrame, QScrollArea, QWidget

from collectionview.core.config import DragSettings


class ScrollSurface(QObject):
    """
    Abstract scroll host.

    Layer, offset, size, velocity and press members raise NotImplementedError
    here; subclasses override all of them. QObject does not use ABCMeta, so
    a missing override shows up when it is first called.

    Signals:
        scrolled()                 content offset changed
        resized()                  viewport size changed
        tapped(QPointF)            short click, overlay coordinates
        press_began(QPointF)       long press recognized, overlay coordinates
        press_moved(QPointF)       pointer moved while long-pressing
        press_ended(QPointF)       long press released
        press_cancelled()          long press aborted by the system
    """

    scrolled = Signal()
    resized = Signal()
    tapped = Signal(QPointF)
    press_began = Signal(QPointF)
    press_moved = Signal(QPointF)
    press_ended = Signal(QPointF)
    press_cancelled = Signal()

    # --- Layers ---

    @property
    def content_widget(self) -> QWidget:
        """Parent for item views that scroll with the content."""
        raise NotImplementedError

    @property
    def overlay_widget(self) -> QWidget:
        """Parent for floating views; fixed to the viewport, above content."""
        raise NotImplementedError

    # --- Geometry ---

    def content_offset(self) -> QPointF:
        raise NotImplementedError

    def set_content_offset(self, offset: QPointF):
        raise NotImplementedError

    def viewport_size(self) -> QSizeF:
        raise NotImplementedError

    def content_size(self) -> QSizeF:
        raise NotImplementedError

    def set_content_size(self, size: QSizeF):
        raise NotImplementedError

    # --- Motion ---

    def velocity(self) -> QPointF:
        """Current scroll velocity in content points per second."""
        raise NotImplementedError

    def decay(self, damping: float):
        """Let the current velocity decay toward zero."""
        raise NotImplementedError

    def decay_to(self, velocity: QPointF, damping: float = 0.0):
        """Drive scrolling with velocity; damping 0 keeps it constant."""
        raise NotImplementedError

    def is_panning(self) -> bool:
        """True while the user is scrolling the surface directly."""
        raise NotImplementedError

    def reset_press(self):
        """Abort the press currently being recognized."""
        raise NotImplementedError

    def reset_pan(self):
        """Abort any user scrolling in progress."""
        raise NotImplementedError

    # --- Derived helpers ---

    def visible_rect(self) -> QRectF:
        """Viewport rectangle in content coordinates."""
        return QRectF(self.content_offset(), self.viewport_size())

    def offset_bounds(self) -> QRectF:
        """Range of valid content offsets."""
        content = self.content_size()
        viewport = self.viewport_size()
        return QRectF(
            0.0, 0.0,
            max(0.0, content.width() - viewport.width()),
            max(0.0, content.height() - viewport.height()),
        )

    def to_overlay(self, point: QPointF) -> QPointF:
        return point - self.content_offset()

    def from_overlay(self, point: QPointF) -> QPointF:
        return point + self.content_offset()


class QtScrollSurface(ScrollSurface):
    """
    ScrollSurface on top of a QScrollArea.

    Adds the pieces QScrollArea lacks: an overlay layer above the scrolled
    widget, long-press recognition, and a timer driven velocity decay used
    for autoscroll.

    Example:
        surface = QtScrollSurface()
        layout.addWidget(surface.scroll_area)
        collection = CollectionView(surface)
    """

    TICK_MS = 16
    STOP_VELOCITY = 1.0

    def __init__(
        self,
        scroll_area: QScrollArea | None = None,
        settings: DragSettings | None = None,
        parent: QObject | None = None
    ):
        super().__init__(parent)
        self._settings = settings or DragSettings()

        self.scroll_area = scroll_area or QScrollArea()
        self.scroll_area.setWidgetResizable(False)
        self.scroll_area.setFrameShape(QFrame.Shape.NoFrame)

        self._content = QWidget()
        self._content.setMouseTracking(True)
        self.scroll_area.setWidget(self._content)

        viewport = self.scroll_area.viewport()
        self._overlay = QWidget(viewport)
        self._overlay.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents)
        self._overlay.setGeometry(viewport.rect())
        self._overlay.raise_()
        viewport.installEventFilter(self)

        self.scroll_area.horizontalScrollBar().valueChanged.connect(self._on_scroll_changed)
        self.scroll_area.verticalScrollBar().valueChanged.connect(self._on_scroll_changed)

        # Velocity tracking
        self._velocity = QPointF()
        self._last_offset = self.content_offset()
        self._scroll_clock = QElapsedTimer()
        self._scroll_clock.start()

        # Decay / autoscroll
        self._decay_velocity = QPointF()
        self._decay_damping = 0.0
        self._decay_timer = QTimer(self)
        self._decay_timer.setInterval(self.TICK_MS)
        self._decay_timer.timeout.connect(self._on_decay_tick)

        # Long press recognition
        self._press_origin: QPointF | None = None
        self._long_pressing = False
        self._press_timer = QTimer(self)
        self._press_timer.setSingleShot(True)
        self._press_timer.setInterval(self._settings.long_press_ms)
        self._press_timer.timeout.connect(self._on_long_press)

    # --- Layers ---

    @property
    def content_widget(self) -> QWidget:
        return self._content

    @property
    def overlay_widget(self) -> QWidget:
        return self._overlay

    # --- Geometry ---

    def content_offset(self) -> QPointF:
        return QPointF(
            self.scroll_area.horizontalScrollBar().value(),
            self.scroll_area.verticalScrollBar().value(),
        )

    def set_content_offset(self, offset: QPointF):
        self.scroll_area.horizontalScrollBar().setValue(round(offset.x()))
        self.scroll_area.verticalScrollBar().setValue(round(offset.y()))

    def viewport_size(self) -> QSizeF:
        return QSizeF(self.scroll_area.viewport().size())

    def content_size(self) -> QSizeF:
        return QSizeF(self._content.size())

    def set_content_size(self, size: QSizeF):
        self._content.resize(math.ceil(size.width()), math.ceil(size.height()))

    # --- Motion ---

    def velocity(self) -> QPointF:
        if self._decay_timer.isActive():
            return QPointF(self._decay_velocity)
        if self._scroll_clock.elapsed() > 100:
            return QPointF()
        return QPointF(self._velocity)

    def decay(self, damping: float):
        self._decay_velocity = self.velocity()
        self._decay_damping = damping
        if self._is_resting(self._decay_velocity):
            self._stop_decay()
        elif not self._decay_timer.isActive():
            self._decay_timer.start()

    def decay_to(self, velocity: QPointF, damping: float = 0.0):
        self._decay_velocity = QPointF(velocity)
        self._decay_damping = damping
        if self._is_resting(velocity):
            self._stop_decay()
        elif not self._decay_timer.isActive():
            self._decay_timer.start()

    def is_panning(self) -> bool:
        return (
            self.scroll_area.verticalScrollBar().isSliderDown()
            or self.scroll_area.horizontalScrollBar().isSliderDown()
        )

    def reset_press(self):
        self._press_timer.stop()
        self._press_origin = None
        self._long_pressing = False

    def reset_pan(self):
        self._stop_decay()

    def _is_resting(self, velocity: QPointF) -> bool:
        return abs(velocity.x()) < self.STOP_VELOCITY and abs(velocity.y()) < self.STOP_VELOCITY

    def _stop_decay(self):
        self._decay_timer.stop()
        self._decay_velocity = QPointF()

    def _on_decay_tick(self):
        dt = self.TICK_MS / 1000.0
        bounds = self.offset_bounds()
        offset = self.content_offset() + self._decay_velocity * dt
        clamped = QPointF(
            min(max(offset.x(), bounds.left()), bounds.right()),
            min(max(offset.y(), bounds.top()), bounds.bottom()),
        )
        self.set_content_offset(clamped)

        if self._decay_damping > 0:
            self._decay_velocity = self._decay_velocity * math.exp(-self._decay_damping * dt)
        if clamped != offset or self._is_resting(self._decay_velocity):
            self._stop_decay()

    def _on_scroll_changed(self, _value: int):
        offset = self.content_offset()
        elapsed = max(1, self._scroll_clock.restart()) / 1000.0
        raw = (offset - self._last_offset) / elapsed
        self._velocity = (self._velocity + raw) * 0.5
        self._last_offset = offset
        self.scrolled.emit()

    # --- Press recognition ---

    def _on_long_press(self):
        if self._press_origin is None:
            return
        self._long_pressing = True
        logger.trace(f"Long press at {self._press_origin}")
        self.press_began.emit(QPointF(self._press_origin))

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        if watched is not self.scroll_area.viewport():
            return super().eventFilter(watched, event)

        kind = event.type()
        if kind == QEvent.Type.Resize:
            self._overlay.setGeometry(self.scroll_area.viewport().rect())
            self._overlay.raise_()
            self.resized.emit()
        elif kind == QEvent.Type.MouseButtonPress and event.button() == Qt.MouseButton.LeftButton:
            self._press_origin = event.position()
            self._long_pressing = False
            self._press_timer.start()
            return True
        elif kind == QEvent.Type.MouseMove and self._press_origin is not None:
            position = event.position()
            if self._long_pressing:
                self.press_moved.emit(position)
                return True
            if (position - self._press_origin).manhattanLength() > self._settings.press_move_tolerance:
                self._press_timer.stop()
                self._press_origin = None
        elif kind == QEvent.Type.MouseButtonRelease and event.button() == Qt.MouseButton.LeftButton:
            position = event.position()
            if self._long_pressing:
                self.reset_press()
                self.press_ended.emit(position)
                return True
            if self._press_timer.isActive():
                self.reset_press()
                self.tapped.emit(position)
                return True
            self.reset_press()
        elif kind == QEvent.Type.Leave and self._long_pressing:
            self.reset_press()
            self.press_cancelled.emit()
        return super().eventFilter(watched, event)
