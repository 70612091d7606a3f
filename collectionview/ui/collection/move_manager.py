"""
MoveManager - long-press drag-to-reorder for a CollectionView.

State machine:

    Idle --begin()--> Armed --drag_to()--> Dragging --end()/cancel()--> Idle
    Armed --end()/cancel()--> Idle

begin() floats the pressed view when the delegate allows it. Every
drag_to() pins the view under the pointer, drives edge autoscroll and,
once autoscroll has stopped, asks the delegate to move the item to the
index under the pointer. end() and cancel() always stop autoscroll and
unfloat the view, whether or not a reorder happened. Ending during a
reload sets Idle at once; the view is unfloated when the reload finishes.

All points are overlay (viewport) coordinates, as delivered by the
surface's press signals.
"""
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Tuple, Union

from loguru import logger
from PySide6.QtCore import QObject, QPointF, QRectF, QTimer
from PySide6.QtWidgets import QWidget

from collectionview.core.config import DragSettings

if TYPE_CHECKING:
    from collectionview.ui.collection.collection_view import CollectionView


@dataclass
class MoveContext:
    """The floating view being dragged and where it was grabbed."""
    view: QWidget
    identifier: str
    grab_offset: QPointF = field(default_factory=QPointF)
    reorder_count: int = 0


@dataclass
class IdleState:
    pass


@dataclass
class ArmedState:
    context: MoveContext


@dataclass
class DraggingState:
    context: MoveContext


MoveState = Union[IdleState, ArmedState, DraggingState]


class MoveManager(QObject):
    """
    Drives drag-reorder from press gestures.

    Connected to the surface's press signals by default; begin(),
    drag_to(), end() and cancel() can also be called directly.
    """

    def __init__(self, collection_view: 'CollectionView', settings: DragSettings | None = None):
        super().__init__(collection_view)
        self._collection = collection_view
        self._settings = settings or DragSettings()
        self._state: MoveState = IdleState()
        self._can_reorder = True
        self.autoscroll_velocity = QPointF()
        self._pending_release: Optional[Tuple[MoveContext, bool]] = None

        self._cooldown_timer = QTimer(self)
        self._cooldown_timer.setSingleShot(True)
        self._cooldown_timer.setInterval(self._settings.reorder_cooldown_ms)
        self._cooldown_timer.timeout.connect(self._on_cooldown_finished)

        surface = collection_view.surface
        surface.press_began.connect(self.begin)
        surface.press_moved.connect(self.drag_to)
        surface.press_ended.connect(self.end)
        surface.press_cancelled.connect(self.cancel)
        collection_view.reloaded.connect(self._on_reloaded)

    # --- State ---

    @property
    def state(self) -> MoveState:
        return self._state

    @property
    def settings(self) -> DragSettings:
        return self._settings

    @property
    def is_dragging(self) -> bool:
        return not isinstance(self._state, IdleState)

    @property
    def context(self) -> Optional[MoveContext]:
        if isinstance(self._state, IdleState):
            return None
        return self._state.context

    @property
    def can_reorder(self) -> bool:
        """False during the cooldown that follows a reorder."""
        return self._can_reorder

    # --- Transitions ---

    def begin(self, point: QPointF) -> bool:
        """
        Try to pick up the item under point.

        Returns:
            True when a view was floated and the manager is Armed
        """
        collection = self._collection
        surface = collection.surface
        if self.is_dragging or collection.reloading:
            return False

        index = collection.index_for_point(surface.from_overlay(point))
        view = collection.view_at(index) if index is not None else None
        delegate = collection.delegate
        if (
            view is None
            or collection.is_floating(view)
            or delegate is None
            or not delegate.will_drag(view, index)
        ):
            surface.reset_press()
            return False

        surface.reset_pan()
        collection.float_view(view)
        center = QRectF(view.geometry()).center()
        context = MoveContext(
            view=view,
            identifier=collection.identifier_at(index),
            grab_offset=point - center,
        )
        self._state = ArmedState(context)
        logger.debug(f"Drag armed for '{context.identifier}' at index {index}")
        return True

    def drag_to(self, point: QPointF):
        """Track the pointer: move the floating view, autoscroll, reorder."""
        if isinstance(self._state, IdleState):
            return
        context = self._state.context
        collection = self._collection
        surface = collection.surface
        if collection.reloading:
            return

        view = context.view
        index = collection.index_of(view)
        if index is None or not collection.is_floating(view):
            logger.debug(f"Dragged item '{context.identifier}' vanished, ending drag")
            self._return_to_idle(notify=False)
            return

        self._state = DraggingState(context)

        center = point - context.grab_offset
        view.move((center - QPointF(view.width() / 2, view.height() / 2)).toPoint())

        velocity = self.autoscroll_velocity_for(point)
        self.autoscroll_velocity = velocity
        if velocity.isNull():
            surface.decay(self._settings.drag_release_damping)
        else:
            surface.decay_to(velocity, 0.0)

        if not velocity.isNull() or not self._can_reorder or surface.is_panning():
            return

        to_index = collection.index_for_point(surface.from_overlay(point))
        delegate = collection.delegate
        if to_index is None or to_index == index or delegate is None:
            return
        if delegate.move_item(index, to_index):
            context.reorder_count += 1
            self._can_reorder = False
            self._cooldown_timer.start()
            collection.reload_data()

    def end(self, point: QPointF | None = None):
        """Drop the dragged view."""
        self._return_to_idle(notify=True)

    def cancel(self):
        """Abort the drag; the view still returns to its frame."""
        self._return_to_idle(notify=True)

    def _return_to_idle(self, notify: bool):
        state = self._state
        self._state = IdleState()
        self.autoscroll_velocity = QPointF()
        collection = self._collection
        collection.surface.decay(self._settings.drag_release_damping)
        if isinstance(state, IdleState):
            return
        if collection.reloading:
            self._pending_release = (state.context, notify)
            return
        self._release(state.context, notify)

    def _on_reloaded(self):
        pending = self._pending_release
        self._pending_release = None
        if pending is not None:
            self._release(*pending)

    def _release(self, context: MoveContext, notify: bool):
        collection = self._collection
        view = context.view
        index = collection.index_of(view)
        if index is None or not collection.is_floating(view):
            return
        collection.unfloat_view(view)
        delegate = collection.delegate
        if notify and delegate is not None:
            delegate.did_drag(view, index)
        logger.debug(f"Drag ended for '{context.identifier}' at index {index}")

    def _on_cooldown_finished(self):
        self._can_reorder = True

    # --- Autoscroll ---

    def autoscroll_velocity_for(self, point: QPointF) -> QPointF:
        """
        Edge autoscroll velocity for a pointer at point.

        Within margin of a viewport edge, and only along axes where the
        content is larger than the viewport and not already at its limit,
        velocity grows linearly with how far the pointer is into the margin.
        """
        surface = self._collection.surface
        margin = self._settings.autoscroll_margin
        gain = self._settings.autoscroll_gain
        viewport = surface.viewport_size()
        content = surface.content_size()
        offset = surface.content_offset()
        bounds = surface.offset_bounds()

        vx = 0.0
        vy = 0.0
        if content.width() > viewport.width():
            if point.x() < margin and offset.x() > bounds.left():
                vx = -(margin - point.x()) * gain
            elif point.x() > viewport.width() - margin and offset.x() < bounds.right():
                vx = (point.x() - (viewport.width() - margin)) * gain
        if content.height() > viewport.height():
            if point.y() < margin and offset.y() > bounds.top():
                vy = -(margin - point.y()) * gain
            elif point.y() > viewport.height() - margin and offset.y() < bounds.bottom():
                vy = (point.y() - (viewport.height() - margin)) * gain
        return QPointF(vx, vy)
