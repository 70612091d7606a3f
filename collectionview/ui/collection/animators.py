"""
Animators - how item views reach their frames.

The engine decides when a view is inserted, deleted or moved; the
provider's animator decides how its geometry gets there. The default
animator snaps views into place, SmoothAnimator eases them with
QPropertyAnimation.
"""
from typing import TYPE_CHECKING, Dict

from PySide6.QtCore import QEasingCurve, QObject, QPropertyAnimation, QRect, QRectF
from PySide6.QtWidgets import QWidget

if TYPE_CHECKING:
    from collectionview.ui.collection.collection_view import CollectionView


def apply_frame(view: QWidget, frame: QRectF):
    """Place view on frame immediately."""
    target = frame.toRect()
    if view.geometry() != target:
        view.setGeometry(target)


class CollectionAnimator:
    """
    Immediate animator.

    Subclass and override insert/delete/update for custom transitions.
    delete() runs before the view is retired to the reuse pool.
    """

    def prepare(self, collection_view: 'CollectionView'):
        """Called before every reload and cell load pass."""
        pass

    def insert(self, view: QWidget, index: int, frame: QRectF):
        apply_frame(view, frame)

    def delete(self, view: QWidget, index: int, frame: QRectF):
        pass

    def update(self, view: QWidget, index: int, frame: QRectF):
        apply_frame(view, frame)

    def stop(self, view: QWidget):
        """Halt any transition on view. Called before the view is floated."""
        pass


class SmoothAnimator(CollectionAnimator):
    """
    Eases views toward their frames.

    Inserted views appear in place; updates run a geometry animation from
    wherever the view currently is, so views shifted by the engine (scroll
    offset compensation, unfloat) glide to their new frame.
    """

    def __init__(self, duration_ms: int = 200, easing: QEasingCurve.Type = QEasingCurve.Type.OutCubic):
        self.duration_ms = duration_ms
        self.easing = easing
        self._animations: Dict[QWidget, QPropertyAnimation] = {}

    def is_animating(self, view: QWidget) -> bool:
        animation = self._animations.get(view)
        return animation is not None and animation.state() == QPropertyAnimation.State.Running

    def insert(self, view: QWidget, index: int, frame: QRectF):
        self._stop(view)
        apply_frame(view, frame)

    def delete(self, view: QWidget, index: int, frame: QRectF):
        self._stop(view)

    def stop(self, view: QWidget):
        self._stop(view)

    def update(self, view: QWidget, index: int, frame: QRectF):
        target = frame.toRect()
        animation = self._animations.get(view)
        if animation is not None and animation.state() == QPropertyAnimation.State.Running:
            if animation.endValue() == target:
                return
            animation.stop()
        if view.geometry() == target:
            return
        if self.duration_ms <= 0:
            view.setGeometry(target)
            return

        if animation is None:
            animation = QPropertyAnimation(view, b"geometry", view)
            animation.setEasingCurve(self.easing)
            animation.destroyed.connect(lambda _=None, v=view: self._animations.pop(v, None))
            self._animations[view] = animation
        animation.setDuration(self.duration_ms)
        animation.setStartValue(QRect(view.geometry()))
        animation.setEndValue(target)
        animation.start()

    def _stop(self, view: QWidget):
        animation = self._animations.get(view)
        if animation is not None:
            animation.stop()
