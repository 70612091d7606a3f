"""
MoveManager Tests - long-press drag-to-reorder.

Points are viewport coordinates. With the default fixtures, rows are 100
high and 300 wide, so (50, 50) is on item 0 and (50, 250) on item 2.
"""
import pytest
from PySide6.QtCore import QPointF, QRectF
from PySide6.QtTest import QTest

from collectionview.ui.collection import ArmedState, DraggingState, IdleState

from fakes import RecordingAnimator, RecordingDelegate, make_provider


class HookedAnimator(RecordingAnimator):
    """Runs on_insert from inside the engine's insert callback."""

    def __init__(self):
        super().__init__()
        self.on_insert = None

    def insert(self, view, index, frame):
        super().insert(view, index, frame)
        if self.on_insert is not None:
            self.on_insert()


@pytest.fixture
def abc(collection):
    """Collection over [A, B, C] with a reordering delegate."""
    provider = make_provider(["A", "B", "C"])
    collection.provider = provider
    collection.delegate = RecordingDelegate(provider)
    collection.reload_data()
    return collection


@pytest.fixture
def tall(collection):
    """Collection over 10 rows, taller than the viewport."""
    provider = make_provider([str(i) for i in range(10)])
    collection.provider = provider
    collection.delegate = RecordingDelegate(provider)
    collection.reload_data()
    return collection


class TestDragReorder:
    def test_begin_floats_pressed_view(self, abc):
        manager = abc.move_manager
        view = abc.view_at(0)

        assert manager.begin(QPointF(50, 50))

        assert isinstance(manager.state, ArmedState)
        assert manager.context.view is view
        assert manager.context.identifier == "A"
        assert abc.is_floating(view)
        assert abc.surface.pan_resets == 1

    def test_drag_to_last_position_reorders_once(self, abc):
        manager = abc.move_manager
        delegate = abc.delegate
        view = abc.view_at(0)

        manager.begin(QPointF(50, 50))
        manager.drag_to(QPointF(50, 250))
        manager.drag_to(QPointF(50, 260))

        assert delegate.move_calls == [(0, 2)]
        assert abc.provider.data == ["B", "C", "A"]
        assert abc.index_for_identifier("A") == 2
        assert abc.index_of(view) == 2
        assert abc.is_floating(view)
        assert isinstance(manager.state, DraggingState)
        assert manager.context.reorder_count == 1

    def test_dragged_view_follows_pointer(self, abc):
        manager = abc.move_manager
        view = abc.view_at(0)
        manager.begin(QPointF(50, 50))
        manager.drag_to(QPointF(60, 180))
        # grabbed 100 left of center; center now at (160, 180)
        assert QRectF(view.geometry()).center() == QPointF(160, 180)

    def test_end_unfloats_and_notifies(self, abc):
        manager = abc.move_manager
        delegate = abc.delegate
        view = abc.view_at(0)

        manager.begin(QPointF(50, 50))
        manager.drag_to(QPointF(50, 250))
        manager.end(QPointF(50, 250))

        assert isinstance(manager.state, IdleState)
        assert not abc.is_floating(view)
        assert view.parentWidget() is abc.surface.content_widget
        assert QRectF(view.geometry()) == abc.frame_at(2)
        assert delegate.did_drag_calls == [(view, 2)]

    def test_cancel_returns_view(self, abc):
        manager = abc.move_manager
        view = abc.view_at(1)
        manager.begin(QPointF(50, 150))
        manager.cancel()

        assert not manager.is_dragging
        assert not abc.is_floating(view)
        assert QRectF(view.geometry()) == abc.frame_at(1)

    def test_cooldown_blocks_immediate_second_reorder(self, abc):
        manager = abc.move_manager
        manager.begin(QPointF(50, 50))
        manager.drag_to(QPointF(50, 250))
        assert not manager.can_reorder

        manager.drag_to(QPointF(50, 50))
        assert abc.delegate.move_calls == [(0, 2)]

        QTest.qWait(manager.settings.reorder_cooldown_ms + 100)
        assert manager.can_reorder

        manager.drag_to(QPointF(50, 50))
        assert abc.delegate.move_calls == [(0, 2), (2, 0)]
        assert abc.provider.data == ["A", "B", "C"]

    def test_declined_drag_resets_press(self, abc):
        abc.delegate.allow_drag = False
        manager = abc.move_manager

        assert not manager.begin(QPointF(50, 50))
        assert abc.delegate.will_drag_calls == [0]
        assert abc.surface.press_resets == 1
        assert abc.floating_views == set()
        assert isinstance(manager.state, IdleState)

    def test_no_delegate_never_drags(self, abc):
        abc.delegate = None
        assert not abc.move_manager.begin(QPointF(50, 50))
        assert abc.surface.press_resets == 1

    def test_press_outside_items(self, abc):
        assert not abc.move_manager.begin(QPointF(50, 5000))
        assert abc.delegate.will_drag_calls == []

    def test_refused_move_keeps_order(self, abc):
        abc.delegate.allow_move = False
        manager = abc.move_manager
        manager.begin(QPointF(50, 50))
        manager.drag_to(QPointF(50, 250))
        assert abc.provider.data == ["A", "B", "C"]
        assert manager.can_reorder

    def test_panning_suppresses_reorder(self, abc):
        abc.surface.panning = True
        manager = abc.move_manager
        manager.begin(QPointF(50, 50))
        manager.drag_to(QPointF(50, 250))
        assert abc.delegate.move_calls == []

    def test_vanished_view_ends_silently(self, abc):
        manager = abc.move_manager
        manager.begin(QPointF(50, 50))

        abc.provider.data = ["B", "C"]
        abc.reload_data()
        manager.drag_to(QPointF(50, 150))

        assert isinstance(manager.state, IdleState)
        assert abc.delegate.did_drag_calls == []
        assert abc.floating_views == set()

    def test_cancel_during_reload_unfloats_after_reload(self, collection):
        animator = HookedAnimator()
        provider = make_provider(["A", "B", "C"], animator=animator)
        collection.provider = provider
        collection.delegate = RecordingDelegate(provider)
        collection.reload_data()
        manager = collection.move_manager
        view = collection.view_at(0)
        assert manager.begin(QPointF(50, 50))

        animator.on_insert = manager.cancel
        provider.data = ["A", "B", "D"]
        collection.reload_data()

        assert isinstance(manager.state, IdleState)
        assert not collection.is_floating(view)
        assert view.parentWidget() is collection.surface.content_widget
        assert QRectF(view.geometry()) == collection.frame_at(0)
        assert collection.delegate.did_drag_calls == [(view, 0)]

    def test_second_begin_while_dragging_ignored(self, abc):
        manager = abc.move_manager
        assert manager.begin(QPointF(50, 50))
        assert not manager.begin(QPointF(50, 150))
        assert len(abc.floating_views) == 1

    def test_surface_signals_drive_manager(self, abc):
        surface = abc.surface
        surface.press_began.emit(QPointF(50, 50))
        surface.press_moved.emit(QPointF(50, 250))
        surface.press_ended.emit(QPointF(50, 250))

        assert abc.delegate.move_calls == [(0, 2)]
        assert len(abc.delegate.did_drag_calls) == 1
        assert not abc.move_manager.is_dragging


class TestAutoscroll:
    def test_velocity_near_bottom_edge(self, tall):
        velocity = tall.move_manager.autoscroll_velocity_for(QPointF(50, 290))
        assert velocity == QPointF(0, (290 - 220) * 20)

    def test_no_velocity_at_limit(self, tall):
        assert tall.move_manager.autoscroll_velocity_for(QPointF(50, 10)).isNull()

    def test_velocity_near_top_edge(self, tall):
        tall.surface.set_content_offset(QPointF(0, 100))
        velocity = tall.move_manager.autoscroll_velocity_for(QPointF(50, 10))
        assert velocity == QPointF(0, -(80 - 10) * 20)

    def test_no_horizontal_scroll_when_content_fits(self, tall):
        assert tall.move_manager.autoscroll_velocity_for(QPointF(295, 150)).isNull()

    def test_center_has_no_velocity(self, tall):
        assert tall.move_manager.autoscroll_velocity_for(QPointF(150, 150)).isNull()

    def test_drag_near_edge_autoscrolls_without_reordering(self, tall):
        manager = tall.move_manager
        manager.begin(QPointF(50, 50))
        manager.drag_to(QPointF(50, 290))

        kind, velocity, damping = tall.surface.decay_calls[-1]
        assert kind == "decay_to"
        assert velocity == QPointF(0, 1400)
        assert damping == 0.0
        assert manager.autoscroll_velocity == QPointF(0, 1400)
        assert tall.delegate.move_calls == []

    def test_end_stops_autoscroll(self, tall):
        manager = tall.move_manager
        manager.begin(QPointF(50, 50))
        manager.drag_to(QPointF(50, 290))
        manager.end()

        assert tall.surface.decay_calls[-1][0] == "decay"
        assert manager.autoscroll_velocity.isNull()
