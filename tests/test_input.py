# tests/test_input.py
# Unit tests for services/input_service.py: pointer/touch unification

import unittest

from maskstudio.models.mask_model import BoundingRect, DrawEvent, DrawEventKind
from maskstudio.services.input_service import (
    InputUnifier,
    PointerInput,
    PointerPhase,
    TouchInput,
    TouchPhase,
    TouchPoint,
)

RECT = BoundingRect(0, 0, 400, 200)
BACKING = (800, 400)


class TestPointerInput(unittest.TestCase):
    """Мышь: down/move/up/leave."""

    def setUp(self):
        self.unifier = InputUnifier()

    def translate(self, phase, x=0.0, y=0.0, rect=RECT):
        return self.unifier.translate(PointerInput(phase, x, y), rect, *BACKING)

    def test_stroke_sequence(self):
        start = self.translate(PointerPhase.DOWN, 10, 20)
        self.assertEqual(start.event, DrawEvent(DrawEventKind.START, 20.0, 40.0))
        self.assertTrue(start.suppress_default)

        move = self.translate(PointerPhase.MOVE, 30, 40)
        self.assertEqual(move.event, DrawEvent(DrawEventKind.MOVE, 60.0, 80.0))
        self.assertTrue(move.suppress_default)

        end = self.translate(PointerPhase.UP, 30, 40)
        self.assertEqual(end.event, DrawEvent(DrawEventKind.END, 60.0, 80.0))
        self.assertFalse(self.unifier.active)

    def test_hover_move_is_not_suppressed(self):
        result = self.translate(PointerPhase.MOVE, 5, 5)
        self.assertEqual(result.event.kind, DrawEventKind.MOVE)
        self.assertFalse(result.suppress_default)

    def test_up_without_stroke_is_ignored(self):
        result = self.translate(PointerPhase.UP, 5, 5)
        self.assertIsNone(result.event)
        self.assertFalse(result.suppress_default)

    def test_leave_ends_stroke(self):
        self.translate(PointerPhase.DOWN, 10, 10)
        result = self.translate(PointerPhase.LEAVE, 500, 500)
        self.assertEqual(result.event.kind, DrawEventKind.END)

    def test_down_without_geometry_is_skipped(self):
        result = self.translate(PointerPhase.DOWN, 10, 10, rect=BoundingRect(0, 0, 0, 0))
        self.assertIsNone(result.event)
        self.assertFalse(self.unifier.active)

    def test_unknown_source_rejected(self):
        with self.assertRaises(TypeError):
            self.unifier.translate(object(), RECT, *BACKING)


class TestTouchInput(unittest.TestCase):
    """Касания: отслеживается только первичный контакт."""

    def setUp(self):
        self.unifier = InputUnifier()

    def translate(self, phase, *touches):
        return self.unifier.translate(TouchInput(phase, tuple(touches)), RECT, *BACKING)

    def test_first_touch_wins(self):
        result = self.translate(TouchPhase.START, TouchPoint(7, 10, 10), TouchPoint(8, 100, 100))
        self.assertEqual(result.event, DrawEvent(DrawEventKind.START, 20.0, 20.0))
        self.assertTrue(result.suppress_default)

        moved = self.translate(TouchPhase.MOVE, TouchPoint(8, 150, 150), TouchPoint(7, 20, 10))
        self.assertEqual(moved.event, DrawEvent(DrawEventKind.MOVE, 40.0, 20.0))

    def test_secondary_contact_is_ignored(self):
        self.translate(TouchPhase.START, TouchPoint(1, 10, 10))
        extra = self.translate(TouchPhase.START, TouchPoint(1, 10, 10), TouchPoint(2, 50, 50))
        self.assertIsNone(extra.event)
        self.assertTrue(extra.suppress_default)

        only_secondary = self.translate(TouchPhase.MOVE, TouchPoint(2, 60, 60))
        self.assertIsNone(only_secondary.event)

    def test_lifting_secondary_does_not_end_stroke(self):
        self.translate(TouchPhase.START, TouchPoint(1, 10, 10))
        result = self.translate(TouchPhase.END, TouchPoint(1, 10, 10))
        self.assertIsNone(result.event)
        self.assertTrue(self.unifier.active)

    def test_lifting_primary_ends_stroke(self):
        self.translate(TouchPhase.START, TouchPoint(1, 10, 10))
        self.translate(TouchPhase.MOVE, TouchPoint(1, 30, 10))
        result = self.translate(TouchPhase.END)
        self.assertEqual(result.event, DrawEvent(DrawEventKind.END, 60.0, 20.0))
        self.assertFalse(self.unifier.active)

    def test_cancel_ends_stroke(self):
        self.translate(TouchPhase.START, TouchPoint(3, 10, 10))
        result = self.translate(TouchPhase.CANCEL)
        self.assertEqual(result.event.kind, DrawEventKind.END)

    def test_touch_moves_are_always_suppressed(self):
        result = self.translate(TouchPhase.MOVE, TouchPoint(1, 10, 10))
        self.assertIsNone(result.event)
        self.assertTrue(result.suppress_default)


if __name__ == "__main__":
    unittest.main()
