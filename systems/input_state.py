"""
Input State
===========
Current keyboard and pointer state, mutated by event notifications and
read once per frame.
"""

from typing import Optional, Set, Tuple


class InputStateTracker:
    """
    Pressed-key flags plus pointer drag status.

    Key names are normalised to lowercase, so "W" and "w" are the same key.
    Pressing a held key again, or releasing a key that is not held, has no
    effect. Pointer motion accumulates while dragging and is cleared by
    ``consume_pointer_delta``.
    """

    def __init__(self):
        self._pressed: Set[str] = set()
        self._dragging = False
        self.last_pointer: Optional[Tuple[float, float]] = None
        self._delta_x = 0.0
        self._delta_y = 0.0

    @staticmethod
    def normalize(name: str) -> str:
        return name.lower()

    # ---- keyboard ----

    def set_key(self, name: str, pressed: bool):
        key = self.normalize(name)
        if pressed:
            self._pressed.add(key)
        else:
            self._pressed.discard(key)

    def is_pressed(self, name: str) -> bool:
        return self.normalize(name) in self._pressed

    def any_pressed(self, *names: str) -> bool:
        return any(self.is_pressed(n) for n in names)

    @property
    def pressed_keys(self) -> Set[str]:
        return set(self._pressed)

    def release_all_keys(self):
        """Drop every held key (window focus lost)."""
        self._pressed.clear()

    # ---- pointer ----

    def set_dragging(self, dragging: bool, position: Optional[Tuple[float, float]] = None):
        self._dragging = dragging
        if position is not None:
            self.last_pointer = position
        if not dragging:
            self._delta_x = 0.0
            self._delta_y = 0.0

    def is_dragging(self) -> bool:
        return self._dragging

    def move_pointer(self, x: float, y: float) -> Tuple[float, float]:
        """
        Record a pointer move and return its displacement since the last one.

        Displacement only accumulates while dragging.
        """
        if self.last_pointer is None:
            self.last_pointer = (x, y)
            return 0.0, 0.0

        dx = x - self.last_pointer[0]
        dy = y - self.last_pointer[1]
        self.last_pointer = (x, y)
        if not self._dragging:
            return 0.0, 0.0

        self._delta_x += dx
        self._delta_y += dy
        return dx, dy

    def consume_pointer_delta(self) -> Tuple[float, float]:
        """Return accumulated drag displacement and clear it."""
        delta = (self._delta_x, self._delta_y)
        self._delta_x = 0.0
        self._delta_y = 0.0
        return delta
