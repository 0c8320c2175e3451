"""
ButtonState - one frame's button snapshot with edge detection
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class ButtonState:
    """
    Snapshot of all buttons for one frame, compared with the previous frame.

    Usage:
        state = ButtonState([True, False], [False, False])
        state.pressed_buttons()    # [0]  - rising edges
        state.released_buttons()   # []   - falling edges
    """
    for_button: List[bool]           # Current state: [button0, button1, ...]
    previous_state_of: List[bool]    # Previous frame: [button0_prev, button1_prev, ...]

    # Calculated in __post_init__
    was_changed: List[bool] = field(init=False)
    total_buttons_pressed: int = field(init=False)
    any_changed: bool = field(init=False)

    def __post_init__(self):
        if not isinstance(self.for_button, list):
            raise TypeError("for_button must be a list of bool")
        if not isinstance(self.previous_state_of, list):
            raise TypeError("previous_state_of must be a list of bool")
        if len(self.for_button) != len(self.previous_state_of):
            raise ValueError(
                f"State lists must have same length: "
                f"for_button={len(self.for_button)}, previous_state_of={len(self.previous_state_of)}"
            )
        if not all(isinstance(x, bool) for x in self.for_button + self.previous_state_of):
            raise TypeError("Button states must be bool")

        self.was_changed = [prev != cur for prev, cur in zip(self.previous_state_of, self.for_button)]
        self.total_buttons_pressed = sum(self.for_button)
        self.any_changed = any(self.was_changed)

    def get_button_count(self) -> int:
        return len(self.for_button)

    def pressed_buttons(self) -> List[int]:
        """Indices that went down this frame"""
        return [i for i, changed in enumerate(self.was_changed) if changed and self.for_button[i]]

    def released_buttons(self) -> List[int]:
        """Indices that went up this frame"""
        return [i for i, changed in enumerate(self.was_changed) if changed and not self.for_button[i]]

    def __str__(self) -> str:
        pressed = [i for i, is_pressed in enumerate(self.for_button) if is_pressed]
        changed = [i for i, is_changed in enumerate(self.was_changed) if is_changed]
        return f"ButtonState(pressed={pressed}, changed={changed}, total_pressed={self.total_buttons_pressed})"
