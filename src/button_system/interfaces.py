"""
Abstract interfaces for button input
"""

from abc import ABC, abstractmethod

from .button_state import ButtonState


class IButtonSampler(ABC):
    """
    Reads the raw state of single buttons.

    Implementations: GPIOSampler (Raspberry Pi pins), KeyboardSampler
    (terminal keys), or any fake used in tests.
    """

    @abstractmethod
    def read_button(self, button_index: int) -> bool:
        """
        Args:
            button_index: Button number (0-based)

        Returns:
            True if the button is currently held down
        """
        pass

    @abstractmethod
    def get_button_count(self) -> int:
        pass

    @abstractmethod
    def setup(self) -> None:
        """Acquire hardware/terminal resources"""
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """Release hardware/terminal resources"""
        pass


class IButtonReader(ABC):
    """Produces one ButtonState per frame"""

    @abstractmethod
    def read_buttons(self) -> ButtonState:
        """
        Read all buttons once.

        Returns:
            ButtonState with edges relative to the previous call
        """
        pass

    @abstractmethod
    def get_button_count(self) -> int:
        pass

    @abstractmethod
    def cleanup(self) -> None:
        """Release the underlying sampler; call before program exit"""
        pass
