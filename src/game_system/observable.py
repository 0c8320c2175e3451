"""
Observable value holder - the read surface for presenters
"""

from typing import Callable, Generic, List, Optional, TypeVar

T = TypeVar("T")

Observer = Callable[[T], None]


class StateStream(Generic[T]):
    """
    Holds the current value and notifies subscribers on every change.

    The current value is readable synchronously. Setting an equal value
    does not notify. An observer that raises is logged and skipped; it
    never breaks the caller that changed the value.
    """

    def __init__(self, initial: T, logger=None):
        self._value: T = initial
        self._observers: List[Observer] = []
        self._logger = logger

    @property
    def value(self) -> T:
        return self._value

    def set(self, new_value: T) -> bool:
        """
        Replace the value.

        Returns:
            True if the value changed and observers were notified
        """
        if new_value == self._value:
            return False
        self._value = new_value
        for observer in list(self._observers):
            self._notify(observer, new_value)
        return True

    def subscribe(self, observer: Observer, replay: bool = True) -> Callable[[], None]:
        """
        Register an observer.

        Args:
            observer: Called with each new value
            replay: Immediately call observer with the current value

        Returns:
            Function that removes the observer again
        """
        self._observers.append(observer)
        if replay:
            self._notify(observer, self._value)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def _notify(self, observer: Observer, value: T) -> None:
        try:
            observer(value)
        except Exception as e:
            if self._logger:
                self._logger.error(f"State observer {getattr(observer, '__name__', observer)} failed: {e}", exception=e)
