import weakref
from typing import Callable, List, Union

from loguru import logger


_Ref = Union[weakref.WeakMethod, Callable]


class ObserverEvent:
    """
    Plain observer list for non-Qt subscribers (config changes).

    Bound methods are held weakly, so a widget listening to config changes
    does not outlive its window. Plain functions and lambdas are held strongly.
    connect() returns the callback and can be used as a decorator.
    """

    def __init__(self, name: str):
        self.name = name
        self._refs: List[_Ref] = []

    @staticmethod
    def _ref(callback: Callable) -> _Ref:
        if hasattr(callback, "__self__") and hasattr(callback, "__func__"):
            return weakref.WeakMethod(callback)
        return callback

    @staticmethod
    def _resolve(ref: _Ref):
        if isinstance(ref, weakref.WeakMethod):
            return ref()
        return ref

    def _live(self) -> List[Callable]:
        callbacks = []
        alive = []
        for ref in self._refs:
            callback = self._resolve(ref)
            if callback is not None:
                callbacks.append(callback)
                alive.append(ref)
        self._refs = alive
        return callbacks

    def connect(self, callback: Callable) -> Callable:
        if callback not in self._live():
            self._refs.append(self._ref(callback))
        return callback

    def disconnect(self, callback: Callable):
        self._refs = [ref for ref in self._refs if self._resolve(ref) != callback]

    @property
    def subscriber_count(self) -> int:
        return len(self._live())

    def emit(self, *args, **kwargs):
        for sub in self._live():
            try:
                sub(*args, **kwargs)
            except Exception as e:
                logger.error(f"Event '{self.name}' error in subscriber '{sub}': {e}")
