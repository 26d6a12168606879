# signals.py
from typing import Callable, List, Optional, Tuple, Iterator
import logging

from waveforms import SignalDescriptor

logger = logging.getLogger(__name__)


class SignalCollection:
    """Ordered, mutable set of signal descriptors.

    Every successful mutation notifies subscribers synchronously, in the
    order they subscribed. Buffers are never stored here.
    """

    def __init__(self, descriptors=None):
        self._descriptors: List[SignalDescriptor] = list(descriptors or [])
        self._subscribers: List[Callable[['SignalCollection'], None]] = []

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self) -> Iterator[SignalDescriptor]:
        return iter(tuple(self._descriptors))

    def __getitem__(self, index: int) -> SignalDescriptor:
        return self._descriptors[index]

    def descriptors(self) -> Tuple[SignalDescriptor, ...]:
        """Snapshot of the current descriptors in insertion order"""
        return tuple(self._descriptors)

    def subscribe(self, callback: Callable[['SignalCollection'], None]) -> Callable[[], None]:
        """Register a change callback and return a function that removes it"""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def add(self, descriptor: Optional[SignalDescriptor] = None) -> int:
        """Append a descriptor and return its index"""
        self._descriptors.append(descriptor if descriptor is not None else SignalDescriptor())
        index = len(self._descriptors) - 1
        logger.debug(f"SignalCollection add - signals: {len(self._descriptors)}")
        self._notify()
        return index

    def remove(self, index: int) -> SignalDescriptor:
        """Remove the descriptor at the specified index"""
        self._check_index(index)
        removed = self._descriptors.pop(index)
        logger.debug(f"SignalCollection remove - signals: {len(self._descriptors)}")
        self._notify()
        return removed

    def update(self, index: int, **changes) -> SignalDescriptor:
        """Update fields of the descriptor at the specified index"""
        self._check_index(index)
        updated = self._descriptors[index].replace(**changes)
        self._descriptors[index] = updated
        logger.debug(f"SignalCollection update - index {index}: {updated}")
        self._notify()
        return updated

    def replace(self, index: int, descriptor: SignalDescriptor):
        self._check_index(index)
        self._descriptors[index] = descriptor
        self._notify()

    def clear(self):
        self._descriptors.clear()
        self._notify()

    def _check_index(self, index: int):
        if not 0 <= index < len(self._descriptors):
            raise IndexError(f"Signal index {index} out of range for {len(self._descriptors)} signals")

    def _notify(self):
        for callback in list(self._subscribers):
            callback(self)
