"""Multi-producer, single-consumer message channel for threads.

Senders can be cloned and handed to separate threads. The single receiver
blocks until a message arrives, a timeout expires, or every sender has been
closed with nothing left in the queue.

Usage:
    tx, rx = open_channel()
    tx2 = tx.clone()

    threading.Thread(target=producer, args=(tx,)).start()
    threading.Thread(target=producer, args=(tx2,)).start()

    message = rx.receive(timeout=5.0)
"""
from __future__ import annotations

import threading
import time
from collections import deque
from typing import Any, Generic, Optional, TypeVar

from .errors import ChannelClosed, ChannelDisconnected, ReceiveTimeout

T = TypeVar("T")


class _ChannelState(Generic[T]):
    """Shared state behind one sender/receiver family."""

    def __init__(self) -> None:
        self.items: deque[T] = deque()
        self.cond = threading.Condition()
        self.senders = 0
        self.receiver_open = True


class Sender(Generic[T]):
    """Producer handle. Safe to use from any thread."""

    def __init__(self, state: _ChannelState[T]):
        self._state = state
        self._closed = False
        with state.cond:
            state.senders += 1

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, item: T) -> None:
        """Enqueue an item without blocking.

        Raises:
            ChannelClosed: If this handle or the receiver has been closed.
        """
        state = self._state
        with state.cond:
            if self._closed:
                raise ChannelClosed("sender is closed")
            if not state.receiver_open:
                raise ChannelClosed("channel receiver is closed")
            state.items.append(item)
            state.cond.notify()

    def clone(self) -> "Sender[T]":
        """Create another producer handle on the same channel."""
        if self._closed:
            raise ChannelClosed("cannot clone a closed sender")
        return Sender(self._state)

    def close(self) -> None:
        """Drop this handle. Closing twice is a no-op."""
        state = self._state
        with state.cond:
            if self._closed:
                return
            self._closed = True
            state.senders -= 1
            if state.senders == 0:
                # Wake the receiver so it can report disconnection
                state.cond.notify_all()

    def __enter__(self) -> "Sender[T]":
        return self

    def __exit__(self, *args) -> None:
        self.close()


class Receiver(Generic[T]):
    """Consumer handle. Only one exists per channel."""

    def __init__(self, state: _ChannelState[T]):
        self._state = state

    @property
    def closed(self) -> bool:
        return not self._state.receiver_open

    @property
    def connected(self) -> bool:
        """True while at least one sender is open."""
        with self._state.cond:
            return self._state.senders > 0

    def receive(self, timeout: Optional[float] = None) -> T:
        """Block until an item is available.

        Args:
            timeout: Maximum seconds to wait, or None to wait forever.

        Returns:
            The oldest queued item.

        Raises:
            ReceiveTimeout: If nothing arrived within ``timeout``.
            ChannelDisconnected: If all senders are closed and the queue is empty.
        """
        state = self._state
        deadline = None if timeout is None else time.monotonic() + timeout
        with state.cond:
            while True:
                if state.items:
                    return state.items.popleft()
                if state.senders == 0:
                    raise ChannelDisconnected("all senders have been closed")
                if deadline is None:
                    state.cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise ReceiveTimeout(timeout)
                state.cond.wait(remaining)

    def try_receive(self) -> Optional[T]:
        """Return the oldest item, or None if the queue is empty."""
        with self._state.cond:
            if self._state.items:
                return self._state.items.popleft()
            return None

    def drain(self) -> list[T]:
        """Remove and return everything currently queued."""
        with self._state.cond:
            items = list(self._state.items)
            self._state.items.clear()
            return items

    def close(self) -> list[T]:
        """Drop the receiver and return whatever was still queued.

        Later sends fail with ChannelClosed.
        """
        with self._state.cond:
            self._state.receiver_open = False
            items = list(self._state.items)
            self._state.items.clear()
            return items

    def __len__(self) -> int:
        with self._state.cond:
            return len(self._state.items)


def open_channel() -> tuple[Sender[Any], Receiver[Any]]:
    """Create a new channel and return its first sender and its receiver."""
    state: _ChannelState[Any] = _ChannelState()
    return Sender(state), Receiver(state)
