"""Single-slot rendezvous between an issuing thread and a completion callback."""

import threading
from contextlib import contextmanager
from typing import Optional

from asyncsocket.errors import OperationInProgressError
from asyncsocket.events import SocketEvent


class CompletionGate:
    """
    Binary gate carrying one completion result.

    The gate starts open. The issuing thread closes it before starting an
    operation and then waits; the completion callback deposits its result and
    reopens it. The operation stays in flight until the issuing thread has
    taken the result, so no other operation can be issued in between.

    A public call that chains several operations holds the gate for its whole
    duration with ``hold()``; other threads are refused until it returns.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._opened = threading.Event()
        self._opened.set()
        self._result: Optional[SocketEvent] = None
        self._in_flight = False
        self._owner: Optional[int] = None
        self._depth = 0
        self._cycles = 0

    @property
    def is_open(self) -> bool:
        return self._opened.is_set()

    @property
    def is_held(self) -> bool:
        return self._owner is not None

    @property
    def cycles(self) -> int:
        """Number of completed close/open cycles."""
        return self._cycles

    def _check_owner(self, caller: int) -> None:
        if self._owner is not None and self._owner != caller:
            raise OperationInProgressError("Another call holds the gate")

    @contextmanager
    def hold(self):
        """
        Own the gate for the duration of the block. Reentrant for the owner.

        Raises:
            OperationInProgressError: If another thread holds the gate
        """
        caller = threading.get_ident()
        with self._lock:
            self._check_owner(caller)
            self._owner = caller
            self._depth += 1
        try:
            yield self
        finally:
            with self._lock:
                self._depth -= 1
                if self._depth == 0:
                    self._owner = None

    def close(self) -> None:
        """
        Close the gate before issuing an operation.

        Raises:
            OperationInProgressError: If an operation is in flight or its
                                     result has not been taken yet, or if
                                     another thread holds the gate
        """
        with self._lock:
            self._check_owner(threading.get_ident())
            if self._in_flight:
                raise OperationInProgressError("Another operation is in flight")
            self._in_flight = True
            self._result = None
            self._opened.clear()

    def open(self, result: SocketEvent) -> None:
        """Deposit a completion result and reopen the gate. Called by the transport."""
        with self._lock:
            if not self._in_flight or self._opened.is_set():
                raise OperationInProgressError("Gate opened without a pending operation")
            self._result = result
            self._cycles += 1
            self._opened.set()

    def wait(self) -> SocketEvent:
        """Block until the gate is reopened and take the deposited result."""
        self._opened.wait()
        with self._lock:
            result, self._result = self._result, None
            self._in_flight = False
        return result

    def abandon(self) -> None:
        """Reopen the gate after an operation could not be issued at all."""
        with self._lock:
            self._result = None
            self._in_flight = False
            self._opened.set()
