"""A recorder wrapper that can be installed globally and recovered later."""

from __future__ import annotations

import threading
import weakref
from contextlib import contextmanager, nullcontext
from typing import Iterator, Optional

from metricutil.core import (
    Counter,
    Gauge,
    Histogram,
    Recorder,
    SetRecorderError,
    set_global_recorder,
)


class _Slot:
    """Holds the recorder and counts calls that are currently using it."""

    def __init__(self, recorder: Recorder) -> None:
        self.recorder: Optional[Recorder] = recorder
        self.cond = threading.Condition()
        self.active = 0

    @contextmanager
    def borrow(self) -> Iterator[Optional[Recorder]]:
        with self.cond:
            recorder = self.recorder
            if recorder is not None:
                self.active += 1
        try:
            yield recorder
        finally:
            if recorder is not None:
                with self.cond:
                    self.active -= 1
                    if self.active == 0:
                        self.cond.notify_all()


class _WeakRecorder(Recorder):
    """Forwards to the recorder while it is alive; does nothing afterwards."""

    def __init__(self, slot: _Slot) -> None:
        self._slot_ref = weakref.ref(slot)

    def _borrow(self):
        slot = self._slot_ref()
        if slot is None:
            return nullcontext(None)
        return slot.borrow()

    def describe_counter(self, key_name, unit, description):
        with self._borrow() as recorder:
            if recorder is not None:
                recorder.describe_counter(key_name, unit, description)

    def describe_gauge(self, key_name, unit, description):
        with self._borrow() as recorder:
            if recorder is not None:
                recorder.describe_gauge(key_name, unit, description)

    def describe_histogram(self, key_name, unit, description):
        with self._borrow() as recorder:
            if recorder is not None:
                recorder.describe_histogram(key_name, unit, description)

    def register_counter(self, key, metadata):
        with self._borrow() as recorder:
            if recorder is not None:
                return recorder.register_counter(key, metadata)
        return Counter.noop()

    def register_gauge(self, key, metadata):
        with self._borrow() as recorder:
            if recorder is not None:
                return recorder.register_gauge(key, metadata)
        return Gauge.noop()

    def register_histogram(self, key, metadata):
        with self._borrow() as recorder:
            if recorder is not None:
                return recorder.register_histogram(key, metadata)
        return Histogram.noop()


class RecoveryHandle:
    """Keeps a wrapped recorder alive and allows taking it back."""

    def __init__(self, slot: _Slot) -> None:
        self._slot: Optional[_Slot] = slot

    def into_inner(self) -> Recorder:
        """Waits for in-flight calls to finish, then returns the original recorder.

        After this, the installed wrapper ignores every call.
        """
        slot = self._slot
        if slot is None:
            raise RuntimeError("recorder has already been recovered")
        with slot.cond:
            slot.cond.wait_for(lambda: slot.active == 0)
            recorder = slot.recorder
            slot.recorder = None
        self._slot = None
        assert recorder is not None
        return recorder


class RecoverableRecorder:
    """Wraps a recorder so that only a weak reference to it is installed globally.

    Dropping the returned handle releases the recorder; the installed wrapper then
    turns every operation into a no-op.
    """

    def __init__(self, recorder: Recorder) -> None:
        self._slot: Optional[_Slot] = _Slot(recorder)

    def build(self) -> tuple[Recorder, RecoveryHandle]:
        """Returns the weakly-referencing wrapper and the handle that owns the recorder."""
        slot = self._slot
        if slot is None:
            raise RuntimeError("recoverable recorder has already been built")
        self._slot = None
        return _WeakRecorder(slot), RecoveryHandle(slot)

    def install(self) -> RecoveryHandle:
        """Installs the wrapper globally and returns the recovery handle.

        Raises SetRecorderError carrying the original recorder if a global recorder
        is already installed.
        """
        wrapped, handle = self.build()
        try:
            set_global_recorder(wrapped)
        except SetRecorderError:
            raise SetRecorderError(handle.into_inner()) from None
        return handle