import time
import bisect
import inspect
import weakref
import threading

from core import logger
from threading import Timer


class _StrongRef:
    """Stands in for a weakref when the slot cannot be weakly referenced"""
    def __init__(self, slot):
        self._slot = slot

    def __call__(self):
        return self._slot


class DefaultEvent:
    def __init__(self):
        self._slots = []
        self._lock = threading.RLock()

    def connect(self, slot, priority=0):
        """
        Connect slots with priority with higher being executed earlier
        :param slot:
        :param priority:
        :return:
        """
        with self._lock:
            if inspect.ismethod(slot):
                ref = weakref.WeakMethod(slot, self._on_dead_reference)
            elif inspect.isbuiltin(slot) and not inspect.ismodule(slot.__self__):
                # bound builtins such as list.append are created per access
                ref = _StrongRef(slot)
            else:
                try:
                    ref = weakref.ref(slot, self._on_dead_reference)
                except TypeError:
                    ref = _StrongRef(slot)

            entry = (-priority, ref)
            bisect.insort(self._slots, entry, key=lambda x: x[0])

    def disconnect(self, slot):
        with self._lock:
            self._slots = [s for s in self._slots if s[1]() != slot]

    def _on_dead_reference(self, ref):
        # clean all matching dead refs
        with self._lock:
            self._slots = [s for s in self._slots if s[1] is not ref]

    def emit(self, *args, **kwargs):
        with self._lock:
            current_slots = []
            for _, ref in self._slots:
                slot = ref()
                if slot is not None:
                    current_slots.append(slot)

        for slot in current_slots:
            try:
                slot(*args, **kwargs)
            except Exception as e:
                logger.warning(f"Priority Slot Error: {e}")

    def __len__(self):
        with self._lock:
            return len([s for s in self._slots if s[1]() is not None])


class ThrottledDefaultEvent(DefaultEvent):

    def __init__(self, interval_sec=0.1):
        super().__init__()
        self.interval_sec = interval_sec
        self.last_emit_time = 0
        self._trailing_timer = None

    def emit(self, *args, **kwargs):
        with self._lock:
            now = time.monotonic()
            elapsed = now - self.last_emit_time

            if self._trailing_timer:
                self._trailing_timer.cancel()
                self._trailing_timer = None

            if elapsed >= self.interval_sec:
                self.last_emit_time = now
                emit_now = True
            else:
                emit_now = False
                self._trailing_timer = Timer(
                    self.interval_sec - elapsed,
                    self._perform_emit,
                    args=args, kwargs=kwargs
                )
                self._trailing_timer.daemon = True
                self._trailing_timer.start()

        if emit_now:
            self._perform_emit(*args, **kwargs)

    def _perform_emit(self, *args, **kwargs):
        super().emit(*args, **kwargs)


class Event(ThrottledDefaultEvent):
    def __init__(self, *arg_types, interval_sec=0.1):
        super().__init__(interval_sec=interval_sec)
        self._arg_types = arg_types

    def _validate_types(self, args):
        """
        Checks if provided args match the defined schema
        :param args:
        :return:
        """
        if len(args) != len(self._arg_types):
            raise TypeError(
                f"Signal expected {len(self._arg_types)} arguments, got {len(args)}"
            )

        for i, (val, expected_type) in enumerate(zip(args, self._arg_types)):
            if not isinstance(val, expected_type):
                raise TypeError(
                    f"Argument {i} expected {expected_type.__name__}, got {type(val).__name__}"
                )

    def emit(self, *args, **kwargs):
        self._validate_types(args)
        super().emit(*args, **kwargs)
