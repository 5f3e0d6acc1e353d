"""Subscription registry for runtime messages emitted by agents.

Agents report display updates, errors and single-character input events keyed
by agent id. A `MessageRegistry` keeps the latest value per (agent, key) and
pushes changes to subscribers. Pass the registry to whatever needs it; there is
no module-level instance.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, List, Mapping, Tuple

from .visual.models import DisplayMessage, ErrorMessage, InputMessage

logger = logging.getLogger(__name__)

EVENT_DISPLAY = "askit:display"
EVENT_ERROR = "askit:error"
EVENT_INPUT = "askit:input"

Callback = Callable[[Any], None]


class Subscription:
    """Handle returned by `subscribe_*`; call `cancel()` to stop receiving values."""

    def __init__(self, registry: "MessageRegistry", slot: Tuple[str, str, str], callback: Callback):
        self._registry = registry
        self._slot = slot
        self._callback = callback
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self._registry._remove(self._slot, self._callback)


class _Slot:
    __slots__ = ("value", "callbacks")

    def __init__(self, value: Any):
        self.value = value
        self.callbacks: List[Callback] = []


class MessageRegistry:
    def __init__(self) -> None:
        self._slots: Dict[Tuple[str, str, str], _Slot] = {}
        self._lock = threading.Lock()

    # subscribe

    def _subscribe(self, slot_key: Tuple[str, str, str], initial: Any, callback: Callback) -> Subscription:
        with self._lock:
            slot = self._slots.get(slot_key)
            if slot is None:
                slot = _Slot(initial)
                self._slots[slot_key] = slot
            slot.callbacks.append(callback)
            current = slot.value
        self._call(callback, current)
        return Subscription(self, slot_key, callback)

    def subscribe_display(self, agent_id: str, key: str, callback: Callback) -> Subscription:
        return self._subscribe(("display", agent_id, key), None, callback)

    def subscribe_error(self, agent_id: str, callback: Callback) -> Subscription:
        return self._subscribe(("error", agent_id, ""), "", callback)

    def subscribe_input(self, agent_id: str, callback: Callback) -> Subscription:
        return self._subscribe(("input", agent_id, ""), {"ch": "", "t": 0}, callback)

    def _remove(self, slot_key: Tuple[str, str, str], callback: Callback) -> None:
        with self._lock:
            slot = self._slots.get(slot_key)
            if slot is not None and callback in slot.callbacks:
                slot.callbacks.remove(callback)

    # publish

    def _publish(self, slot_key: Tuple[str, str, str], value: Any) -> bool:
        with self._lock:
            slot = self._slots.get(slot_key)
            if slot is None:
                return False
            slot.value = value
            callbacks = list(slot.callbacks)
        for callback in callbacks:
            self._call(callback, value)
        return True

    def publish_display(self, agent_id: str, key: str, data: Any) -> bool:
        return self._publish(("display", agent_id, key), data)

    def publish_error(self, agent_id: str, message: str) -> bool:
        return self._publish(("error", agent_id, ""), message)

    def publish_input(self, agent_id: str, ch: str) -> bool:
        return self._publish(("input", agent_id, ""), {"ch": ch, "t": int(time.time() * 1000)})

    def current(self, kind: str, agent_id: str, key: str = "") -> Any:
        with self._lock:
            slot = self._slots.get((kind, agent_id, key))
            return slot.value if slot is not None else None

    def dispatch(self, event: str, payload: Mapping[str, Any]) -> bool:
        """Route a raw host event (`askit:display`, `askit:error`, `askit:input`)."""
        if event == EVENT_DISPLAY:
            msg = DisplayMessage.model_validate(payload)
            return self.publish_display(msg.agent_id, msg.key, msg.data)
        if event == EVENT_ERROR:
            err = ErrorMessage.model_validate(payload)
            return self.publish_error(err.agent_id, err.message)
        if event == EVENT_INPUT:
            inp = InputMessage.model_validate(payload)
            return self.publish_input(inp.agent_id, inp.ch)
        logger.debug("Ignoring unknown event '%s'", event)
        return False

    @staticmethod
    def _call(callback: Callback, value: Any) -> None:
        try:
            callback(value)
        except Exception:
            logger.exception("Message subscriber failed")
