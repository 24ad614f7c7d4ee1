from __future__ import annotations

import copy
from contextlib import contextmanager
from typing import Any, Iterator

from uireel.timeline.state import PresentationState


def _ms(seconds: float) -> float:
    return round(seconds * 1000.0, 3)


class TimelineRecorder:
    """Append-only log of timed presentation mutations.

    The clock only moves forward: every ``animate``/``wait`` outside a
    ``together()`` block suspends for its full duration before the next
    mutation is recorded. Inside the block all members start at the same
    instant and the clock advances by the longest one on exit.
    """

    def __init__(self) -> None:
        self.now_s = 0.0
        self.mutations: list[dict[str, Any]] = []
        self.state = PresentationState()
        self._group_end: float | None = None

    @property
    def at_ms(self) -> float:
        return _ms(self.now_s)

    def _emit(self, op: str, node_id: str, prop: str | None, value: Any, **extra: Any) -> dict[str, Any]:
        row: dict[str, Any] = {
            "seq": len(self.mutations),
            "op": op,
            "path": f"/nodes/{node_id}" if prop is None else f"/nodes/{node_id}/{prop}",
            "node": node_id,
            "prop": prop,
            "value": copy.deepcopy(value),
            "at_ms": self.at_ms,
            **extra,
        }
        self.mutations.append(row)
        return row

    def _advance(self, duration_s: float) -> None:
        if self._group_end is not None:
            self._group_end = max(self._group_end, self.now_s + duration_s)
        else:
            self.now_s += duration_s

    def create(self, node_id: str, kind: str, props: dict[str, Any], parent: str | None = None) -> None:
        self._emit("create", node_id, None, {"kind": kind, "parent": parent, "props": props})
        self.state.create(node_id, kind, props, parent)

    def remove(self, node_id: str) -> None:
        if not self.state.has(node_id):
            return
        self._emit("remove", node_id, None, None)
        self.state.remove(node_id)

    def set(self, node_id: str, prop: str, value: Any) -> None:
        self._emit("set", node_id, prop, value)
        self.state.set(node_id, prop, value)

    def animate(self, node_id: str, prop: str, value: Any, duration_s: float, easing: str = "linear") -> None:
        duration_s = max(0.0, float(duration_s))
        start = self.state.get(node_id, prop)
        self._emit(
            "animate",
            node_id,
            prop,
            value,
            duration_ms=_ms(duration_s),
            easing=easing,
        )
        self.mutations[-1]["from"] = copy.deepcopy(start)
        self.state.set(node_id, prop, value)
        self._advance(duration_s)

    def wait(self, duration_s: float) -> None:
        self._advance(max(0.0, float(duration_s)))

    @contextmanager
    def together(self) -> Iterator[None]:
        if self._group_end is not None:
            # nested groups join the enclosing one
            yield
            return
        self._group_end = self.now_s
        try:
            yield
        finally:
            end = self._group_end
            self._group_end = None
            self.now_s = max(self.now_s, end)

    def get(self, node_id: str, prop: str, default: Any = None) -> Any:
        return self.state.get(node_id, prop, default)


__all__ = ["TimelineRecorder"]
