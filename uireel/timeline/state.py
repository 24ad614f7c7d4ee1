from __future__ import annotations

import copy
from typing import Any, Iterator

from uireel.timeline.easing import get_easing, interpolate


class PresentationState:
    """Flat node table: ``node_id -> {"kind", "parent", **props}``."""

    def __init__(self) -> None:
        self.nodes: dict[str, dict[str, Any]] = {}

    def has(self, node_id: str) -> bool:
        return node_id in self.nodes

    def create(self, node_id: str, kind: str, props: dict[str, Any], parent: str | None = None) -> None:
        self.nodes[node_id] = {**copy.deepcopy(props), "kind": kind, "parent": parent}

    def remove(self, node_id: str) -> None:
        self.nodes.pop(node_id, None)
        for child_id in [key for key, row in self.nodes.items() if row.get("parent") == node_id]:
            self.remove(child_id)

    def get(self, node_id: str, prop: str, default: Any = None) -> Any:
        return self.nodes.get(node_id, {}).get(prop, default)

    def set(self, node_id: str, prop: str, value: Any) -> None:
        row = self.nodes.get(node_id)
        if row is None:
            raise KeyError(f"node '{node_id}' does not exist")
        row[prop] = copy.deepcopy(value)

    def snapshot(self) -> dict[str, dict[str, Any]]:
        return copy.deepcopy(self.nodes)

    def apply(self, mutation: dict[str, Any], at_ms: float | None = None) -> None:
        op = mutation["op"]
        node_id = mutation["node"]
        if op == "create":
            value = mutation.get("value") or {}
            self.create(node_id, str(value.get("kind", "node")), value.get("props") or {}, value.get("parent"))
            return
        if op == "remove":
            self.remove(node_id)
            return
        if node_id not in self.nodes:
            return
        if op == "set":
            self.set(node_id, mutation["prop"], mutation.get("value"))
            return
        if op == "animate":
            target = mutation.get("value")
            duration_ms = float(mutation.get("duration_ms", 0) or 0)
            if at_ms is None or duration_ms <= 0:
                self.set(node_id, mutation["prop"], target)
                return
            elapsed = float(at_ms) - float(mutation.get("at_ms", 0))
            if elapsed >= duration_ms:
                self.set(node_id, mutation["prop"], target)
                return
            progress = get_easing(mutation.get("easing"))(elapsed / duration_ms)
            self.set(node_id, mutation["prop"], interpolate(mutation.get("from"), target, progress))


def sample_frame(mutations: list[dict[str, Any]], at_ms: float) -> dict[str, dict[str, Any]]:
    """Presentation state at ``at_ms`` with in-flight animations interpolated."""
    state = PresentationState()
    for mutation in sorted(mutations, key=lambda row: int(row.get("seq", 0))):
        if float(mutation.get("at_ms", 0)) > at_ms:
            break
        state.apply(mutation, at_ms=at_ms)
    return state.nodes


def iter_frames(
    mutations: list[dict[str, Any]],
    duration_ms: float,
    fps: int = 60,
) -> Iterator[tuple[float, dict[str, dict[str, Any]]]]:
    step_ms = 1000.0 / max(1, int(fps))
    count = int(duration_ms // step_ms) + 1
    for idx in range(count):
        at_ms = round(idx * step_ms, 3)
        yield at_ms, sample_frame(mutations, at_ms)


__all__ = ["PresentationState", "iter_frames", "sample_frame"]
