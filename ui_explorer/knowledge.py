from __future__ import annotations

"""Data structures shared by the exploration engine.

A `UIState` is one observed snapshot of the application: an ordered set of
`UIElement`s whose parent/child hierarchy is kept in a networkx graph. The
`ExplorationContext` is the campaign-wide registry through which selectors
share watchers such as the probability model and the `ActionCounter`.
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

import networkx as nx

logger = logging.getLogger(__name__)


class ActionType(str, Enum):
    """Supported interaction primitives."""

    CLICK = "click"
    LONG_CLICK = "long_click"
    SCROLL = "scroll"
    INPUT = "input"


@dataclass(frozen=True)
class UIElement:
    """A single interactive unit of a UI state (e.g. a button)."""

    element_id: str
    type_label: str
    parent_id: Optional[str] = None
    clickable: bool = False
    long_clickable: bool = False
    checkable: bool = False
    editable: bool = False
    scrollable: bool = False
    enabled: bool = True
    visible: bool = True

    @property
    def actionable(self) -> bool:
        if not (self.enabled and self.visible):
            return False
        return (
            self.clickable
            or self.long_clickable
            or self.checkable
            or self.editable
            or self.scrollable
        )

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "UIElement":
        parent = data.get("parent_id")
        return cls(
            element_id=str(data["id"]),
            type_label=str(data.get("type") or data.get("class_name") or ""),
            parent_id=str(parent) if parent is not None else None,
            clickable=bool(data.get("clickable", False)),
            long_clickable=bool(data.get("long_clickable", False)),
            checkable=bool(data.get("checkable", False)),
            editable=bool(data.get("editable", False)),
            scrollable=bool(data.get("scrollable", False)),
            enabled=bool(data.get("enabled", True)),
            visible=bool(data.get("visible", True)),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "id": self.element_id,
            "type": self.type_label,
            "parent_id": self.parent_id,
            "clickable": self.clickable,
            "long_clickable": self.long_clickable,
            "checkable": self.checkable,
            "editable": self.editable,
            "scrollable": self.scrollable,
            "enabled": self.enabled,
            "visible": self.visible,
        }


class UIState:
    """An observed snapshot: elements in observation order plus their hierarchy.

    The hierarchy is a `nx.DiGraph` with an edge parent -> child for every
    element whose parent is part of the same state. Each node stores the
    element object and its position in the snapshot.
    """

    def __init__(self, elements: Iterable[UIElement], state_id: str = "") -> None:
        self.state_id = state_id
        self._g: nx.DiGraph = nx.DiGraph()
        self._elements: Dict[str, UIElement] = {}
        for position, elem in enumerate(elements):
            if elem.element_id in self._elements:
                raise ValueError(f"Duplicate element id in state: {elem.element_id}")
            self._elements[elem.element_id] = elem
            self._g.add_node(elem.element_id, obj=elem, position=position)
        for elem in self._elements.values():
            if elem.parent_id is not None and elem.parent_id in self._g:
                self._g.add_edge(elem.parent_id, elem.element_id)

    # --- accessors --------------------------------------------------------
    @property
    def elements(self) -> List[UIElement]:
        return list(self._elements.values())

    @property
    def actionable_elements(self) -> List[UIElement]:
        return [e for e in self._elements.values() if e.actionable]

    def get(self, element_id: str) -> Optional[UIElement]:
        return self._elements.get(element_id)

    def parent_of(self, element: UIElement) -> Optional[UIElement]:
        """Return the parent element, or None if it has none in this state."""
        if element.parent_id is None:
            return None
        return self._elements.get(element.parent_id)

    def children_of(self, element_id: str) -> List[UIElement]:
        """Return the direct children of `element_id`, ordered by position."""
        if element_id not in self._g:
            return []
        child_ids = sorted(
            self._g.successors(element_id), key=lambda n: self._g.nodes[n]["position"]
        )
        return [self._g.nodes[n]["obj"] for n in child_ids]

    def to_networkx(self) -> nx.DiGraph:
        return self._g

    def __len__(self) -> int:
        return len(self._elements)

    def __contains__(self, element_id: object) -> bool:
        return element_id in self._elements

    def __repr__(self) -> str:
        return f"UIState(state_id={self.state_id!r}, elements={len(self)})"

    # --- persistence ------------------------------------------------------
    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "UIState":
        return cls(
            (UIElement.from_json(e) for e in data.get("elements", [])),
            state_id=str(data.get("state_id", "")),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "state_id": self.state_id,
            "elements": [e.to_json() for e in self._elements.values()],
        }


def load_state(path: str | Path) -> UIState:
    """Read a UI state snapshot from a JSON file."""
    with open(path, "r", encoding="utf-8") as fh:
        return UIState.from_json(json.load(fh))


INPUT_PLACEHOLDER_TEXT = "sample text"


@dataclass(frozen=True)
class ExplorationAction:
    """What the driver should do next: an interaction type and its target."""

    action_type: ActionType
    target: UIElement
    text: str = ""

    @classmethod
    def for_element(cls, element: UIElement) -> "ExplorationAction":
        """Derive the interaction implied by the element's capabilities."""
        if element.editable:
            return cls(ActionType.INPUT, element, text=INPUT_PLACEHOLDER_TEXT)
        if element.clickable or element.checkable:
            return cls(ActionType.CLICK, element)
        if element.long_clickable:
            return cls(ActionType.LONG_CLICK, element)
        if element.scrollable:
            return cls(ActionType.SCROLL, element)
        return cls(ActionType.CLICK, element)


class Watcher:
    """Something registered on the `ExplorationContext` that follows the run.

    `kind` is the stable key under which the registry stores the watcher.
    """

    kind: str = ""

    def on_new_interaction(
        self, action: Optional[ExplorationAction], new_state: UIState
    ) -> None:
        pass


class ActionCounter(Watcher):
    """Tracks how many times each element has been the target of an action."""

    kind = "action_counter"

    def __init__(self, counts: Optional[Mapping[str, int]] = None) -> None:
        self._counts: Dict[str, int] = dict(counts or {})

    def count(self, element_id: str) -> int:
        return self._counts.get(element_id, 0)

    def record(self, action: ExplorationAction) -> None:
        eid = action.target.element_id
        self._counts[eid] = self._counts.get(eid, 0) + 1

    def on_new_interaction(
        self, action: Optional[ExplorationAction], new_state: UIState
    ) -> None:
        if action is not None:
            self.record(action)


class ExplorationContext:
    """Campaign-wide registry of watchers, keyed by their `kind`."""

    def __init__(self) -> None:
        self._watchers: Dict[str, Watcher] = {}
        self.last_target: Optional[UIElement] = None

    def find_watcher(self, predicate: Callable[[Watcher], bool]) -> Optional[Watcher]:
        for w in self._watchers.values():
            if predicate(w):
                return w
        return None

    def get_watcher(self, kind: str) -> Optional[Watcher]:
        return self._watchers.get(kind)

    def add_watcher(self, watcher: Watcher) -> Watcher:
        """Register `watcher`; an already registered watcher of the same kind wins."""
        if not watcher.kind:
            raise ValueError(f"Watcher {watcher!r} has no kind")
        existing = self._watchers.get(watcher.kind)
        if existing is not None:
            if existing != watcher:
                logger.debug("Watcher of kind %s already registered, keeping it", watcher.kind)
            return existing
        self._watchers[watcher.kind] = watcher
        return watcher

    def get_or_create_watcher(self, kind: str, factory: Callable[[], Watcher]) -> Watcher:
        existing = self._watchers.get(kind)
        if existing is not None:
            return existing
        watcher = factory()
        if watcher.kind != kind:
            raise ValueError(f"Factory for {kind!r} produced a watcher of kind {watcher.kind!r}")
        self._watchers[kind] = watcher
        return watcher

    @property
    def watchers(self) -> List[Watcher]:
        return list(self._watchers.values())

    def notify_interaction(
        self, action: Optional[ExplorationAction], new_state: UIState
    ) -> None:
        """Forward a completed interaction (or the initial observation) to all watchers."""
        if action is not None:
            self.last_target = action.target
        for w in self._watchers.values():
            w.on_new_interaction(action, new_state)
