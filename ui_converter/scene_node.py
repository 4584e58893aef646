"""Scene tree produced by the converter (no engine types)."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

Vec3 = Tuple[float, float, float]


@dataclass
class Transform:
    """Local transform relative to the parent node."""

    position: Vec3 = (0.0, 0.0, 0.0)
    scale: Vec3 = (1.0, 1.0, 1.0)

    def set_planar_position(self, x: float, y: float) -> None:
        self.position = (x, y, self.position[2])

    def set_planar_scale(self, x: float, y: float) -> None:
        self.scale = (x, y, self.scale[2])

    def set_depth(self, z: float) -> None:
        self.position = (self.position[0], self.position[1], z)


@dataclass(eq=False)
class SceneNode:
    """One node of the converted scene; owns its children."""

    name: str
    kind: str
    transform: Transform = field(default_factory=Transform)
    template: Optional[str] = None
    visible: bool = True
    content: Dict[str, Any] = field(default_factory=dict)
    behaviors: List[Any] = field(default_factory=list)
    # Set when the local scale is the inverse of the inherited scale.
    cancels_inherited_scale: bool = field(default=False, repr=False)
    parent: Optional["SceneNode"] = field(default=None, repr=False)
    _children: List["SceneNode"] = field(default_factory=list, repr=False)

    @property
    def children(self) -> Tuple["SceneNode", ...]:
        return tuple(self._children)

    def add_child(self, child: "SceneNode") -> "SceneNode":
        """Attach ``child`` as the last child, detaching it from any previous parent."""

        if child is self:
            raise ValueError("A scene node cannot be its own child")
        if child.parent is not None:
            child.parent._children.remove(child)
        child.parent = self
        self._children.append(child)
        return child

    def detach(self) -> None:
        if self.parent is not None:
            self.parent._children.remove(self)
            self.parent = None

    def find(self, name: str) -> Optional["SceneNode"]:
        """Return the first direct child called ``name`` (slash-separated paths allowed)."""

        head, _, rest = name.partition("/")
        for child in self._children:
            if child.name == head:
                return child.find(rest) if rest else child
        return None

    def walk(self) -> Iterator["SceneNode"]:
        yield self
        for child in self._children:
            yield from child.walk()

    def ancestors(self) -> Iterator["SceneNode"]:
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "kind": self.kind,
            "position": [round(value, 6) for value in self.transform.position],
            "scale": [round(value, 6) for value in self.transform.scale],
            "visible": self.visible,
        }
        if self.template:
            payload["template"] = self.template
        if self.content:
            payload["content"] = _plain(self.content)
        if self.behaviors:
            payload["behaviors"] = [type(behavior).__name__ for behavior in self.behaviors]
        if self._children:
            payload["children"] = [child.to_payload() for child in self._children]
        return payload


def _plain(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    to_payload = getattr(value, "to_payload", None)
    if callable(to_payload):
        return to_payload()
    return repr(value)


def accumulated_scale(node: SceneNode) -> Tuple[float, float]:
    """Product of the planar local scales of every strict ancestor of ``node``."""

    scale_x = 1.0
    scale_y = 1.0
    for ancestor in node.ancestors():
        scale_x *= ancestor.transform.scale[0]
        scale_y *= ancestor.transform.scale[1]
    return scale_x, scale_y


def absolute_scale(node: SceneNode) -> Tuple[float, float]:
    """Visual stretch of ``node`` itself: inherited scale times its own scale."""

    inherited_x, inherited_y = accumulated_scale(node)
    return inherited_x * node.transform.scale[0], inherited_y * node.transform.scale[1]


def reparent_children(source: SceneNode, target: SceneNode, *, depth: Optional[float] = 0.0) -> List[SceneNode]:
    """Move every child of ``source`` under ``target`` keeping local transforms.

    ``depth`` overrides the Z position of each moved node; pass ``None`` to keep it.
    """

    moved = list(source.children)
    for child in moved:
        if depth is not None:
            child.transform.set_depth(depth)
        target.add_child(child)
    return moved
