"""Scene graph: an arena of nodes with a transform hierarchy.

Nodes live in a flat list and refer to their parent by key (the node's index
in the arena). Entities and lights never own nodes; they store a node key
and look the node up when its world transform is needed.

Each node carries a local ``Transform`` (translation, rotation, scale). The
local-to-world matrix of a node is the product of its ancestors' local
matrices, root first:

    M_world(node) = M_local(root) @ ... @ M_local(parent) @ M_local(node)

All math here is plain NumPy on the Python side; the resulting matrices are
uploaded to Taichi fields by the scene manager.

Example:
    >>> graph = SceneGraph()
    >>> arm = graph.add_node(transform=Transform(position=(0.0, 1.0, 0.0)))
    >>> hand = graph.add_node(parent=arm, transform=Transform(scale=(2.0, 2.0, 2.0)))
    >>> graph.get_local_to_world(hand)[:3, 3]
    array([0., 1., 0.])
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt

ROOT_NODE = 0


@dataclass
class Transform:
    """Local transform of a scene node, applied as T @ R @ S.

    Attributes:
        position: Translation (x, y, z).
        rotation: Euler angles in degrees about X, then Y, then Z
            (the rotation matrix is Rz @ Ry @ Rx).
        scale: Per-axis scale. Zero components make the node singular.
    """

    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation: tuple[float, float, float] = (0.0, 0.0, 0.0)
    scale: tuple[float, float, float] = (1.0, 1.0, 1.0)

    def to_matrix(self) -> npt.NDArray[np.float64]:
        """Build the 4x4 local matrix T @ R @ S."""
        rx, ry, rz = (math.radians(a) for a in self.rotation)

        cx, sx = math.cos(rx), math.sin(rx)
        cy, sy = math.cos(ry), math.sin(ry)
        cz, sz = math.cos(rz), math.sin(rz)

        rot_x = np.array([[1.0, 0.0, 0.0], [0.0, cx, -sx], [0.0, sx, cx]])
        rot_y = np.array([[cy, 0.0, sy], [0.0, 1.0, 0.0], [-sy, 0.0, cy]])
        rot_z = np.array([[cz, -sz, 0.0], [sz, cz, 0.0], [0.0, 0.0, 1.0]])

        matrix = np.eye(4)
        matrix[:3, :3] = rot_z @ rot_y @ rot_x @ np.diag(self.scale)
        matrix[:3, 3] = self.position
        return matrix


@dataclass
class SceneNode:
    """A node in the scene graph arena.

    Attributes:
        name: Human-readable label.
        parent: Key of the parent node, or None for the root.
        transform: Local transform relative to the parent.
        children: Keys of child nodes, in insertion order.
    """

    name: str
    parent: int | None
    transform: Transform = field(default_factory=Transform)
    children: list[int] = field(default_factory=list)


class SceneGraph:
    """Arena of scene nodes addressed by integer keys.

    Node 0 is the root and always exists. Nodes are never removed during a
    render; keys stay valid for the lifetime of the graph.
    """

    def __init__(self) -> None:
        self._nodes: list[SceneNode] = [SceneNode(name="root", parent=None)]

    def add_node(
        self,
        parent: int = ROOT_NODE,
        transform: Transform | None = None,
        name: str | None = None,
    ) -> int:
        """Add a node under ``parent``.

        Args:
            parent: Key of the parent node (default: the root).
            transform: Local transform (default: identity).
            name: Optional label (default: ``node<key>``).

        Returns:
            The key of the new node.

        Raises:
            KeyError: If ``parent`` is not a node key.
        """
        self._check_key(parent)
        key = len(self._nodes)
        node = SceneNode(
            name=name if name is not None else f"node{key}",
            parent=parent,
            transform=transform if transform is not None else Transform(),
        )
        self._nodes.append(node)
        self._nodes[parent].children.append(key)
        return key

    def node_count(self) -> int:
        """Number of nodes, including the root."""
        return len(self._nodes)

    def get_node(self, key: int) -> SceneNode:
        """Look up a node by key."""
        self._check_key(key)
        return self._nodes[key]

    def children(self, key: int) -> list[int]:
        """Keys of the direct children of a node."""
        return list(self.get_node(key).children)

    def get_transform(self, key: int) -> Transform:
        """Local transform of a node."""
        return self.get_node(key).transform

    def set_transform(self, key: int, transform: Transform) -> None:
        """Replace the local transform of a node."""
        self.get_node(key).transform = transform

    def get_local_to_world(self, key: int) -> npt.NDArray[np.float64]:
        """Compose the local-to-world matrix of a node.

        Args:
            key: The node key.

        Returns:
            The 4x4 local-to-world matrix.

        Raises:
            KeyError: If ``key`` is not a node key.
        """
        node = self.get_node(key)
        matrix = node.transform.to_matrix()
        while node.parent is not None:
            node = self._nodes[node.parent]
            matrix = node.transform.to_matrix() @ matrix
        return matrix

    def _check_key(self, key: int) -> None:
        if not 0 <= key < len(self._nodes):
            raise KeyError(f"Unknown scene node: {key}")
