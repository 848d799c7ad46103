"""
ContainerTree: the indexed collection that owns the live containers.

Parent and child relations are stored as node ids, so the tree can be dumped
and inspected without following object references.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from process_foundry.exceptions import DuplicateKeyError, NotFoundError
from process_foundry.ports.container_port import ContainerPort


@dataclass
class _Node:
    node_id: int
    container: ContainerPort
    parent_id: Optional[int]


class ContainerTree:
    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._nodes: dict[int, _Node] = {}
        self._next_id = 0
        self._logger = logger or logging.getLogger(__name__)

    def __len__(self) -> int:
        return len(self._nodes)

    def add(self, container: ContainerPort, parent_id: Optional[int] = None) -> int:
        """
        Register a container, optionally below an existing node.

        Returns:
            The new node id

        Raises:
            NotFoundError: If parent_id is not in the tree
            DuplicateKeyError: If the container is already registered
        """
        if parent_id is not None and parent_id not in self._nodes:
            raise NotFoundError(
                f"Cannot add {container.get_name()} below unknown node {parent_id}"
            )
        if self.id_of(container) is not None:
            raise DuplicateKeyError(
                f"{container.get_name()} is already part of the container tree"
            )
        node_id = self._next_id
        self._next_id += 1
        self._nodes[node_id] = _Node(node_id, container, parent_id)
        self._logger.debug(
            f"Added {container.get_name()} as node {node_id} (parent {parent_id})"
        )
        return node_id

    def ensure(
        self, container: ContainerPort, parent: Optional[ContainerPort] = None
    ) -> int:
        """
        Node id of a container, registering it below parent when it is new.

        Raises:
            NotFoundError: If parent is given but not part of the tree
        """
        node_id = self.id_of(container)
        if node_id is not None:
            return node_id
        parent_id = None
        if parent is not None:
            parent_id = self.id_of(parent)
            if parent_id is None:
                raise NotFoundError(
                    f"Parent {parent.get_name()} of {container.get_name()} "
                    "is not part of the container tree"
                )
        return self.add(container, parent_id)

    def replace(self, old: ContainerPort, new: ContainerPort) -> int:
        """
        Put new in the node held by old, keeping its id, parent and children.

        Raises:
            NotFoundError: If old is not in the tree
            DuplicateKeyError: If new is already in the tree
        """
        node_id = self.id_of(old)
        if node_id is None:
            raise NotFoundError(f"{old.get_name()} is not part of the container tree")
        if self.id_of(new) is not None:
            raise DuplicateKeyError(
                f"{new.get_name()} is already part of the container tree"
            )
        self._nodes[node_id].container = new
        self._logger.debug(f"Node {node_id} now holds {new.get_name()}")
        return node_id

    def get(self, node_id: int) -> ContainerPort:
        try:
            return self._nodes[node_id].container
        except KeyError:
            raise NotFoundError(f"No container registered as node {node_id}")

    def id_of(self, container: ContainerPort) -> Optional[int]:
        for node in self._nodes.values():
            if node.container is container:
                return node.node_id
        return None

    def parent_of(self, node_id: int) -> Optional[ContainerPort]:
        self.get(node_id)
        parent_id = self._nodes[node_id].parent_id
        return None if parent_id is None else self._nodes[parent_id].container

    def children_of(self, node_id: int) -> list[ContainerPort]:
        self.get(node_id)
        return [
            node.container
            for node in self._nodes.values()
            if node.parent_id == node_id
        ]

    def route(self, container: ContainerPort) -> list[ContainerPort]:
        """The container followed by its ancestors up to the root."""
        node_id = self.id_of(container)
        if node_id is None:
            raise NotFoundError(
                f"{container.get_name()} is not part of the container tree"
            )
        chain = []
        while node_id is not None:
            node = self._nodes[node_id]
            chain.append(node.container)
            node_id = node.parent_id
        return chain

    def find_by_name(self, name: str) -> list[ContainerPort]:
        """Containers whose get_name() starts with the given name, case-insensitively."""
        key = name.strip().lower()
        return [
            node.container
            for node in self._nodes.values()
            if node.container.get_name().lower().startswith(key)
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [
                {
                    "id": node.node_id,
                    "name": node.container.get_name(),
                    "parent_id": node.parent_id,
                    "cache_policy": node.container.cache_policy.value,
                    "cached_apps": [
                        app.full_name() for app in node.container.cached_apps()
                    ],
                }
                for node in self._nodes.values()
            ]
        }
