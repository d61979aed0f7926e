"""
In-memory destination mesh
==========================

A small unstructured mesh container filled by the CDB reader:

1. Points addressed by dense local node ids
2. Elements with a fixed topology, node slots and a partition (subdomain) id
3. Partition names
4. Named node groups (boundary node sets)

Node ordering of every topology follows the canonical convention recorded in
ELEM_NODE_COUNT / QUADRATIC_EDGES: corners first (bottom face counterclockwise
seen from the top, then the top face), followed by mid-edge nodes.
"""

from enum import IntEnum
from typing import Dict, List, Optional, Set, Tuple

import numpy as np


class ElemType(IntEnum):
    """Target element topologies"""
    TRI3 = 3
    QUAD4 = 5
    TET4 = 8
    TET10 = 9
    HEX8 = 10
    HEX20 = 11
    PRISM6 = 13
    PRISM15 = 14
    PYRAMID5 = 16
    PYRAMID13 = 17


ELEM_NODE_COUNT: Dict[ElemType, int] = {
    ElemType.TRI3: 3,
    ElemType.QUAD4: 4,
    ElemType.TET4: 4,
    ElemType.TET10: 10,
    ElemType.HEX8: 8,
    ElemType.HEX20: 20,
    ElemType.PRISM6: 6,
    ElemType.PRISM15: 15,
    ElemType.PYRAMID5: 5,
    ElemType.PYRAMID13: 13,
}

ELEM_DIM: Dict[ElemType, int] = {
    ElemType.TRI3: 2,
    ElemType.QUAD4: 2,
    ElemType.TET4: 3,
    ElemType.TET10: 3,
    ElemType.HEX8: 3,
    ElemType.HEX20: 3,
    ElemType.PRISM6: 3,
    ElemType.PRISM15: 3,
    ElemType.PYRAMID5: 3,
    ElemType.PYRAMID13: 3,
}

# mid-edge slot -> (corner slot, corner slot) for the quadratic topologies
QUADRATIC_EDGES: Dict[ElemType, Dict[int, Tuple[int, int]]] = {
    ElemType.TET10: {
        4: (0, 1), 5: (1, 2), 6: (2, 0),
        7: (0, 3), 8: (1, 3), 9: (2, 3),
    },
    ElemType.HEX20: {
        8: (0, 1), 9: (1, 2), 10: (2, 3), 11: (3, 0),
        12: (0, 4), 13: (1, 5), 14: (2, 6), 15: (3, 7),
        16: (4, 5), 17: (5, 6), 18: (6, 7), 19: (7, 4),
    },
    ElemType.PRISM15: {
        6: (0, 1), 7: (1, 2), 8: (2, 0),
        9: (0, 3), 10: (1, 4), 11: (2, 5),
        12: (3, 4), 13: (4, 5), 14: (5, 3),
    },
    ElemType.PYRAMID13: {
        5: (0, 1), 6: (1, 2), 7: (2, 3), 8: (3, 0),
        9: (0, 4), 10: (1, 4), 11: (2, 4), 12: (3, 4),
    },
}


def elem_type_name(elem_type: ElemType) -> str:
    """Return the printable name of a topology"""
    return ElemType(elem_type).name


class Element:
    """A single element: topology, id, node slots and partition"""

    def __init__(self, elem_type: ElemType, elem_id: int):
        self.elem_type = ElemType(elem_type)
        self.id = elem_id
        self.nodes: List[Optional[int]] = [None] * ELEM_NODE_COUNT[self.elem_type]
        self.partition_id: int = 0

    @property
    def n_nodes(self) -> int:
        return len(self.nodes)

    def set_node(self, slot: int, node_id: int) -> None:
        if not 0 <= slot < len(self.nodes):
            raise IndexError(f"Slot {slot} out of range for {self.elem_type.name}")
        self.nodes[slot] = node_id

    def set_partition(self, partition_id: int) -> None:
        self.partition_id = partition_id

    def __repr__(self):
        return f"Element({self.elem_type.name}, id={self.id}, partition={self.partition_id}, nodes={self.nodes})"


class NodeGroupRegistry:
    """Named node sets keyed by group id"""

    def __init__(self):
        self._nodes: Dict[int, Set[int]] = {}
        self._names: Dict[int, str] = {}

    def clear(self) -> None:
        self._nodes.clear()
        self._names.clear()

    def add_node(self, node_id: int, group_id: int) -> None:
        self._nodes.setdefault(group_id, set()).add(node_id)

    def set_group_name(self, group_id: int, name: str) -> None:
        self._nodes.setdefault(group_id, set())
        self._names[group_id] = name

    def group_name(self, group_id: int) -> str:
        return self._names.get(group_id, "")

    def group_ids(self) -> List[int]:
        return sorted(self._nodes)

    def group_nodes(self, group_id: int) -> List[int]:
        """Sorted local node ids of a group"""
        return sorted(self._nodes.get(group_id, ()))

    def get_id_by_name(self, name: str) -> Optional[int]:
        for group_id, group_name in self._names.items():
            if group_name == name:
                return group_id
        return None

    def __len__(self):
        return len(self._nodes)


class Mesh:
    """Unstructured mesh filled incrementally by a reader

    Usage:
        >>> mesh = Mesh()
        >>> mesh.add_point((0.0, 0.0, 0.0), 0)
        >>> elem = mesh.add_elem(ElemType.TET4, 0)
        >>> elem.set_node(0, 0)

    A reader that fails part way calls mark_partial(); such a mesh must be
    discarded by the caller.
    """

    def __init__(self):
        self._points: Dict[int, Tuple[float, float, float]] = {}
        self.elements: List[Element] = []
        self._partition_names: Dict[int, str] = {}
        self._groups = NodeGroupRegistry()
        self.is_valid: bool = True

    def clear(self) -> None:
        """Remove all points, elements, partitions and groups"""
        self._points.clear()
        self.elements = []
        self._partition_names.clear()
        self._groups.clear()
        self.is_valid = True

    def mark_partial(self) -> None:
        self.is_valid = False

    # Points

    def add_point(self, coords, node_id: int) -> None:
        if node_id in self._points:
            raise ValueError(f"Node id {node_id} already exists")
        x, y, z = (float(c) for c in coords)
        self._points[node_id] = (x, y, z)

    def point(self, node_id: int) -> Tuple[float, float, float]:
        return self._points[node_id]

    def node_exists(self, node_id: int) -> bool:
        return node_id in self._points

    @property
    def n_nodes(self) -> int:
        return len(self._points)

    @property
    def points(self) -> np.ndarray:
        """Point coordinates as an (n_nodes, 3) array ordered by node id"""
        if not self._points:
            return np.empty((0, 3), dtype=np.float64)
        return np.array([self._points[i] for i in sorted(self._points)], dtype=np.float64)

    # Elements

    def add_elem(self, elem_type: ElemType, elem_id: int) -> Element:
        elem = Element(elem_type, elem_id)
        self.elements.append(elem)
        return elem

    @property
    def n_elem(self) -> int:
        return len(self.elements)

    # Partitions

    def set_partition_name(self, partition_id: int, name: str) -> None:
        self._partition_names[partition_id] = name

    def partition_name(self, partition_id: int) -> str:
        return self._partition_names.get(partition_id, "")

    def partition_ids(self) -> List[int]:
        """Partition ids that own at least one element or a name"""
        ids = {elem.partition_id for elem in self.elements}
        ids.update(self._partition_names)
        return sorted(ids)

    def elements_in_partition(self, partition_id: int) -> List[Element]:
        return [elem for elem in self.elements if elem.partition_id == partition_id]

    def connectivity(self, partition_id: int) -> np.ndarray:
        """Node ids of one partition as an (n_elem, n_nodes) integer array"""
        elems = self.elements_in_partition(partition_id)
        if not elems:
            return np.empty((0, 0), dtype=np.int64)
        return np.array([elem.nodes for elem in elems], dtype=np.int64)

    # Groups

    def get_group_registry(self) -> NodeGroupRegistry:
        return self._groups

    def get_mesh_info(self) -> Dict[str, object]:
        """Basic mesh information for reports and statistics export"""
        elem_types: Dict[str, int] = {}
        for elem in self.elements:
            elem_types[elem.elem_type.name] = elem_types.get(elem.elem_type.name, 0) + 1

        partitions = {}
        for pid in self.partition_ids():
            elems = self.elements_in_partition(pid)
            partitions[pid] = {
                'name': self.partition_name(pid),
                'element_count': len(elems),
                'element_type': elems[0].elem_type.name if elems else None,
            }

        groups = {}
        for gid in self._groups.group_ids():
            groups[gid] = {
                'name': self._groups.group_name(gid),
                'node_count': len(self._groups.group_nodes(gid)),
            }

        return {
            'valid': self.is_valid,
            'num_nodes': self.n_nodes,
            'num_elements': self.n_elem,
            'element_types': elem_types,
            'partitions': partitions,
            'groups': groups,
        }
