"""
ANSYS element type table
========================

Maps an ANSYS element type code (the number in an ``ET,<itype>,<code>`` line)
to the target topologies it can stand for. One code covers several
topologies: a SOLID226 brick written with repeated node numbers is really a
tetrahedron, prism or pyramid, so the concrete topology is keyed by the number
of *distinct* nodes found in the element record.

Permutation convention: after duplicate node numbers are removed (keeping the
first occurrence), target slot ``i`` takes the vendor node at position
``permutation[i]``.
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from cdb_errors import AmbiguousNodeCountError, UnknownTopologyError
from cdb_mesh import ELEM_NODE_COUNT, ElemType


@dataclass(frozen=True)
class SubTypeDefinition:
    """Target topology for one (code, node count) pair"""
    elem_type: ElemType
    name: str
    permutation: Tuple[int, ...]

    def __post_init__(self):
        n = len(self.permutation)
        if sorted(self.permutation) != list(range(n)):
            raise ValueError(f"{self.name}: permutation {self.permutation} is not a bijection on [0, {n})")
        if ELEM_NODE_COUNT[self.elem_type] != n:
            raise ValueError(f"{self.name}: permutation has {n} entries, "
                             f"{self.elem_type.name} has {ELEM_NODE_COUNT[self.elem_type]} nodes")

    @property
    def n_nodes(self) -> int:
        return len(self.permutation)

    def apply(self, nodes: Sequence[int]) -> List[int]:
        """Reorder deduplicated vendor nodes into target slot order"""
        if len(nodes) != self.n_nodes:
            raise ValueError(f"{self.name} expects {self.n_nodes} nodes, got {len(nodes)}")
        return [nodes[i] for i in self.permutation]


class AnsysElementDefinition:
    """All sub-definitions registered for one ANSYS element type code"""

    def __init__(self, code: int, label: str):
        self.code = code
        self.label = label
        self.sub_types: Dict[int, SubTypeDefinition] = {}

    def add_sub_type(self, permutation: Sequence[int], elem_type: ElemType, name: str) -> None:
        sub_type = SubTypeDefinition(elem_type, name, tuple(permutation))
        if sub_type.n_nodes in self.sub_types:
            raise ValueError(f"{self.label}: node count {sub_type.n_nodes} registered twice")
        self.sub_types[sub_type.n_nodes] = sub_type


class ElementTypeTable:
    """Registry of element definitions, shared read-only by all readers"""

    def __init__(self):
        self._definitions: Dict[int, AnsysElementDefinition] = {}

    def register(self, definition: AnsysElementDefinition) -> None:
        self._definitions[definition.code] = definition

    def __contains__(self, code: int) -> bool:
        return code in self._definitions

    def codes(self) -> List[int]:
        return sorted(self._definitions)

    def definition(self, code: int) -> AnsysElementDefinition:
        try:
            return self._definitions[code]
        except KeyError:
            raise UnknownTopologyError(f"Unsupported ANSYS element type {code}") from None

    def lookup(self, code: int, n_nodes: int) -> SubTypeDefinition:
        """Resolve the target topology of an element with n_nodes distinct nodes

        Raises:
            UnknownTopologyError: code is not registered
            AmbiguousNodeCountError: code is registered but n_nodes is not
        """
        definition = self.definition(code)
        try:
            return definition.sub_types[n_nodes]
        except KeyError:
            supported = ", ".join(str(n) for n in sorted(definition.sub_types))
            raise AmbiguousNodeCountError(
                f"{definition.label} has no topology with {n_nodes} distinct nodes "
                f"(supported: {supported})") from None


def _identity(n: int) -> List[int]:
    return list(range(n))


def _add_solid20_family(definition: AnsysElementDefinition) -> None:
    # 20-node brick I..P, Q..B and its degenerate forms
    hex_ordering = [3, 0, 1, 2, 7, 4, 5, 6, 11, 8, 9, 10, 19, 16, 17, 18, 15, 12, 13, 14]
    tet_ordering = [2, 0, 1, 3, 6, 4, 5, 9, 7, 8]
    prism_ordering = [2, 0, 1, 5, 3, 4, 8, 6, 7, 14, 12, 13, 11, 9, 10]
    pyramid_ordering = [3, 0, 1, 2, 4, 8, 5, 6, 7, 12, 9, 10, 11]

    definition.add_sub_type(hex_ordering, ElemType.HEX20, "HEX20")
    definition.add_sub_type(tet_ordering, ElemType.TET10, "TET10")
    definition.add_sub_type(prism_ordering, ElemType.PRISM15, "PRISM15")
    definition.add_sub_type(pyramid_ordering, ElemType.PYRAMID13, "PYR13")


def build_element_table() -> ElementTypeTable:
    """Build the table of supported ANSYS element types"""
    table = ElementTypeTable()

    # SHELL181: quadrilateral, triangle when K = L
    shell181 = AnsysElementDefinition(181, "SHELL181")
    shell181.add_sub_type(_identity(4), ElemType.QUAD4, "QUAD4")
    shell181.add_sub_type(_identity(3), ElemType.TRI3, "TRI3")
    table.register(shell181)

    # SOLID185: 8-node brick with prism, pyramid and tetrahedron forms
    solid185 = AnsysElementDefinition(185, "SOLID185")
    solid185.add_sub_type(_identity(8), ElemType.HEX8, "HEX8")
    solid185.add_sub_type(_identity(6), ElemType.PRISM6, "PRISM6")
    solid185.add_sub_type(_identity(5), ElemType.PYRAMID5, "PYR5")
    solid185.add_sub_type(_identity(4), ElemType.TET4, "TET4")
    table.register(solid185)

    solid186 = AnsysElementDefinition(186, "SOLID186")
    _add_solid20_family(solid186)
    table.register(solid186)

    # SOLID187: 10-node tetrahedron, mid-side nodes already in canonical order
    solid187 = AnsysElementDefinition(187, "SOLID187")
    solid187.add_sub_type(_identity(10), ElemType.TET10, "TET10")
    table.register(solid187)

    solid226 = AnsysElementDefinition(226, "SOLID226")
    _add_solid20_family(solid226)
    table.register(solid226)

    solid285 = AnsysElementDefinition(285, "SOLID285")
    solid285.add_sub_type(_identity(4), ElemType.TET4, "TET4")
    table.register(solid285)

    return table


ELEMENT_TABLE = build_element_table()
