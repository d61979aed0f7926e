"""
VTK conversion for meshes read from CDB files
=============================================

Builds a vtkUnstructuredGrid from a cdb_mesh.Mesh:
- points from the mesh coordinates (point id == local node id)
- one cell per element, node order converted to VTK's convention
- cell arrays PartitionID / PartitionName
- one point array per node group (Group_<name>, 1 for members)
"""

from typing import Dict, Iterable, List, Optional

import numpy as np
import vtk  # required for vtk.vtkPoints, vtk constants, arrays
from vtkmodules.vtkCommonDataModel import vtkUnstructuredGrid
from vtkmodules.util.numpy_support import numpy_to_vtk

from cdb_mesh import ElemType, Mesh


VTK_CELL_TYPES: Dict[ElemType, int] = {
    ElemType.TRI3: vtk.VTK_TRIANGLE,
    ElemType.QUAD4: vtk.VTK_QUAD,
    ElemType.TET4: vtk.VTK_TETRA,
    ElemType.TET10: vtk.VTK_QUADRATIC_TETRA,
    ElemType.HEX8: vtk.VTK_HEXAHEDRON,
    ElemType.HEX20: vtk.VTK_QUADRATIC_HEXAHEDRON,
    ElemType.PRISM6: vtk.VTK_WEDGE,
    ElemType.PRISM15: vtk.VTK_QUADRATIC_WEDGE,
    ElemType.PYRAMID5: vtk.VTK_PYRAMID,
    ElemType.PYRAMID13: vtk.VTK_QUADRATIC_PYRAMID,
}

# VTK slot -> mesh slot, for topologies whose mid-edge order differs.
# VTK lists the top face edges before the vertical edges.
VTK_NODE_ORDER: Dict[ElemType, List[int]] = {
    ElemType.HEX20: [0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 16, 17, 18, 19, 12, 13, 14, 15],
    ElemType.PRISM15: [0, 1, 2, 3, 4, 5, 6, 7, 8, 12, 13, 14, 9, 10, 11],
}


def vtk_node_order(elem_type: ElemType, nodes: List[int]) -> List[int]:
    """Reorder element nodes into VTK slot order"""
    order = VTK_NODE_ORDER.get(elem_type)
    if order is None:
        return list(nodes)
    return [nodes[i] for i in order]


def _make_str_array(name: str, values: List[str]):
    a = vtk.vtkStringArray()
    a.SetName(name)
    a.SetNumberOfComponents(1)
    a.SetNumberOfTuples(len(values))
    for i, v in enumerate(values):
        a.SetValue(i, v)
    return a


def to_vtk_grid(mesh: Mesh, partitions: Optional[Iterable[int]] = None) -> vtkUnstructuredGrid:
    """Create a VTK unstructured grid from a mesh

    Args:
        mesh: Mesh filled by CDBReader
        partitions: Partition ids to include (default: all)

    Returns:
        vtkUnstructuredGrid with partition cell arrays and group point arrays
    """
    output = vtkUnstructuredGrid()

    points = vtk.vtkPoints()
    if mesh.n_nodes:
        points.SetData(numpy_to_vtk(mesh.points, deep=1))
    output.SetPoints(points)

    selected = set(partitions) if partitions is not None else None
    elements = [e for e in mesh.elements if selected is None or e.partition_id in selected]

    output.Allocate(len(elements))
    partition_ids: List[int] = []
    partition_names: List[str] = []
    for elem in elements:
        ids = vtk.vtkIdList()
        for node_id in vtk_node_order(elem.elem_type, elem.nodes):
            ids.InsertNextId(int(node_id))
        output.InsertNextCell(VTK_CELL_TYPES[elem.elem_type], ids)
        partition_ids.append(elem.partition_id)
        partition_names.append(mesh.partition_name(elem.partition_id))

    if elements:
        pid_arr = numpy_to_vtk(np.array(partition_ids, dtype=np.int32), deep=1)
        pid_arr.SetName("PartitionID")
        output.GetCellData().AddArray(pid_arr)
        output.GetCellData().AddArray(_make_str_array("PartitionName", partition_names))

    registry = mesh.get_group_registry()
    for group_id in registry.group_ids():
        membership = np.zeros(mesh.n_nodes, dtype=np.uint8)
        members = registry.group_nodes(group_id)
        if members:
            membership[members] = 1
        arr = numpy_to_vtk(membership, deep=1)
        arr.SetName(f"Group_{registry.group_name(group_id) or group_id}")
        output.GetPointData().AddArray(arr)

    return output
