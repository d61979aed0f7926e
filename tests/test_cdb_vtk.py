import io

import numpy as np
import pytest

vtk = pytest.importorskip("vtk")

from cdb_builders import brick_record, cdb_text, cmblock, eblock, et_line, line_nodes, nblock
from cdb_mesh import ElemType, Mesh
from cdb_parser import CDBReader
from cdb_vtk import VTK_CELL_TYPES, to_vtk_grid, vtk_node_order


def read_mesh(text):
    mesh = Mesh()
    CDBReader(mesh).read(io.StringIO(text))
    return mesh


def cell_points(grid, cell_id):
    ids = grid.GetCell(cell_id).GetPointIds()
    return np.array([grid.GetPoint(ids.GetId(i)) for i in range(ids.GetNumberOfIds())])


def test_every_topology_has_a_cell_type():
    assert set(VTK_CELL_TYPES) == set(ElemType)


def test_tet4_grid():
    mesh = read_mesh(cdb_text(
        et_line(285), nblock(line_nodes(5)),
        eblock([(1, [1, 2, 3, 4])], block_name="A"),
        eblock([(2, [2, 3, 4, 5])], block_name="B"),
        cmblock("WALL", [1, 5]),
    ))
    grid = to_vtk_grid(mesh)
    assert grid.GetNumberOfPoints() == 5
    assert grid.GetNumberOfCells() == 2
    assert grid.GetCellType(0) == vtk.VTK_TETRA

    pids = grid.GetCellData().GetArray("PartitionID")
    assert [pids.GetValue(i) for i in range(2)] == [1, 2]
    names = grid.GetCellData().GetAbstractArray("PartitionName")
    assert names.GetValue(1) == "B_TET4"

    wall = grid.GetPointData().GetArray("Group_WALL")
    assert [wall.GetValue(i) for i in range(5)] == [1, 0, 0, 0, 1]


def test_partition_filter():
    mesh = read_mesh(cdb_text(
        et_line(285), nblock(line_nodes(5)),
        eblock([(1, [1, 2, 3, 4])], block_name="A"),
        eblock([(2, [2, 3, 4, 5])], block_name="B"),
    ))
    grid = to_vtk_grid(mesh, partitions=[2])
    assert grid.GetNumberOfCells() == 1
    assert grid.GetCellData().GetArray("PartitionID").GetValue(0) == 2
    assert grid.GetNumberOfPoints() == 5


def test_hex20_midside_nodes():
    record, coords = brick_record("HEX")
    mesh = read_mesh(cdb_text(et_line(226), nblock(coords), eblock([(1, record)])))
    grid = to_vtk_grid(mesh)
    assert grid.GetCellType(0) == vtk.VTK_QUADRATIC_HEXAHEDRON
    xyz = cell_points(grid, 0)
    # VTK: edges 8-11 bottom, 12-15 top, 16-19 vertical
    np.testing.assert_allclose(xyz[12], (xyz[4] + xyz[5]) / 2.0)
    np.testing.assert_allclose(xyz[16], (xyz[0] + xyz[4]) / 2.0)


def test_prism15_midside_nodes():
    record, coords = brick_record("PRISM")
    mesh = read_mesh(cdb_text(et_line(226), nblock(coords), eblock([(1, record)])))
    grid = to_vtk_grid(mesh)
    assert grid.GetCellType(0) == vtk.VTK_QUADRATIC_WEDGE
    xyz = cell_points(grid, 0)
    # VTK: edges 6-8 bottom, 9-11 top, 12-14 vertical
    np.testing.assert_allclose(xyz[9], (xyz[3] + xyz[4]) / 2.0)
    np.testing.assert_allclose(xyz[12], (xyz[0] + xyz[3]) / 2.0)


def test_vtk_node_order_identity_for_linear_cells():
    assert vtk_node_order(ElemType.TET4, [4, 3, 2, 1]) == [4, 3, 2, 1]


def test_empty_mesh():
    grid = to_vtk_grid(Mesh())
    assert grid.GetNumberOfPoints() == 0
    assert grid.GetNumberOfCells() == 0
