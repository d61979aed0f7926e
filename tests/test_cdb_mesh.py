import numpy as np
import pytest

from cdb_mesh import ELEM_NODE_COUNT, QUADRATIC_EDGES, ElemType, Mesh, elem_type_name


def small_mesh():
    mesh = Mesh()
    for i, xyz in enumerate([(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1), (1, 1, 1)]):
        mesh.add_point(xyz, i)
    for elem_id, nodes in enumerate([[0, 1, 2, 3], [1, 2, 3, 4]]):
        elem = mesh.add_elem(ElemType.TET4, elem_id)
        elem.set_partition(elem_id + 1)
        for slot, node in enumerate(nodes):
            elem.set_node(slot, node)
    mesh.set_partition_name(1, "A_TET4")
    mesh.set_partition_name(2, "B_TET4")
    registry = mesh.get_group_registry()
    registry.add_node(4, 1)
    registry.add_node(0, 1)
    registry.set_group_name(1, "WALL")
    return mesh


def test_quadratic_edges_reference_corners():
    for elem_type, edges in QUADRATIC_EDGES.items():
        n = ELEM_NODE_COUNT[elem_type]
        assert sorted(edges) == list(range(n - len(edges), n))
        n_corners = n - len(edges)
        assert all(a < n_corners and b < n_corners for a, b in edges.values())


def test_elem_type_name():
    assert elem_type_name(ElemType.PYRAMID13) == "PYRAMID13"
    assert elem_type_name(11) == "HEX20"


def test_points():
    mesh = small_mesh()
    assert mesh.n_nodes == 5
    assert mesh.point(4) == (1.0, 1.0, 1.0)
    assert mesh.points.shape == (5, 3)
    np.testing.assert_array_equal(mesh.points[1], [1.0, 0.0, 0.0])
    assert Mesh().points.shape == (0, 3)


def test_duplicate_point_id():
    mesh = small_mesh()
    with pytest.raises(ValueError):
        mesh.add_point((0, 0, 0), 2)


def test_element_slots():
    elem = Mesh().add_elem(ElemType.HEX20, 0)
    assert elem.n_nodes == 20
    assert elem.nodes == [None] * 20
    with pytest.raises(IndexError):
        elem.set_node(20, 1)


def test_partitions():
    mesh = small_mesh()
    assert mesh.partition_ids() == [1, 2]
    assert mesh.partition_name(2) == "B_TET4"
    assert mesh.partition_name(9) == ""
    np.testing.assert_array_equal(mesh.connectivity(2), [[1, 2, 3, 4]])
    assert mesh.connectivity(9).shape == (0, 0)


def test_groups():
    registry = small_mesh().get_group_registry()
    assert len(registry) == 1
    assert registry.group_nodes(1) == [0, 4]
    assert registry.get_id_by_name("WALL") == 1
    assert registry.get_id_by_name("INLET") is None


def test_mesh_info():
    info = small_mesh().get_mesh_info()
    assert info['valid'] is True
    assert info['num_nodes'] == 5
    assert info['num_elements'] == 2
    assert info['element_types'] == {"TET4": 2}
    assert info['partitions'][1] == {'name': "A_TET4", 'element_count': 1, 'element_type': "TET4"}
    assert info['groups'] == {1: {'name': "WALL", 'node_count': 2}}


def test_clear_and_mark_partial():
    mesh = small_mesh()
    mesh.mark_partial()
    assert not mesh.is_valid
    mesh.clear()
    assert mesh.is_valid
    assert mesh.n_nodes == 0
    assert mesh.n_elem == 0
    assert mesh.partition_ids() == []
    assert len(mesh.get_group_registry()) == 0
