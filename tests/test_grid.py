import numpy as np
import pytest

from yee2d.grid import GridGeometry, Material, MaterialMap, VACUUM


def test_linear_index_is_row_major():
    g = GridGeometry(7, 5)
    assert g.shape == (5, 7)
    assert g.size == 35
    assert g.index(3, 2) == 2 * 7 + 3
    assert g.coords(g.index(6, 4)) == (6, 4)


def test_bounds_and_interior():
    g = GridGeometry(4, 3)
    assert g.in_bounds(0, 0) and g.in_bounds(3, 2)
    assert not g.in_bounds(4, 0) and not g.in_bounds(-1, 1)
    assert g.is_interior(1, 1) and g.is_interior(2, 1)
    assert not g.is_interior(0, 1) and not g.is_interior(3, 1) and not g.is_interior(1, 2)
    assert g.is_edge(0, 0) and not g.is_edge(1, 1) and not g.is_edge(9, 9)


@pytest.mark.parametrize('w,h', [(0, 5), (5, 0), (-1, 3)])
def test_rejects_empty_grid(w, h):
    with pytest.raises(ValueError):
        GridGeometry(w, h)


def test_material_eps_is_clamped_square():
    assert Material(1.5).eps_r == pytest.approx(2.25)
    assert Material(0.3).eps_r == 1.0
    assert VACUUM.eps_r == 1.0


def test_material_map_defaults_and_reset():
    m = MaterialMap(GridGeometry(6, 4))
    assert m.eps_r.shape == (4, 6) and m.eps_r.dtype == np.float32
    assert np.all(m.eps_r == 1.0) and not m.obstacle.any()
    m.paint_box((1, 1, 3, 2), Material(2.0))
    m.paint_obstacle([(0, 0), (5, 3)])
    m.reset()
    assert np.all(m.eps_r == 1.0) and not m.obstacle.any()


def test_paint_obstacle_skips_out_of_bounds_and_neutralizes_eps():
    m = MaterialMap(GridGeometry(5, 5))
    m.paint_box((0, 0, 4, 4), Material(2.0))
    painted = m.paint_obstacle([(-1, 2), (2, 2), (5, 5)])
    assert painted == [(2, 2)]
    assert m.is_obstacle(2, 2)
    assert m.eps_at(2, 2) == 1.0
    assert m.eps_at(1, 1) == pytest.approx(4.0)
    assert m.flat_obstacle().sum() == 1


def test_paint_box_keeps_obstacle_flag():
    m = MaterialMap(GridGeometry(5, 5))
    m.paint_obstacle([(2, 2)])
    m.paint_box((0, 0, 4, 4), Material(1.5))
    assert m.is_obstacle(2, 2)
    assert m.eps_at(2, 2) == pytest.approx(2.25)
