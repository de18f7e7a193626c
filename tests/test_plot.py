import math

import pytest

from uhpspectrum.plot import GRID_STEP_X, GRID_STEP_Y, X_SIZE, Y_SIZE, PlotGeometry


@pytest.fixture
def geometry():
    return PlotGeometry(800, 300)


def test_plot_area_leaves_room_for_three_grid_steps(geometry):
    assert geometry.width == 800 - 3 * GRID_STEP_X
    assert geometry.height == 300 - 3 * GRID_STEP_Y


def test_x_grid_labels_and_extent(geometry):
    lines = geometry.x_grid()
    assert [line.label for line in lines] == [str(x) for x in range(0, X_SIZE + 1, GRID_STEP_X)]
    assert lines[0].x1 == 0
    assert lines[-1].x1 == geometry.width
    assert all(line.x1 == line.x2 for line in lines)
    assert all(line.y2 == geometry.height for line in lines)
    assert all(line.label_y == geometry.height + 2 for line in lines)


def test_x_grid_positions_increase(geometry):
    positions = [line.x1 for line in geometry.x_grid()]
    assert positions == sorted(positions)
    assert all(float(p).is_integer() for p in positions)


def test_y_grid_labels_count_down(geometry):
    lines = geometry.y_grid()
    assert len(lines) == GRID_STEP_X // GRID_STEP_X + 16
    assert lines[0].label == str(Y_SIZE)
    assert lines[-1].label == "0"
    assert lines[0].y1 == 0
    assert lines[-1].y1 == geometry.height
    assert all(line.x2 == geometry.width for line in lines)
    assert all(line.label_x == -30 for line in lines)
    assert all(line.label_y == line.y1 - 10 for line in lines)


def test_scene_rect(geometry):
    assert geometry.scene_rect() == (
        -40.0,
        0.0,
        geometry.width + GRID_STEP_X,
        geometry.height + GRID_STEP_Y,
    )


def test_axes_meet_at_origin_of_plot(geometry):
    x_axis, y_axis = geometry.axes()
    assert x_axis == (0.0, geometry.height, geometry.width, geometry.height)
    assert y_axis == (0.0, 0.0, 0.0, geometry.height)


def test_path_top_and_bottom_levels(geometry):
    top = geometry.path_points([Y_SIZE] * 10)
    bottom = geometry.path_points([0] * 10)
    assert all(y == 0 for _, y in top)
    assert all(y == geometry.height for _, y in bottom)


def test_path_is_limited_to_1024_points(geometry):
    points = geometry.path_points([64.0] * 2000)
    assert len(points) == X_SIZE
    xs = [x for x, _ in points]
    assert xs[0] == 0
    assert xs == sorted(xs)
    assert xs[-1] < geometry.width


def test_path_keeps_short_spectra(geometry):
    assert len(geometry.path_points([1.0, 2.0, 3.0])) == 3


def test_path_of_minus_infinity_is_below_plot(geometry):
    (_, y), = geometry.path_points([-math.inf])
    assert y == math.inf


def test_empty_path_is_rejected(geometry):
    with pytest.raises(ValueError):
        geometry.path_points([])