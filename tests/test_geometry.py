"""Tests for the geometry kernel."""

import numpy as np
import pytest
from hypothesis import given
from hypothesis import strategies as st

from traffic_replay.geometry import (
    BACK_LEFT,
    BACK_RIGHT,
    FRONT_LEFT,
    FRONT_RIGHT,
    centroid,
    corners_of,
    front_midpoint,
    oriented_box,
    rotate,
    rotate_box,
)

coords = st.floats(min_value=-1e4, max_value=1e4, allow_nan=False, allow_infinity=False)
angles = st.floats(min_value=-2 * np.pi, max_value=2 * np.pi, allow_nan=False)


class TestCorners:

    def test_winding_order(self):
        box = corners_of((10.0, 5.0), (4.0, 2.0))

        np.testing.assert_allclose(box[BACK_LEFT], [8.0, 6.0])
        np.testing.assert_allclose(box[FRONT_LEFT], [12.0, 6.0])
        np.testing.assert_allclose(box[FRONT_RIGHT], [12.0, 4.0])
        np.testing.assert_allclose(box[BACK_RIGHT], [8.0, 4.0])

    def test_centroid_is_center(self):
        box = corners_of((-3.0, 7.5), (5.0, 1.5))
        np.testing.assert_allclose(centroid(box), [-3.0, 7.5])


class TestRotate:

    @given(px=coords, py=coords, cx=coords, cy=coords)
    def test_zero_angle_is_identity(self, px, py, cx, cy):
        np.testing.assert_allclose(rotate((px, py), 0.0, (cx, cy)), [px, py], atol=1e-9)

    @given(px=coords, py=coords, cx=coords, cy=coords, theta=angles)
    def test_round_trip(self, px, py, cx, cy, theta):
        back = rotate(rotate((px, py), theta, (cx, cy)), -theta, (cx, cy))
        np.testing.assert_allclose(back, [px, py], atol=1e-6)

    def test_quarter_turn_is_counter_clockwise(self):
        np.testing.assert_allclose(rotate((1.0, 0.0), np.pi / 2), [0.0, 1.0], atol=1e-12)

    def test_about_pivot(self):
        np.testing.assert_allclose(rotate((2.0, 1.0), np.pi, (1.0, 1.0)), [0.0, 1.0], atol=1e-12)

    def test_many_points(self):
        pts = np.array([[1.0, 0.0], [0.0, 1.0]])
        out = rotate(pts, np.pi / 2)
        np.testing.assert_allclose(out, [[0.0, 1.0], [-1.0, 0.0]], atol=1e-12)


class TestOrientedBox:

    def test_rotation_keeps_centroid(self):
        box = rotate_box(corners_of((3.0, 4.0), (4.0, 2.0)), 0.7)
        np.testing.assert_allclose(centroid(box), [3.0, 4.0])

    def test_rotation_keeps_side_lengths(self):
        box = oriented_box((0.0, 0.0), (4.0, 2.0), 1.1)
        assert np.hypot(*(box[FRONT_LEFT] - box[BACK_LEFT])) == pytest.approx(4.0)
        assert np.hypot(*(box[FRONT_LEFT] - box[FRONT_RIGHT])) == pytest.approx(2.0)

    @pytest.mark.parametrize('heading, expected', [
        (0.0, [2.0, 0.0]),
        (np.pi / 2, [0.0, 2.0]),
        (np.pi, [-2.0, 0.0]),
    ])
    def test_front_follows_heading(self, heading, expected):
        box = oriented_box((0.0, 0.0), (4.0, 2.0), heading)
        np.testing.assert_allclose(front_midpoint(box), expected, atol=1e-12)
