import pytest

from conftest import north_of
from utils.distance import NOISE_FLOOR_KM, haversine_distance, is_significant_move

POINTS = [
    (41.0082, 28.9784),    # Istanbul
    (39.9334, 32.8597),    # Ankara
    (-33.8688, 151.2093),  # Sydney
    (0.0, 0.0),
    (51.5074, -0.1278),    # London
]


@pytest.mark.parametrize("a", POINTS)
@pytest.mark.parametrize("b", POINTS)
def test_distance_is_symmetric(a, b):
    assert haversine_distance(*a, *b) == pytest.approx(haversine_distance(*b, *a))


@pytest.mark.parametrize("point", POINTS)
def test_distance_to_self_is_zero(point):
    assert haversine_distance(*point, *point) == 0


def test_one_degree_of_latitude():
    assert haversine_distance(0, 0, 1, 0) == pytest.approx(111.195, rel=1e-4)


def test_istanbul_to_ankara():
    assert haversine_distance(*POINTS[0], *POINTS[1]) == pytest.approx(350, abs=5)


def test_meter_scale_moves():
    lat, lng = 41.0, 29.0
    assert haversine_distance(lat, lng, north_of(lat, 50), lng) == pytest.approx(0.05, rel=1e-6)


def test_noise_floor():
    assert NOISE_FLOOR_KM == 0.005
    assert not is_significant_move(0.003)
    assert not is_significant_move(0.005)
    assert is_significant_move(0.0051)
