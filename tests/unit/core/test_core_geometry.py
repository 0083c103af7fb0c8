"""
Geometry model unit tests

Covers lifting records into shape variants, bounding points for map
fitting, and validation of explicit shapes.
"""

import pytest
from hypothesis import given, strategies as st

from shutdown_tracker.core.errors import ShutdownValidationError
from shutdown_tracker.core.geometry import (
    CircleShape,
    LineShape,
    PointShape,
    PolygonShape,
    bounding_points,
    fit_bounds,
    is_renderable,
    record_fields,
    shape_of,
    validate_shape,
)
from conftest import make_line, make_record


class TestShapeOf:
    """shape_of tests"""

    def test_circle(self):
        shape = shape_of(make_record())
        assert isinstance(shape, CircleShape)
        assert shape.radius_km == 200.0

    def test_point(self):
        shape = shape_of(make_record(geometry_type="point", radius_km=None))
        assert isinstance(shape, PointShape)
        assert (shape.center_lat, shape.center_lng) == (50.45, -104.61)

    def test_polygon(self):
        record = make_record(geometry_type="polygon", center_lat=None, center_lng=None,
                             radius_km=None, coordinates=[[1, 1], [2, 2], [3, 1]])
        shape = shape_of(record)
        assert isinstance(shape, PolygonShape)
        assert shape.coordinates == ((1.0, 1.0), (2.0, 2.0), (3.0, 1.0))

    def test_line(self):
        shape = shape_of(make_line())
        assert isinstance(shape, LineShape)
        assert len(shape.coordinates) == 2

    def test_unknown_geometry_type_is_not_rendered(self):
        record = make_record(geometry_type="hexagon")
        assert shape_of(record) is None
        assert not is_renderable(record)
        assert bounding_points(record) == []

    def test_circle_without_center_is_not_rendered(self):
        assert shape_of(make_record(center_lat=None)) is None

    def test_line_without_coordinates_is_not_rendered(self):
        assert shape_of(make_line(coordinates=None)) is None
        assert shape_of(make_line(coordinates=[])) is None


class TestBoundingPoints:
    """bounding_points / fit_bounds tests"""

    def test_circle_contributes_center(self):
        assert bounding_points(make_record()) == [[50.45, -104.61]]

    def test_line_contributes_every_vertex(self):
        assert bounding_points(make_line()) == [[50.45, -104.61], [52.13, -106.67]]

    def test_fit_bounds_over_mixed_records(self):
        bounds = fit_bounds([make_record(), make_line(id="l2")])
        assert bounds == (50.45, -106.67, 52.13, -104.61)

    def test_fit_bounds_ignores_unrenderable(self):
        assert fit_bounds([make_record(geometry_type="unknown")]) is None

    def test_fit_bounds_empty(self):
        assert fit_bounds([]) is None

    @given(points=st.lists(
        st.tuples(st.floats(min_value=-90, max_value=90), st.floats(min_value=-180, max_value=180)),
        min_size=2, max_size=20,
    ))
    def test_bounds_contain_every_vertex(self, points):
        record = make_line(coordinates=[list(p) for p in points])
        south, west, north, east = fit_bounds([record])
        for lat, lng in points:
            assert south <= lat <= north
            assert west <= lng <= east


class TestValidateShape:
    """validate_shape tests"""

    def test_valid_shapes_pass(self):
        validate_shape(CircleShape(center_lat=10, center_lng=20, radius_km=5))
        validate_shape(PointShape(center_lat=10, center_lng=20))
        validate_shape(PolygonShape(coordinates=((0, 0), (1, 0), (1, 1))))
        validate_shape(LineShape(coordinates=((0, 0), (1, 1))))

    def test_circle_radius_must_be_positive(self):
        with pytest.raises(ShutdownValidationError):
            validate_shape(CircleShape(center_lat=10, center_lng=20, radius_km=0))

    def test_center_out_of_range(self):
        with pytest.raises(ShutdownValidationError):
            validate_shape(PointShape(center_lat=91, center_lng=0))

    def test_polygon_needs_three_vertices(self):
        with pytest.raises(ShutdownValidationError):
            validate_shape(PolygonShape(coordinates=((0, 0), (1, 1))))

    def test_line_needs_two_vertices(self):
        with pytest.raises(ShutdownValidationError):
            validate_shape(LineShape(coordinates=((0, 0),)))

    def test_vertex_out_of_range(self):
        with pytest.raises(ShutdownValidationError):
            validate_shape(LineShape(coordinates=((0, 0), (0, 181))))


class TestRecordFields:
    """record_fields tests"""

    def test_circle_fields(self):
        fields = record_fields(CircleShape(center_lat=1, center_lng=2, radius_km=3))
        assert fields == {"geometry_type": "circle", "center_lat": 1.0,
                          "center_lng": 2.0, "radius_km": 3.0}

    def test_line_fields_are_lat_lng_lists(self):
        fields = record_fields(LineShape(coordinates=((1, 2), (3, 4))))
        assert fields == {"geometry_type": "line", "coordinates": [[1.0, 2.0], [3.0, 4.0]]}
