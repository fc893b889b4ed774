"""Tests for domain models to verify they work correctly."""

import math

import pytest

from cutpath.domain import (
    Arc,
    BoundingBox,
    ChainRole,
    Circle,
    DetectedPart,
    Ellipse,
    GeometryType,
    LeadConfig,
    LeadGeometry,
    LeadResult,
    LeadType,
    LeadValidationResult,
    Line,
    PartHole,
    PartShell,
    Point2D,
    Polyline,
    Severity,
    Shape,
    ShapeChain,
    Spline,
)


def _square_chain(chain_id: str, x0: float, y0: float, size: float) -> ShapeChain:
    corners = [
        Point2D(x0, y0),
        Point2D(x0 + size, y0),
        Point2D(x0 + size, y0 + size),
        Point2D(x0, y0 + size),
    ]
    return ShapeChain(
        id=chain_id,
        shapes=[Shape(id=f"{chain_id}-poly", geometry=Polyline(points=corners, closed=True))],
    )


class TestPoint2D:
    """Tests for Point2D class."""

    def test_point_creation(self) -> None:
        """Test basic point creation."""
        p = Point2D(100.0, 200.0)
        assert p.x == 100.0
        assert p.y == 200.0

    def test_point_to_tuple(self) -> None:
        """Test point to tuple conversion."""
        assert Point2D(1.5, -2.0).to_tuple() == (1.5, -2.0)

    def test_point_distance(self) -> None:
        assert Point2D(0, 0).distance_to(Point2D(3, 4)) == pytest.approx(5.0)

    def test_point_immutable(self) -> None:
        """Test that point is immutable."""
        p = Point2D(100.0, 200.0)
        with pytest.raises(AttributeError):
            p.x = 300.0  # type: ignore

    def test_point_hashable(self) -> None:
        assert len({Point2D(1, 2), Point2D(1, 2), Point2D(2, 1)}) == 2


class TestShape:
    """Tests for Shape and the geometry kinds."""

    def test_type_tags(self) -> None:
        """Test that each geometry kind reports its tag."""
        cases = [
            (Line(Point2D(0, 0), Point2D(1, 0)), GeometryType.LINE),
            (Arc(Point2D(0, 0), 1.0, 0.0, math.pi), GeometryType.ARC),
            (Circle(Point2D(0, 0), 1.0), GeometryType.CIRCLE),
            (Polyline(points=(Point2D(0, 0), Point2D(1, 1))), GeometryType.POLYLINE),
            (Spline(control_points=(Point2D(0, 0), Point2D(1, 1))), GeometryType.SPLINE),
            (Ellipse(Point2D(0, 0), Point2D(2, 0), 0.5), GeometryType.ELLIPSE),
        ]
        for geometry, expected in cases:
            assert Shape(id="s", geometry=geometry).type == expected

    def test_unknown_type_tag_rejected(self) -> None:
        with pytest.raises(ValueError):
            Shape.from_dict({"id": "s", "type": "hyperbola", "geometry": {}})

    def test_arc_serialization(self) -> None:
        """Test shape serialization and deserialization."""
        shape = Shape(
            id="arc-1",
            geometry=Arc(Point2D(1, 2), 3.0, 0.0, math.pi / 2, clockwise=True),
            layer="cut",
        )
        restored = Shape.from_dict(shape.to_dict())
        assert restored == shape

    def test_polyline_points_become_tuple(self) -> None:
        polyline = Polyline(points=[Point2D(0, 0), Point2D(1, 0)])  # type: ignore[arg-type]
        assert isinstance(polyline.points, tuple)

    def test_ellipse_full_detection(self) -> None:
        assert Ellipse(Point2D(0, 0), Point2D(2, 0), 0.5).is_full
        assert Ellipse(Point2D(0, 0), Point2D(2, 0), 0.5, 0.0, 2 * math.pi).is_full
        assert not Ellipse(Point2D(0, 0), Point2D(2, 0), 0.5, 0.0, math.pi).is_full

    def test_spline_serialization(self) -> None:
        shape = Shape(
            id="spline-1",
            geometry=Spline(
                control_points=(Point2D(0, 0), Point2D(1, 2), Point2D(3, 0)),
                degree=2,
                knots=(0, 0, 0, 1, 1, 1),
                weights=(1, 1, 1),
            ),
        )
        restored = Shape.from_dict(shape.to_dict())
        assert restored.geometry == shape.geometry


class TestBoundingBox:
    """Tests for BoundingBox class."""

    def test_from_points(self) -> None:
        bbox = BoundingBox.from_points([Point2D(1, 5), Point2D(-2, 3), Point2D(4, -1)])
        assert bbox == BoundingBox(-2, -1, 4, 5)
        assert bbox.width == 6
        assert bbox.height == 6

    def test_from_no_points(self) -> None:
        assert BoundingBox.from_points([]) == BoundingBox(0, 0, 0, 0)

    def test_containment(self) -> None:
        outer = BoundingBox(0, 0, 10, 10)
        assert outer.contains_box(BoundingBox(2, 2, 8, 8))
        assert not outer.contains_box(BoundingBox(2, 2, 12, 8))
        assert outer.contains_point(Point2D(10, 5))
        assert not outer.contains_point(Point2D(10.1, 5))

    def test_distance_to_point(self) -> None:
        bbox = BoundingBox(0, 0, 10, 10)
        assert bbox.distance_to_point(Point2D(5, 5)) == 0.0
        assert bbox.distance_to_point(Point2D(13, 14)) == pytest.approx(5.0)


class TestShapeChain:
    """Tests for ShapeChain class."""

    def test_bounding_box_cached(self) -> None:
        """Test that the bounding box is computed once."""
        chain = _square_chain("chain-1", 0, 0, 10)
        bbox = chain.bounding_box()
        assert bbox == BoundingBox(0, 0, 10, 10)
        assert chain.bounding_box() is bbox

    def test_empty_chain(self) -> None:
        chain = ShapeChain(id="chain-1", shapes=[])
        assert chain.is_empty()
        assert chain.bounding_box() == BoundingBox(0, 0, 0, 0)

    def test_chain_serialization(self) -> None:
        chain = _square_chain("chain-7", 0, 0, 5)
        restored = ShapeChain.from_dict(chain.to_dict())
        assert restored.id == "chain-7"
        assert restored.shape_ids == ["chain-7-poly"]


class TestDetectedPart:
    """Tests for part structure models."""

    @pytest.fixture
    def part(self) -> DetectedPart:
        shell_chain = _square_chain("chain-1", 0, 0, 100)
        hole_chain = _square_chain("chain-2", 40, 40, 20)
        island_chain = _square_chain("chain-3", 45, 45, 10)
        island = PartHole(
            id="hole-1-1-1", chain=island_chain, bounding_box=island_chain.bounding_box()
        )
        hole = PartHole(
            id="hole-1-1",
            chain=hole_chain,
            bounding_box=hole_chain.bounding_box(),
            holes=[island],
        )
        holes = [hole]
        shell = PartShell(
            id="shell-1", chain=shell_chain, bounding_box=shell_chain.bounding_box(), holes=holes
        )
        return DetectedPart(id="part-1", shell=shell, holes=holes)

    def test_role_of(self, part: DetectedPart) -> None:
        """Test chain classification against a part."""
        assert part.role_of(part.shell.chain) == ChainRole.SHELL
        assert part.role_of(part.holes[0].chain) == ChainRole.HOLE
        # Nested boundaries are not direct holes
        assert part.role_of(part.holes[0].holes[0].chain) == ChainRole.SHAPE

    def test_role_of_restored_part(self, part: DetectedPart) -> None:
        """Test that a part rebuilt from a dict still recognises the original chains."""
        restored = DetectedPart.from_dict(part.to_dict())
        assert restored.shell.chain is not part.shell.chain
        assert restored.role_of(part.shell.chain) == ChainRole.SHELL
        assert restored.role_of(part.holes[0].chain) == ChainRole.HOLE
        assert restored.role_of(_square_chain("chain-9", 0, 0, 100)) == ChainRole.SHAPE

    def test_chains(self, part: DetectedPart) -> None:
        assert [c.id for c in part.chains()] == ["chain-1", "chain-2"]

    def test_iter_tree(self, part: DetectedPart) -> None:
        assert [h.id for h in part.holes[0].iter_tree()] == ["hole-1-1", "hole-1-1-1"]

    def test_part_serialization(self, part: DetectedPart) -> None:
        """Test part serialization keeps the shared holes list."""
        restored = DetectedPart.from_dict(part.to_dict())
        assert restored.id == "part-1"
        assert restored.shell.holes is restored.holes
        assert restored.holes[0].holes[0].id == "hole-1-1-1"
        assert restored.shell.type == "shell"
        assert restored.holes[0].type == "hole"


class TestLeadModels:
    """Tests for lead configuration and result models."""

    def test_config_defaults(self) -> None:
        config = LeadConfig()
        assert config.type == LeadType.NONE
        assert config.length == 0.0
        assert config.fit
        assert not config.is_requested

    def test_config_accepts_out_of_range_values(self) -> None:
        """Out-of-range values are left for validation to report."""
        config = LeadConfig(type=LeadType.LINE, length=-5, angle=400)
        assert config.length == -5
        assert not config.is_requested

    def test_config_serialization(self) -> None:
        config = LeadConfig(type=LeadType.ARC, length=5, flip_side=True, angle=45, fit=False)
        assert LeadConfig.from_dict(config.to_dict()) == config

    def test_geometry_length(self) -> None:
        lead = LeadGeometry(
            type=LeadType.LINE, points=(Point2D(0, 0), Point2D(3, 0), Point2D(3, 4))
        )
        assert lead.length == pytest.approx(7.0)

    def test_severity_escalation(self) -> None:
        assert Severity.INFO.escalate(Severity.WARNING) == Severity.WARNING
        assert Severity.ERROR.escalate(Severity.INFO) == Severity.ERROR

    def test_validation_result_add(self) -> None:
        result = LeadValidationResult()
        result.add(Severity.WARNING, "careful", "do something")
        assert result.is_valid
        assert result.severity == Severity.WARNING
        result.add(Severity.ERROR, "broken")
        assert not result.is_valid
        assert result.severity == Severity.ERROR
        assert result.warnings == ["careful", "broken"]
        assert result.suggestions == ["do something"]

    def test_validation_result_merge(self) -> None:
        first = LeadValidationResult()
        first.add(Severity.INFO, "note")
        second = LeadValidationResult()
        second.add(Severity.ERROR, "bad")
        first.merge(second)
        assert first.warnings == ["note", "bad"]
        assert not first.is_valid

    def test_result_effective_points(self) -> None:
        start = Point2D(0, 0)
        lead_in = LeadGeometry(type=LeadType.LINE, points=(Point2D(-5, 0), start))
        result = LeadResult(lead_in=lead_in)
        assert result.effective_start(start) == Point2D(-5, 0)
        assert result.effective_end(Point2D(1, 1)) == Point2D(1, 1)

    def test_result_serialization(self) -> None:
        validation = LeadValidationResult()
        validation.add(Severity.INFO, "note")
        result = LeadResult(
            lead_out=LeadGeometry(type=LeadType.LINE, points=(Point2D(0, 0), Point2D(0, 5))),
            warnings=["note"],
            validation=validation,
        )
        restored = LeadResult.from_dict(result.to_dict())
        assert restored.lead_in is None
        assert restored.lead_out == result.lead_out
        assert restored.validation.severity == Severity.INFO
