"""Tests for lead configuration validation."""

import pytest

from cutpath.core.chains import detect_shape_chains
from cutpath.core.lead_validation import (
    validate_basic_configuration,
    validate_chain_geometry,
    validate_cut_direction,
    validate_lead_configuration,
    validate_lead_lengths,
    validate_part_context,
)
from cutpath.core.parts import detect_parts
from cutpath.domain import (
    CutDirection,
    DetectedPart,
    LeadConfig,
    LeadType,
    Line,
    Point2D,
    Polyline,
    Severity,
    Shape,
    ShapeChain,
)

NO_LEAD = LeadConfig()


def _square(shape_id: str, x0: float, y0: float, size: float) -> Shape:
    points = (
        Point2D(x0, y0),
        Point2D(x0 + size, y0),
        Point2D(x0 + size, y0 + size),
        Point2D(x0, y0 + size),
    )
    return Shape(id=shape_id, geometry=Polyline(points=points, closed=True))


@pytest.fixture
def square_chain() -> ShapeChain:
    return detect_shape_chains([_square("sq", 0, 0, 10)])[0]


@pytest.fixture
def plate() -> DetectedPart:
    """100x100 plate with a hole near its start corner."""
    chains = detect_shape_chains([_square("outer", 0, 0, 100), _square("inner", 5, 5, 10)])
    return detect_parts(chains).parts[0]


class TestBasicConfiguration:
    """Tests for validate_basic_configuration."""

    def test_negative_length_is_error(self) -> None:
        result = validate_basic_configuration(LeadConfig(LeadType.LINE, -5), NO_LEAD)
        assert not result.is_valid
        assert result.severity == Severity.ERROR
        assert "Lead-in length cannot be negative" in result.warnings

    def test_angle_out_of_range_is_error(self) -> None:
        result = validate_basic_configuration(NO_LEAD, LeadConfig(LeadType.ARC, 5, angle=360))
        assert not result.is_valid
        assert "Lead-out angle must be between 0 and 359 degrees" in result.warnings

    def test_angle_in_range(self) -> None:
        result = validate_basic_configuration(LeadConfig(LeadType.ARC, 5, angle=359.5), NO_LEAD)
        assert result.is_valid
        assert result.warnings == []

    def test_none_type_with_length(self) -> None:
        result = validate_basic_configuration(LeadConfig(LeadType.NONE, 5), NO_LEAD)
        assert result.is_valid
        assert result.severity == Severity.WARNING
        assert result.warnings == ['Lead-in type is "none" but length is greater than 0']

    def test_type_with_zero_length(self) -> None:
        result = validate_basic_configuration(NO_LEAD, LeadConfig(LeadType.LINE, 0))
        assert result.warnings == ['Lead-out type is "line" but length is 0']


class TestChainGeometry:
    """Tests for validate_chain_geometry."""

    def test_empty_chain_is_error(self) -> None:
        result = validate_chain_geometry(ShapeChain(id="chain-1", shapes=[]), NO_LEAD, NO_LEAD)
        assert not result.is_valid
        assert result.warnings == ["Cannot generate leads for empty chain"]

    def test_lead_large_for_chain(self, square_chain: ShapeChain) -> None:
        result = validate_chain_geometry(square_chain, LeadConfig(LeadType.LINE, 30), NO_LEAD)
        assert result.is_valid
        assert "Lead-in length is very large compared to chain size" in result.warnings

    def test_lead_within_chain_scale(self, square_chain: ShapeChain) -> None:
        result = validate_chain_geometry(square_chain, LeadConfig(LeadType.LINE, 20), NO_LEAD)
        assert result.warnings == []

    def test_small_chain_long_lead(self) -> None:
        chain = detect_shape_chains([_square("tiny", 0, 0, 2)])[0]
        result = validate_chain_geometry(chain, NO_LEAD, LeadConfig(LeadType.LINE, 11))
        assert (
            "Chain is very small but leads are long - may cause intersection issues"
            in result.warnings
        )


class TestPartContext:
    """Tests for validate_part_context."""

    def test_hole_gets_info(self, plate: DetectedPart) -> None:
        result = validate_part_context(
            plate.holes[0].chain, plate, LeadConfig(LeadType.ARC, 1), NO_LEAD
        )
        assert result.severity == Severity.INFO
        assert result.warnings == [
            "Generating leads for hole - leads will be placed inside the hole"
        ]

    def test_foreign_chain(self, plate: DetectedPart, square_chain: ShapeChain) -> None:
        foreign = ShapeChain(id="chain-99", shapes=square_chain.shapes)
        result = validate_part_context(foreign, plate, NO_LEAD, NO_LEAD)
        assert result.warnings == ["Chain is not recognized as part of the specified part"]

    def test_shell_lead_reaching_hole(self, plate: DetectedPart) -> None:
        """Test that a shell lead long enough to reach a hole is flagged."""
        result = validate_part_context(
            plate.shell.chain, plate, LeadConfig(LeadType.LINE, 10), NO_LEAD
        )
        assert result.warnings == ["Lead may intersect with nearby hole (hole-1-1)"]

    def test_short_shell_lead(self, plate: DetectedPart) -> None:
        result = validate_part_context(
            plate.shell.chain, plate, LeadConfig(LeadType.LINE, 2), NO_LEAD
        )
        assert result.warnings == []


class TestLeadLengths:
    """Tests for validate_lead_lengths."""

    def test_very_long(self) -> None:
        result = validate_lead_lengths(LeadConfig(LeadType.LINE, 60), NO_LEAD)
        assert result.warnings == ["Lead-in length (60) is very long"]
        assert result.severity == Severity.WARNING

    def test_very_short(self) -> None:
        result = validate_lead_lengths(NO_LEAD, LeadConfig(LeadType.ARC, 0.3))
        assert result.warnings == ["Lead-out length (0.3) is very short"]
        assert result.severity == Severity.INFO


class TestCutDirection:
    """Tests for validate_cut_direction."""

    def test_closed_chain_without_direction(self, square_chain: ShapeChain) -> None:
        result = validate_cut_direction(square_chain, NO_LEAD, NO_LEAD, CutDirection.NONE)
        assert result.warnings == ['Closed chain detected but cut direction is "none"']

    def test_open_chain_with_direction(self) -> None:
        chain = ShapeChain(
            id="chain-1", shapes=[Shape(id="l", geometry=Line(Point2D(0, 0), Point2D(5, 0)))]
        )
        result = validate_cut_direction(chain, NO_LEAD, NO_LEAD, CutDirection.CLOCKWISE)
        assert result.warnings == ["Cut direction specified for open chain (not necessary)"]

    def test_manual_arc_angle_with_direction(self, square_chain: ShapeChain) -> None:
        result = validate_cut_direction(
            square_chain,
            LeadConfig(LeadType.ARC, 5, angle=90),
            NO_LEAD,
            CutDirection.COUNTERCLOCKWISE,
        )
        assert len(result.warnings) == 1
        assert result.warnings[0].startswith("Manual lead-in angle specified with cut direction")


class TestValidateLeadConfiguration:
    """Tests for the combined validation."""

    def test_valid_configuration(self, square_chain: ShapeChain) -> None:
        result = validate_lead_configuration(
            LeadConfig(LeadType.ARC, 5),
            LeadConfig(LeadType.LINE, 5),
            square_chain,
            cut_direction=CutDirection.COUNTERCLOCKWISE,
        )
        assert result.is_valid
        assert result.warnings == []
        assert result.severity == Severity.INFO

    def test_findings_are_merged_in_check_order(self, square_chain: ShapeChain) -> None:
        result = validate_lead_configuration(
            LeadConfig(LeadType.LINE, -5),
            LeadConfig(LeadType.LINE, 60),
            square_chain,
        )
        assert not result.is_valid
        assert result.severity == Severity.ERROR
        assert result.warnings[0] == "Lead-in length cannot be negative"
        assert "Lead-out length (60) is very long" in result.warnings
        assert result.warnings[-1] == 'Closed chain detected but cut direction is "none"'
        assert len(result.suggestions) == len(result.warnings)

    def test_never_raises_for_empty_chain(self) -> None:
        result = validate_lead_configuration(
            LeadConfig(LeadType.ARC, 5), NO_LEAD, ShapeChain(id="chain-1", shapes=[])
        )
        assert not result.is_valid
