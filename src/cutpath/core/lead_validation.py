"""Validation of lead configurations before geometry is generated.

Validation runs five independent checks and folds their findings into one
LeadValidationResult:
1. Basic configuration (lengths, types, angles)
2. Chain geometry (empty chains, leads out of scale with the chain)
3. Part context (shell/hole membership, nearby holes)
4. Absolute lead lengths
5. Cut direction compatibility

Only negative lengths, out-of-range angles and empty chains are errors.
Validation reports problems and never raises.
"""

import structlog

from cutpath.core.chains import chain_end_point, chain_start_point, is_chain_closed
from cutpath.domain import (
    ChainRole,
    CutDirection,
    DetectedPart,
    LeadConfig,
    LeadType,
    LeadValidationResult,
    Severity,
    ShapeChain,
)

logger = structlog.get_logger(__name__)

FULL_CIRCLE_DEG = 360.0
MAX_RECOMMENDED_LENGTH = 50.0
MIN_RECOMMENDED_LENGTH = 0.5
SMALL_CHAIN_SIZE = 3.0
SMALL_CHAIN_MAX_LEAD = 10.0
CHAIN_SCALE_FACTOR = 2.0


def _labelled(lead_in: LeadConfig, lead_out: LeadConfig) -> list[tuple[str, LeadConfig]]:
    return [("Lead-in", lead_in), ("Lead-out", lead_out)]


def validate_basic_configuration(
    lead_in: LeadConfig, lead_out: LeadConfig
) -> LeadValidationResult:
    """Check lengths, type/length consistency and angle ranges."""
    result = LeadValidationResult()

    for label, config in _labelled(lead_in, lead_out):
        if config.length < 0:
            result.add(
                Severity.ERROR,
                f"{label} length cannot be negative",
                f"Set {label.lower()} length to 0 or a positive value",
            )

    for label, config in _labelled(lead_in, lead_out):
        if config.type == LeadType.NONE and config.length > 0:
            result.add(
                Severity.WARNING,
                f'{label} type is "none" but length is greater than 0',
                f'Set {label.lower()} length to 0 or change type to "line" or "arc"',
            )
        elif config.type != LeadType.NONE and config.length == 0:
            result.add(
                Severity.WARNING,
                f'{label} type is "{config.type.value}" but length is 0',
                f'Set a positive {label.lower()} length or change type to "none"',
            )

    for label, config in _labelled(lead_in, lead_out):
        if config.angle is not None and not 0 <= config.angle < FULL_CIRCLE_DEG:
            result.add(
                Severity.ERROR,
                f"{label} angle must be between 0 and 359 degrees",
                f"Adjust {label.lower()} angle to be within 0-359 degree range",
            )

    return result


def validate_chain_geometry(
    chain: ShapeChain, lead_in: LeadConfig, lead_out: LeadConfig
) -> LeadValidationResult:
    """Check leads against the size of the chain they attach to."""
    result = LeadValidationResult()

    if chain.is_empty():
        result.add(
            Severity.ERROR,
            "Cannot generate leads for empty chain",
            "Ensure the chain contains at least one shape",
        )
        return result

    bbox = chain.bounding_box()
    limit = bbox.diagonal * CHAIN_SCALE_FACTOR

    for label, config in _labelled(lead_in, lead_out):
        if config.type != LeadType.NONE and config.length > limit:
            result.add(
                Severity.WARNING,
                f"{label} length is very large compared to chain size",
                f"Consider reducing {label.lower()} length to less than {limit:.1f} units",
            )

    chain_size = max(bbox.width, bbox.height)
    if chain_size < SMALL_CHAIN_SIZE and (
        lead_in.length > SMALL_CHAIN_MAX_LEAD or lead_out.length > SMALL_CHAIN_MAX_LEAD
    ):
        result.add(
            Severity.WARNING,
            "Chain is very small but leads are long - may cause intersection issues",
            "Consider using shorter leads for small geometry",
        )

    return result


def validate_part_context(
    chain: ShapeChain, part: DetectedPart, lead_in: LeadConfig, lead_out: LeadConfig
) -> LeadValidationResult:
    """Check the chain's role in its part and the reach of shell leads."""
    result = LeadValidationResult()
    role = part.role_of(chain)

    if role == ChainRole.SHAPE:
        result.add(
            Severity.WARNING,
            "Chain is not recognized as part of the specified part",
            "Verify that the chain belongs to the correct part",
        )
        return result

    if role == ChainRole.SHELL and part.holes:
        max_length = max(lead_in.length, lead_out.length)
        endpoints = [
            p for p in (chain_start_point(chain), chain_end_point(chain)) if p is not None
        ]
        if max_length > 0 and endpoints:
            for hole in part.holes:
                reach = min(hole.bounding_box.distance_to_point(p) for p in endpoints)
                if max_length >= reach:
                    result.add(
                        Severity.WARNING,
                        f"Lead may intersect with nearby hole ({hole.id})",
                        "Consider reducing lead length or adjusting lead angle",
                    )

    if role == ChainRole.HOLE:
        result.add(
            Severity.INFO, "Generating leads for hole - leads will be placed inside the hole"
        )

    return result


def validate_lead_lengths(lead_in: LeadConfig, lead_out: LeadConfig) -> LeadValidationResult:
    """Flag lead lengths outside the practical machining range."""
    result = LeadValidationResult()

    for label, config in _labelled(lead_in, lead_out):
        if config.length > MAX_RECOMMENDED_LENGTH:
            result.add(
                Severity.WARNING,
                f"{label} length ({config.length:g}) is very long",
                f"Consider reducing {label.lower()} length to under "
                f"{MAX_RECOMMENDED_LENGTH:g} units",
            )

    for label, config in _labelled(lead_in, lead_out):
        if config.type != LeadType.NONE and 0 < config.length < MIN_RECOMMENDED_LENGTH:
            result.add(
                Severity.INFO,
                f"{label} length ({config.length:g}) is very short",
                f"Consider using length of at least {MIN_RECOMMENDED_LENGTH:g} units "
                "or setting to 0",
            )

    return result


def validate_cut_direction(
    chain: ShapeChain,
    lead_in: LeadConfig,
    lead_out: LeadConfig,
    cut_direction: CutDirection,
) -> LeadValidationResult:
    """Check that the cut direction suits the chain and the lead angles."""
    result = LeadValidationResult()
    closed = is_chain_closed(chain)

    if closed and cut_direction == CutDirection.NONE:
        result.add(
            Severity.INFO,
            'Closed chain detected but cut direction is "none"',
            'Consider specifying "clockwise" or "counterclockwise" cut direction '
            "for better lead tangency",
        )
    if not closed and cut_direction != CutDirection.NONE:
        result.add(
            Severity.INFO,
            "Cut direction specified for open chain (not necessary)",
            'Cut direction only affects closed chains - can be set to "none" for open chains',
        )

    if cut_direction != CutDirection.NONE:
        for label, config in _labelled(lead_in, lead_out):
            if config.type == LeadType.ARC and config.angle is not None:
                result.add(
                    Severity.INFO,
                    f"Manual {label.lower()} angle specified with cut direction - "
                    "angle may override automatic tangency",
                    "Consider removing manual angle to allow automatic tangent calculation",
                )

    return result


def validate_lead_configuration(
    lead_in: LeadConfig,
    lead_out: LeadConfig,
    chain: ShapeChain,
    part: DetectedPart | None = None,
    cut_direction: CutDirection = CutDirection.NONE,
) -> LeadValidationResult:
    """Validate a lead-in/lead-out pair for a chain.

    Args:
        lead_in: Lead-in configuration
        lead_out: Lead-out configuration
        chain: Chain the leads attach to
        part: Part owning the chain, if known
        cut_direction: Direction the chain will be cut

    Returns:
        Combined result; is_valid is False only when an error was found
    """
    result = LeadValidationResult()
    result.merge(validate_basic_configuration(lead_in, lead_out))
    result.merge(validate_chain_geometry(chain, lead_in, lead_out))
    if part is not None:
        result.merge(validate_part_context(chain, part, lead_in, lead_out))
    result.merge(validate_lead_lengths(lead_in, lead_out))
    result.merge(validate_cut_direction(chain, lead_in, lead_out, cut_direction))

    if result.warnings:
        logger.debug(
            "Lead validation findings",
            chain_id=chain.id,
            severity=result.severity.value,
            count=len(result.warnings),
        )
    return result
