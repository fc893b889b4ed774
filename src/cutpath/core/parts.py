"""Part detection from closed chains.

This module builds the shell/hole structure of a drawing:
- Closed vs open chain classification
- Containment hierarchy between closed chains (point-in-polygon on every
  vertex, with a bounding box pre-check)
- Shell/hole classification by nesting depth parity
- Warnings for open chains straddling a closed region

Nesting depth alternates roles: depth 0 is a shell, depth 1 a hole in it,
depth 2 a shell sitting inside that hole, and so on.
"""

from dataclasses import dataclass

import structlog

from cutpath.core.chains import (
    DEFAULT_CLOSURE_TOLERANCE,
    chain_end_point,
    chain_polygon,
    chain_start_point,
    is_chain_closed,
)
from cutpath.core.geometry import point_in_polygon
from cutpath.domain import (
    BoundingBox,
    DetectedPart,
    PartDetectionResult,
    PartDetectionWarning,
    PartHole,
    PartShell,
    PartWarningType,
    Point2D,
    ShapeChain,
)

logger = structlog.get_logger(__name__)


@dataclass
class ChainNode:
    """A node in the chain containment tree.

    Attributes:
        index: Index of the chain in the closed chain list
        chain_id: Id of the chain
        parent: Index of the immediate container (None if root)
        children: Indices of directly contained chains
        depth: Nesting depth (0 for top-level)
    """

    index: int
    chain_id: str
    parent: int | None
    children: list[int]
    depth: int

    @property
    def is_shell(self) -> bool:
        """Even depth chains are shells, odd depth chains are holes."""
        return self.depth % 2 == 0


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


class PartDetector:
    """Detects parts (shells with holes) in a set of chains.

    The detector holds only its tolerance and is safe to reuse.

    Attributes:
        tolerance: Closure tolerance used to classify chains
    """

    def __init__(self, tolerance: float = DEFAULT_CLOSURE_TOLERANCE) -> None:
        self.tolerance = tolerance

    def detect(self, chains: list[ShapeChain]) -> PartDetectionResult:
        """Detect parts and structural warnings.

        Process:
        1. Split chains into closed and open
        2. Check open chains against closed chain bounding boxes
        3. Build the containment tree of closed chains
        4. Turn every shell into a part with its hole tree

        Args:
            chains: Chains to analyze

        Returns:
            PartDetectionResult with parts in shell discovery order
        """
        closed_chains = [c for c in chains if is_chain_closed(c, self.tolerance)]
        open_chains = [c for c in chains if not is_chain_closed(c, self.tolerance)]

        warnings: list[PartDetectionWarning] = []
        for open_chain in open_chains:
            warning = self._check_boundary_crossing(open_chain, closed_chains)
            if warning is not None:
                warnings.append(warning)

        tree = self.build_hierarchy(closed_chains)

        parts: list[DetectedPart] = []
        for idx, chain in enumerate(closed_chains):
            node = tree[idx]
            if not node.is_shell:
                continue

            part_number = len(parts) + 1
            holes = [
                self._build_hole(f"hole-{part_number}-{n}", child, closed_chains, tree)
                for n, child in enumerate(node.children, start=1)
            ]
            shell = PartShell(
                id=f"shell-{part_number}",
                chain=chain,
                bounding_box=chain.bounding_box(),
                holes=holes,
            )
            parts.append(DetectedPart(id=f"part-{part_number}", shell=shell, holes=holes))

        if not parts and open_chains:
            warnings.append(
                PartDetectionWarning(
                    type=PartWarningType.OVERLAPPING_BOUNDARY,
                    chain_id="all-open-chains",
                    message=(
                        f"No parts detected. Found {len(open_chains)} unclosed "
                        f"chain{_plural(len(open_chains))}. Check for gaps in your drawing "
                        "geometry - chains may not be properly connected to form closed shapes."
                    ),
                )
            )
        if not parts and closed_chains:
            warnings.append(
                PartDetectionWarning(
                    type=PartWarningType.OVERLAPPING_BOUNDARY,
                    chain_id="all-closed-chains",
                    message=(
                        f"No parts detected despite having {len(closed_chains)} closed "
                        f"chain{_plural(len(closed_chains))}. This may indicate a problem "
                        "with geometric containment analysis."
                    ),
                )
            )

        logger.debug(
            "Detected parts",
            chain_count=len(chains),
            closed_count=len(closed_chains),
            part_count=len(parts),
            warning_count=len(warnings),
        )
        return PartDetectionResult(parts=parts, warnings=warnings)

    def build_hierarchy(self, closed_chains: list[ShapeChain]) -> dict[int, ChainNode]:
        """Build the containment tree of closed chains.

        For each chain, finds its immediate parent: the smallest (by bounding
        box area) chain that geometrically contains it. A container must have
        a strictly larger bounding box, which keeps the tree acyclic even for
        coincident boundaries.

        Args:
            closed_chains: Closed chains to arrange

        Returns:
            Dict mapping chain index to ChainNode
        """
        n = len(closed_chains)
        if n == 0:
            return {}

        bboxes = [chain.bounding_box() for chain in closed_chains]
        polygons = [chain_polygon(chain) for chain in closed_chains]

        parent_map: dict[int, int | None] = {}
        for idx in range(n):
            candidates = [
                other_idx
                for other_idx in range(n)
                if other_idx != idx
                and self._contains(
                    bboxes[other_idx], polygons[other_idx], bboxes[idx], polygons[idx]
                )
            ]
            if not candidates:
                parent_map[idx] = None
            else:
                # Choose the smallest containing chain as parent
                parent_map[idx] = min(candidates, key=lambda i: bboxes[i].area)

        def get_depth(idx: int, memo: dict[int, int]) -> int:
            if idx in memo:
                return memo[idx]
            parent = parent_map.get(idx)
            if parent is None:
                memo[idx] = 0
            else:
                memo[idx] = get_depth(parent, memo) + 1
            return memo[idx]

        depth_memo: dict[int, int] = {}
        tree: dict[int, ChainNode] = {}
        for idx in range(n):
            tree[idx] = ChainNode(
                index=idx,
                chain_id=closed_chains[idx].id,
                parent=parent_map[idx],
                children=[],
                depth=get_depth(idx, depth_memo),
            )

        for idx, node in tree.items():
            if node.parent is not None:
                tree[node.parent].children.append(idx)

        return tree

    @staticmethod
    def _contains(
        outer_bbox: BoundingBox,
        outer_polygon: list[Point2D],
        inner_bbox: BoundingBox,
        inner_polygon: list[Point2D],
    ) -> bool:
        """Check if the inner chain lies completely inside the outer chain.

        Every vertex of the inner polygon must pass the ray casting test.
        """
        if not inner_polygon or len(outer_polygon) < 3:
            return False
        if not outer_bbox.contains_box(inner_bbox):
            return False
        if inner_bbox.area >= outer_bbox.area:
            return False
        return all(point_in_polygon(point, outer_polygon) for point in inner_polygon)

    def _build_hole(
        self,
        hole_id: str,
        idx: int,
        closed_chains: list[ShapeChain],
        tree: dict[int, ChainNode],
    ) -> PartHole:
        chain = closed_chains[idx]
        return PartHole(
            id=hole_id,
            chain=chain,
            bounding_box=chain.bounding_box(),
            holes=[
                self._build_hole(f"{hole_id}-{n}", child, closed_chains, tree)
                for n, child in enumerate(tree[idx].children, start=1)
            ],
        )

    @staticmethod
    def _check_boundary_crossing(
        open_chain: ShapeChain, closed_chains: list[ShapeChain]
    ) -> PartDetectionWarning | None:
        """Warn when an open chain starts inside a closed region and ends outside.

        Only the first straddled closed chain is reported.
        """
        start = chain_start_point(open_chain)
        end = chain_end_point(open_chain)

        for closed_chain in closed_chains:
            bbox = closed_chain.bounding_box()
            start_inside = start is not None and bbox.contains_point(start)
            end_inside = end is not None and bbox.contains_point(end)
            if start_inside != end_inside:
                return PartDetectionWarning(
                    type=PartWarningType.OVERLAPPING_BOUNDARY,
                    chain_id=open_chain.id,
                    message=(
                        "Chain may cross the boundary of a closed region "
                        f"(chain {closed_chain.id})"
                    ),
                    related_chain_id=closed_chain.id,
                )
        return None


def detect_parts(
    chains: list[ShapeChain], tolerance: float = DEFAULT_CLOSURE_TOLERANCE
) -> PartDetectionResult:
    """Detect parts in a list of chains.

    This is a convenience wrapper around PartDetector.

    Args:
        chains: Chains to analyze
        tolerance: Closure tolerance

    Returns:
        PartDetectionResult
    """
    return PartDetector(tolerance).detect(chains)
