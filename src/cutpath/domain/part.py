"""Part structure detected from closed chains.

A part is a shell (outer boundary) plus the holes cut out of it. Holes may
themselves contain nested shells, which appear in the hole's own holes
list, giving a recursive tree:

    PartShell
    └── PartHole
        └── PartHole (island inside the hole)
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from cutpath.domain.chain import BoundingBox, ShapeChain


class ChainRole(str, Enum):
    """Role a chain plays within a part."""

    SHELL = "shell"
    HOLE = "hole"
    SHAPE = "shape"


class PartWarningType(str, Enum):
    """Kinds of structural issue reported by part detection."""

    OVERLAPPING_BOUNDARY = "overlapping_boundary"


@dataclass
class PartHole:
    """A hole boundary within a part.

    Attributes:
        id: Hole identifier (hole-<part>-<n>, nested holes extend the suffix)
        chain: Closed chain tracing the hole
        bounding_box: Bounding box of the chain
        holes: Boundaries nested inside this hole
    """

    id: str
    chain: ShapeChain
    bounding_box: BoundingBox
    holes: list["PartHole"] = field(default_factory=list)

    @property
    def type(self) -> str:
        return "hole"

    def iter_tree(self) -> Iterator["PartHole"]:
        """Yield this hole and every hole nested beneath it, depth first."""
        yield self
        for child in self.holes:
            yield from child.iter_tree()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "chain": self.chain.to_dict(),
            "bounding_box": self.bounding_box.to_dict(),
            "holes": [h.to_dict() for h in self.holes],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PartHole":
        return cls(
            id=data["id"],
            chain=ShapeChain.from_dict(data["chain"]),
            bounding_box=BoundingBox.from_dict(data["bounding_box"]),
            holes=[PartHole.from_dict(h) for h in data.get("holes", [])],
        )


@dataclass
class PartShell:
    """The outer boundary of a part.

    Attributes:
        id: Shell identifier (shell-<part>)
        chain: Closed chain tracing the shell
        bounding_box: Bounding box of the chain
        holes: Direct holes of the shell
    """

    id: str
    chain: ShapeChain
    bounding_box: BoundingBox
    holes: list[PartHole] = field(default_factory=list)

    @property
    def type(self) -> str:
        return "shell"


@dataclass
class DetectedPart:
    """A shell together with its direct holes.

    The shell's holes list and the part's holes list are the same list.

    Attributes:
        id: Part identifier (part-1, part-2, ...)
        shell: Outer boundary
        holes: Direct holes of the shell
    """

    id: str
    shell: PartShell
    holes: list[PartHole] = field(default_factory=list)

    def role_of(self, chain: ShapeChain) -> ChainRole:
        """Classify a chain against this part.

        Chains are matched by identity first. A part rebuilt with from_dict
        (as in worker processes) holds equal but distinct chain objects, so
        chain ids are compared when no identical object is found.

        Args:
            chain: Chain to classify

        Returns:
            SHELL, HOLE (direct holes only) or SHAPE when the chain is not
            part of this part
        """
        if self.shell.chain is chain:
            return ChainRole.SHELL
        if any(hole.chain is chain for hole in self.holes):
            return ChainRole.HOLE
        if self.shell.chain.id == chain.id:
            return ChainRole.SHELL
        if any(hole.chain.id == chain.id for hole in self.holes):
            return ChainRole.HOLE
        return ChainRole.SHAPE

    def chains(self) -> list[ShapeChain]:
        """Shell chain followed by the direct hole chains."""
        return [self.shell.chain, *(hole.chain for hole in self.holes)]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for IPC.

        Returns:
            Dictionary representation of the part
        """
        return {
            "id": self.id,
            "shell": {
                "id": self.shell.id,
                "chain": self.shell.chain.to_dict(),
                "bounding_box": self.shell.bounding_box.to_dict(),
            },
            "holes": [h.to_dict() for h in self.holes],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DetectedPart":
        """Deserialize from dictionary.

        Args:
            data: Dictionary representation of a part

        Returns:
            DetectedPart instance sharing one holes list with its shell
        """
        holes = [PartHole.from_dict(h) for h in data.get("holes", [])]
        shell_data = data["shell"]
        shell = PartShell(
            id=shell_data["id"],
            chain=ShapeChain.from_dict(shell_data["chain"]),
            bounding_box=BoundingBox.from_dict(shell_data["bounding_box"]),
            holes=holes,
        )
        return cls(id=data["id"], shell=shell, holes=holes)


@dataclass(frozen=True, slots=True)
class PartDetectionWarning:
    """A structural issue found during part detection.

    Attributes:
        type: Kind of issue
        chain_id: Chain the warning is about
        message: Human readable description
        related_chain_id: Second chain involved, if any
    """

    type: PartWarningType
    chain_id: str
    message: str
    related_chain_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "chain_id": self.chain_id,
            "message": self.message,
            "related_chain_id": self.related_chain_id,
        }


@dataclass
class PartDetectionResult:
    """Outcome of part detection.

    Attributes:
        parts: Detected parts in shell discovery order
        warnings: Structural issues found along the way
    """

    parts: list[DetectedPart] = field(default_factory=list)
    warnings: list[PartDetectionWarning] = field(default_factory=list)

    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def part_for_chain(self, chain_id: str) -> DetectedPart | None:
        """Find the part whose shell or direct hole is the given chain.

        A chain that is the shell of one part is reported for that part even
        when it also sits in another part's hole tree.
        """
        for part in self.parts:
            if part.shell.chain.id == chain_id:
                return part
        for part in self.parts:
            if any(hole.chain.id == chain_id for hole in part.holes):
                return part
        return None
