"""cutpath - Cut path planning for 2D CAM.

cutpath turns a flat collection of 2D shapes (lines, arcs, circles,
polylines, splines and ellipses) into machine-ready cut paths. It joins
shapes into continuous chains, works out which closed chains are part
outlines and which are holes, and generates lead-in/lead-out moves that
meet each chain tangentially without crossing solid material.

Example:
    $ cutpath drawing.json --lead-in arc --lead-in-length 5

This will write the chains, parts and leads planned for drawing.json
to drawing-plan.json.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
