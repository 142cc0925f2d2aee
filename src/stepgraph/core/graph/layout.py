"""Position math for placing nodes on the canvas.

Pure functions: the drop gesture shell only forwards pointer coordinates,
so none of this needs a UI to test.
"""

from __future__ import annotations

from stepgraph.contracts.graph import Position, Viewport

# Horizontal spacing used when laying out nodes that have no stored position
RECORD_LAYOUT_SPACING = 500.0


def screen_to_canvas(client: Position, bounds_origin: Position, viewport: Viewport | None) -> Position:
    """Convert a pointer position to canvas coordinates.

    Args:
        client: Pointer position in window coordinates
        bounds_origin: Top-left corner of the canvas element in window coordinates
        viewport: Current pan/zoom (None means identity)

    Returns:
        Position in canvas space, where nodes live
    """
    view = viewport or Viewport()
    return Position(
        x=(client.x - bounds_origin.x - view.x) / view.zoom,
        y=(client.y - bounds_origin.y - view.y) / view.zoom,
    )


def canvas_to_screen(point: Position, bounds_origin: Position, viewport: Viewport | None) -> Position:
    """Inverse of screen_to_canvas()."""
    view = viewport or Viewport()
    return Position(
        x=point.x * view.zoom + view.x + bounds_origin.x,
        y=point.y * view.zoom + view.y + bounds_origin.y,
    )


def row_layout_position(index: int) -> Position:
    """Left-to-right placement for the index-th node of a stored pipeline record."""
    if index < 0:
        raise ValueError(f"layout index must be non-negative, got {index}")
    return Position(x=RECORD_LAYOUT_SPACING * index, y=0.0)
