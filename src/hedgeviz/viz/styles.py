"""Scene categories and their styling.

Every scene node and link carries one category tag. The same tags select
the Cytoscape.js style rules in the exported HTML, so changing a color here
changes it in the browser view.
"""

from dataclasses import dataclass

# ============================================================
# NODE CATEGORIES
# ============================================================

VERTEX = "vertex"
HALF_EDGE = "half-edge"
EDGE = "edge"
FACE = "face"

# ============================================================
# LINK CATEGORIES
# ============================================================

VERTEX_EDGE = "vertex-edge"  # derived vertex adjacency, labelled with its edge id
PAIR_LINK = "pair-link"
NEXT_LINK = "next-link"
PREV_LINK = "prev-link"
VERTEX_LINK = "vertex-link"
EDGE_LINK = "edge-link"
INCIDENCE_LINK = "incidence-link"  # vertex/face -> its incident half-edge

NODE_CATEGORIES = (VERTEX, HALF_EDGE, EDGE, FACE)
LINK_CATEGORIES = (VERTEX_EDGE, PAIR_LINK, NEXT_LINK, PREV_LINK, VERTEX_LINK, EDGE_LINK, INCIDENCE_LINK)


@dataclass(frozen=True)
class CategoryStyle:
    """Cytoscape.js style for one category."""

    color: str
    size: int = 12
    width: int = 1
    arrow: bool = True
    label: str | None = "data(id)"
    font_size: int = 8


NODE_STYLES: dict[str, CategoryStyle] = {
    VERTEX: CategoryStyle(color="#F00", size=20, font_size=12),
    HALF_EDGE: CategoryStyle(color="#00F"),
    EDGE: CategoryStyle(color="#666"),
    FACE: CategoryStyle(color="#999"),
}

LINK_STYLES: dict[str, CategoryStyle] = {
    VERTEX_EDGE: CategoryStyle(color="#CCC", width=3, arrow=False, label="data(label)", font_size=6),
    PAIR_LINK: CategoryStyle(color="#00F", arrow=False, label=None),
    NEXT_LINK: CategoryStyle(color="#0F0", label=None),
    PREV_LINK: CategoryStyle(color="#080", label=None),
    VERTEX_LINK: CategoryStyle(color="#F00", label=None),
    EDGE_LINK: CategoryStyle(color="#CCC", label=None),
    INCIDENCE_LINK: CategoryStyle(color="#FF0", label=None),
}


def cytoscape_stylesheet() -> list[dict]:
    """Build the Cytoscape.js stylesheet for all categories."""
    sheet: list[dict] = [
        {
            "selector": "node",
            "style": {"background-color": "#666", "label": "data(id)", "font-size": "8px", "width": "12px", "height": "12px"},
        },
        {
            "selector": "edge",
            "style": {"width": 1, "curve-style": "bezier", "font-size": "8px"},
        },
    ]
    for category, style in NODE_STYLES.items():
        rule = {
            "background-color": style.color,
            "width": f"{style.size}px",
            "height": f"{style.size}px",
            "font-size": f"{style.font_size}px",
        }
        if style.label:
            rule["label"] = style.label
        sheet.append({"selector": f'[class="{category}"]', "style": rule})
    for category, style in LINK_STYLES.items():
        rule = {
            "width": style.width,
            "line-color": style.color,
            "target-arrow-color": style.color,
            "target-arrow-shape": "triangle" if style.arrow else "none",
            "font-size": f"{style.font_size}px",
        }
        if style.label:
            rule["label"] = style.label
        sheet.append({"selector": f'[class="{category}"]', "style": rule})
    return sheet
