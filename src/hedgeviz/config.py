"""Visualization settings and project-level configuration from pyproject.toml.

Reads the [tool.hedgeviz] section so a repository can pin its preferred
viewer settings, e.g.:

    [tool.hedgeviz]
    show_edge_nodes = true
    offset_magnitude = 20.0

    [tool.hedgeviz.layout]
    ideal_edge_length = 150.0
"""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from hedgeviz.exceptions import ConfigError


@dataclass(frozen=True)
class ForceLayoutConfig:
    """Parameters for the force-directed layout of vertex nodes.

    Attributes:
        ideal_edge_length: Target spacing between adjacent vertices (scene units)
        iterations: Number of spring-layout iterations
        seed: Random seed, so repeated layouts of one mesh are identical
    """

    ideal_edge_length: float = 200.0
    iterations: int = 50
    seed: int | None = 0


@dataclass(frozen=True)
class VizConfig:
    """Settings recognized by the graph builder and satellite layout.

    Attributes:
        show_edge_nodes: Add one marker node per edge, placed at the edge midpoint
        show_prev_links: Draw half-edge -> prev links next to the next links
        offset_magnitude: Distance of a half-edge node from its edge midpoint
        vertex_star_bound: Step cap for vertex-star walks on malformed meshes
        layout: Force-directed layout parameters
    """

    show_edge_nodes: bool = False
    show_prev_links: bool = True
    offset_magnitude: float = 30.0
    vertex_star_bound: int = 20
    layout: ForceLayoutConfig = field(default_factory=ForceLayoutConfig)

    def __post_init__(self) -> None:
        if isinstance(self.vertex_star_bound, bool) or not isinstance(self.vertex_star_bound, int):
            raise ConfigError(f"vertex_star_bound must be an integer, got {self.vertex_star_bound!r}")
        if self.vertex_star_bound < 1:
            raise ConfigError(
                f"Invalid vertex_star_bound: {self.vertex_star_bound}\n\n"
                f"  -> at least one step is needed to leave the start half-edge\n\n"
                f"How to fix:\n"
                f"  Use a positive bound (default: 20)"
            )
        if not math.isfinite(self.offset_magnitude) or self.offset_magnitude < 0:
            raise ConfigError(
                f"Invalid offset_magnitude: {self.offset_magnitude}\n\n"
                f"  -> must be a finite, non-negative distance"
            )
        if self.layout.ideal_edge_length <= 0 or self.layout.iterations < 1:
            raise ConfigError(f"Invalid layout settings: {self.layout}")

    def with_overrides(self, **overrides: Any) -> VizConfig:
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def find_pyproject(start: Path | None = None) -> Path | None:
    """Walk up from start directory to find pyproject.toml."""
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        candidate = directory / "pyproject.toml"
        if candidate.is_file():
            return candidate
    return None


def config_from_dict(section: dict[str, Any]) -> VizConfig:
    """Build a VizConfig from a [tool.hedgeviz] table, rejecting unknown keys."""
    known = {f.name for f in fields(VizConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ConfigError(
            f"Unknown [tool.hedgeviz] keys: {', '.join(unknown)}\n\n"
            f"  -> valid keys: {', '.join(sorted(known))}"
        )

    values = dict(section)
    layout_section = values.pop("layout", None)
    if layout_section is not None:
        layout_known = {f.name for f in fields(ForceLayoutConfig)}
        bad = sorted(set(layout_section) - layout_known)
        if bad:
            raise ConfigError(f"Unknown [tool.hedgeviz.layout] keys: {', '.join(bad)}")
        values["layout"] = ForceLayoutConfig(**layout_section)
    return VizConfig(**values)


def load_config(start: Path | None = None) -> VizConfig:
    """Load [tool.hedgeviz] from the nearest pyproject.toml.

    Returns default config if no pyproject.toml or no [tool.hedgeviz] section.
    """
    path = find_pyproject(start)
    if path is None:
        return VizConfig()

    if sys.version_info >= (3, 11):
        import tomllib
    else:
        try:
            import tomli as tomllib
        except ImportError:
            return VizConfig()

    with open(path, "rb") as f:
        data = tomllib.load(f)

    section = data.get("tool", {}).get("hedgeviz", {})
    if not section:
        return VizConfig()

    return config_from_dict(section)
