import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Union

import networkx as nx
import numpy as np
from numpy.typing import NDArray

from .png import Image, load_png

log = logging.getLogger(__name__)

# regions smaller than this are usually anti-aliasing noise
MINIMUM_REGION_AREA = 25

# faintly visible pixels don't start a region
DEFAULT_ALPHA_THRESHOLD = 127


@dataclass
class Region:
    x1: int
    y1: int
    x2: int
    y2: int

    @property
    def width(self) -> int:
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        return self.y2 - self.y1

    @property
    def area(self) -> int:
        return self.width * self.height

    def to_dict(self) -> Dict[str, int]:
        return {"x1": self.x1, "y1": self.y1, "x2": self.x2, "y2": self.y2}


def visible_mask(image: Image, alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD) -> NDArray[np.bool_]:
    """Pixels opaque enough to belong to a region. The outermost one pixel
    border of the image is never part of a region."""
    mask = image.pixels[:, :, 3] > alpha_threshold
    if mask.size:
        mask[[0, -1], :] = False
        mask[:, [0, -1]] = False
    return mask


@dataclass(frozen=True)
class Run:
    """A horizontal stretch of visible pixels, `start` and `end` inclusive."""

    y: int
    start: int
    end: int

    def touches(self, below: "Run") -> bool:
        # diagonal contact counts
        return below.start <= self.end + 1 and self.start <= below.end + 1


def row_runs(mask: NDArray[np.bool_]) -> List[Run]:
    """Splits every row of the mask into runs, top to bottom then left to
    right."""
    height, width = mask.shape
    padded = np.zeros((height, width + 2), dtype=np.int8)
    padded[:, 1:-1] = mask
    edges = np.diff(padded, axis=1)
    start_ys, starts = np.nonzero(edges == 1)
    _, stops = np.nonzero(edges == -1)
    return [
        Run(y, start, stop - 1)
        for y, start, stop in zip(start_ys.tolist(), starts.tolist(), stops.tolist())
    ]


def _run_graph(runs: List[Run]) -> nx.Graph:
    """
    One node per run. Runs on neighboring rows are joined when any of their
    pixels are 8-connected. Both rows are walked left to right at once, always
    stepping past whichever run finishes first.
    """
    graph = nx.Graph()
    graph.add_nodes_from(runs)
    rows: Dict[int, List[Run]] = defaultdict(list)
    for run in runs:
        rows[run.y].append(run)

    for y, upper in rows.items():
        lower = rows.get(y + 1, [])
        i = j = 0
        while i < len(upper) and j < len(lower):
            above, below = upper[i], lower[j]
            if above.touches(below):
                graph.add_edge(above, below)
            if above.end + 1 <= below.end:
                i += 1
            else:
                j += 1
    return graph


def _bounding_box(component: Iterable[Run]) -> Region:
    runs = list(component)
    return Region(
        min(run.start for run in runs),
        min(run.y for run in runs),
        max(run.end for run in runs),
        max(run.y for run in runs),
    )


def detect_regions(image: Image, alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD) -> List[Region]:
    """Finds connected areas of visible pixels and returns their bounding
    boxes, ordered top to bottom then left to right."""
    mask = visible_mask(image, alpha_threshold)
    graph = _run_graph(row_runs(mask))
    regions = [_bounding_box(component) for component in nx.connected_components(graph)]
    regions.sort(key=lambda region: (region.y1, region.x1))
    log.debug("found %d regions in %dx%d image", len(regions), image.width, image.height)
    return regions


def filter_regions(regions: Iterable[Region], minimum_area: int = MINIMUM_REGION_AREA) -> List[Region]:
    return [region for region in regions if region.area >= minimum_area]


def detect_regions_in_file(
    file: Union[str, Path],
    minimum_area: int = MINIMUM_REGION_AREA,
    alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD,
) -> List[Region]:
    return filter_regions(detect_regions(load_png(file), alpha_threshold), minimum_area)

