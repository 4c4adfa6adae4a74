import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Optional, Union

import numpy as np
from numpy.typing import NDArray

from .png import DecodeError, Image, load_png

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiffResult:
    additions: int
    deletions: int
    diffs: int
    changes: float

    @property
    def total(self) -> int:
        return self.additions + self.deletions + self.diffs

    def to_dict(self) -> Dict[str, Union[int, float]]:
        return asdict(self)


def _row(premultiplied: NDArray[np.uint32], y: int) -> Optional[NDArray[np.uint32]]:
    if y >= premultiplied.shape[0]:
        return None
    return premultiplied[y]


def _starts_empty(row: NDArray[np.uint32]) -> bool:
    return row.shape[0] == 0 or not row[0].any()


def diff_images(base: Image, compare: Image) -> DiffResult:
    """Compares two images one row at a time.

    A row whose first pixel is transparent is treated as missing: if the
    base row is missing the compare row counts as added, if the compare row
    is missing the base row counts as deleted. Rows present in both images
    are compared pixel by pixel over their shared width, and any columns
    beyond that width count as additions (compare is wider) or deletions
    (base is wider).
    """
    base_data = base.premultiplied()
    compare_data = compare.premultiplied()
    overlap = min(base.width, compare.width)

    additions = 0
    deletions = 0
    diffs = 0

    for y in range(max(base.height, compare.height)):
        base_row = _row(base_data, y)
        compare_row = _row(compare_data, y)

        if compare_row is not None and (base_row is None or _starts_empty(base_row)):
            additions += compare.width
        elif base_row is not None and (compare_row is None or _starts_empty(compare_row)):
            deletions += base.width
        else:
            assert base_row is not None and compare_row is not None
            unequal = np.any(base_row[:overlap] != compare_row[:overlap], axis=1)
            diffs += int(np.count_nonzero(unequal))
            if compare.width > base.width:
                additions += compare.width - base.width
            elif base.width > compare.width:
                deletions += base.width - compare.width

    total = additions + deletions + diffs
    if base.area > 0:
        changes = total / base.area * 100
    else:
        changes = 100.0 if total else 0.0

    result = DiffResult(additions, deletions, diffs, changes)
    log.debug("diff %s", result)
    return result


def diff_files(base_path: Union[str, Path], compare_path: Union[str, Path]) -> DiffResult:
    try:
        base = load_png(base_path)
    except (OSError, DecodeError) as exc:
        raise DecodeError("Couldn't decode the base image.") from exc

    try:
        compare = load_png(compare_path)
    except (OSError, DecodeError) as exc:
        raise DecodeError("Couldn't decode the comparison image.") from exc

    return diff_images(base, compare)
