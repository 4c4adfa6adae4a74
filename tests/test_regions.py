import numpy as np

from pngdiff.png import Image
from pngdiff.regions import (
    MINIMUM_REGION_AREA,
    Region,
    Run,
    detect_regions,
    detect_regions_in_file,
    filter_regions,
    row_runs,
)

from .conftest import CLEAR, RED, solid


def two_blobs():
    pixels = solid(12, 12, CLEAR)
    pixels[2:5, 2:5] = RED
    pixels[7:10, 7:11] = RED
    return pixels


def test_separate_blobs_are_separate_regions():
    regions = detect_regions(Image.from_array(two_blobs()))
    assert regions == [Region(2, 2, 4, 4), Region(7, 7, 10, 9)]
    assert [region.area for region in regions] == [4, 6]


def test_diagonal_neighbors_join_regions():
    pixels = two_blobs()
    pixels[5, 5] = RED
    pixels[6, 6] = RED
    assert detect_regions(Image.from_array(pixels)) == [Region(2, 2, 10, 9)]


def test_border_is_ignored():
    pixels = solid(6, 6, CLEAR)
    pixels[0, :] = RED
    pixels[:, 5] = RED
    assert detect_regions(Image.from_array(pixels)) == []


def test_faint_pixels_are_not_visible():
    pixels = solid(6, 6, CLEAR)
    pixels[2:4, 2:4] = (0, 0, 0, 127)
    assert detect_regions(Image.from_array(pixels)) == []
    assert detect_regions(Image.from_array(pixels), alpha_threshold=100) == [Region(2, 2, 3, 3)]


def test_filter_regions():
    regions = [Region(0, 0, 4, 4), Region(0, 0, 5, 5), Region(1, 1, 1, 1)]
    assert filter_regions(regions, minimum_area=MINIMUM_REGION_AREA) == [Region(0, 0, 5, 5)]
    assert filter_regions(regions, minimum_area=0) == regions


def test_region_serializes_corners():
    assert Region(1, 2, 3, 4).to_dict() == {"x1": 1, "y1": 2, "x2": 3, "y2": 4}


def test_detect_regions_in_file(write_png):
    path = write_png("blobs.png", two_blobs())
    assert detect_regions_in_file(path, minimum_area=5) == [Region(7, 7, 10, 9)]


def test_row_runs():
    mask = np.array(
        [
            [False, True, True, False, True],
            [False, False, False, False, False],
            [True, True, True, True, True],
        ]
    )
    assert row_runs(mask) == [Run(0, 1, 2), Run(0, 4, 4), Run(2, 0, 4)]


def test_arms_joined_at_the_bottom_are_one_region():
    pixels = solid(9, 9, CLEAR)
    pixels[1:7, 2] = RED
    pixels[1:7, 6] = RED
    pixels[6, 2:7] = RED
    pixels[2, 4] = RED
    assert detect_regions(Image.from_array(pixels)) == [Region(2, 1, 6, 6), Region(4, 2, 4, 2)]


def test_runs_touching_only_at_a_corner_join():
    pixels = solid(8, 6, CLEAR)
    pixels[2, 1:3] = RED
    pixels[3, 3:6] = RED
    assert detect_regions(Image.from_array(pixels)) == [Region(1, 2, 5, 3)]


def test_screenshot_sized_opaque_image_is_one_region():
    image = Image.from_array(solid(1200, 900))
    assert detect_regions(image) == [Region(1, 1, 1198, 898)]
