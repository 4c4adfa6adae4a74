import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import uvicorn
from tap import Tap

from . import png
from .diff import diff_images
from .download import DEFAULT_TIMEOUT, load_source
from .regions import DEFAULT_ALPHA_THRESHOLD, MINIMUM_REGION_AREA, detect_regions, filter_regions
from .server import Settings, create_app

FIXTURES = Path(__file__).resolve().parent.parent / "fixtures" / "large"

usage = """
Usage:
    python -m pngdiff [command] [arguments]

Available Commands:
    area        Print the pixel area of each image
    diff        Compare a base image against a compare image
    regions     Find visible regions in an image
    serve       Start the HTTP service
"""


class CommonParser(Tap):
    log_level: str = "WARNING"


class AreaParser(CommonParser):
    paths: List[Path] = []

    def configure(self):
        self.add_argument("paths", nargs="*")


class DiffParser(CommonParser):
    base: str
    compare: str
    timeout: float = DEFAULT_TIMEOUT

    def configure(self):
        self.add_argument("base")
        self.add_argument("compare")


class RegionsParser(CommonParser):
    image: str
    minimum_region_area: int = MINIMUM_REGION_AREA
    alpha_threshold: int = DEFAULT_ALPHA_THRESHOLD
    timeout: float = DEFAULT_TIMEOUT

    def configure(self):
        self.add_argument("image")


class ServeParser(CommonParser):
    host: str = "127.0.0.1"
    port: int = 8080
    timeout: float = DEFAULT_TIMEOUT
    minimum_region_area: int = MINIMUM_REGION_AREA


def run_area(args: AreaParser):
    paths = args.paths
    if not paths:
        # the benchmark fixtures only ship with a source checkout
        if not FIXTURES.is_dir():
            args.error(f"no paths given and no fixtures at {FIXTURES}")
        paths = [FIXTURES / "base.png", FIXTURES / "target.png"]
    for path in paths:
        print(png.load_png(path).area)


def run_diff(args: DiffParser):
    base = load_source(args.base, args.timeout)
    compare = load_source(args.compare, args.timeout)
    print(json.dumps(diff_images(base, compare).to_dict()))


def run_regions(args: RegionsParser):
    image = load_source(args.image, args.timeout)
    regions = filter_regions(detect_regions(image, args.alpha_threshold), args.minimum_region_area)
    print(json.dumps([region.to_dict() for region in regions]))


def run_serve(args: ServeParser):
    settings = Settings(args.host, args.port, args.timeout, args.minimum_region_area)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


COMMANDS = {
    "area": (AreaParser, run_area),
    "diff": (DiffParser, run_diff),
    "regions": (RegionsParser, run_regions),
    "serve": (ServeParser, run_serve),
}


def main(argv: Optional[List[str]] = None):
    argv = sys.argv[1:] if argv is None else argv
    if not argv or argv[0] not in COMMANDS:
        print(usage)
        sys.exit(2)

    parser_type, run = COMMANDS[argv[0]]
    args = parser_type(prog=f"pngdiff {argv[0]}").parse_args(argv[1:])
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    logging.getLogger(__name__).debug("Running %s with args %s", argv[0], args)
    run(args)


if __name__ == "__main__":
    main()
