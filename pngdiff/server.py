import logging
from dataclasses import dataclass
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from .diff import diff_images
from .download import DEFAULT_TIMEOUT, DownloadError, download_png, valid_url
from .png import DecodeError, Image
from .regions import MINIMUM_REGION_AREA, detect_regions, filter_regions

log = logging.getLogger(__name__)

appname = "pngdiff server"


@dataclass
class Settings:
    host: str = "127.0.0.1"
    port: int = 8080
    timeout: float = DEFAULT_TIMEOUT
    minimum_region_area: int = MINIMUM_REGION_AREA


class DiffResponse(BaseModel):
    additions: int
    deletions: int
    diffs: int
    changes: float


class RegionResponse(BaseModel):
    x1: int
    y1: int
    x2: int
    y2: int


def _fetch(name: str, url: str, timeout: float, invalid: str = "invalid {name} got {url}") -> Image:
    if not valid_url(url):
        raise HTTPException(status_code=400, detail=invalid.format(name=name, url=url))
    try:
        return download_png(url, timeout)
    except DownloadError as exc:
        log.warning("download of %s failed: %s", url, exc.__cause__)
        raise HTTPException(status_code=502, detail=f"could not download {name} at {url}") from exc
    except DecodeError as exc:
        raise HTTPException(status_code=422, detail=f"could not decode {name} at {url}") from exc


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    app = FastAPI(title=appname)

    @app.get("/")
    def index():
        return appname

    @app.get("/diff", response_model=DiffResponse)
    def diff(base_url: str = "", compare_url: str = ""):
        base = _fetch("base_url", base_url, settings.timeout)
        compare = _fetch("compare_url", compare_url, settings.timeout)
        result = diff_images(base, compare)
        log.info("diff %s %s -> %s", base_url, compare_url, result)
        return DiffResponse(**result.to_dict())

    @app.get("/regions", response_model=List[RegionResponse])
    def regions(image_url: str = "", minimum_region_area: Optional[str] = None):
        minimum_area = settings.minimum_region_area
        if minimum_region_area:
            try:
                minimum_area = int(minimum_region_area)
            except ValueError:
                raise HTTPException(
                    status_code=400,
                    detail="invalid minimum_region_area must be an integer",
                )

        image = _fetch(
            "image_url", image_url, settings.timeout, invalid='missing valid {name} got "{url}"'
        )
        found = filter_regions(detect_regions(image), minimum_area)
        return [RegionResponse(**region.to_dict()) for region in found]

    return app
