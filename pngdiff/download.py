import logging
import os
import tempfile
import time
from pathlib import Path
from urllib.parse import urlparse

import requests

from .png import Image, load_png

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class DownloadError(RuntimeError):
    pass


def valid_url(value: str) -> bool:
    if not value:
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def download_file(url: str, timeout: float = DEFAULT_TIMEOUT) -> Path:
    """Writes the body at `url` to a fresh temporary file and returns its
    path. The caller owns the file."""
    start = time.monotonic()
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise DownloadError(f"could not download {url}") from exc
    elapsed = time.monotonic() - start

    fd, name = tempfile.mkstemp(prefix="screenshot", suffix=".png")
    with os.fdopen(fd, "wb") as tmpfile:
        tmpfile.write(response.content)
    log.info("url=%s size=%d elapsed=%.3fs tmpfile=%s", url, len(response.content), elapsed, name)
    return Path(name)


def download_png(url: str, timeout: float = DEFAULT_TIMEOUT) -> Image:
    path = download_file(url, timeout)
    try:
        return load_png(path)
    finally:
        path.unlink()


def load_source(source: str, timeout: float = DEFAULT_TIMEOUT) -> Image:
    """Loads an image from an http(s) URL or a local path."""
    if valid_url(source):
        return download_png(source, timeout)
    return load_png(source)
