"""
Image Handler

Utilities for downloading and compositing images.

Downloading images: supports only plain GET requests for image files specified by URL, with no
expectation of authentication or other API requests. The response body is stored exactly as
received; decoding happens later, when the image is composited.

Image compositing: scales the downloaded image to a fixed size and centers it on a black canvas
sized for the desktop. This is intended only for building wallpapers and is not a general photo
manipulation toolkit.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError
import requests
import structlog

log = structlog.stdlib.get_logger(__name__)

CANVAS_COLOR = "black"
JPEG_QUALITY = 75


class InvalidImageError(Exception):
    """
    Raised when a provided binary input file is not an image. Wrapper around the PIL
    UnidentifiedImageError for better identification of errors during debugging
    and custom error messaging.
    """

    pass


class ImageDownloadError(Exception):
    """
    Raised when an image download is unsuccessful.
    """

    pass


class ImageProcessingError(Exception):
    """
    Raised when an image cannot be resized, composited or encoded.
    """

    pass


def download_image(url: str, file_path: Path, timeout: Optional[float] = None) -> Path:
    """
    Download the resource at url and write the response body verbatim to file_path, replacing any
    file already there. Returns the absolute location on filesystem where the body was saved.

    If downloading fails for one of various reasons, raise ImageDownloadError instead of failing
    silently. Nothing is written in that case: the body goes to a temporary file next to the
    destination first and is only moved into place once it has been written completely, so an
    earlier download at file_path survives a failed run.
    """

    destination_path = Path(file_path).expanduser().resolve()

    # edge case where destination path is a folder
    if destination_path.is_dir():
        raise ImageDownloadError(f"Destination file {destination_path} is a directory.")

    log.info("Downloading image", url=url, path=str(destination_path))

    # requests has no timeout by default, so timeout=None blocks until the server answers or the
    # connection drops.
    try:
        r = requests.get(url, timeout=timeout)

    except requests.exceptions.RequestException as error:
        raise ImageDownloadError(str(error))

    # successful request but received a bad response from the server.
    try:
        r.raise_for_status()
    except requests.exceptions.HTTPError:
        raise ImageDownloadError(
            f"Download error: something went wrong trying to access {url} (status code {r.status_code})"
        )

    try:
        destination_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=destination_path.parent, prefix=f".{destination_path.name}.", suffix=".part"
        )

    except OSError as error:
        raise ImageDownloadError(f"Could not write to {destination_path.parent}: {error}")

    try:
        with os.fdopen(fd, "wb") as file:
            file.write(r.content)
        os.replace(tmp_name, destination_path)

    except OSError as error:
        Path(tmp_name).unlink(missing_ok=True)
        raise ImageDownloadError(f"Could not save image to {destination_path}: {error}")

    return destination_path


def center_offset(
    canvas_size: tuple[int, int], image_size: tuple[int, int]
) -> tuple[int, int]:
    """
    Top-left corner at which image_size is centered on canvas_size. Floor division puts the extra
    pixel of an odd difference on the right/bottom. Negative when the image is larger than the canvas.
    """

    return (
        (canvas_size[0] - image_size[0]) // 2,
        (canvas_size[1] - image_size[1]) // 2,
    )


def composite_image(
    img_path: Path,
    dest_path: Path,
    scale_to: tuple[int, int],
    canvas_size: tuple[int, int],
    quality: int = JPEG_QUALITY,
) -> Path:
    """
    Resize the image at img_path to exactly scale_to with bicubic resampling, paste it centered on a
    black canvas of canvas_size and save the canvas as a JPEG at dest_path. The original image is
    unmodified. Returns dest_path.

    A scaled image larger than the canvas is not rejected. Its offset goes negative and PIL clips the
    paste to the canvas, so the image is cropped evenly on both sides.
    """

    for name, (width, height) in (("scale_to", scale_to), ("canvas_size", canvas_size)):
        if width <= 0 or height <= 0:
            raise ImageProcessingError(
                f"{name} must have positive dimensions, got {width}x{height}."
            )

    dest_path = Path(dest_path).expanduser().resolve()

    log.info("Resizing image", path=str(img_path), scale_to=list(scale_to), canvas_size=list(canvas_size))

    try:
        with Image.open(img_path) as image:
            resized = image.convert("RGB").resize(
                scale_to, resample=Image.Resampling.BICUBIC
            )

    except UnidentifiedImageError:
        raise InvalidImageError(f"Input {str(img_path)} does not appear to be an image.")

    except FileNotFoundError:
        raise InvalidImageError(f"Input {str(img_path)} could not be found.")

    except Image.DecompressionBombError as error:
        raise ImageProcessingError(f"Refusing to decode {img_path}: {error}")

    except (OSError, ValueError, MemoryError) as error:
        raise ImageProcessingError(f"Could not resize {img_path}: {error}")

    offset = center_offset(canvas_size, scale_to)
    if offset[0] < 0 or offset[1] < 0:
        log.warning("Scaled image exceeds canvas, cropping", offset=list(offset))

    try:
        canvas = Image.new("RGB", canvas_size, CANVAS_COLOR)
        canvas.paste(resized, offset)
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        canvas.save(dest_path, format="JPEG", quality=quality)

    except (OSError, ValueError, MemoryError) as error:
        raise ImageProcessingError(f"Could not save wallpaper to {dest_path}: {error}")

    finally:
        resized.close()

    return dest_path
