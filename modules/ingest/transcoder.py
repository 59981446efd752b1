"""Decode downloaded bytes and re-encode them as a JPEG file."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from modules.errors import DecodeError, WriteError
from modules.utils.image_utils import prepare_for_jpeg

logger = logging.getLogger(__name__)

DEFAULT_JPEG_QUALITY = 90
PARTIAL_SUFFIX = ".part"


def transcode_to_jpeg(source: Path, destination: Path, quality: int = DEFAULT_JPEG_QUALITY) -> Path:
    """Write ``source`` to ``destination`` as JPEG and return the destination.

    The format is taken from the decoded bytes, never from the file name or
    the HTTP Content-Type. The output is written next to ``destination`` and
    renamed into place, so a failed encode never leaves a half-written JPEG.
    """
    source = Path(source)
    destination = Path(destination)

    try:
        image = Image.open(source)
    except (UnidentifiedImageError, Image.DecompressionBombError) as exc:
        raise DecodeError(f"Downloaded file is not a supported image: {exc}") from exc
    except OSError as exc:
        raise DecodeError(f"Downloaded file could not be opened: {exc}") from exc

    with image:
        try:
            image.load()
            prepared = prepare_for_jpeg(image)
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            raise DecodeError(f"Downloaded image could not be decoded: {exc}") from exc
        _save_atomically(prepared, destination, quality)
        logger.debug("Transcoded %s (%s) to %s at quality %s", source, image.format, destination, quality)

    return destination


def _save_atomically(image: Image.Image, destination: Path, quality: int) -> None:
    partial = destination.with_name(destination.name + PARTIAL_SUFFIX)
    try:
        image.save(partial, format="JPEG", quality=quality)
        os.replace(partial, destination)
    except (OSError, ValueError) as exc:
        try:
            partial.unlink(missing_ok=True)
        except OSError as cleanup_exc:
            logger.warning("Could not remove partial JPEG %s: %s", partial, cleanup_exc)
        raise WriteError(f"Cannot write JPEG to {destination}: {exc}") from exc
