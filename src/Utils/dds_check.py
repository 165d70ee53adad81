"""
dds_check.py
Decide whether an _m.dds environment mask is really a complex material map.

A complex material map stores a height map in its alpha channel.  A plain
environment mask leaves alpha fully opaque, or has no alpha at all.  Maps
that use complex material without the parallax part can't be told apart
from plain masks this way and are treated as plain.
"""

from __future__ import annotations

import io
import logging

from PIL import Image

log = logging.getLogger(__name__)


def alpha_all_opaque(image: Image.Image) -> bool:
    """True if every pixel of image has alpha 255 (or there is no alpha)."""
    if image.mode == "P" and "transparency" in image.info:
        image = image.convert("RGBA")
    if "A" not in image.getbands():
        return True
    low, _high = image.getchannel("A").getextrema()
    return low == 255


def is_complex_material(data: bytes, name: str = "") -> bool:
    """Decode texture bytes and report whether the alpha channel is in use.

    A texture Pillow can't decode is logged and treated as not complex.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            opaque = alpha_all_opaque(image)
    except (OSError, ValueError, NotImplementedError) as exc:
        log.warning("Failed to load DDS from memory: %s - skipping (%s)", name, exc)
        return False
    return not opaque
