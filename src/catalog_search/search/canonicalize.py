"""Filename canonicalization for matching media files against catalog entries.

Release filenames carry a lot of noise: separators instead of spaces,
resolution and codec tags, projection and device markers, and product codes
spelled three different ways (``PXVR 258``, ``PXVR258``, ``PXVR00258``).
``canonicalize_filename`` strips the noise and appends the missing code
spellings so the result can be fed straight into a fuzzy search.

The function is not idempotent: running it on its own output may append
further code variants. Apply it once, to raw filenames.
"""

from __future__ import annotations

import re


NOISE_TOKENS = frozenset(
    {
        "180",
        "180x180",
        "2880x1440",
        "3d",
        "3dh",
        "3dv",
        "30fps",
        "30m",
        "360",
        "3840x1920",
        "4k",
        "5k",
        "5400x2700",
        "60fps",
        "6k",
        "7k",
        "7680x3840",
        "8k",
        "fb360",
        "fisheye190",
        "funscript",
        "cmscript",
        "h264",
        "h265",
        "hevc",
        "hq",
        "hsp",
        "lq",
        "lr",
        "mkv",
        "mkx200",
        "mkx220",
        "mono",
        "mp4",
        "oculus",
        "oculus5k",
        "oculusrift",
        "original",
        "rf52",
        "smartphone",
        "srt",
        "ssa",
        "tb",
        "uhq",
        "vrca220",
        "vp9",
    }
)

_SEPARATOR_PATTERN = re.compile(r"[._+-]")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_RESOLUTION_PATTERN = re.compile(r"^[0-9]+p$")
_PRODUCT_CODE_PATTERN = re.compile(r"([a-zA-Z]+)\s+([0-9]+)")
_PADDED_CODE_WIDTH = 5


def _strip_extension(filename: str) -> str:
    # Only a dot inside the last path element starts an extension.
    dot = filename.rfind(".")
    if dot == -1 or dot < max(filename.rfind("/"), filename.rfind("\\")):
        return filename
    return filename[:dot]


def _is_noise(token: str) -> bool:
    lowered = token.lower()
    return lowered in NOISE_TOKENS or _RESOLUTION_PATTERN.match(lowered) is not None


def product_code_variants(text: str) -> list[str]:
    """Return the zero-padded and concatenated spellings of every product code in ``text``.

    ``"PXVR 258"`` yields ``["PXVR00258", "PXVR258"]``.
    """
    variants: list[str] = []
    for prefix, digits in _PRODUCT_CODE_PATTERN.findall(text):
        variants.append(f"{prefix}{int(digits):0{_PADDED_CODE_WIDTH}d}")
        variants.append(f"{prefix}{digits}")
    return variants


def canonicalize_filename(filename: str) -> str:
    """Normalize a raw media filename into comparable search text.

    Example:
        >>> canonicalize_filename("My.Scene_1080p.h264.mp4")
        'My Scene'
        >>> canonicalize_filename("PXVR 258.mp4")
        'PXVR 258 PXVR00258 PXVR258'
    """
    name = _strip_extension(filename)
    name = _SEPARATOR_PATTERN.sub(" ", name)
    name = _WHITESPACE_PATTERN.sub(" ", name).strip()

    kept = [token for token in name.split(" ") if not _is_noise(token)]
    result = " ".join(kept).replace(" s ", "'s ")

    for variant in product_code_variants(result):
        if variant not in result:
            result = f"{result} {variant}"
    return result
