"""
Frame Size Negotiation
Picks capture and preview resolutions from the sizes a device supports
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

ASPECT_TOLERANCE = 0.1


@dataclass(frozen=True)
class FrameSize:
    width: int
    height: int

    @property
    def aspect(self) -> float:
        return self.width / self.height

    def __str__(self):
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class NegotiatedSizes:
    capture: FrameSize
    preview: FrameSize


def _check_viewport(width: int, height: int):
    if width <= 0 or height <= 0:
        raise ValueError(f"Viewport must be positive, got {width}x{height}")


def _usable(sizes: Iterable[FrameSize]):
    return [size for size in sizes if size.width > 0 and size.height > 0]


def _matching_aspect(sizes: Iterable[FrameSize], target: float, tolerance: float):
    return [size for size in sizes if abs(size.aspect - target) <= tolerance]


def _tallest(sizes: Sequence[FrameSize]) -> Optional[FrameSize]:
    best = None
    for size in sizes:
        if best is None or size.height > best.height:
            best = size
    return best


def _closest_height(sizes: Sequence[FrameSize], target_height: int) -> Optional[FrameSize]:
    best = None
    for size in sizes:
        if best is None or abs(size.height - target_height) < abs(best.height - target_height):
            best = size
    return best


def pick_capture_size(
        sizes: Optional[Sequence[FrameSize]],
        viewport_width: int,
        viewport_height: int,
        tolerance: float = ASPECT_TOLERANCE
) -> Optional[FrameSize]:
    """
    Choose the capture resolution for a viewport.

    The tallest size whose aspect ratio is within ``tolerance`` of the
    viewport's wins; if none matches, the tallest size overall. Earlier
    entries win ties.

    Args:
        sizes: Capture sizes supported by the device
        viewport_width: Viewport width in pixels
        viewport_height: Viewport height in pixels
        tolerance: Allowed aspect ratio difference

    Returns:
        The chosen size, or None when the catalog has no positive size
    """
    sizes = _usable(sizes or ())
    if not sizes:
        return None
    _check_viewport(viewport_width, viewport_height)

    target = viewport_width / viewport_height
    return _tallest(_matching_aspect(sizes, target, tolerance)) or _tallest(sizes)


def pick_preview_size(
        sizes: Optional[Sequence[FrameSize]],
        viewport_width: int,
        viewport_height: int,
        capture_aspect: float,
        tolerance: float = ASPECT_TOLERANCE
) -> Optional[FrameSize]:
    """
    Choose the preview resolution matching the capture's aspect ratio.

    Among sizes within ``tolerance`` of ``capture_aspect`` the one whose height
    is closest to the viewport height wins; if none matches, the closest
    height overall. Earlier entries win ties.

    Returns:
        The chosen size, or None when the catalog has no positive size
    """
    sizes = _usable(sizes or ())
    if not sizes:
        return None
    _check_viewport(viewport_width, viewport_height)

    return (_closest_height(_matching_aspect(sizes, capture_aspect, tolerance), viewport_height)
            or _closest_height(sizes, viewport_height))


def negotiate(
        capture_sizes: Optional[Sequence[FrameSize]],
        preview_sizes: Optional[Sequence[FrameSize]],
        viewport_width: int,
        viewport_height: int,
        tolerance: float = ASPECT_TOLERANCE
) -> Optional[NegotiatedSizes]:
    """Pick both sizes; None when either catalog yields nothing."""
    capture = pick_capture_size(capture_sizes, viewport_width, viewport_height, tolerance)
    if capture is None:
        return None
    preview = pick_preview_size(preview_sizes, viewport_width, viewport_height, capture.aspect, tolerance)
    if preview is None:
        return None
    return NegotiatedSizes(capture=capture, preview=preview)
