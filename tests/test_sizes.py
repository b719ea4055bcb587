"""Frame size negotiation."""

import pytest

from skiphone.camera import FrameSize, NegotiatedSizes, negotiate, pick_capture_size, pick_preview_size
from skiphone.camera.simulated import DEFAULT_CAPTURE_SIZES, DEFAULT_PREVIEW_SIZES


@pytest.mark.parametrize('sizes', [[], None])
def test_empty_catalog_yields_nothing(sizes):
    assert pick_capture_size(sizes, 800, 480) is None
    assert pick_preview_size(sizes, 800, 480, 4 / 3) is None
    assert negotiate(sizes, DEFAULT_PREVIEW_SIZES, 800, 480) is None


def test_capture_prefers_tallest_matching_aspect():
    sizes = [FrameSize(2592, 1944), FrameSize(1280, 720), FrameSize(1920, 1080)]

    assert pick_capture_size(sizes, 1280, 720) == FrameSize(1920, 1080)


def test_capture_single_exact_aspect_wins_regardless_of_height():
    sizes = [FrameSize(4000, 3000), FrameSize(320, 180)]

    assert pick_capture_size(sizes, 1920, 1080) == FrameSize(320, 180)


def test_capture_falls_back_to_tallest():
    sizes = [FrameSize(640, 480), FrameSize(2592, 1944), FrameSize(1280, 720)]

    # 800x480 is 1.667; 1.778 and 1.333 are both out of tolerance
    assert pick_capture_size(sizes, 800, 480) == FrameSize(2592, 1944)


def test_capture_first_wins_on_equal_height():
    sizes = [FrameSize(1280, 720), FrameSize(1300, 720)]

    assert pick_capture_size(sizes, 1920, 1080) == FrameSize(1280, 720)


def test_preview_closest_height_among_matching_aspect():
    sizes = [FrameSize(1280, 720), FrameSize(800, 480), FrameSize(640, 480), FrameSize(320, 240)]

    assert pick_preview_size(sizes, 800, 480, 4 / 3) == FrameSize(640, 480)


def test_preview_uses_capture_aspect_not_viewport():
    sizes = [FrameSize(1280, 720), FrameSize(176, 144)]

    # 1280x720 matches the viewport height exactly but not the capture aspect
    assert pick_preview_size(sizes, 800, 720, 176 / 144) == FrameSize(176, 144)


def test_preview_falls_back_to_closest_height():
    sizes = [FrameSize(640, 480), FrameSize(320, 240)]

    assert pick_preview_size(sizes, 1280, 720, 16 / 9) == FrameSize(640, 480)


def test_negotiate_default_catalog():
    sizes = negotiate(DEFAULT_CAPTURE_SIZES, DEFAULT_PREVIEW_SIZES, 800, 480)

    assert sizes == NegotiatedSizes(capture=FrameSize(2592, 1944), preview=FrameSize(640, 480))


def test_negotiate_needs_both_catalogs():
    assert negotiate(DEFAULT_CAPTURE_SIZES, [], 800, 480) is None


def test_pure_and_repeatable():
    sizes = list(DEFAULT_CAPTURE_SIZES)
    snapshot = list(sizes)

    first = pick_capture_size(sizes, 1280, 720)
    second = pick_capture_size(sizes, 1280, 720)

    assert first == second
    assert sizes == snapshot


@pytest.mark.parametrize('width,height', [(0, 480), (800, 0), (-1, 480)])
def test_invalid_viewport(width, height):
    with pytest.raises(ValueError):
        pick_capture_size(DEFAULT_CAPTURE_SIZES, width, height)


def test_tolerance_boundary_is_inclusive():
    # 1.75 vs 1.65 target: difference 0.1 (within float noise) counts as a match
    sizes = [FrameSize(700, 400), FrameSize(2000, 2000)]
    assert pick_capture_size(sizes, 660, 400, tolerance=0.1 + 1e-9) == FrameSize(700, 400)


def test_degenerate_sizes_skipped():
    sizes = [FrameSize(640, 0), FrameSize(0, 480), FrameSize(320, 240)]

    assert pick_capture_size(sizes, 800, 480) == FrameSize(320, 240)
    assert pick_preview_size(sizes, 800, 480, 4 / 3) == FrameSize(320, 240)
    assert pick_capture_size([FrameSize(640, 0)], 800, 480) is None
