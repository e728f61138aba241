import pytest

from gif_transcoder.canvas import Canvas
from gif_transcoder.color import TRANSPARENT, from_rgb

RED = from_rgb((255, 0, 0))
BLUE = from_rgb((0, 0, 255))


def test_new_canvas_is_filled():
    canvas = Canvas(3, 2, RED)
    assert canvas.pixels == [RED] * 6

    assert Canvas(2, 2).pixels == [TRANSPARENT] * 4


def test_invalid_size():
    with pytest.raises(ValueError):
        Canvas(0, 4)


def test_pixels_are_row_major():
    canvas = Canvas(4, 3)
    canvas.set_pixel(2, 1, RED)
    assert canvas.pixels[1 * 4 + 2] == RED
    assert canvas.get_pixel(2, 1) == RED
    assert canvas.get_pixel(1, 2) == TRANSPARENT


def test_fill_rect_touches_only_the_rectangle():
    canvas = Canvas(4, 4, BLUE)
    canvas.fill_rect(1, 2, 2, 1, RED)

    for y in range(4):
        for x in range(4):
            expected = RED if (y == 2 and x in (1, 2)) else BLUE
            assert canvas.get_pixel(x, y) == expected


def test_fill_rect_empty_is_noop():
    canvas = Canvas(2, 2, BLUE)
    canvas.fill_rect(1, 1, 0, 0, RED)
    assert canvas.pixels == [BLUE] * 4


def test_fill_replaces_everything():
    canvas = Canvas(2, 2, BLUE)
    canvas.set_pixel(0, 0, RED)
    canvas.fill(TRANSPARENT)
    assert canvas.pixels == [TRANSPARENT] * 4


def test_out_of_bounds_access_asserts():
    canvas = Canvas(2, 2)
    with pytest.raises(AssertionError):
        canvas.get_pixel(2, 0)
    with pytest.raises(AssertionError):
        canvas.set_pixel(0, -1, RED)
