# tests/arch/chip8/test_display.py
import copy

import pytest

from chip8_tracer.arch.chip8.display import Display, DISPLAY_WIDTH, DISPLAY_HEIGHT

# @intent:test_suite フレームバッファのXOR描画と読み取りビューを検証します。

@pytest.fixture
def display():
    return Display()

def test_initial_frame_is_blank(display):
    frame = display.get_frame()
    assert len(frame) == DISPLAY_HEIGHT
    assert all(len(row) == DISPLAY_WIDTH for row in frame)
    assert display.lit_count() == 0

def test_draw_sprite_msb_is_leftmost(display):
    collision = display.draw_sprite(0, 0, [0b10000001])
    assert collision is False
    assert display.get_pixel(0, 0) == 1
    assert display.get_pixel(7, 0) == 1
    assert display.get_pixel(1, 0) == 0

def test_redraw_erases_and_reports_collision(display):
    display.draw_sprite(5, 5, [0xF0, 0x90])
    assert display.draw_sprite(5, 5, [0xF0, 0x90]) is True
    assert display.lit_count() == 0

def test_drawing_onto_unlit_cells_is_not_a_collision(display):
    display.draw_sprite(0, 0, [0xF0])
    assert display.draw_sprite(0, 0, [0x0F]) is False
    assert display.lit_count() == 8

def test_wraps_around_both_edges(display):
    display.draw_sprite(63, 31, [0xC0, 0xC0])
    lit = {(x, y) for y in range(DISPLAY_HEIGHT) for x in range(DISPLAY_WIDTH) if display.get_pixel(x, y)}
    assert lit == {(63, 31), (0, 31), (63, 0), (0, 0)}

def test_get_frame_is_read_only_view(display):
    display.draw_sprite(0, 0, [0x80])
    frame = display.get_frame()
    with pytest.raises(TypeError):
        frame[0][0] = 0
    display.clear()
    assert frame[0][0] == 1

def test_render_ascii(display):
    display.draw_sprite(1, 0, [0x80])
    lines = display.render_ascii(on="#", off=".").split("\n")
    assert len(lines) == DISPLAY_HEIGHT
    assert lines[0] == "." + "#" + "." * (DISPLAY_WIDTH - 2)
    assert lines[1] == "." * DISPLAY_WIDTH

def test_deepcopy_is_independent(display):
    display.draw_sprite(0, 0, [0xFF])
    clone = copy.deepcopy(display)
    assert clone == display
    display.clear()
    assert clone != display
    assert clone.lit_count() == 8
