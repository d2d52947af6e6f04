# tests/arch/chip8/test_chip8_graphics.py
import unittest
from chip8_tracer.transport.bus import Bus, RAM
from chip8_tracer.arch.chip8.cpu import Chip8Cpu
from chip8_tracer.arch.chip8.peripherals import Chip8Devices, Chip8Quirks
from chip8_tracer.arch.chip8.fontset import glyph_address
from chip8_tracer.arch.chip8.instructions import decode_opcode, execute_instruction

class TestChip8GraphicsInstructions(unittest.TestCase):
    def setUp(self):
        self.bus = Bus()
        self.bus.register_device(0x000, 0xFFF, RAM(0x1000))
        self.devices = Chip8Devices()
        self.cpu = Chip8Cpu(self.bus, self.devices)
        self.state = self.cpu.get_state()
        self.fb = self.devices.framebuffer

    def _execute(self, word):
        self.state.pc = 0x202
        op = decode_opcode(word)
        execute_instruction(op, self.state, self.bus, self.devices)

    def _draw_byte(self, value, x, y):
        self.bus.write(0x300, value)
        self.state.index = 0x300
        self.state.v[0] = x
        self.state.v[1] = y
        self._execute(0xD011)

    def test_cls(self):
        self.fb.toggle_pixel(3, 3)
        self._execute(0x00E0)
        self.assertEqual(self.fb.lit_pixels(), [])

    # @intent:test_case_draw_glyph フォントの "0" が正しい形で描画されることを検証します。
    def test_draw_font_glyph(self):
        self.state.index = glyph_address(0)
        self.state.v[0] = 0
        self.state.v[1] = 0
        self._execute(0xD015)
        text = self.fb.to_text().splitlines()
        self.assertEqual(text[0][:8], "####....")
        self.assertEqual(text[1][:8], "#..#....")
        self.assertEqual(text[4][:8], "####....")
        self.assertEqual(self.state.v[0xF], 0)

    # @intent:test_case_collision 点灯ピクセルを消灯させた場合に VF=1 となることを検証します。
    def test_draw_twice_erases_and_sets_collision(self):
        self._draw_byte(0b1100_0000, 10, 5)
        self.assertEqual(self.fb.lit_pixels(), [(10, 5), (11, 5)])
        self.assertEqual(self.state.v[0xF], 0)

        self._draw_byte(0b1100_0000, 10, 5)
        self.assertEqual(self.fb.lit_pixels(), [])
        self.assertEqual(self.state.v[0xF], 1)

    def test_partial_overlap_collides(self):
        self._draw_byte(0b1000_0000, 11, 5)
        self._draw_byte(0b1100_0000, 10, 5)
        self.assertEqual(self.fb.lit_pixels(), [(10, 5)])
        self.assertEqual(self.state.v[0xF], 1)

    def test_no_overlap_clears_previous_flag(self):
        self.state.v[0xF] = 1
        self._draw_byte(0b1000_0000, 0, 0)
        self.assertEqual(self.state.v[0xF], 0)

    def test_origin_wraps(self):
        self._draw_byte(0b1000_0000, 64 + 3, 32 + 2)
        self.assertEqual(self.fb.lit_pixels(), [(3, 2)])

    # @intent:test_case_clip 既定では画面端をはみ出した部分は描画されないことを検証します。
    def test_clipped_at_right_edge(self):
        self._draw_byte(0xFF, 60, 0)
        self.assertEqual(self.fb.lit_pixels(), [(60, 0), (61, 0), (62, 0), (63, 0)])

    def test_clipped_at_bottom_edge(self):
        for i in range(3):
            self.bus.write(0x300 + i, 0x80)
        self.state.index = 0x300
        self.state.v[0] = 0
        self.state.v[1] = 31
        self._execute(0xD013)
        self.assertEqual(self.fb.lit_pixels(), [(0, 31)])

    def test_wraps_when_clipping_disabled(self):
        self.devices.quirks = Chip8Quirks(clip_sprites=False)
        self._draw_byte(0b1100_0000, 63, 31)
        self.assertEqual(sorted(self.fb.lit_pixels()), [(0, 31), (63, 31)])

        for i in range(2):
            self.bus.write(0x310 + i, 0x80)
        self.state.index = 0x310
        self.state.v[0] = 5
        self.state.v[1] = 31
        self._execute(0xD012)
        self.assertIn((5, 0), self.fb.lit_pixels())
        self.assertIn((5, 31), self.fb.lit_pixels())

    def test_zero_height_sprite_draws_nothing(self):
        self.state.v[0xF] = 1
        self._execute(0xD010)
        self.assertEqual(self.fb.lit_pixels(), [])
        self.assertEqual(self.state.v[0xF], 0)


if __name__ == '__main__':
    unittest.main()
