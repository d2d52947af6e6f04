# tests/arch/chip8/test_chip8_alu.py
import random
import unittest
from chip8_tracer.transport.bus import Bus, RAM
from chip8_tracer.arch.chip8.cpu import Chip8Cpu
from chip8_tracer.arch.chip8.peripherals import Chip8Devices
from chip8_tracer.arch.chip8.instructions import decode_opcode, execute_instruction

class TestChip8AluInstructions(unittest.TestCase):
    def setUp(self):
        self.bus = Bus()
        self.bus.register_device(0x000, 0xFFF, RAM(0x1000))
        self.devices = Chip8Devices(rng=random.Random(1234))
        self.cpu = Chip8Cpu(self.bus, self.devices)
        self.state = self.cpu.get_state()

    def _execute(self, word):
        self.state.pc = 0x202
        op = decode_opcode(word)
        execute_instruction(op, self.state, self.bus, self.devices)

    def test_ld_imm(self):
        # LD V5, #$AB
        self._execute(0x65AB)
        self.assertEqual(self.state.v[5], 0xAB)

    def test_add_imm_wraps_without_flag(self):
        self.state.v[2] = 0xFF
        self.state.v[0xF] = 0x55
        # ADD V2, #$02
        self._execute(0x7202)
        self.assertEqual(self.state.v[2], 0x01)
        self.assertEqual(self.state.v[0xF], 0x55) # キャリーフラグは変化しない

    def test_ld_reg(self):
        self.state.v[1] = 0x42
        self._execute(0x8010)
        self.assertEqual(self.state.v[0], 0x42)

    def test_bitwise_ops(self):
        self.state.v[0] = 0b1100
        self.state.v[1] = 0b1010
        self._execute(0x8011)
        self.assertEqual(self.state.v[0], 0b1110)

        self.state.v[0] = 0b1100
        self._execute(0x8012)
        self.assertEqual(self.state.v[0], 0b1000)

        self.state.v[0] = 0b1100
        self._execute(0x8013)
        self.assertEqual(self.state.v[0], 0b0110)

    def test_add_reg_no_carry(self):
        self.state.v[0] = 0x10
        self.state.v[1] = 0x20
        self._execute(0x8014)
        self.assertEqual(self.state.v[0], 0x30)
        self.assertEqual(self.state.v[0xF], 0)

    def test_add_reg_carry(self):
        self.state.v[0] = 0xF0
        self.state.v[1] = 0x20
        self._execute(0x8014)
        self.assertEqual(self.state.v[0], 0x10)
        self.assertEqual(self.state.v[0xF], 1)

    def test_sub_no_borrow_sets_flag(self):
        self.state.v[0] = 0x30
        self.state.v[1] = 0x10
        self._execute(0x8015)
        self.assertEqual(self.state.v[0], 0x20)
        self.assertEqual(self.state.v[0xF], 1)

    def test_sub_equal_operands_sets_flag(self):
        self.state.v[0] = 0x10
        self.state.v[1] = 0x10
        self._execute(0x8015)
        self.assertEqual(self.state.v[0], 0x00)
        self.assertEqual(self.state.v[0xF], 1)

    def test_sub_borrow_clears_flag(self):
        self.state.v[0] = 0x10
        self.state.v[1] = 0x30
        self._execute(0x8015)
        self.assertEqual(self.state.v[0], 0xE0)
        self.assertEqual(self.state.v[0xF], 0)

    def test_subn(self):
        # V0 = V1 - V0
        self.state.v[0] = 0x10
        self.state.v[1] = 0x30
        self._execute(0x8017)
        self.assertEqual(self.state.v[0], 0x20)
        self.assertEqual(self.state.v[0xF], 1)

        self.state.v[0] = 0x30
        self.state.v[1] = 0x10
        self._execute(0x8017)
        self.assertEqual(self.state.v[0], 0xE0)
        self.assertEqual(self.state.v[0xF], 0)

    def test_shr(self):
        self.state.v[3] = 0b0000_0101
        self._execute(0x8306)
        self.assertEqual(self.state.v[3], 0b0000_0010)
        self.assertEqual(self.state.v[0xF], 1)

        self._execute(0x8306)
        self.assertEqual(self.state.v[3], 0b0000_0001)
        self.assertEqual(self.state.v[0xF], 0)

    def test_shl(self):
        self.state.v[3] = 0b1000_0001
        self._execute(0x830E)
        self.assertEqual(self.state.v[3], 0b0000_0010)
        self.assertEqual(self.state.v[0xF], 1)

        self._execute(0x830E)
        self.assertEqual(self.state.v[3], 0b0000_0100)
        self.assertEqual(self.state.v[0xF], 0)

    # 格納先がVFの場合でも、最後に書き込まれるフラグ値が残る
    def test_flag_wins_when_destination_is_vf(self):
        self.state.v[0xF] = 0xFF
        self.state.v[1] = 0x01
        self._execute(0x8F14)
        self.assertEqual(self.state.v[0xF], 1)

    def test_rnd_is_masked(self):
        for _ in range(20):
            self._execute(0xC10F)
            self.assertEqual(self.state.v[1] & 0xF0, 0)

    def test_rnd_is_reproducible_with_seed(self):
        self._execute(0xC1FF)
        first = self.state.v[1]
        self.devices.rng = random.Random(1234)
        self._execute(0xC1FF)
        self.assertEqual(self.state.v[1], first)


if __name__ == '__main__':
    unittest.main()
