# tests/arch/chip8/test_chip8_cpu.py
"""
Chip8Cpu の命令サイクル全体（フェッチ、デコード、実行、タイマー）の結合テスト。
"""
import pytest
from chip8_tracer.core.errors import ProgramTooLargeError, UnknownOpcodeWarning
from chip8_tracer.transport.bus import Bus, RAM, BusAccessType
from chip8_tracer.arch.chip8.cpu import Chip8Cpu, MAX_PROGRAM_SIZE
from chip8_tracer.arch.chip8.state import Chip8CpuState
from chip8_tracer.arch.chip8.fontset import FONT_BASE, FONT_SET

# @intent:test_suite CHIP-8 CPUのサイクル動作と外部シェル向け境界を検証します。

@pytest.fixture
def bus():
    bus = Bus()
    bus.register_device(0x000, 0xFFF, RAM(0x1000))
    return bus

@pytest.fixture
def cpu(bus):
    return Chip8Cpu(bus)


def run(cpu, cycles):
    return [cpu.advance_cycle() for _ in range(cycles)]


class TestChip8CpuInit:
    # @intent:test_case_initial_state 初期状態の検証。
    def test_initial_state(self, cpu):
        state = cpu.get_state()
        assert isinstance(state, Chip8CpuState)
        assert state.pc == 0x200
        assert state.v == [0] * 16
        assert state.index == 0
        assert state.sp == 0
        assert state.delay_timer == 0
        assert state.sound_timer == 0
        assert state.awaiting_key is None
        assert cpu.framebuffer.lit_pixels() == []
        assert not any(cpu.keypad.state())

    # @intent:test_case_font フォントテーブルが 0x050 から配置されることを検証します。
    def test_font_installed(self, bus, cpu):
        assert [bus.peek(FONT_BASE + i) for i in range(len(FONT_SET))] == list(FONT_SET)

    def test_reset_clears_screen_and_restores_font(self, bus, cpu):
        cpu.framebuffer.toggle_pixel(0, 0)
        bus.write(FONT_BASE, 0x00)
        cpu.get_state().v[0] = 5
        cpu.reset()
        assert cpu.framebuffer.lit_pixels() == []
        assert bus.peek(FONT_BASE) == FONT_SET[0]
        assert cpu.get_state().v[0] == 0


class TestChip8CpuLoadProgram:
    def test_load_program(self, bus, cpu):
        cpu.load_program(bytes([0x12, 0x00, 0xAB]))
        assert [bus.peek(0x200 + i) for i in range(3)] == [0x12, 0x00, 0xAB]

    def test_load_program_max_size(self, bus, cpu):
        cpu.load_program(bytes([0x01] * MAX_PROGRAM_SIZE))
        assert bus.peek(0xFFF) == 0x01

    # @intent:test_case_too_large 容量を超えるプログラムは何も書き込まずに拒否されることを検証します。
    def test_load_program_too_large(self, bus, cpu):
        with pytest.raises(ProgramTooLargeError):
            cpu.load_program(bytes([0x01] * (MAX_PROGRAM_SIZE + 1)))
        assert bus.peek(0x200) == 0x00


class TestChip8CpuCycle:
    # @intent:test_case_fetch 命令語がビッグエンディアンで読まれ、PCが2進むことを検証します。
    def test_fetch_big_endian_and_advance(self, cpu):
        cpu.load_program(bytes([0x6A, 0x42]))
        snapshot = cpu.advance_cycle()
        assert snapshot.operation.opcode_hex == "6A42"
        assert snapshot.metadata.symbol_info == "LD VA, #$42"
        assert cpu.get_state().v[0xA] == 0x42
        assert cpu.get_state().pc == 0x202
        assert cpu.get_state().opcode == 0x6A42

    def test_jump_overrides_advance(self, cpu):
        cpu.load_program(bytes([0x12, 0x00]))
        run(cpu, 3)
        assert cpu.get_state().pc == 0x200

    def test_bus_activity_contains_fetch(self, cpu):
        cpu.load_program(bytes([0x60, 0x01]))
        snapshot = cpu.advance_cycle()
        assert [(a.address, a.access_type) for a in snapshot.bus_activity] == [
            (0x200, BusAccessType.READ), (0x201, BusAccessType.READ)
        ]

    def test_cycle_count(self, cpu):
        cpu.load_program(bytes([0x12, 0x00]))
        run(cpu, 5)
        assert cpu.get_cycle_count() == 5

    # @intent:test_case_unknown 未知の命令語は警告とともにスキップされ、実行が継続することを検証します。
    def test_unknown_opcode_warns_and_continues(self, cpu):
        cpu.load_program(bytes([0x01, 0x23, 0x60, 0x07]))
        with pytest.warns(UnknownOpcodeWarning, match="Unknown opcode 0123 at 0x200"):
            cpu.advance_cycle()
        assert cpu.unknown_opcode_count == 1
        assert cpu.get_state().pc == 0x202

        cpu.advance_cycle()
        assert cpu.get_state().v[0] == 7

    def test_stack_overflow_propagates(self, cpu):
        from chip8_tracer.core.errors import StackOverflowError
        cpu.load_program(bytes([0x22, 0x00]))
        run(cpu, 16)
        with pytest.raises(StackOverflowError):
            cpu.advance_cycle()


class TestChip8CpuTimers:
    # @intent:test_case_timers 両タイマーは毎サイクル1ずつ減り、0で止まることを検証します。
    def test_timers_decrement_and_stop_at_zero(self, cpu):
        cpu.load_program(bytes([0x12, 0x00]))
        state = cpu.get_state()
        state.delay_timer = 2
        state.sound_timer = 3
        cpu.advance_cycle()
        assert (state.delay_timer, state.sound_timer) == (1, 2)
        run(cpu, 5)
        assert (state.delay_timer, state.sound_timer) == (0, 0)

    def test_timer_set_then_decremented_same_cycle(self, cpu):
        # LD V0, #$05 ; LD DT, V0
        cpu.load_program(bytes([0x60, 0x05, 0xF0, 0x15]))
        run(cpu, 2)
        assert cpu.get_state().delay_timer == 4

    # @intent:test_case_sound サウンドタイマーが1から0に下がるサイクルでのみ信号が立つことを検証します。
    def test_sound_active_when_timer_expires(self, cpu):
        cpu.load_program(bytes([0x12, 0x00]))
        cpu.get_state().sound_timer = 2
        flags = [s.metadata.sound_active for s in run(cpu, 4)]
        assert flags == [False, True, False, False]
        assert cpu.sound_active is False

    def test_timers_run_while_waiting_for_key(self, cpu):
        cpu.load_program(bytes([0xF0, 0x0A]))
        cpu.get_state().delay_timer = 5
        run(cpu, 3)
        assert cpu.is_awaiting_key
        assert cpu.get_state().delay_timer == 2


class TestChip8CpuKeyWait:
    # @intent:test_case_key_wait キー待ちの間PCは命令自身を指し続け、キー押下後に通常どおり2進むことを検証します。
    def test_key_wait_holds_pc_until_key(self, cpu):
        cpu.load_program(bytes([0xF0, 0x0A, 0x61, 0x01]))
        for _ in range(5):
            snapshot = cpu.advance_cycle()
            assert cpu.get_state().pc == 0x200
            assert snapshot.operation.opcode_hex == "F00A"
        assert cpu.is_awaiting_key
        assert cpu.get_flag_state()["KEYWAIT"] is True

        cpu.keypad.press(0x5)
        cpu.advance_cycle()
        assert cpu.get_state().v[0] == 0x5
        assert cpu.get_state().pc == 0x202
        assert not cpu.is_awaiting_key

        cpu.advance_cycle()
        assert cpu.get_state().v[1] == 0x01

    def test_key_wait_does_not_refetch(self, cpu):
        cpu.load_program(bytes([0xF0, 0x0A]))
        cpu.advance_cycle()
        snapshot = cpu.advance_cycle()
        assert snapshot.bus_activity == []

    def test_key_already_held(self, cpu):
        cpu.keypad.press(0xE)
        cpu.load_program(bytes([0xF2, 0x0A]))
        cpu.advance_cycle()
        assert cpu.get_state().v[2] == 0xE
        assert cpu.get_state().pc == 0x202


class TestChip8CpuScenarios:
    # @intent:test_case_draw_scenario 画面消去・レジスタ設定・描画の一連の流れを検証します。
    def test_clear_set_draw(self, bus, cpu):
        cpu.load_program(bytes([0x00, 0xE0, 0x60, 0x0A, 0x61, 0x05, 0xD0, 0x15]))
        run(cpu, 4)
        state = cpu.get_state()
        assert state.v[0] == 0x0A
        assert state.v[1] == 0x05
        assert state.pc == 0x208
        # I=0 が指すメモリは全て0なので、何も点灯しない
        assert cpu.framebuffer.lit_pixels() == []
        assert state.v[0xF] == 0

    def test_clear_set_draw_with_sprite_data(self, bus, cpu):
        bus.write(0x000, 0b1010_0000)
        cpu.load_program(bytes([0x00, 0xE0, 0x60, 0x0A, 0x61, 0x05, 0xD0, 0x11]))
        run(cpu, 4)
        assert cpu.framebuffer.lit_pixels() == [(10, 5), (12, 5)]
        assert cpu.get_state().v[0xF] == 0

    # @intent:test_case_call_return 呼び出しと復帰で PC と SP が元に戻ることを検証します。
    def test_call_then_return(self, cpu):
        cpu.load_program(bytes([0x22, 0x04, 0x00, 0x00, 0x00, 0xEE]))
        cpu.advance_cycle()
        assert cpu.get_state().pc == 0x204
        assert cpu.get_state().sp == 1
        cpu.advance_cycle()
        assert cpu.get_state().pc == 0x202
        assert cpu.get_state().sp == 0

    @pytest.mark.parametrize("value, digits", [(157, [1, 5, 7]), (0, [0, 0, 0]), (255, [2, 5, 5])])
    def test_bcd_digits(self, bus, cpu, value, digits):
        # LD V0, #$vv ; LD I, $300 ; LD B, V0
        cpu.load_program(bytes([0x60, value, 0xA3, 0x00, 0xF0, 0x33]))
        run(cpu, 3)
        assert [bus.peek(0x300 + i) for i in range(3)] == digits

    def test_bcd_and_block_load(self, bus, cpu):
        # LD V0, #$9C ; LD I, $300 ; LD B, V0 ; LD V2, [I]
        cpu.load_program(bytes([0x60, 0x9C, 0xA3, 0x00, 0xF0, 0x33, 0xF2, 0x65]))
        run(cpu, 4)
        assert cpu.get_state().v[:3] == [1, 5, 6]


class TestChip8CpuFrontEnd:
    def test_register_map(self, cpu):
        state = cpu.get_state()
        state.v[0xB] = 0x12
        state.index = 0x345
        registers = cpu.get_register_map()
        assert registers["VB"] == 0x12
        assert registers["I"] == 0x345
        assert registers["PC"] == 0x200
        assert set(registers) == {f"V{i:X}" for i in range(16)} | {"I", "PC", "SP", "DT", "ST"}

    def test_register_layout(self, cpu):
        layout = cpu.get_register_layout()
        assert [group.group_name for group in layout] == ["General", "Pointers", "Timers"]
        assert len(layout[0].registers) == 16

    def test_flag_state(self, cpu):
        cpu.get_state().v[0xF] = 1
        assert cpu.get_flag_state() == {"VF": True, "SOUND": False, "KEYWAIT": False}

    def test_disassemble(self, cpu):
        cpu.load_program(bytes([0x00, 0xE0, 0xA2, 0x2A]))
        assert cpu.disassemble(0x200, 4) == [
            (0x200, "00E0", "CLS"),
            (0x202, "A22A", "LD I, $22A"),
        ]
