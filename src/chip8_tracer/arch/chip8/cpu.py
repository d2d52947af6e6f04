# src/chip8_tracer/arch/chip8/cpu.py
"""
CHIP-8 CPUエミュレーションの中心モジュール。

外部のシェル（ウィンドウ、入力、フレームペーシング）は次の境界を通じてCPUを操作します:

    * load_program(data)   プログラムイメージを 0x200 以降に配置
    * advance_cycle()      1サイクル（フェッチ・デコード・実行・タイマー）を進める
    * framebuffer          64x32 の画面状態（読み取り専用として扱う）
    * keypad               16キーの押下状態（サイクル前に書き込む）
    * sound_active         このサイクルでビープを鳴らすべきか
"""
import warnings
from typing import Dict, List, Optional, Tuple

from chip8_tracer.core.cpu import AbstractCpu
from chip8_tracer.core.errors import UnknownOpcodeWarning
from chip8_tracer.core.snapshot import Operation, Snapshot
from chip8_tracer.common.types import RegisterLayoutInfo, RegisterInfo
from chip8_tracer.transport.bus import Bus
from chip8_tracer.loader.loader import BinaryLoader
from chip8_tracer.arch.chip8.state import Chip8CpuState, NUM_REGISTERS, PROGRAM_START
from chip8_tracer.arch.chip8.peripherals import Chip8Devices, Framebuffer, Keypad, Chip8Quirks
from chip8_tracer.arch.chip8.fontset import FONT_BASE, FONT_SET
from chip8_tracer.arch.chip8.instructions import decode_opcode, execute_instruction, InstructionKind
from chip8_tracer.arch.chip8 import disassembler

# @intent:constant メモリ空間のサイズと、プログラム領域に収まる最大バイト数。
MEMORY_SIZE = 0x1000
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START


# @intent:responsibility CHIP-8 CPUの具体的なエミュレーションロジック（フェッチ、デコード、実行、タイマー）を提供します。
class Chip8Cpu(AbstractCpu):
    """
    CHIP-8 CPUをエミュレートするクラス。
    メモリはBus経由でアクセスし、画面とキーパッドはChip8Devicesが保持します。
    """
    def __init__(self, bus: Bus, devices: Optional[Chip8Devices] = None):
        self._devices = devices if devices is not None else Chip8Devices()
        self._sound_active = False
        self._unknown_opcode_count = 0
        super().__init__(bus)
        self._install_font()

    def _create_initial_state(self) -> Chip8CpuState:
        return Chip8CpuState()

    # @intent:responsibility フォントテーブルをメモリに書き込みます。ROM領域にも書けるようbus.loadを使用します。
    def _install_font(self) -> None:
        for offset, byte in enumerate(FONT_SET):
            self._bus.load(FONT_BASE + offset, byte)

    # @intent:responsibility CPUを初期状態に戻します。画面を消去し、フォントを再配置します。
    # @intent:rationale プログラム領域のメモリ内容は保持します（再ロード不要でリスタートできるように）。
    def reset(self) -> None:
        super().reset()
        self._devices.framebuffer.clear()
        self._sound_active = False
        self._unknown_opcode_count = 0
        self._install_font()

    # --- 外部シェル向けの境界 ---

    @property
    def framebuffer(self) -> Framebuffer:
        return self._devices.framebuffer

    @property
    def keypad(self) -> Keypad:
        return self._devices.keypad

    @property
    def quirks(self) -> Chip8Quirks:
        return self._devices.quirks

    # @intent:responsibility このサイクルでサウンドタイマーが満了直前（1）であったかを返します。
    @property
    def sound_active(self) -> bool:
        return self._sound_active

    # @intent:responsibility Fx0A によるキー入力待ち状態かを返します。ドライバはadvance前にこれを確認できます。
    @property
    def is_awaiting_key(self) -> bool:
        return self._state.awaiting_key is not None

    @property
    def unknown_opcode_count(self) -> int:
        return self._unknown_opcode_count

    # @intent:responsibility プログラムイメージを 0x200 からメモリにコピーします。
    # @intent:pre-condition len(data) <= 0xE00。超える場合は何も書き込まずにProgramTooLargeErrorを送出します。
    def load_program(self, data: bytes) -> None:
        BinaryLoader().load_bytes(data, self._bus, PROGRAM_START)

    # @intent:responsibility 1サイクル進めます。step()の別名です。
    def advance_cycle(self) -> Snapshot:
        return self.step()

    # --- 命令サイクル ---

    # @intent:responsibility PCの位置から2バイトをビッグエンディアンで読み出します。
    def _fetch(self) -> int:
        pc = self._state.pc
        return (self._bus.read(pc) << 8) | self._bus.read((pc + 1) & 0xFFF)

    def _decode(self, opcode: int) -> Operation:
        self._state.opcode = opcode
        return decode_opcode(opcode)

    # @intent:responsibility 実行前にPCを2進めます。分岐命令はこの値を上書きします。
    def _update_pc(self, operation: Operation) -> None:
        self._state.pc = (self._state.pc + operation.length) & 0xFFF

    # @intent:responsibility 命令を実行します。未知の命令は警告を出してカウントし、何もしません。
    def _execute(self, operation: Operation) -> None:
        if operation.kind is InstructionKind.UNKNOWN:
            self._unknown_opcode_count += 1
            warnings.warn(
                f"Unknown opcode {operation.opcode_hex} at {(self._state.pc - 2) & 0xFFF:#05x}; treated as no-op.",
                UnknownOpcodeWarning,
                stacklevel=2,
            )
        execute_instruction(operation, self._state, self._bus, self._devices)

    # @intent:responsibility キー入力待ちの間はフェッチせずにサイクルを消費します。
    # @intent:post-condition キーが押されていれば最小のキー番号をVxに格納し、待機を解除してPCを2進めます。
    def _handle_halt(self, current_pc: int) -> Optional[Operation]:
        target = self._state.awaiting_key
        if target is None:
            return None
        key = self._devices.keypad.first_pressed()
        if key is not None:
            self._state.v[target] = key
            self._state.awaiting_key = None
            self._state.pc = (current_pc + 2) & 0xFFF
        return decode_opcode(self._state.opcode)

    # @intent:responsibility 命令の効果の後に、サウンド信号の判定と両タイマーの減算を行います。
    def _after_execute(self, operation: Operation) -> None:
        state = self._state
        self._sound_active = state.sound_timer == 1
        if state.delay_timer > 0:
            state.delay_timer -= 1
        if state.sound_timer > 0:
            state.sound_timer -= 1

    def _metadata_extras(self) -> Dict[str, object]:
        return {"sound_active": self._sound_active}

    # --- 表示用API ---

    # @intent:responsibility 現在のレジスタ値を辞書形式で提供します。
    def get_register_map(self) -> Dict[str, int]:
        s = self._state
        registers = {f"V{i:X}": s.v[i] for i in range(NUM_REGISTERS)}
        registers.update({
            "I": s.index, "PC": s.pc, "SP": s.sp, "DT": s.delay_timer, "ST": s.sound_timer
        })
        return registers

    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("General", [RegisterInfo(f"V{i:X}", 8) for i in range(NUM_REGISTERS)]),
            RegisterLayoutInfo("Pointers", [
                RegisterInfo("I", 16), RegisterInfo("PC", 16), RegisterInfo("SP", 8)
            ]),
            RegisterLayoutInfo("Timers", [
                RegisterInfo("DT", 8), RegisterInfo("ST", 8)
            ]),
        ]

    def get_flag_state(self) -> Dict[str, bool]:
        return {
            "VF": self._state.flag_vf,
            "SOUND": self._sound_active,
            "KEYWAIT": self.is_awaiting_key,
        }

    # @intent:responsibility 指定範囲のメモリを逆アセンブルします。
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        return disassembler.disassemble(self._bus, start_addr, length)
