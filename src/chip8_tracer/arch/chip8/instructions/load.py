# src/chip8_tracer/arch/chip8/instructions/load.py
"""
ロード/ストア命令（インデックス、タイマー、BCD、レジスタブロック転送）の実装。
"""
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState
from chip8_tracer.arch.chip8.peripherals import Chip8Devices
from chip8_tracer.arch.chip8.fontset import glyph_address
from .base import Chip8Operation, InstructionKind, make_operation, make_unknown, reg
from . import keys


# --- Annn ---
def decode_ld_i(word: int) -> Chip8Operation:
    return make_operation(word, InstructionKind.LD_I, "LD", "I", f"${word & 0x0FFF:03X}")

def execute_ld_i(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    state.index = op.nnn


# --- Family F ---
_FAMILY_F = {
    0x07: (InstructionKind.LD_VX_DT, "LD", lambda x: (reg(x), "DT")),
    0x15: (InstructionKind.LD_DT_VX, "LD", lambda x: ("DT", reg(x))),
    0x18: (InstructionKind.LD_ST_VX, "LD", lambda x: ("ST", reg(x))),
    0x1E: (InstructionKind.ADD_I_VX, "ADD", lambda x: ("I", reg(x))),
    0x29: (InstructionKind.LD_F_VX, "LD", lambda x: ("F", reg(x))),
    0x33: (InstructionKind.LD_B_VX, "LD", lambda x: ("B", reg(x))),
    0x55: (InstructionKind.LD_MEM_VX, "LD", lambda x: ("[I]", reg(x))),
    0x65: (InstructionKind.LD_VX_MEM, "LD", lambda x: (reg(x), "[I]")),
}

# @intent:responsibility Fx?? を下位バイトでデコードします。定義外の下位バイトは未知の命令です。
def decode_family_f(word: int) -> Chip8Operation:
    sub = word & 0xFF
    if sub == 0x0A:
        return keys.decode_ld_vx_k(word)
    entry = _FAMILY_F.get(sub)
    if entry is None:
        return make_unknown(word)
    kind, mnemonic, operands = entry
    return make_operation(word, kind, mnemonic, *operands((word >> 8) & 0xF))


# --- Timers ---
def execute_ld_vx_dt(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    state.v[op.x] = state.delay_timer

def execute_ld_dt_vx(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    state.delay_timer = state.v[op.x]

def execute_ld_st_vx(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    state.sound_timer = state.v[op.x]


# --- Index ---
# @intent:responsibility Fx1E: I += Vx（16ビットで累算、フラグなし）。
def execute_add_i_vx(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    state.index = (state.index + state.v[op.x]) & 0xFFFF

# @intent:responsibility Fx29: Vx の下位ニブルが示す16進数字グリフのアドレスを I に設定します。
def execute_ld_f_vx(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    state.index = glyph_address(state.v[op.x])


# --- BCD ---
# @intent:responsibility Fx33: Vx を百・十・一の位に分解し、I, I+1, I+2 に格納します。
def execute_ld_b_vx(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    value = state.v[op.x]
    bus.write(state.index & 0xFFF, value // 100)
    bus.write((state.index + 1) & 0xFFF, (value // 10) % 10)
    bus.write((state.index + 2) & 0xFFF, value % 10)


# --- Block transfer ---
# @intent:responsibility Fx55: V0..Vx（x を含む）を I から始まるメモリへ格納します。
def execute_ld_mem_vx(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    for i in range(op.x + 1):
        bus.write((state.index + i) & 0xFFF, state.v[i])
    if devices.quirks.increment_index_on_block_transfer:
        state.index = (state.index + op.x + 1) & 0xFFFF

# @intent:responsibility Fx65: I から始まるメモリを V0..Vx（x を含む）へ読み込みます。
def execute_ld_vx_mem(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    for i in range(op.x + 1):
        state.v[i] = bus.read((state.index + i) & 0xFFF)
    if devices.quirks.increment_index_on_block_transfer:
        state.index = (state.index + op.x + 1) & 0xFFFF
