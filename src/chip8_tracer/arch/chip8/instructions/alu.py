# src/chip8_tracer/arch/chip8/instructions/alu.py
"""
算術論理演算命令の実装。

全ての演算は8ビットで循環（mod 256）します。VFを更新する命令は、
格納先がVFであっても正しいフラグが残るよう、VFへの書き込みを最後に行います。
"""
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState
from chip8_tracer.arch.chip8.peripherals import Chip8Devices
from .base import Chip8Operation, InstructionKind, make_operation, make_unknown, reg, set_flag


# --- LD / ADD immediate ---
def decode_ld_imm(word: int) -> Chip8Operation:
    return make_operation(word, InstructionKind.LD_IMM, "LD", reg((word >> 8) & 0xF), f"#${word & 0xFF:02X}")

def execute_ld_imm(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    state.v[op.x] = op.nn

def decode_add_imm(word: int) -> Chip8Operation:
    return make_operation(word, InstructionKind.ADD_IMM, "ADD", reg((word >> 8) & 0xF), f"#${word & 0xFF:02X}")

# @intent:responsibility 7xnn: Vx += nn。キャリーフラグは変更しません。
def execute_add_imm(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    state.v[op.x] = (state.v[op.x] + op.nn) & 0xFF


# --- Family 8 ---
_FAMILY_8 = {
    0x0: (InstructionKind.LD_REG, "LD"),
    0x1: (InstructionKind.OR, "OR"),
    0x2: (InstructionKind.AND, "AND"),
    0x3: (InstructionKind.XOR, "XOR"),
    0x4: (InstructionKind.ADD_REG, "ADD"),
    0x5: (InstructionKind.SUB, "SUB"),
    0x6: (InstructionKind.SHR, "SHR"),
    0x7: (InstructionKind.SUBN, "SUBN"),
    0xE: (InstructionKind.SHL, "SHL"),
}

# @intent:responsibility 8xyN をデコードします。N が定義外の場合は未知の命令として扱います。
def decode_family_8(word: int) -> Chip8Operation:
    entry = _FAMILY_8.get(word & 0x000F)
    if entry is None:
        return make_unknown(word)
    kind, mnemonic = entry
    x, y = (word >> 8) & 0xF, (word >> 4) & 0xF
    if kind in (InstructionKind.SHR, InstructionKind.SHL):
        return make_operation(word, kind, mnemonic, reg(x))
    return make_operation(word, kind, mnemonic, reg(x), reg(y))

def execute_ld_reg(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    state.v[op.x] = state.v[op.y]

def execute_or(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    state.v[op.x] |= state.v[op.y]

def execute_and(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    state.v[op.x] &= state.v[op.y]

def execute_xor(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    state.v[op.x] ^= state.v[op.y]

# @intent:responsibility 8xy4: Vx += Vy。256以上になった場合 VF=1。
def execute_add_reg(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    res = state.v[op.x] + state.v[op.y]
    state.v[op.x] = res & 0xFF
    set_flag(state, res > 0xFF)

# @intent:responsibility 8xy5: Vx -= Vy。ボローが発生しなかった場合 (Vx >= Vy) VF=1。
def execute_sub(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    v1, v2 = state.v[op.x], state.v[op.y]
    state.v[op.x] = (v1 - v2) & 0xFF
    set_flag(state, v1 >= v2)

# @intent:responsibility 8xy7: Vx = Vy - Vx。ボローが発生しなかった場合 (Vy >= Vx) VF=1。
def execute_subn(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    v1, v2 = state.v[op.x], state.v[op.y]
    state.v[op.x] = (v2 - v1) & 0xFF
    set_flag(state, v2 >= v1)

# @intent:responsibility 8xy6: Vx >>= 1。押し出されたビット0をVFへ。
def execute_shr(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    value = state.v[op.x]
    state.v[op.x] = value >> 1
    set_flag(state, value & 0x01)

# @intent:responsibility 8xyE: Vx <<= 1。押し出されたビット7をVFへ。
def execute_shl(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    value = state.v[op.x]
    state.v[op.x] = (value << 1) & 0xFF
    set_flag(state, value & 0x80)


# --- RND ---
def decode_rnd(word: int) -> Chip8Operation:
    return make_operation(word, InstructionKind.RND, "RND", reg((word >> 8) & 0xF), f"#${word & 0xFF:02X}")

# @intent:responsibility Cxnn: 0-255の乱数と nn の論理積を Vx に格納します。
def execute_rnd(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    state.v[op.x] = devices.rng.randint(0, 255) & op.nn
