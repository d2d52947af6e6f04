# src/chip8_tracer/arch/chip8/instructions/control.py
"""
制御命令（ジャンプ、サブルーチン、条件スキップ）の実装。
"""
from chip8_tracer.core.errors import StackOverflowError, StackUnderflowError
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState, STACK_DEPTH
from chip8_tracer.arch.chip8.peripherals import Chip8Devices
from .base import Chip8Operation, InstructionKind, make_operation, make_unknown, reg, skip_next
from . import graphics


# --- Family 0 ---
# @intent:responsibility 0で始まる命令語（00E0, 00EE）をデコードします。0nnn (SYS) は未知の命令として扱います。
def decode_family_0(word: int) -> Chip8Operation:
    if word == 0x00E0:
        return graphics.decode_cls(word)
    if word == 0x00EE:
        return make_operation(word, InstructionKind.RET, "RET")
    return make_unknown(word)

# @intent:responsibility 00EE: コールスタックの先頭をPCに戻します。
# @intent:pre-condition スタックが空でないこと。空の場合はStackUnderflowErrorを送出します。
def execute_ret(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    if state.sp == 0:
        raise StackUnderflowError(f"RET with empty call stack at {state.pc - 2:#05x}")
    state.sp -= 1
    state.pc = state.stack[state.sp]


# --- JP / CALL ---
def decode_jp(word: int) -> Chip8Operation:
    return make_operation(word, InstructionKind.JP, "JP", f"${word & 0x0FFF:03X}")

def execute_jp(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    state.pc = op.nnn

def decode_call(word: int) -> Chip8Operation:
    return make_operation(word, InstructionKind.CALL, "CALL", f"${word & 0x0FFF:03X}")

# @intent:responsibility 2nnn: 現在のPC（次の命令のアドレス）をスタックに積み、nnnへ分岐します。
# @intent:pre-condition スタックに空きがあること。16段を超える場合はStackOverflowErrorを送出します。
def execute_call(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    if state.sp >= STACK_DEPTH:
        raise StackOverflowError(f"CALL ${op.nnn:03X} exceeds call stack depth of {STACK_DEPTH}")
    state.stack[state.sp] = state.pc
    state.sp += 1
    state.pc = op.nnn

def decode_jp_v0(word: int) -> Chip8Operation:
    return make_operation(word, InstructionKind.JP_V0, "JP", "V0", f"${word & 0x0FFF:03X}")

# @intent:responsibility Bnnn: V0 + nnn へ分岐します。結果は12ビットアドレス空間に収めます。
def execute_jp_v0(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    state.pc = (op.nnn + state.v[0]) & 0xFFF


# --- Skips ---
def decode_se_imm(word: int) -> Chip8Operation:
    return make_operation(word, InstructionKind.SE_IMM, "SE", reg((word >> 8) & 0xF), f"#${word & 0xFF:02X}")

def execute_se_imm(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    if state.v[op.x] == op.nn:
        skip_next(state)

def decode_sne_imm(word: int) -> Chip8Operation:
    return make_operation(word, InstructionKind.SNE_IMM, "SNE", reg((word >> 8) & 0xF), f"#${word & 0xFF:02X}")

def execute_sne_imm(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    if state.v[op.x] != op.nn:
        skip_next(state)

# 5xyN / 9xyN は下位ニブルを検査しない
def decode_se_reg(word: int) -> Chip8Operation:
    return make_operation(word, InstructionKind.SE_REG, "SE", reg((word >> 8) & 0xF), reg((word >> 4) & 0xF))

def execute_se_reg(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    if state.v[op.x] == state.v[op.y]:
        skip_next(state)

def decode_sne_reg(word: int) -> Chip8Operation:
    return make_operation(word, InstructionKind.SNE_REG, "SNE", reg((word >> 8) & 0xF), reg((word >> 4) & 0xF))

def execute_sne_reg(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    if state.v[op.x] != state.v[op.y]:
        skip_next(state)


# @intent:responsibility 未知の命令語。状態を変更しません（報告はCPU層が行います）。
def execute_unknown(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    pass
