# src/chip8_tracer/arch/chip8/instructions/keys.py
"""
キー入力命令（Ex9E, ExA1, Fx0A）の実装。
"""
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState
from chip8_tracer.arch.chip8.peripherals import Chip8Devices
from .base import Chip8Operation, InstructionKind, make_operation, make_unknown, reg, skip_next


# @intent:responsibility Ex9E / ExA1 をデコードします。それ以外の下位バイトは未知の命令です。
def decode_family_e(word: int) -> Chip8Operation:
    x = (word >> 8) & 0xF
    if word & 0xFF == 0x9E:
        return make_operation(word, InstructionKind.SKP, "SKP", reg(x))
    if word & 0xFF == 0xA1:
        return make_operation(word, InstructionKind.SKNP, "SKNP", reg(x))
    return make_unknown(word)

# @intent:pre-condition Vx は 0x0-0xF であること。範囲外の場合 InvalidKeyError を送出します。
def execute_skp(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    if devices.keypad.is_pressed(state.v[op.x]):
        skip_next(state)

def execute_sknp(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    if not devices.keypad.is_pressed(state.v[op.x]):
        skip_next(state)


def decode_ld_vx_k(word: int) -> Chip8Operation:
    return make_operation(word, InstructionKind.LD_VX_K, "LD", reg((word >> 8) & 0xF), "K")

# @intent:responsibility Fx0A: キーが押されていればその番号を Vx に格納し、なければ入力待ち状態に入ります。
# @intent:rationale 入力待ちはスレッドをブロックせず、awaiting_key として明示的な状態で表現します。
#                  待機中のPCはこの命令自身のアドレスを指し、キー検出後のサイクルで通常どおり2進みます。
def execute_ld_vx_k(state: Chip8CpuState, bus: Bus, op: Chip8Operation, devices: Chip8Devices) -> None:
    key = devices.keypad.first_pressed()
    if key is None:
        state.awaiting_key = op.x
        state.pc = (state.pc - 2) & 0xFFF
    else:
        state.v[op.x] = key
