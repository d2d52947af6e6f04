# src/chip8_tracer/arch/chip8/instructions/__init__.py
"""
CHIP-8命令セット実装パッケージ。
"""
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState
from chip8_tracer.arch.chip8.peripherals import Chip8Devices
from .base import Chip8Operation, InstructionKind
from .maps import DECODE_MAP, EXECUTE_MAP

# @intent:responsibility 16ビットの命令語をCHIP-8の命令としてデコードします。
# @intent:rationale デコードは純粋関数とし、バスやCPU状態に依存させません。
def decode_opcode(word: int) -> Chip8Operation:
    """
    命令語をデコードし、命令種別とオペランドを保持するChip8Operationを返します。
    未知の命令語の場合は種別 UNKNOWN を返します。
    """
    return DECODE_MAP[(word >> 12) & 0xF](word & 0xFFFF)

# @intent:responsibility デコードされたCHIP-8命令を実行し、CPUの状態を変更します。
def execute_instruction(operation: Chip8Operation, state: Chip8CpuState, bus: Bus, devices: Chip8Devices) -> None:
    EXECUTE_MAP[operation.kind](state, bus, operation, devices)
