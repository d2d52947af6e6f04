# src/chip8_tracer/arch/chip8/instructions/base.py
"""
CHIP-8命令実装用の共通定義。

命令語のビット配置:

   Bits:  15-12    11-8     7-4      3-0
          family    x        y        n
                             nn (7-0)
                   nnn (11-0)
"""
from dataclasses import dataclass
from enum import Enum, auto

from chip8_tracer.core.snapshot import Operation
from chip8_tracer.arch.chip8.state import Chip8CpuState, FLAG_REGISTER


# @intent:responsibility デコード結果の命令種別（タグ）を定義します。
class InstructionKind(Enum):
    CLS = auto()         # 00E0
    RET = auto()         # 00EE
    JP = auto()          # 1nnn
    CALL = auto()        # 2nnn
    SE_IMM = auto()      # 3xnn
    SNE_IMM = auto()     # 4xnn
    SE_REG = auto()      # 5xy0
    LD_IMM = auto()      # 6xnn
    ADD_IMM = auto()     # 7xnn
    LD_REG = auto()      # 8xy0
    OR = auto()          # 8xy1
    AND = auto()         # 8xy2
    XOR = auto()         # 8xy3
    ADD_REG = auto()     # 8xy4
    SUB = auto()         # 8xy5
    SHR = auto()         # 8xy6
    SUBN = auto()        # 8xy7
    SHL = auto()         # 8xyE
    SNE_REG = auto()     # 9xy0
    LD_I = auto()        # Annn
    JP_V0 = auto()       # Bnnn
    RND = auto()         # Cxnn
    DRW = auto()         # Dxyn
    SKP = auto()         # Ex9E
    SKNP = auto()        # ExA1
    LD_VX_DT = auto()    # Fx07
    LD_VX_K = auto()     # Fx0A
    LD_DT_VX = auto()    # Fx15
    LD_ST_VX = auto()    # Fx18
    ADD_I_VX = auto()    # Fx1E
    LD_F_VX = auto()     # Fx29
    LD_B_VX = auto()     # Fx33
    LD_MEM_VX = auto()   # Fx55
    LD_VX_MEM = auto()   # Fx65
    UNKNOWN = auto()


# @intent:responsibility 命令種別と抽出済みオペランドを保持するタグ付き命令。
# @intent:rationale デコードと実行を分離し、それぞれを単体で検証できるようにします。
@dataclass(frozen=True)
class Chip8Operation(Operation):
    kind: InstructionKind = InstructionKind.UNKNOWN
    word: int = 0x0000
    x: int = 0
    y: int = 0
    n: int = 0
    nn: int = 0
    nnn: int = 0


# @intent:utility_function 命令語からオペランドを切り出し、Chip8Operationを生成します。
def make_operation(word: int, kind: InstructionKind, mnemonic: str, *operands: str) -> Chip8Operation:
    return Chip8Operation(
        opcode_hex=f"{word:04X}",
        mnemonic=mnemonic,
        operands=list(operands),
        cycle_count=1,
        length=2,
        kind=kind,
        word=word,
        x=(word & 0x0F00) >> 8,
        y=(word & 0x00F0) >> 4,
        n=word & 0x000F,
        nn=word & 0x00FF,
        nnn=word & 0x0FFF,
    )


# @intent:utility_function 未知の命令語を表すOperationを生成します。
def make_unknown(word: int) -> Chip8Operation:
    return make_operation(word, InstructionKind.UNKNOWN, "UNKNOWN", f"${word:04X}")


def reg(index: int) -> str:
    return f"V{index:X}"


# @intent:utility_function VFへフラグ値(0/1)を書き込みます。命令の最後の手順として呼び出すこと。
def set_flag(state: Chip8CpuState, value: bool) -> None:
    state.v[FLAG_REGISTER] = 1 if value else 0


# @intent:utility_function 次の命令をスキップします（PCを2バイト進める）。
def skip_next(state: Chip8CpuState) -> None:
    state.pc = (state.pc + 2) & 0xFFF
