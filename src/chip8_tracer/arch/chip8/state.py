# src/chip8_tracer/arch/chip8/state.py
"""
CHIP-8 CPUの状態定義。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from chip8_tracer.core.state import CpuState

# @intent:constant 汎用レジスタ数 (V0-VF)。
NUM_REGISTERS = 16

# @intent:constant コールスタックの容量（リターンアドレス数）。
STACK_DEPTH = 16

# @intent:constant プログラムのロード先アドレスであり、PCの初期値。
PROGRAM_START = 0x200

# @intent:constant フラグレジスタとして兼用されるVFのインデックス。
FLAG_REGISTER = 0xF


# @intent:responsibility CHIP-8 CPUのレジスタ、タイマー、コールスタックの状態を保持します。
# @intent:rationale メモリ・画面・キーパッドはBusとペリフェラルが保持するため、ここには含めません。
@dataclass
class Chip8CpuState(CpuState):
    """
    CHIP-8 CPUのレジスタ状態。

    sp はコールスタックに積まれているリターンアドレスの数 (0-16) を表します。
    awaiting_key は Fx0A によるキー入力待ちの間、格納先レジスタ番号を保持します。
    """
    pc: int = PROGRAM_START
    v: List[int] = field(default_factory=lambda: [0] * NUM_REGISTERS)
    index: int = 0x000
    stack: List[int] = field(default_factory=lambda: [0] * STACK_DEPTH)
    delay_timer: int = 0
    sound_timer: int = 0
    awaiting_key: Optional[int] = None
    opcode: int = 0x0000  # 直近にデコードした命令語

    # @intent:responsibility VF（キャリー/ボロー/衝突フラグ）の状態。
    @property
    def flag_vf(self) -> bool:
        return self.v[FLAG_REGISTER] != 0

    # @intent:responsibility 表示名でレジスタ値を取得します（V0-VF, I, PC, SP, DT, ST）。
    def read_register(self, name: str) -> int:
        key = name.upper()
        if len(key) == 2 and key[0] == "V":
            return self.v[int(key[1], 16)]
        aliases = {
            "I": self.index,
            "PC": self.pc,
            "SP": self.sp,
            "DT": self.delay_timer,
            "ST": self.sound_timer,
        }
        if key not in aliases:
            raise KeyError(f"Unknown register name: {name}")
        return aliases[key]
