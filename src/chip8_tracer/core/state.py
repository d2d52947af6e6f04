# chip8_tracer/core/state.py
"""
命令サイクルが共通して扱う状態。

AbstractCpu.step() は開始時の pc を Snapshot に、Debugger は pc を PC_MATCH の判定に使います。
sp はコールスタックに積まれたリターンアドレスの数で、アドレスではありません。
"""
from dataclasses import dataclass

# @intent:responsibility pc と sp のみを持つ基底状態。レジスタ、タイマー、スタック本体は Chip8CpuState が追加します。
@dataclass
class CpuState:
    pc: int = 0x000
    sp: int = 0
