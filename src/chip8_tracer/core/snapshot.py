# chip8_tracer/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1サイクル実行後のCPUとバスの状態を記録した不変のデータ構造を定義します。
デバッガやCLIへの情報提供と、実行履歴の記録に用いる責務を負います。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from chip8_tracer.core.state import CpuState
from chip8_tracer.transport.bus import BusAccess


# @intent:responsibility 実行された命令の詳細を記録します。
@dataclass(frozen=True)
class Operation:
    """
    実行された命令の詳細（HEX、ニーモニック、オペランド）を記録するデータクラス。
    """
    opcode_hex: str  # 例: "A22A"
    mnemonic: str  # 例: "LD"
    operands: List[str] = field(default_factory=list)  # 例: ["I", "$22A"]
    cycle_count: int = 0  # 命令実行に必要なサイクル数
    length: int = 1  # 命令のバイト長

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True)
class Metadata:
    """
    実行に関するメタデータ（累計サイクル数、表示用テキスト、サウンド信号）を記録するデータクラス。
    """
    cycle_count: int
    symbol_info: Optional[str] = None  # 例: "DRW V0, V1, 5"
    sound_active: bool = False  # このサイクルでビープ音を鳴らすべきか

# @intent:responsibility ある一時点におけるCPUとバスの状態を不変に記録します。
@dataclass(frozen=True)
class Snapshot:
    """
    ある一時点における、CPUとバスの状態を記録した不変のデータ構造。
    stateは生成時点のコピーであり、以後のサイクルで変化しません。
    """
    state: CpuState
    operation: Operation
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)
