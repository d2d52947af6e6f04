# chip8_tracer/debugger/debugger.py
"""
デバッガモジュール。

コアエンジンの実行を制御し、ユーザーが指定した条件（ブレークポイント）で
実行を中断させる責務を負います。
"""
import copy
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from chip8_tracer.core.cpu import AbstractCpu
from chip8_tracer.core.snapshot import Snapshot
from chip8_tracer.core.state import CpuState
from chip8_tracer.transport.bus import BusAccessType

# @intent:responsibility ブレークポイントの条件タイプを定義します。
class BreakpointConditionType(Enum):
    PC_MATCH = "PC_MATCH"               # プログラムカウンタが特定のアドレスに一致
    MEMORY_READ = "MEMORY_READ"         # 特定のアドレスが読み込まれた
    MEMORY_WRITE = "MEMORY_WRITE"       # 特定のアドレスに書き込まれた
    REGISTER_VALUE = "REGISTER_VALUE"   # 特定のレジスタが特定の値になった
    REGISTER_CHANGE = "REGISTER_CHANGE" # 特定のレジスタの値が変化した
    KEY_WAIT = "KEY_WAIT"               # Fx0A によるキー入力待ちに入った

# @intent:responsibility ブレークポイントをトリガーする条件を定義します。
@dataclass(frozen=True)
class BreakpointCondition:
    """
    ブレークポイントがヒットするための条件を定義するデータクラス。
    """
    condition_type: BreakpointConditionType
    value: Optional[int] = None           # PC_MATCH, REGISTER_VALUEで使用
    address: Optional[int] = None         # MEMORY_READ, MEMORY_WRITEで使用
    register_name: Optional[str] = None   # REGISTER_VALUE, REGISTER_CHANGEで使用 (例: "V3", "I")
    enabled: bool = True


# @intent:utility_function レジスタ名から値を取得します。未知の名前はNoneを返します。
def _read_register(state: CpuState, name: str) -> Optional[int]:
    reader = getattr(state, "read_register", None)
    if reader is not None:
        try:
            return reader(name)
        except (KeyError, ValueError):
            return None
    return getattr(state, name, None)


# @intent:responsibility コアエンジンの実行制御とブレークポイント管理を行います。
class Debugger:
    """
    CPUの実行を制御し、ブレークポイントの管理を行うクラス。
    """
    def __init__(self, cpu: AbstractCpu):
        self._cpu = cpu
        self._breakpoints: List[BreakpointCondition] = []
        self._running: bool = False
        self._previous_state: CpuState = copy.deepcopy(self._cpu.get_state())
        self._last_snapshot: Optional[Snapshot] = None
        # @intent:responsibility 実行履歴を保持します。
        self._history: List[Snapshot] = []

    def add_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition not in self._breakpoints:
            self._breakpoints.append(condition)

    def update_breakpoint(self, old_condition: BreakpointCondition, new_condition: BreakpointCondition) -> None:
        if old_condition in self._breakpoints:
            idx = self._breakpoints.index(old_condition)
            self._breakpoints[idx] = new_condition

    def remove_breakpoint(self, condition: BreakpointCondition) -> None:
        if condition in self._breakpoints:
            self._breakpoints.remove(condition)

    def get_breakpoints(self) -> List[BreakpointCondition]:
        return list(self._breakpoints)

    def get_history(self) -> List[Snapshot]:
        return list(self._history)

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    def is_running(self) -> bool:
        return self._running

    # @intent:responsibility 現在のPCに一致する有効なPC_MATCHブレークポイントがあるかを判定します。
    def _pc_breakpoint_hit(self, pc: int) -> bool:
        return any(
            bp.enabled and bp.condition_type == BreakpointConditionType.PC_MATCH and bp.value == pc
            for bp in self._breakpoints
        )

    def _check_other_breakpoints(self, snapshot: Snapshot) -> bool:
        """
        Snapshotに基づいてPC_MATCH以外のブレークポイントをチェックします。
        """
        current_state = snapshot.state

        for bp in self._breakpoints:
            if not bp.enabled:
                continue

            if bp.condition_type == BreakpointConditionType.MEMORY_READ:
                for access in snapshot.bus_activity:
                    if access.access_type == BusAccessType.READ and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.MEMORY_WRITE:
                for access in snapshot.bus_activity:
                    if access.access_type == BusAccessType.WRITE and access.address == bp.address:
                        return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_VALUE:
                if bp.register_name and _read_register(current_state, bp.register_name) == bp.value:
                    return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_CHANGE:
                if bp.register_name:
                    current = _read_register(current_state, bp.register_name)
                    previous = _read_register(self._previous_state, bp.register_name)
                    if current is not None and current != previous:
                        return True
            elif bp.condition_type == BreakpointConditionType.KEY_WAIT:
                if getattr(current_state, "awaiting_key", None) is not None:
                    return True
        return False

    # @intent:responsibility Fx0A によるキー入力待ちに入っているかを判定します。
    def _awaiting_key(self, snapshot: Snapshot) -> bool:
        return getattr(snapshot.state, "awaiting_key", None) is not None

    # @intent:responsibility 1サイクル後の停止判定。ブレークポイントの有無にかかわらず、キー入力待ちでも停止します。
    def _should_stop(self, snapshot: Snapshot) -> bool:
        if self._check_other_breakpoints(snapshot):
            print(f"Breakpoint hit at PC: {snapshot.state.pc:#05x}")
            return True
        if self._awaiting_key(snapshot):
            print(f"Waiting for key at PC: {snapshot.state.pc:#05x}")
            return True
        return False

    def step_instruction(self) -> Snapshot:
        """
        CPUを1サイクル実行し、その結果のSnapshotを返します。
        """
        self._previous_state = copy.deepcopy(self._cpu.get_state())
        snapshot = self._cpu.step()
        self._last_snapshot = snapshot
        self._history.append(snapshot)
        return snapshot

    def run(self, max_steps: Optional[int] = None) -> int:
        """
        ブレークポイントにヒットするか、キー入力待ちに入るか、max_steps サイクルを実行するまで実行を継続します。
        実行したサイクル数を返します。
        """
        self._running = True
        steps = 0

        # 現在のPCにブレークポイントがある場合は、まず1命令進めてから判定を始める
        if (max_steps is None or max_steps > 0) and self._pc_breakpoint_hit(self._cpu.get_state().pc):
            snapshot = self.step_instruction()
            steps += 1
            if self._should_stop(snapshot):
                self._running = False
                return steps

        while self._running:
            if max_steps is not None and steps >= max_steps:
                self._running = False
                break

            current_pc = self._cpu.get_state().pc
            if self._pc_breakpoint_hit(current_pc):
                self._running = False
                print(f"Breakpoint hit at PC: {current_pc:#05x}")
                break

            snapshot = self.step_instruction()
            steps += 1

            if self._should_stop(snapshot):
                self._running = False

        return steps

    def stop(self) -> None:
        self._running = False
