# chip8_tracer/debugger/debugger.py
"""
デバッガモジュール。

コアエンジンの実行を制御し、ユーザーが指定した条件（ブレークポイント）で
実行を中断させる責務を負います。実行中に MachineFault が発生した場合は
ループを停止してから例外を呼び出し元へ伝播させます。
"""
import copy
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, List, Optional

from chip8_tracer.common.errors import MachineFault
from chip8_tracer.common.types import RegisterMap
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

# @intent:responsibility ブレークポイントをトリガーする条件を定義します。
@dataclass(frozen=True)
class BreakpointCondition:
    """
    ブレークポイントがヒットするための条件を定義するデータクラス。
    register_name は CPU の get_register_map() のキー（"V0", "I" など）です。
    """
    condition_type: BreakpointConditionType
    value: Optional[int] = None           # PC_MATCH, REGISTER_VALUEで使用
    address: Optional[int] = None         # MEMORY_READ, MEMORY_WRITEで使用
    register_name: Optional[str] = None   # REGISTER_VALUE, REGISTER_CHANGEで使用
    enabled: bool = True

# @intent:responsibility 履歴の1エントリ。実行後のSnapshotと、実行直前の乱数生成器の状態を組で保持します。
@dataclass(frozen=True)
class HistoryEntry:
    snapshot: Snapshot
    random_state: Optional[object] = None

DEFAULT_MAX_HISTORY = 1000

# @intent:responsibility コアエンジンの実行制御とブレークポイント管理を行います。
class Debugger:
    """
    CPUの実行を制御し、ブレークポイントの管理を行うクラス。
    """
    # @intent:pre-condition `max_history`は1以上である必要があります。
    def __init__(self, cpu: AbstractCpu, max_history: int = DEFAULT_MAX_HISTORY):
        if max_history < 1:
            raise ValueError(f"max_history must be at least 1: {max_history}")
        self._cpu = cpu
        self._breakpoints: List[BreakpointCondition] = []
        self._running: bool = False
        self._previous_registers: RegisterMap = self._cpu.get_register_map()
        self._last_snapshot: Optional[Snapshot] = None
        # @intent:responsibility 直近 max_history 命令分の実行履歴を保持し、ステップバックをサポートします。
        # @intent:rationale Snapshotはディスプレイを含む状態全体のコピーを持つため、古いものから破棄します。
        self._history: Deque[HistoryEntry] = deque(maxlen=max_history)
        # 一度でも履歴を破棄すると、初期状態は直前の状態として使えなくなる
        self._history_truncated: bool = False
        # @intent:responsibility 履歴が尽きた時に戻るための初期状態を保持します。
        self._initial_state: CpuState = copy.deepcopy(self._cpu.get_state())

    @property
    def max_history(self) -> int:
        return self._history.maxlen

    @property
    def is_running(self) -> bool:
        return self._running

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
        return [entry.snapshot for entry in self._history]

    def get_last_snapshot(self) -> Optional[Snapshot]:
        return self._last_snapshot

    def _hits_pc_breakpoint(self, pc: int) -> bool:
        return any(
            bp.enabled and bp.condition_type == BreakpointConditionType.PC_MATCH and bp.value == pc
            for bp in self._breakpoints
        )

    def _check_other_breakpoints(self, snapshot: Snapshot) -> bool:
        """
        Snapshotに基づいてPC_MATCH以外のブレークポイントをチェックします。
        """
        current_registers = self._cpu.get_register_map()

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
                if bp.register_name in current_registers:
                    if current_registers[bp.register_name] == bp.value:
                        return True
            elif bp.condition_type == BreakpointConditionType.REGISTER_CHANGE:
                if bp.register_name in current_registers and bp.register_name in self._previous_registers:
                    if current_registers[bp.register_name] != self._previous_registers[bp.register_name]:
                        return True
        return False

    def step_instruction(self) -> Snapshot:
        """
        CPUを1命令分実行し、その結果のSnapshotを返します。
        """
        self._previous_registers = self._cpu.get_register_map()
        random_state = self._cpu.get_random_state()
        snapshot = self._cpu.step()
        self._last_snapshot = snapshot
        if len(self._history) == self._history.maxlen:
            self._history_truncated = True
        self._history.append(HistoryEntry(snapshot, random_state))
        return snapshot

    # @intent:responsibility 実行履歴を1つ戻り、CPUとメモリと乱数生成器の状態を復元します。
    # @intent:return 戻った先の命令のSnapshot。戻れない場合や初期状態へ戻った場合はNone。
    def step_back(self) -> Optional[Snapshot]:
        if not self._history:
            return None
        # 破棄済みの履歴の直後にいる場合、戻り先の状態が残っていない
        if len(self._history) == 1 and self._history_truncated:
            return None

        entry = self._history.pop()

        # バスアクティビティを逆順にスキャンし、書き込み操作があれば元に戻す
        bus = self._cpu.get_bus()
        for access in reversed(entry.snapshot.bus_activity):
            if access.access_type == BusAccessType.WRITE and access.previous_data is not None:
                bus.load(access.address, access.previous_data)

        # 取り消した命令の実行直前の乱数状態に戻し、再実行で同じ値が出るようにする
        self._cpu.set_random_state(entry.random_state)

        if self._history:
            previous_snapshot = self._history[-1].snapshot
            self._cpu.restore_state(previous_snapshot.state)
            self._last_snapshot = previous_snapshot
            return previous_snapshot

        self._cpu.restore_state(self._initial_state)
        self._last_snapshot = None
        return None

    def run(self, max_steps: Optional[int] = None) -> int:
        """
        ブレークポイントにヒットするか、max_steps 命令を実行するまでCPUの実行を継続します。
        実行した命令数を返します。
        """
        self._running = True
        executed = 0

        # 現在のPCにあるブレークポイントで即座に停止しないよう、最初の1命令は無条件に実行する
        first = True
        try:
            while self._running:
                if max_steps is not None and executed >= max_steps:
                    break

                current_pc = self._cpu.get_state().pc
                if not first and self._hits_pc_breakpoint(current_pc):
                    print(f"Breakpoint hit at PC: {current_pc:#06x}")
                    break
                first = False

                snapshot = self.step_instruction()
                executed += 1

                if self._check_other_breakpoints(snapshot):
                    print(f"Breakpoint hit at PC: {snapshot.state.pc:#06x}")
                    break
        except MachineFault as fault:
            print(f"Machine fault at PC: {self._cpu.get_state().pc:#06x}: {fault}")
            raise
        finally:
            self._running = False
        return executed

    def stop(self) -> None:
        self._running = False
