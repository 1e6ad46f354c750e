# chip8_tracer/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1命令実行後のCPUとバスの状態を記録した不変のデータ構造を定義します。
デバッガへの情報提供と、トレース時の状態記録に用いる責務を負います。
"""
from dataclasses import dataclass, field
from typing import List, Optional

from chip8_tracer.core.state import CpuState
from chip8_tracer.transport.bus import BusAccessType, BusAccess


# @intent:responsibility デコードされた命令の詳細を記録します。
@dataclass(frozen=True) # 不変データ構造
class Operation:
    """
    デコードされた命令の詳細（命令語、ニーモニック、オペランド、派生フィールド）を記録するデータクラス。
    """
    opcode: int # 例: 0x6005
    form: str # 命令形式。例: "6XKK"
    mnemonic: str # 例: "LD"
    operands: List[str] = field(default_factory=list) # 例: ["V0", "0x05"]
    x: int = 0 # bits 8-11
    y: int = 0 # bits 4-7
    n: int = 0 # bits 0-3
    kk: int = 0 # 下位8bit即値
    nnn: int = 0 # 下位12bitアドレス
    length: int = 2 # 命令のバイト長

    @property
    def opcode_hex(self) -> str:
        return f"{self.opcode:04X}"

    # @intent:responsibility "LD V0, 0x05" 形式のアセンブリ表記を返します。
    def to_assembly(self) -> str:
        if self.operands:
            return f"{self.mnemonic} " + ", ".join(self.operands)
        return self.mnemonic

# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True) # 不変データ構造
class Metadata:
    """
    実行に関するメタデータ（累計ステップ数、トレース文字列）を記録するデータクラス。
    """
    step_count: int
    trace: Optional[str] = None # 例: "0x0200: 6005 LD V0, 0x05"

# @intent:responsibility ある一時点におけるCPUとバスの状態を不変に記録します。
@dataclass(frozen=True) # 不変データ構造
class Snapshot:
    """
    1命令実行直後の、CPUとバスの状態を記録した不変のデータ構造。
    state は実行後の状態のコピーであり、以降の実行で変化しません。
    """
    state: CpuState
    operation: Operation
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)

    # @intent:responsibility このステップで書き込まれたアドレスの一覧を返します。
    def written_addresses(self) -> List[int]:
        return [a.address for a in self.bus_activity if a.access_type == BusAccessType.WRITE]
