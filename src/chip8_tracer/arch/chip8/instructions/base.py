# src/chip8_tracer/arch/chip8/instructions/base.py
"""
CHIP-8命令実装用の共通ユーティリティ。
"""
from typing import List, Optional

from chip8_tracer.common.errors import MemoryAccessError
from chip8_tracer.core.snapshot import Operation
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState, INSTRUCTION_SIZE

# @intent:utility_function 命令語を分解し、派生フィールドを埋めたOperationを生成します。
def make_operation(opcode: int, form: str, mnemonic: str, operands: Optional[List[str]] = None) -> Operation:
    return Operation(
        opcode=opcode,
        form=form,
        mnemonic=mnemonic,
        operands=operands or [],
        x=(opcode >> 8) & 0xF,
        y=(opcode >> 4) & 0xF,
        n=opcode & 0xF,
        kk=opcode & 0xFF,
        nnn=opcode & 0xFFF,
        length=INSTRUCTION_SIZE,
    )

# @intent:utility_function オペランド表記のフォーマッタ。
def reg(index: int) -> str:
    return f"V{index:X}"

def imm(value: int) -> str:
    return f"{value:#04x}"

def addr(value: int) -> str:
    return f"{value:#05x}"

# @intent:utility_function 通常の命令完了としてPCを1命令分進めます。
def advance(state: Chip8CpuState) -> None:
    state.pc += INSTRUCTION_SIZE

# @intent:utility_function 条件成立時に次の命令を読み飛ばします。
def skip_if(state: Chip8CpuState, condition: bool) -> None:
    state.pc += 2 * INSTRUCTION_SIZE if condition else INSTRUCTION_SIZE

# @intent:utility_function 複数バイトに跨るメモリアクセスの前に範囲全体を検査します。
# @intent:rationale 途中で失敗して部分的に書き込まれた状態を残さないため、アクセス前に一括で検査します。
def require_memory(bus: Bus, start: int, length: int) -> None:
    if length > 0 and not bus.is_mapped(start, length):
        raise MemoryAccessError(
            f"Memory range {start:#06x}-{start + length - 1:#06x} is outside the address space."
        )
