"""
CHIP-8命令セット実装パッケージ。
"""
from random import Random

from chip8_tracer.transport.bus import Bus
from chip8_tracer.core.snapshot import Operation
from chip8_tracer.arch.chip8.state import Chip8CpuState
from .maps import DECODE_MAP, EXECUTE_MAP, opcode_form
from .control import decode_unknown, execute_nop

# @intent:responsibility CHIP-8の16bit命令語をデコードします。
def decode_opcode(opcode: int) -> Operation:
    """
    命令語をデコードし、Operationオブジェクトを返します。
    未定義のパターンは UNKNOWN として返し、実行時はPCを進めるだけの命令として扱います。
    """
    decoder = DECODE_MAP.get(opcode_form(opcode))
    if decoder:
        return decoder(opcode)
    return decode_unknown(opcode)

# @intent:responsibility デコードされたCHIP-8命令を実行します。
def execute_instruction(operation: Operation, state: Chip8CpuState, bus: Bus, rng: Random) -> None:
    """
    デコードされた命令を実行し、CPUの状態を変更します。PCの更新は各命令が行います。
    """
    executor = EXECUTE_MAP.get(operation.form, execute_nop)
    executor(state, bus, operation, rng)
