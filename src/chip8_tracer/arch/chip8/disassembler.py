# src/chip8_tracer/arch/chip8/disassembler.py
"""
CHIP-8 Disassembler

メモリ上のバイナリデータを解析し、CHIP-8のアセンブリ言語（ニーモニック）に変換します。
Instruction Layerのデコードロジックを再利用し、バスアクセスログを汚さないよう
peek（ログなし読み込み）のみを使用します。
"""
from typing import List

from chip8_tracer.common.types import DisassemblyListing
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.instructions import decode_opcode
from chip8_tracer.arch.chip8.state import INSTRUCTION_SIZE

# @intent:responsibility 指定されたメモリ範囲を逆アセンブルし、表示用データを生成します。
def disassemble(bus: Bus, start_addr: int, length: int) -> DisassemblyListing:
    """
    指定された範囲のメモリを2バイト単位で逆アセンブルします。

    Returns:
        List of (address, hex_bytes, mnemonic) tuples.
    """
    result = []
    current_addr = start_addr
    end_addr = start_addr + length

    # 命令語の2バイト目がマップ外になる位置で打ち切る
    while current_addr + 1 < end_addr and bus.is_mapped(current_addr, INSTRUCTION_SIZE):
        opcode = (bus.peek(current_addr) << 8) | bus.peek(current_addr + 1)
        operation = decode_opcode(opcode)
        result.append((current_addr, operation.opcode_hex, operation.to_assembly()))
        current_addr += operation.length

    return result

# @intent:responsibility メモリ内容の16進ダンプ文字列を生成します。
def dump_memory(bus: Bus, start_addr: int, end_addr: int, condensed: bool = False, width: int = 16) -> str:
    """
    [start_addr, end_addr) のメモリ内容を16進で整形します。
    condensed=True の場合はアドレスを付けずカンマ区切りの1行にします。
    """
    values = [bus.peek(address) for address in range(start_addr, end_addr)]
    if condensed:
        return ", ".join(f"{value:02X}" for value in values)

    lines: List[str] = []
    for offset in range(0, len(values), width):
        chunk = values[offset:offset + width]
        lines.append(f"{start_addr + offset:04X}: " + " ".join(f"{value:02X}" for value in chunk))
    return "\n".join(lines)
