# src/chip8_tracer/arch/chip8/instructions/video.py
"""
ディスプレイ命令（CLS, DRW）の実装。
"""
from random import Random

from chip8_tracer.core.snapshot import Operation
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState
from .base import make_operation, reg, advance, require_memory

# --- CLS ---
def decode_cls(opcode: int) -> Operation:
    return make_operation(opcode, "00E0", "CLS")

def execute_cls(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    state.display.clear()
    advance(state)

# --- DRW Vx, Vy, nibble ---
def decode_drw(opcode: int) -> Operation:
    return make_operation(
        opcode, "DXYN", "DRW",
        [reg((opcode >> 8) & 0xF), reg((opcode >> 4) & 0xF), f"{opcode & 0xF:#x}"]
    )

# @intent:responsibility I から n バイトのスプライトを (Vx, Vy) にXOR描画し、衝突をVFに設定します。
# @intent:rationale 衝突はスプライト全体で論理和を取ります（最後のセルの結果で上書きしない）。
def execute_drw(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    require_memory(bus, state.i, op.n)
    rows = [bus.read(state.i + row) for row in range(op.n)]
    x, y = state.v[op.x], state.v[op.y]
    state.vf = 0
    if state.display.draw_sprite(x, y, rows):
        state.vf = 1
    advance(state)
