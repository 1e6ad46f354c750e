# src/chip8_tracer/arch/chip8/instructions/load.py
"""
ロード/ストア命令（レジスタ、Iレジスタ、タイマー、メモリ転送、キー入力待ち）の実装。

Iレジスタは16bitに収まるよう保持し、12bitへのマスクは行いません。
メモリ範囲外を指したままアクセスした場合は MemoryAccessError となります。
"""
from random import Random

from chip8_tracer.core.snapshot import Operation
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState, FONT_START, FONT_GLYPH_SIZE
from .base import make_operation, reg, imm, addr, advance, require_memory

# --- LD Vx, byte ---
def decode_ld_imm(opcode: int) -> Operation:
    return make_operation(opcode, "6XKK", "LD", [reg((opcode >> 8) & 0xF), imm(opcode & 0xFF)])

def execute_ld_imm(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    state.v[op.x] = op.kk
    advance(state)

# --- LD I, addr ---
def decode_ld_i(opcode: int) -> Operation:
    return make_operation(opcode, "ANNN", "LD", ["I", addr(opcode & 0xFFF)])

def execute_ld_i(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    state.i = op.nnn
    advance(state)

# --- LD Vx, DT ---
def decode_ld_vx_dt(opcode: int) -> Operation:
    return make_operation(opcode, "FX07", "LD", [reg((opcode >> 8) & 0xF), "DT"])

def execute_ld_vx_dt(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    state.v[op.x] = state.delay_timer
    advance(state)

# --- LD Vx, K ---
def decode_ld_vx_k(opcode: int) -> Operation:
    return make_operation(opcode, "FX0A", "LD", [reg((opcode >> 8) & 0xF), "K"])

# @intent:responsibility キーが押されるまで同じ命令に留まり、押されたキーの番号を Vx に格納します。
# @intent:rationale スレッドをブロックせず、PCを進めないことで次のステップで再実行させます。
#                  その間もドライバはタイマー更新と描画を継続できます。
def execute_ld_vx_k(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    key = state.keypad.first_pressed()
    if key is None:
        state.waiting_for_key = True
        return
    state.v[op.x] = key
    state.waiting_for_key = False
    advance(state)

# --- LD DT, Vx ---
def decode_ld_dt_vx(opcode: int) -> Operation:
    return make_operation(opcode, "FX15", "LD", ["DT", reg((opcode >> 8) & 0xF)])

def execute_ld_dt_vx(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    state.delay_timer = state.v[op.x]
    advance(state)

# --- LD ST, Vx ---
def decode_ld_st_vx(opcode: int) -> Operation:
    return make_operation(opcode, "FX18", "LD", ["ST", reg((opcode >> 8) & 0xF)])

def execute_ld_st_vx(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    state.sound_timer = state.v[op.x]
    advance(state)

# --- ADD I, Vx ---
def decode_add_i(opcode: int) -> Operation:
    return make_operation(opcode, "FX1E", "ADD", ["I", reg((opcode >> 8) & 0xF)])

def execute_add_i(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    state.i = (state.i + state.v[op.x]) & 0xFFFF
    advance(state)

# --- LD F, Vx ---
def decode_ld_f(opcode: int) -> Operation:
    return make_operation(opcode, "FX29", "LD", ["F", reg((opcode >> 8) & 0xF)])

# @intent:responsibility Vx の下位4bitに対応するフォントグリフのアドレスを I に設定します。
def execute_ld_f(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    state.i = FONT_START + (state.v[op.x] & 0xF) * FONT_GLYPH_SIZE
    advance(state)

# --- LD B, Vx ---
def decode_ld_b(opcode: int) -> Operation:
    return make_operation(opcode, "FX33", "LD", ["B", reg((opcode >> 8) & 0xF)])

# @intent:responsibility Vx の10進表現（百の位、十の位、一の位）を I, I+1, I+2 に書き込みます。
def execute_ld_b(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    value = state.v[op.x]
    require_memory(bus, state.i, 3)
    bus.write(state.i, value // 100)
    bus.write(state.i + 1, (value // 10) % 10)
    bus.write(state.i + 2, value % 10)
    advance(state)

# --- LD [I], Vx ---
def decode_store(opcode: int) -> Operation:
    return make_operation(opcode, "FX55", "LD", ["[I]", reg((opcode >> 8) & 0xF)])

# @intent:responsibility V0..Vx を I から始まるメモリへコピーします。I は変更しません。
def execute_store(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    require_memory(bus, state.i, op.x + 1)
    for index in range(op.x + 1):
        bus.write(state.i + index, state.v[index])
    advance(state)

# --- LD Vx, [I] ---
def decode_load(opcode: int) -> Operation:
    return make_operation(opcode, "FX65", "LD", [reg((opcode >> 8) & 0xF), "[I]"])

def execute_load(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    require_memory(bus, state.i, op.x + 1)
    for index in range(op.x + 1):
        state.v[index] = bus.read(state.i + index)
    advance(state)
