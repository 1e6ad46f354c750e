# src/chip8_tracer/arch/chip8/instructions/alu.py
"""
算術論理演算命令の実装。

8bitレジスタ演算は全て256で折り返します。フラグを設定する命令は
演算前のオペランドからフラグを計算し、VF、Vx の順に書き込みます
（x が F の場合は演算結果がフラグを上書きします）。
"""
from random import Random

from chip8_tracer.core.snapshot import Operation
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState
from .base import make_operation, reg, imm, advance

def _xy(opcode: int, mnemonic: str, form: str) -> Operation:
    return make_operation(opcode, form, mnemonic, [reg((opcode >> 8) & 0xF), reg((opcode >> 4) & 0xF)])

# --- ADD Vx, byte ---
def decode_add_imm(opcode: int) -> Operation:
    return make_operation(opcode, "7XKK", "ADD", [reg((opcode >> 8) & 0xF), imm(opcode & 0xFF)])

# @intent:responsibility Vx に即値を加算します。VFは変更しません。
def execute_add_imm(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    state.v[op.x] = (state.v[op.x] + op.kk) & 0xFF
    advance(state)

# --- LD Vx, Vy ---
def decode_ld_reg(opcode: int) -> Operation:
    return _xy(opcode, "LD", "8XY0")

def execute_ld_reg(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    state.v[op.x] = state.v[op.y]
    advance(state)

# --- OR / AND / XOR Vx, Vy ---
def decode_or(opcode: int) -> Operation:
    return _xy(opcode, "OR", "8XY1")

def execute_or(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    state.v[op.x] |= state.v[op.y]
    advance(state)

def decode_and(opcode: int) -> Operation:
    return _xy(opcode, "AND", "8XY2")

def execute_and(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    state.v[op.x] &= state.v[op.y]
    advance(state)

def decode_xor(opcode: int) -> Operation:
    return _xy(opcode, "XOR", "8XY3")

def execute_xor(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    state.v[op.x] ^= state.v[op.y]
    advance(state)

# --- ADD Vx, Vy ---
def decode_add_reg(opcode: int) -> Operation:
    return _xy(opcode, "ADD", "8XY4")

# @intent:responsibility Vx + Vy を計算し、256以上ならVF=1（キャリー）とします。
def execute_add_reg(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    res = state.v[op.x] + state.v[op.y]
    state.vf = 1 if res > 0xFF else 0
    state.v[op.x] = res & 0xFF
    advance(state)

# --- SUB Vx, Vy ---
def decode_sub(opcode: int) -> Operation:
    return _xy(opcode, "SUB", "8XY5")

# @intent:responsibility Vx - Vy を計算し、Vx > Vy ならVF=1（NOT borrow）とします。
def execute_sub(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    v1, v2 = state.v[op.x], state.v[op.y]
    state.vf = 1 if v1 > v2 else 0
    state.v[op.x] = (v1 - v2) & 0xFF
    advance(state)

# --- SHR Vx ---
def decode_shr(opcode: int) -> Operation:
    return make_operation(opcode, "8XY6", "SHR", [reg((opcode >> 8) & 0xF)])

# @intent:responsibility Vx を右シフトし、押し出されたLSBをVFに格納します。Vy は使用しません。
def execute_shr(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    value = state.v[op.x]
    state.vf = value & 0x01
    state.v[op.x] = value >> 1
    advance(state)

# --- SUBN Vx, Vy ---
def decode_subn(opcode: int) -> Operation:
    return _xy(opcode, "SUBN", "8XY7")

def execute_subn(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    v1, v2 = state.v[op.x], state.v[op.y]
    state.vf = 1 if v2 > v1 else 0
    state.v[op.x] = (v2 - v1) & 0xFF
    advance(state)

# --- SHL Vx ---
def decode_shl(opcode: int) -> Operation:
    return make_operation(opcode, "8XYE", "SHL", [reg((opcode >> 8) & 0xF)])

# @intent:responsibility Vx を左シフトし、押し出されたMSBをVFに格納します。
def execute_shl(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    value = state.v[op.x]
    state.vf = (value >> 7) & 0x01
    state.v[op.x] = (value << 1) & 0xFF
    advance(state)

# --- RND Vx, byte ---
def decode_rnd(opcode: int) -> Operation:
    return make_operation(opcode, "CXKK", "RND", [reg((opcode >> 8) & 0xF), imm(opcode & 0xFF)])

# @intent:responsibility 一様乱数バイトと即値のANDを Vx に格納します。
def execute_rnd(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    state.v[op.x] = rng.randint(0, 0xFF) & op.kk
    advance(state)
