# src/chip8_tracer/arch/chip8/instructions/control.py
"""
制御命令（ジャンプ、サブルーチン、条件スキップ）の実装。
"""
from random import Random

from chip8_tracer.common.errors import StackOverflow, StackUnderflow
from chip8_tracer.core.snapshot import Operation
from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.state import Chip8CpuState, STACK_DEPTH, INSTRUCTION_SIZE
from .base import make_operation, reg, imm, addr, advance, skip_if

# --- SYS / UNKNOWN ---
# @intent:responsibility 0nnn (SYS addr) をデコードします。機械語ルーチン呼び出しはサポートしません。
def decode_sys(opcode: int) -> Operation:
    return make_operation(opcode, "0NNN", "SYS", [addr(opcode & 0xFFF)])

# @intent:responsibility 未定義の命令語をデコードします。
def decode_unknown(opcode: int) -> Operation:
    return make_operation(opcode, "UNKNOWN", "UNKNOWN", [f"{opcode:#06x}"])

# @intent:responsibility SYSおよび未定義命令を実行します（PCを進めるのみ）。
# @intent:rationale あまり実装されていない命令を使うROMを許容するため、未定義命令はエラーにしません。
def execute_nop(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    advance(state)

# --- RET ---
def decode_ret(opcode: int) -> Operation:
    return make_operation(opcode, "00EE", "RET")

# @intent:responsibility スタックから戻りアドレスをポップしてPCに設定します。
def execute_ret(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    if state.sp == 0:
        raise StackUnderflow(f"RET with empty stack at PC {state.pc:#06x}")
    state.sp -= 1
    state.pc = state.stack[state.sp]

# --- JP addr ---
def decode_jp(opcode: int) -> Operation:
    return make_operation(opcode, "1NNN", "JP", [addr(opcode & 0xFFF)])

def execute_jp(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    state.pc = op.nnn

# --- CALL addr ---
def decode_call(opcode: int) -> Operation:
    return make_operation(opcode, "2NNN", "CALL", [addr(opcode & 0xFFF)])

# @intent:responsibility 戻りアドレス（次の命令）をスタックにプッシュしてからジャンプします。
def execute_call(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    if state.sp >= STACK_DEPTH:
        raise StackOverflow(f"CALL {op.nnn:#05x} with full stack ({STACK_DEPTH} entries) at PC {state.pc:#06x}")
    state.stack[state.sp] = state.pc + INSTRUCTION_SIZE
    state.sp += 1
    state.pc = op.nnn

# --- SE Vx, byte ---
def decode_se_imm(opcode: int) -> Operation:
    return make_operation(opcode, "3XKK", "SE", [reg((opcode >> 8) & 0xF), imm(opcode & 0xFF)])

def execute_se_imm(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    skip_if(state, state.v[op.x] == op.kk)

# --- SNE Vx, byte ---
def decode_sne_imm(opcode: int) -> Operation:
    return make_operation(opcode, "4XKK", "SNE", [reg((opcode >> 8) & 0xF), imm(opcode & 0xFF)])

def execute_sne_imm(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    skip_if(state, state.v[op.x] != op.kk)

# --- SE Vx, Vy ---
def decode_se_reg(opcode: int) -> Operation:
    return make_operation(opcode, "5XY0", "SE", [reg((opcode >> 8) & 0xF), reg((opcode >> 4) & 0xF)])

def execute_se_reg(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    skip_if(state, state.v[op.x] == state.v[op.y])

# --- SNE Vx, Vy ---
def decode_sne_reg(opcode: int) -> Operation:
    return make_operation(opcode, "9XY0", "SNE", [reg((opcode >> 8) & 0xF), reg((opcode >> 4) & 0xF)])

def execute_sne_reg(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    skip_if(state, state.v[op.x] != state.v[op.y])

# --- JP V0, addr ---
def decode_jp_v0(opcode: int) -> Operation:
    return make_operation(opcode, "BNNN", "JP", ["V0", addr(opcode & 0xFFF)])

# @intent:responsibility nnn + V0 へジャンプします。範囲外になった場合は次のフェッチで検出されます。
def execute_jp_v0(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    state.pc = op.nnn + state.v[0]

# --- SKP Vx ---
def decode_skp(opcode: int) -> Operation:
    return make_operation(opcode, "EX9E", "SKP", [reg((opcode >> 8) & 0xF)])

def execute_skp(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    skip_if(state, state.keypad.is_pressed(state.v[op.x]))

# --- SKNP Vx ---
def decode_sknp(opcode: int) -> Operation:
    return make_operation(opcode, "EXA1", "SKNP", [reg((opcode >> 8) & 0xF)])

def execute_sknp(state: Chip8CpuState, bus: Bus, op: Operation, rng: Random) -> None:
    skip_if(state, not state.keypad.is_pressed(state.v[op.x]))
