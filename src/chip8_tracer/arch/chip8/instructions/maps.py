# src/chip8_tracer/arch/chip8/instructions/maps.py
"""
命令形式と命令実装のマッピング定義。

命令形式は上位ニブル（命令ファミリ）と、ファミリ 0, 5, 8, 9, E, F で
命令を区別するための追加ニブルから求めます（例: 0x8124 -> "8XY4"）。
"""
from typing import Optional

from . import alu
from . import control
from . import load
from . import video

# @intent:utility_function 命令語から命令形式キーを求めます。未定義パターンの場合はNone。
def opcode_form(opcode: int) -> Optional[str]:
    family = (opcode >> 12) & 0xF
    n = opcode & 0xF
    kk = opcode & 0xFF
    if family == 0x0:
        if opcode == 0x00E0:
            return "00E0"
        if opcode == 0x00EE:
            return "00EE"
        return "0NNN"
    if family in (0x1, 0x2, 0xA, 0xB):
        return f"{family:X}NNN"
    if family in (0x3, 0x4, 0x6, 0x7, 0xC):
        return f"{family:X}XKK"
    if family in (0x5, 0x9):
        return f"{family:X}XY0" if n == 0 else None
    if family == 0x8:
        return f"8XY{n:X}"
    if family == 0xD:
        return "DXYN"
    # 0xE, 0xF
    return f"{family:X}X{kk:02X}"

# @intent:map 命令形式からデコード関数へのマッピングテーブル。
DECODE_MAP = {
    # Control
    "0NNN": control.decode_sys,
    "00EE": control.decode_ret,
    "1NNN": control.decode_jp,
    "2NNN": control.decode_call,
    "3XKK": control.decode_se_imm,
    "4XKK": control.decode_sne_imm,
    "5XY0": control.decode_se_reg,
    "9XY0": control.decode_sne_reg,
    "BNNN": control.decode_jp_v0,
    "EX9E": control.decode_skp,
    "EXA1": control.decode_sknp,

    # ALU
    "7XKK": alu.decode_add_imm,
    "8XY0": alu.decode_ld_reg,
    "8XY1": alu.decode_or,
    "8XY2": alu.decode_and,
    "8XY3": alu.decode_xor,
    "8XY4": alu.decode_add_reg,
    "8XY5": alu.decode_sub,
    "8XY6": alu.decode_shr,
    "8XY7": alu.decode_subn,
    "8XYE": alu.decode_shl,
    "CXKK": alu.decode_rnd,

    # Load/Store
    "6XKK": load.decode_ld_imm,
    "ANNN": load.decode_ld_i,
    "FX07": load.decode_ld_vx_dt,
    "FX0A": load.decode_ld_vx_k,
    "FX15": load.decode_ld_dt_vx,
    "FX18": load.decode_ld_st_vx,
    "FX1E": load.decode_add_i,
    "FX29": load.decode_ld_f,
    "FX33": load.decode_ld_b,
    "FX55": load.decode_store,
    "FX65": load.decode_load,

    # Video
    "00E0": video.decode_cls,
    "DXYN": video.decode_drw,
}

# @intent:map 命令形式から実行関数へのマッピングテーブル。
EXECUTE_MAP = {
    # Control
    "0NNN": control.execute_nop,
    "UNKNOWN": control.execute_nop,
    "00EE": control.execute_ret,
    "1NNN": control.execute_jp,
    "2NNN": control.execute_call,
    "3XKK": control.execute_se_imm,
    "4XKK": control.execute_sne_imm,
    "5XY0": control.execute_se_reg,
    "9XY0": control.execute_sne_reg,
    "BNNN": control.execute_jp_v0,
    "EX9E": control.execute_skp,
    "EXA1": control.execute_sknp,

    # ALU
    "7XKK": alu.execute_add_imm,
    "8XY0": alu.execute_ld_reg,
    "8XY1": alu.execute_or,
    "8XY2": alu.execute_and,
    "8XY3": alu.execute_xor,
    "8XY4": alu.execute_add_reg,
    "8XY5": alu.execute_sub,
    "8XY6": alu.execute_shr,
    "8XY7": alu.execute_subn,
    "8XYE": alu.execute_shl,
    "CXKK": alu.execute_rnd,

    # Load/Store
    "6XKK": load.execute_ld_imm,
    "ANNN": load.execute_ld_i,
    "FX07": load.execute_ld_vx_dt,
    "FX0A": load.execute_ld_vx_k,
    "FX15": load.execute_ld_dt_vx,
    "FX18": load.execute_ld_st_vx,
    "FX1E": load.execute_add_i,
    "FX29": load.execute_ld_f,
    "FX33": load.execute_ld_b,
    "FX55": load.execute_store,
    "FX65": load.execute_load,

    # Video
    "00E0": video.execute_cls,
    "DXYN": video.execute_drw,
}
