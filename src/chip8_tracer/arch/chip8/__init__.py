"""
CHIP-8 アーキテクチャ実装パッケージ。
"""
from chip8_tracer.arch.chip8.cpu import Chip8Cpu, create_bus
from chip8_tracer.arch.chip8.state import Chip8CpuState
from chip8_tracer.arch.chip8.display import Display, DISPLAY_WIDTH, DISPLAY_HEIGHT
from chip8_tracer.arch.chip8.keypad import Keypad, KEYPAD_LAYOUT

__all__ = [
    "Chip8Cpu",
    "Chip8CpuState",
    "Display",
    "Keypad",
    "KEYPAD_LAYOUT",
    "DISPLAY_WIDTH",
    "DISPLAY_HEIGHT",
    "create_bus",
]
