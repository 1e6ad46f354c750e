from dataclasses import dataclass, field
from typing import Dict, Optional

from chip8_tracer.arch.chip8.state import PROGRAM_START

@dataclass
class CpuInitialState:
    pc: int = PROGRAM_START
    i: int = 0x0000
    delay_timer: int = 0
    sound_timer: int = 0
    registers: Dict[str, int] = field(default_factory=dict)  # 例: {"v0": 5, "vf": 1}

@dataclass
class SystemConfig:
    architecture: str = "CHIP8"
    random_seed: Optional[int] = None
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
