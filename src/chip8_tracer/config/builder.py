import warnings
from random import Random
from typing import Optional, Tuple

from chip8_tracer.transport.bus import Bus
from chip8_tracer.arch.chip8.cpu import Chip8Cpu, create_bus
from chip8_tracer.arch.chip8.state import REGISTER_COUNT
from .models import SystemConfig, CpuInitialState

# @intent:responsibility システム構成（Config）に基づいて、Bus、CPUを生成・接続し、初期状態を適用します。
class SystemBuilder:
    def build_system(self, config: SystemConfig, program: Optional[bytes] = None) -> Tuple[Chip8Cpu, Bus]:
        bus = create_bus()
        rng = Random(config.random_seed)
        cpu = Chip8Cpu(bus, rng=rng)

        # 初期状態の適用
        self.apply_initial_state(cpu, config.initial_state)

        if program is not None:
            cpu.load_program(program)

        return cpu, bus

    # @intent:responsibility Configで定義された初期状態をCPUに適用します。
    def apply_initial_state(self, cpu: Chip8Cpu, config_state: CpuInitialState) -> None:
        """
        CPUをリセットし、Configから指定された初期値を適用します。
        レジスタ名は "v0".."vf" を受け付け、それ以外は警告して無視します。
        """
        cpu.reset()
        state = cpu.get_state()

        state.pc = config_state.pc
        state.i = config_state.i & 0xFFFF
        state.delay_timer = config_state.delay_timer
        state.sound_timer = config_state.sound_timer

        for reg_name, value in config_state.registers.items():
            index = self._register_index(reg_name)
            if index is None:
                warnings.warn(f"Unknown register '{reg_name}' in initial_state is ignored.")
                continue
            state.v[index] = value & 0xFF

    def _register_index(self, name: str) -> Optional[int]:
        name = name.lower()
        if len(name) == 2 and name[0] == "v":
            try:
                index = int(name[1], 16)
            except ValueError:
                return None
            if 0 <= index < REGISTER_COUNT:
                return index
        return None
