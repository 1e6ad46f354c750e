# src/chip8_tracer/arch/chip8/cpu.py
"""
CHIP-8 CPUエミュレーションの中心モジュール。
"""
from random import Random
from typing import Iterable, Optional

from chip8_tracer.common.errors import FetchError, LoadError
from chip8_tracer.common.types import RegisterMap, DisassemblyListing
from chip8_tracer.core.cpu import AbstractCpu
from chip8_tracer.core.snapshot import Operation
from chip8_tracer.transport.bus import Bus, RAM
from chip8_tracer.arch.chip8.state import (
    Chip8CpuState, MEMORY_SIZE, PROGRAM_START, MAX_PROGRAM_SIZE, FONT_SET, FONT_START,
)
from chip8_tracer.arch.chip8.instructions import decode_opcode, execute_instruction
from chip8_tracer.arch.chip8 import disassembler

# @intent:utility_function CHIP-8用の4KB RAMを接続したバスを生成します。
def create_bus() -> Bus:
    bus = Bus()
    bus.register_device(0x000, MEMORY_SIZE - 1, RAM(MEMORY_SIZE))
    return bus

# @intent:responsibility CHIP-8 CPUの具体的なエミュレーションロジック（フェッチ、デコード、実行）を提供します。
class Chip8Cpu(AbstractCpu):
    """
    CHIP-8 仮想マシンをエミュレートするクラス。

    タイマーの60Hz減算や実行速度の制御は行いません。
    ドライバが `tick_timers()` と `step()`/`run()` を明示的に呼び出します。
    """
    # @intent:pre-condition `bus`を省略した場合は4KB RAMのバスを生成します。
    # @intent:rationale `rng`を注入可能にすることで、RND命令を含む実行を再現可能にします。
    def __init__(self, bus: Optional[Bus] = None, rng: Optional[Random] = None):
        self._rng = rng if rng is not None else Random()
        self._program_loaded = False
        super().__init__(bus if bus is not None else create_bus())
        self._initialize_memory()

    def _create_initial_state(self) -> Chip8CpuState:
        return Chip8CpuState()

    # @intent:responsibility メモリをゼロクリアし、フォントを低位アドレスへ書き込みます。
    def _initialize_memory(self) -> None:
        for address in range(MEMORY_SIZE):
            self._bus.load(address, 0)
        for offset, value in enumerate(FONT_SET):
            self._bus.load(FONT_START + offset, value)
        self._bus.get_and_clear_activity_log()

    # @intent:responsibility マシン全体（メモリ含む）を起動直後の状態に戻します。
    def reset(self) -> None:
        super().reset()
        self._initialize_memory()
        self._program_loaded = False

    # @intent:responsibility プログラムイメージを0x200から配置します。
    # @intent:pre-condition リセット後に一度だけ呼び出す必要があります。
    def load_program(self, data: bytes) -> None:
        """
        プログラムイメージ（ヘッダなしのバイト列）をメモリの0x200以降にコピーします。
        3584バイトを超える場合や、既にロード済みの場合は LoadError を送出します。
        """
        if self._program_loaded:
            raise LoadError("A program is already loaded; call reset() before loading another.")
        if len(data) > MAX_PROGRAM_SIZE:
            raise LoadError(
                f"Program of {len(data)} bytes exceeds the {MAX_PROGRAM_SIZE} bytes available at {PROGRAM_START:#05x}."
            )
        for offset, value in enumerate(bytes(data)):
            self._bus.load(PROGRAM_START + offset, value)
        self._program_loaded = True

    # @intent:responsibility 保存済みの状態へ戻しますが、入力ラッチは現在の内容を維持します。
    # @intent:rationale 入力ラッチは外部の入力コラボレータが所有しており、過去の押下状態へ巻き戻しません。
    def restore_state(self, state: Chip8CpuState) -> None:
        keypad = self._state.keypad
        super().restore_state(state)
        self._state.keypad = keypad

    def get_random_state(self) -> object:
        return self._rng.getstate()

    def set_random_state(self, random_state: Optional[object]) -> None:
        if random_state is not None:
            self._rng.setstate(random_state)

    # @intent:responsibility PCの位置からビッグエンディアンの16bit命令語をフェッチします。
    def _fetch(self) -> int:
        pc = self._state.pc
        if pc < 0 or pc + 1 >= MEMORY_SIZE:
            raise FetchError(f"Cannot fetch instruction at PC {pc:#06x}: outside the {MEMORY_SIZE}-byte memory.")
        return (self._bus.read(pc) << 8) | self._bus.read(pc + 1)

    def _decode(self, opcode: int) -> Operation:
        return decode_opcode(opcode)

    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._state, self._bus, self._rng)

    # @intent:responsibility 遅延タイマーとサウンドタイマーを1減算します（0で飽和）。
    # @intent:rationale 命令実行とは独立した60Hzの時間領域であり、ドライバから明示的に呼び出されます。
    def tick_timers(self) -> None:
        state = self._state
        if state.delay_timer > 0:
            state.delay_timer -= 1
        if state.sound_timer > 0:
            state.sound_timer -= 1

    @property
    def is_sound_active(self) -> bool:
        return self._state.sound_timer > 0

    @property
    def is_waiting_for_key(self) -> bool:
        return self._state.waiting_for_key

    # @intent:responsibility 入力コラボレータから受け取った16キーの押下状態で入力ラッチを更新します。
    def set_keys(self, states: Iterable[bool]) -> None:
        self._state.keypad.update(states)

    # @intent:responsibility デバッガ・トレース用に、現在のレジスタ値を辞書形式で提供します。
    def get_register_map(self) -> RegisterMap:
        s = self._state
        registers = {f"V{index:X}": value for index, value in enumerate(s.v)}
        registers.update({
            "I": s.i, "PC": s.pc, "SP": s.sp, "DT": s.delay_timer, "ST": s.sound_timer
        })
        return registers

    def disassemble(self, start_addr: int, length: int) -> DisassemblyListing:
        return disassembler.disassemble(self._bus, start_addr, length)
