# tests/debugger/test_debugger.py
"""
chip8_tracer.debugger.debuggerモジュールの単体テスト。
Debuggerの実行制御、ブレークポイント管理、ステップバックを検証します。
"""
from random import Random

import pytest
from unittest.mock import patch

from chip8_tracer.common.errors import StackUnderflow
from chip8_tracer.arch.chip8.cpu import Chip8Cpu
from chip8_tracer.debugger.debugger import (
    Debugger, BreakpointCondition, BreakpointConditionType, DEFAULT_MAX_HISTORY,
)

# @intent:test_suite デバッガのブレークポイントと実行制御機能の検証。

LOOP_PROGRAM = bytes([0x60, 0x05, 0x70, 0x03, 0x12, 0x00])  # LD V0,5 / ADD V0,3 / JP 0x200
STORE_PROGRAM = bytes([0x60, 0x42, 0xA3, 0x00, 0xF0, 0x55, 0x12, 0x06])  # V0=0x42を0x300へ格納

def make_debugger(program):
    cpu = Chip8Cpu()
    cpu.load_program(program)
    return Debugger(cpu), cpu

class TestDebugger:
    """
    Debuggerの単体テスト。
    """
    # @intent:test_case_add_remove_breakpoint ブレークポイントの追加、更新、削除を検証します。
    def test_add_update_remove_breakpoint(self):
        debugger, _ = make_debugger(LOOP_PROGRAM)
        bp1 = BreakpointCondition(BreakpointConditionType.PC_MATCH, value=0x204)
        bp2 = BreakpointCondition(BreakpointConditionType.MEMORY_WRITE, address=0x300)

        debugger.add_breakpoint(bp1)
        debugger.add_breakpoint(bp2)
        debugger.add_breakpoint(bp1) # 重複追加は無視される
        assert debugger.get_breakpoints() == [bp1, bp2]

        bp3 = BreakpointCondition(BreakpointConditionType.PC_MATCH, value=0x204, enabled=False)
        debugger.update_breakpoint(bp1, bp3)
        assert debugger.get_breakpoints() == [bp3, bp2]

        debugger.remove_breakpoint(bp2)
        debugger.remove_breakpoint(bp2) # 存在しないブレークポイントの削除はエラーにならない
        assert debugger.get_breakpoints() == [bp3]

    def test_step_instruction_records_history(self):
        debugger, cpu = make_debugger(LOOP_PROGRAM)
        snapshot = debugger.step_instruction()
        assert snapshot.state.v[0] == 5
        assert debugger.get_last_snapshot() is snapshot
        assert debugger.get_history() == [snapshot]
        assert cpu.get_state().pc == 0x202

    # @intent:test_case_pc_match_breakpoint PC_MATCHブレークポイントで停止することを検証します。
    def test_pc_match_breakpoint(self):
        debugger, cpu = make_debugger(LOOP_PROGRAM)
        debugger.add_breakpoint(BreakpointCondition(BreakpointConditionType.PC_MATCH, value=0x204))
        with patch('builtins.print') as mock_print:
            executed = debugger.run()
        assert executed == 2
        assert cpu.get_state().pc == 0x204
        assert cpu.get_state().v[0] == 8
        mock_print.assert_called_once_with("Breakpoint hit at PC: 0x0204")
        assert not debugger.is_running

    def test_run_does_not_stop_on_breakpoint_at_start(self):
        debugger, cpu = make_debugger(LOOP_PROGRAM)
        debugger.add_breakpoint(BreakpointCondition(BreakpointConditionType.PC_MATCH, value=0x200))
        with patch('builtins.print'):
            executed = debugger.run()
        assert executed == 3
        assert cpu.get_state().pc == 0x200

    def test_disabled_breakpoint_is_ignored(self):
        debugger, _ = make_debugger(LOOP_PROGRAM)
        debugger.add_breakpoint(BreakpointCondition(BreakpointConditionType.PC_MATCH, value=0x204, enabled=False))
        assert debugger.run(max_steps=10) == 10

    def test_memory_write_breakpoint(self):
        debugger, cpu = make_debugger(STORE_PROGRAM)
        debugger.add_breakpoint(BreakpointCondition(BreakpointConditionType.MEMORY_WRITE, address=0x300))
        with patch('builtins.print') as mock_print:
            executed = debugger.run(max_steps=100)
        assert executed == 3
        assert cpu.get_bus().peek(0x300) == 0x42
        mock_print.assert_called_once_with("Breakpoint hit at PC: 0x0206")

    def test_memory_read_breakpoint(self):
        # 0x202 の命令語フェッチで読み込みが発生する
        debugger, _ = make_debugger(LOOP_PROGRAM)
        debugger.add_breakpoint(BreakpointCondition(BreakpointConditionType.MEMORY_READ, address=0x203))
        with patch('builtins.print'):
            assert debugger.run(max_steps=100) == 2

    def test_register_value_breakpoint(self):
        debugger, cpu = make_debugger(LOOP_PROGRAM)
        debugger.add_breakpoint(
            BreakpointCondition(BreakpointConditionType.REGISTER_VALUE, value=8, register_name="V0")
        )
        with patch('builtins.print'):
            assert debugger.run(max_steps=100) == 2
        assert cpu.get_state().pc == 0x204

    def test_register_change_breakpoint(self):
        debugger, cpu = make_debugger(STORE_PROGRAM)
        debugger.add_breakpoint(BreakpointCondition(BreakpointConditionType.REGISTER_CHANGE, register_name="I"))
        with patch('builtins.print'):
            assert debugger.run(max_steps=100) == 2
        assert cpu.get_state().i == 0x300

    # @intent:test_case_machine_fault 実行中の MachineFault でループが停止し、例外が伝播することを検証します。
    def test_machine_fault_stops_run(self):
        debugger, cpu = make_debugger(bytes([0x00, 0xEE]))
        with patch('builtins.print') as mock_print:
            with pytest.raises(StackUnderflow):
                debugger.run()
        assert not debugger.is_running
        assert cpu.get_state().pc == 0x200
        assert mock_print.call_args[0][0].startswith("Machine fault at PC: 0x0200")

    # @intent:test_case_step_back 1命令ずつ戻り、レジスタとメモリが復元されることを検証します。
    def test_step_back_restores_memory_and_state(self):
        debugger, cpu = make_debugger(STORE_PROGRAM)
        for _ in range(3):
            debugger.step_instruction()
        assert cpu.get_bus().peek(0x300) == 0x42

        previous = debugger.step_back()
        assert cpu.get_bus().peek(0x300) == 0x00
        assert previous.state.pc == 0x204
        assert cpu.get_state().pc == 0x204
        assert cpu.get_state().i == 0x300

        debugger.step_back()
        assert debugger.step_back() is None
        assert cpu.get_state().pc == 0x200
        assert cpu.get_state().v[0] == 0
        assert debugger.get_last_snapshot() is None
        assert debugger.step_back() is None

    def test_stop(self):
        debugger, _ = make_debugger(LOOP_PROGRAM)
        debugger.stop()
        assert not debugger.is_running

class TestDebuggerHistory:
    """
    履歴の上限、乱数状態、入力ラッチの扱いに関するテスト。
    """
    # @intent:test_case_history_bound 長時間実行しても履歴が max_history 件を超えないことを検証します。
    def test_history_is_bounded(self):
        cpu = Chip8Cpu()
        cpu.load_program(bytes([0x12, 0x00]))  # JP 0x200 (自分自身へのジャンプ)
        debugger = Debugger(cpu, max_history=50)
        assert debugger.run(max_steps=5000) == 5000

        history = debugger.get_history()
        assert len(history) == 50
        assert history[0].metadata.step_count == 4951
        assert history[-1].metadata.step_count == 5000

    def test_default_history_limit(self):
        debugger, _ = make_debugger(LOOP_PROGRAM)
        assert debugger.max_history == DEFAULT_MAX_HISTORY
        with pytest.raises(ValueError):
            Debugger(Chip8Cpu(), max_history=0)

    # @intent:test_case_truncated_history 破棄された履歴の手前へは戻れず、状態が変化しないことを検証します。
    def test_step_back_stops_at_oldest_kept_entry(self):
        cpu = Chip8Cpu()
        cpu.load_program(LOOP_PROGRAM)
        debugger = Debugger(cpu, max_history=3)
        for _ in range(5):
            debugger.step_instruction()

        # 保持されているのはステップ3, 4, 5
        assert debugger.step_back().metadata.step_count == 4
        oldest = debugger.step_back()
        assert oldest.metadata.step_count == 3
        assert cpu.get_state().pc == 0x200  # ステップ3は JP 0x200

        assert debugger.step_back() is None
        assert cpu.get_state().pc == 0x200
        assert cpu.get_state().v[0] == 8
        assert len(debugger.get_history()) == 1

    def test_step_back_to_initial_state_without_truncation(self):
        debugger, cpu = make_debugger(LOOP_PROGRAM)
        debugger.step_instruction()
        assert debugger.step_back() is None
        assert cpu.get_state().pc == 0x200
        assert cpu.get_state().v[0] == 0

    # @intent:test_case_random_replay ステップバック後の再実行でRNDが同じ値を返すことを検証します。
    def test_step_back_restores_random_state(self):
        cpu = Chip8Cpu(rng=Random(1))
        cpu.load_program(bytes([0xC0, 0xFF, 0xC1, 0xFF]))
        debugger = Debugger(cpu)

        debugger.step_instruction()
        first_value = cpu.get_state().v[0]
        debugger.step_back()
        debugger.step_instruction()
        assert cpu.get_state().v[0] == first_value

        debugger.step_instruction()
        second_value = cpu.get_state().v[1]
        debugger.step_back()
        debugger.step_instruction()
        assert cpu.get_state().v[1] == second_value

    def test_step_back_keeps_current_key_latch(self):
        debugger, cpu = make_debugger(LOOP_PROGRAM)
        debugger.step_instruction()
        debugger.step_instruction()
        cpu.get_state().keypad.press(0x5)

        debugger.step_back()
        assert cpu.get_state().pc == 0x202
        assert cpu.get_state().keypad.is_pressed(0x5)
