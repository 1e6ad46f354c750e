# src/chip8_tracer/arch/chip8/keypad.py
"""
CHIP-8 16キー入力ラッチの定義。

物理キーの読み取りと論理キーへの割り当ては外部の入力コラボレータの責務であり、
このモジュールはドライバの反復ごとに更新される押下状態のスナップショットのみを保持します。
"""
from typing import Iterable, List, Optional, Tuple

KEY_COUNT = 16

# @intent:constant 歴史的な16進キーパッドの4x4配置（上段から）。
KEYPAD_LAYOUT: Tuple[Tuple[int, ...], ...] = (
    (0x1, 0x2, 0x3, 0xC),
    (0x4, 0x5, 0x6, 0xD),
    (0x7, 0x8, 0x9, 0xE),
    (0xA, 0x0, 0xB, 0xF),
)

# @intent:responsibility 16個の論理キーの押下状態を保持します。命令実行側からは読み取りのみ行われます。
class Keypad:
    def __init__(self):
        self._held: List[bool] = [False] * KEY_COUNT

    @staticmethod
    def _check_key(key: int) -> None:
        if not 0 <= key < KEY_COUNT:
            raise ValueError(f"Key {key} is not a valid logical key (0x0-0xF).")

    def press(self, key: int) -> None:
        self._check_key(key)
        self._held[key] = True

    def release(self, key: int) -> None:
        self._check_key(key)
        self._held[key] = False

    # @intent:responsibility 入力コラボレータから受け取った16キー分の状態でラッチを置き換えます。
    # @intent:pre-condition `states`はちょうど16要素である必要があります。
    def update(self, states: Iterable[bool]) -> None:
        new_states = [bool(s) for s in states]
        if len(new_states) != KEY_COUNT:
            raise ValueError(f"Expected {KEY_COUNT} key states, got {len(new_states)}.")
        self._held = new_states

    def release_all(self) -> None:
        self._held = [False] * KEY_COUNT

    # @intent:rationale 範囲外のキー番号（Vx > 0xF）は「押されていない」と扱います。
    def is_pressed(self, key: int) -> bool:
        return 0 <= key < KEY_COUNT and self._held[key]

    # @intent:return 押下中のキーのうち最小の番号。押下がなければNone。
    def first_pressed(self) -> Optional[int]:
        for key, held in enumerate(self._held):
            if held:
                return key
        return None

    def get_states(self) -> Tuple[bool, ...]:
        return tuple(self._held)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Keypad):
            return NotImplemented
        return self._held == other._held
