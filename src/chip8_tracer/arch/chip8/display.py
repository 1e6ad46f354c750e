# src/chip8_tracer/arch/chip8/display.py
"""
CHIP-8 モノクロディスプレイ (64x32) の定義。

スプライトのXOR描画（トーラス状の折り返しと衝突検出）を担います。
描画先の画面やスケーリングは外部のレンダラの責務です。
"""
from typing import List, Sequence

from chip8_tracer.common.types import Frame

DISPLAY_WIDTH = 64
DISPLAY_HEIGHT = 32
SPRITE_WIDTH = 8

# @intent:responsibility 64x32セルのフレームバッファを保持し、描画命令の効果を適用します。
class Display:
    """
    各セルが0または1を取る2次元フレームバッファ。
    CLS と DRW 命令以外からは変更されません。
    """
    def __init__(self, width: int = DISPLAY_WIDTH, height: int = DISPLAY_HEIGHT):
        self.width = width
        self.height = height
        self._cells: List[List[int]] = [[0] * width for _ in range(height)]

    def clear(self) -> None:
        for row in self._cells:
            row[:] = [0] * self.width

    def get_pixel(self, x: int, y: int) -> int:
        return self._cells[y][x]

    # @intent:responsibility スプライトをXOR描画し、衝突の有無を返します。
    # @intent:post-condition スプライト中のいずれかのビットが点灯セルを消灯させた場合にTrue。
    def draw_sprite(self, x: int, y: int, rows: Sequence[int]) -> bool:
        """
        rows の各バイトを1行8ピクセル（MSBが左端）としてXOR描画します。
        座標は縦横独立に折り返されます。
        """
        collision = False
        for row, sprite_byte in enumerate(rows):
            cell_row = self._cells[(y + row) % self.height]
            for col in range(SPRITE_WIDTH):
                if not (sprite_byte >> (7 - col)) & 1:
                    continue
                cx = (x + col) % self.width
                # 点灯セルへの上書きは消灯になる = 衝突
                if cell_row[cx]:
                    collision = True
                cell_row[cx] ^= 1
        return collision

    # @intent:responsibility レンダラ向けに読み取り専用のビューを返します。
    def get_frame(self) -> Frame:
        return tuple(tuple(row) for row in self._cells)

    def lit_count(self) -> int:
        return sum(sum(row) for row in self._cells)

    # @intent:responsibility フレームをテキストとして描画します（端末での確認用）。
    def render_ascii(self, on: str = "█", off: str = " ") -> str:
        return "\n".join("".join(on if cell else off for cell in row) for row in self._cells)

    def copy(self) -> "Display":
        clone = Display(self.width, self.height)
        clone._cells = [list(row) for row in self._cells]
        return clone

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Display):
            return NotImplemented
        return self._cells == other._cells

    def __deepcopy__(self, memo) -> "Display":
        return self.copy()
