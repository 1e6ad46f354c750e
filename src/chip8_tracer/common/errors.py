"""
エラー分類を定義するモジュール。

ロード・設定の誤りは呼び出し元で回復可能なエラー、
スタック破綻や範囲外メモリアクセスは実行継続不能な MachineFault として扱います。
"""


class Chip8Error(Exception):
    """このパッケージが送出する全ての例外の基底クラス。"""


# @intent:responsibility プログラムイメージのロード失敗を表します（回復可能）。
class LoadError(Chip8Error, ValueError):
    pass


# @intent:responsibility 設定ファイルの内容不正を表します（回復可能）。
class ConfigError(Chip8Error, ValueError):
    pass


# @intent:responsibility 実行中のマシン状態の整合性が失われたことを表します。
# @intent:rationale 送出時点で状態は命令実行前のまま保たれ、ステップループは停止すべきです。
class MachineFault(Chip8Error):
    pass


class StackOverflow(MachineFault):
    """スタックが満杯の状態で CALL が実行された。"""


class StackUnderflow(MachineFault):
    """スタックが空の状態で RET が実行された。"""


# @intent:responsibility 4096バイトのアドレス空間外へのアクセスを表します。
# @intent:rationale 既存の IndexError を捕捉するコードとの互換性のため IndexError も継承します。
class MemoryAccessError(MachineFault, IndexError):
    pass


class FetchError(MemoryAccessError):
    """PC がメモリ末尾を越えており、命令語をフェッチできない。"""
