"""
共通の型定義を提供するモジュール。
プロジェクト全体で使用される汎用的な型エイリアスなどを定義します。
"""
from typing import Dict, List, Tuple

# @intent:data_structure レジスタ名と値をマッピングする辞書の型エイリアス。
# CPU, Debugger など複数のレイヤーで共通して使用されます。
RegisterMap = Dict[str, int]

# @intent:data_structure ディスプレイの読み取り専用ビュー。行(y)ごとのセル値(0/1)のタプル。
Frame = Tuple[Tuple[int, ...], ...]

# @intent:data_structure 逆アセンブル結果の1行 (address, hex_bytes, mnemonic)。
DisassemblyLine = Tuple[int, str, str]
DisassemblyListing = List[DisassemblyLine]
