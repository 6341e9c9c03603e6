"""パラメータ型の並びから関数のデータ形状を判定する。

判定は型名の文字列照合のみで行う。`(buffer, count)` と
`(buffer, rows, cols)` というCの慣用的なシグネチャを配列・行列とみなす。
"""

from dataclasses import dataclass
from typing import FrozenSet, List, Sequence, Tuple

from ..models.records import DataShape, join_category

# 要素数パラメータとして受け付ける型名
SIZE_TYPE_SPELLINGS: FrozenSet[str] = frozenset({
    "size_t",
    "std::size_t",
    "unsigned long",
})

IMAGE_TYPE_MARKERS: Tuple[str, ...] = ("RGBImage",)

CHARACTER_TYPE_MARKER = "char"

POINTER_MARKER = "*"
DOUBLE_POINTER_MARKER = "**"


@dataclass(frozen=True)
class Classification:
    """分類結果。

    Attributes:
        shapes: 判定されたデータ形状（判定順）
        consumed: データ形状として消費された先頭パラメータ数
    """
    shapes: Tuple[DataShape, ...] = ()
    consumed: int = 0

    @property
    def category(self) -> str:
        return join_category(list(self.shapes))

    @property
    def is_known(self) -> bool:
        return bool(self.shapes)


def _is_size_type(spelling: str) -> bool:
    return spelling in SIZE_TYPE_SPELLINGS


def _pointee_spelling(spelling: str) -> str:
    """ポインタ型名から指す先の型名部分を取り出す。"""
    return spelling.split(POINTER_MARKER, 1)[0].strip()


def classify_parameters(type_spellings: Sequence[str]) -> Classification:
    """パラメータ型名の並びからデータ形状を判定する。

    優先順に評価し、最初に一致した規則で確定する。

    1. 3個以上で、第1引数がポインタのポインタ、第2・第3引数がサイズ型
       -> matrix（指す先が画像型なら image を追加）、3個消費
    2. 2個以上で、第1引数がポインタ、第2引数がサイズ型
       -> array（指す先が文字型なら text を追加）、2個消費
    3. それ以外 -> unknown、消費なし

    Args:
        type_spellings: パラメータの型名（呼び出し側の作業用コピー）

    Returns:
        Classification
    """
    types: List[str] = list(type_spellings)

    if len(types) >= 3:
        first, rows, cols = types[0], types[1], types[2]
        if DOUBLE_POINTER_MARKER in first and _is_size_type(rows) and _is_size_type(cols):
            shapes = [DataShape.MATRIX]
            pointee = _pointee_spelling(first)
            if any(marker in pointee for marker in IMAGE_TYPE_MARKERS):
                shapes.append(DataShape.IMAGE)
            return Classification(tuple(shapes), 3)

    if len(types) >= 2:
        first, count = types[0], types[1]
        if POINTER_MARKER in first and _is_size_type(count):
            shapes = [DataShape.ARRAY]
            if CHARACTER_TYPE_MARKER in _pointee_spelling(first):
                shapes.append(DataShape.TEXT)
            return Classification(tuple(shapes), 2)

    return Classification()
