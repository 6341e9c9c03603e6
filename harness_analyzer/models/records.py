"""解析結果のレコードモデル。

1回の構文木走査で生成され、追加後は変更されない。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class DataShape(Enum):
    """関数が受け取るデータの形状。"""
    ARRAY = "array"
    MATRIX = "matrix"
    TEXT = "text"
    IMAGE = "image"


UNKNOWN_CATEGORY = "unknown"


def join_category(shapes: List[DataShape]) -> str:
    """データ形状の並びをカテゴリ文字列に変換する。

    Args:
        shapes: 判定順のデータ形状

    Returns:
        空白区切りのカテゴリ文字列、空の場合は "unknown"
    """
    if not shapes:
        return UNKNOWN_CATEGORY
    return " ".join(shape.value for shape in shapes)


@dataclass(frozen=True)
class Position:
    """ソース上の位置（1始まり、presumed location基準）。"""
    line: int
    column: int

    def to_list(self) -> List[int]:
        return [self.line, self.column]

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Parameter:
    """関数パラメータ。型名は列挙型の場合 "enumeration " で始まる。"""
    type_spelling: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type_spelling, "title": self.name}


@dataclass(frozen=True)
class EnumSelector:
    """列挙型の末尾パラメータと、その列挙子の修飾名（宣言順）。"""
    parameter: str
    enumerators: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"var": self.parameter, "enum": list(self.enumerators)}


@dataclass(frozen=True)
class CandidateArgument:
    """末尾パラメータと、同じ型を持つファイルスコープ変数名。"""
    parameter: str
    names: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"var": self.parameter, "names": list(self.names)}


@dataclass(frozen=True)
class FunctionRecord:
    """関数定義1件の抽出結果。

    ``parameters`` は常に元のシグネチャ全体を保持する。分類で消費された
    先頭パラメータも削除しない。
    """
    return_type: str
    name: str
    parameters: List[Parameter]
    start_pos: Position
    end_pos: Position
    category: str = UNKNOWN_CATEGORY
    enum_selectors: List[EnumSelector] = field(default_factory=list)
    candidate_arguments: List[CandidateArgument] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """JSON出力用の辞書に変換する。"""
        return {
            "name": self.name,
            "returnType": self.return_type,
            "parameters": [p.to_dict() for p in self.parameters],
            "startPos": self.start_pos.to_list(),
            "endPos": self.end_pos.to_list(),
            "type": self.category,
            "enumValues": [s.to_dict() for s in self.enum_selectors],
            "argumentVariables": [c.to_dict() for c in self.candidate_arguments],
        }

    def __str__(self) -> str:
        return f"{self.name} [{self.category}] ({self.start_pos}-{self.end_pos})"


@dataclass(frozen=True)
class VariableRecord:
    """入力箇所1件。同じ変数でも入力箇所ごとに1件生成する。"""
    type: str
    name: str
    pos: Position

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type, "pos": self.pos.to_list()}


@dataclass(frozen=True)
class DiscoveredLiteral:
    """データラッパーのコンストラクタ引数から得た文字列。"""
    wrapper: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.wrapper, "filename": self.value}


@dataclass
class HarnessReadiness:
    """エントリ関数のテストハーネス適合性。

    4つの必須オブジェクトのフラグは一度立つと戻らない。
    ``ready`` は4つすべてが揃った状態で実行呼び出しを検出した場合のみ真。
    """
    has_test_options: bool = False
    has_function_manager: bool = False
    has_data_manager: bool = False
    has_test_functions: bool = False
    ready: bool = False
    discovered_literals: List[DiscoveredLiteral] = field(default_factory=list)

    def all_objects_found(self) -> bool:
        """必須オブジェクトがすべて宣言されているかを確認する。"""
        return (
            self.has_test_options and
            self.has_function_manager and
            self.has_data_manager and
            self.has_test_functions
        )

    def literal_values(self) -> List[str]:
        return [literal.value for literal in self.discovered_literals]


@dataclass
class VariableAnalysis:
    """varsモードの解析結果。"""
    variables: List[VariableRecord] = field(default_factory=list)
    readiness: HarnessReadiness = field(default_factory=HarnessReadiness)

    def merge(self, other: "VariableAnalysis") -> None:
        """別のファイルの結果を入力順に連結する。

        Args:
            other: 追加する解析結果
        """
        self.variables.extend(other.variables)
        self.readiness.discovered_literals.extend(other.readiness.discovered_literals)
        self.readiness.ready = self.readiness.ready or other.readiness.ready

    def to_dict(self) -> Dict[str, Any]:
        """JSON出力用の辞書に変換する。"""
        return {
            "variables": [v.to_dict() for v in self.variables],
            "ready": self.readiness.ready,
            "discoveredLiterals": self.readiness.literal_values(),
            "literalSources": [
                literal.to_dict() for literal in self.readiness.discovered_literals
            ],
        }


@dataclass
class FunctionAnalysis:
    """funcsモードの解析結果。"""
    functions: List[FunctionRecord] = field(default_factory=list)

    def merge(self, other: "FunctionAnalysis") -> None:
        self.functions.extend(other.functions)

    def to_dict(self) -> Dict[str, Any]:
        return {"functions": [f.to_dict() for f in self.functions]}
