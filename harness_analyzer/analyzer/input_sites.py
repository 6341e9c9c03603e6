"""外部入力を変数に読み込む箇所の抽出。"""

from typing import Dict, List, Optional, Set
import logging

from ..models.records import Position, VariableRecord
from .boundary import BoundaryFilter
from .expressions import (
    VariableCache,
    call_arguments,
    expression_children,
    first_token,
    is_in_std_namespace,
    position_of,
    resolve_variable,
    strip_parens_and_casts,
)
from .walker import CursorVisitor

logger = logging.getLogger(__name__)


class InputSiteExtractor(CursorVisitor):
    """scanf形式の呼び出しと標準入力からのストリーム抽出を検出する。

    検出した入力箇所ごとに、読み込み先変数の型・名前・位置を
    VariableRecordとして記録する（同じ変数でも箇所ごとに記録する）。
    """

    # 書式文字列の後の引数すべてが読み込み先となる関数
    FORMATTED_INPUT_FUNCTIONS: Set[str] = {"scanf"}

    EXTRACTION_OPERATOR = "operator>>"
    INPUT_STREAM_NAME = "cin"

    HANDLERS: Dict[str, str] = {"CALL_EXPR": "visit_call"}

    def __init__(
        self,
        boundary: BoundaryFilter,
        variables: List[VariableRecord],
        cache: Optional[VariableCache] = None
    ):
        """入力箇所抽出器を初期化する。

        Args:
            boundary: 境界フィルタ
            variables: 結果を追加する出力コレクション
            cache: 変数宣言ごとの型名キャッシュ（省略時は新規作成）
        """
        self.boundary = boundary
        self.variables = variables
        self.cache = cache or VariableCache()

    def visit_call(self, cursor) -> None:
        """呼び出し式を入力箇所の候補として調べる。"""
        name = cursor.spelling
        if name == self.EXTRACTION_OPERATOR:
            self._process_extraction(cursor)
        elif name in self.FORMATTED_INPUT_FUNCTIONS and self._calls_function(cursor):
            self._process_formatted_input(cursor)

    @staticmethod
    def _calls_function(cursor) -> bool:
        callee = cursor.referenced
        return callee is not None and callee.kind.name == "FUNCTION_DECL"

    def _process_formatted_input(self, cursor) -> None:
        """scanf呼び出しの書式文字列以降の引数を記録する。

        Args:
            cursor: 呼び出し式のカーソル
        """
        position = position_of(cursor.extent.start)

        for argument in call_arguments(cursor)[1:]:
            argument = strip_parens_and_casts(argument)

            # アドレス演算子を1段だけ外す
            if argument.kind.name == "UNARY_OPERATOR" and first_token(argument) == "&":
                operands = expression_children(argument)
                if not operands:
                    continue
                argument = operands[0]

            self._add_variable(argument, position)

    def _process_extraction(self, cursor) -> None:
        """``stream >> var`` の左辺が標準入力なら右辺を記録する。

        Args:
            cursor: operator>> 呼び出しのカーソル
        """
        arguments = call_arguments(cursor)
        if len(arguments) < 2:
            return

        if self._refers_to_input_stream(arguments[0]):
            self._add_variable(arguments[1], position_of(cursor.extent.start))

    def _refers_to_input_stream(self, expression) -> bool:
        """式が標準入力ストリームを指すかを判定する。

        ``std::cin >> a >> b`` は左結合で入れ子になるため、operator>> の
        左辺をたどって std::cin に行き着くかを調べる。解析対象ファイルの
        外に出た時点で偽とする。

        Args:
            expression: 左辺の式

        Returns:
            標準入力の場合True
        """
        while True:
            if not self.boundary.belongs(expression):
                return False

            expression = strip_parens_and_casts(expression)

            if expression.kind.name == "DECL_REF_EXPR":
                declaration = expression.referenced
                return (
                    declaration is not None and
                    declaration.kind.name == "VAR_DECL" and
                    declaration.spelling == self.INPUT_STREAM_NAME and
                    is_in_std_namespace(declaration)
                )

            if expression.kind.name == "CALL_EXPR" and expression.spelling == self.EXTRACTION_OPERATOR:
                arguments = call_arguments(expression)
                if not arguments:
                    return False
                expression = arguments[0]
                continue

            return False

    def _add_variable(self, expression, position: Position) -> None:
        """式が変数を直接参照していれば記録する。

        Args:
            expression: 読み込み先の式
            position: 入力箇所の位置
        """
        declaration = resolve_variable(expression)
        if declaration is None:
            return

        type_spelling, name = self.cache.lookup(declaration)
        record = VariableRecord(type=type_spelling, name=name, pos=position)
        self.variables.append(record)
        logger.debug(f"Input site: {name} ({type_spelling}) at {position}")
