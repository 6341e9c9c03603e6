"""エントリ関数のテストハーネス適合性の検出。"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging

from ..models.records import DiscoveredLiteral, HarnessReadiness
from .expressions import (
    VARIABLE_DECL_KINDS,
    call_arguments,
    character_literal_value,
    expression_children,
    has_body,
    strip_implicit,
    string_literal_value,
)
from .walker import CursorVisitor

logger = logging.getLogger(__name__)

# 変数宣言のリテラル初期化子をたどる最大深さ
MAX_LITERAL_DEPTH = 16


@dataclass
class HarnessState:
    """走査中に引き回す検出状態。

    Attributes:
        readiness: 出力となる適合性フラグと発見したリテラル
        scopes: 走査中の関数定義ごとの (カーソル, エントリ関数内か) スタック
    """
    readiness: HarnessReadiness = field(default_factory=HarnessReadiness)
    scopes: List[Tuple[object, bool]] = field(default_factory=list)

    @property
    def inside_entry_function(self) -> bool:
        return bool(self.scopes) and self.scopes[-1][1]


class HarnessReadinessDetector(CursorVisitor):
    """main関数がテストランナーから駆動できる形かを判定する。

    main内で4種類の必須オブジェクトが宣言され、かつ TestFunctions 型の
    変数に対する run() 呼び出しがあれば ready とする。
    データラッパーのコンストラクタに渡された文字列リテラルは、
    ready とは無関係にファイル全体から収集する。
    """

    ENTRY_FUNCTION = "main"

    # 型名に含まれる文字列と、対応するフラグ
    REQUIRED_OBJECTS: Tuple[Tuple[str, str], ...] = (
        ("TestOptions", "has_test_options"),
        ("FunctionManager", "has_function_manager"),
        ("DataManager", "has_data_manager"),
        ("TestFunctions", "has_test_functions"),
    )

    RUNNER_METHOD = "run"
    RUNNER_TYPE_MARKER = "TestFunctions"

    DATA_WRAPPER_MARKERS: Tuple[str, ...] = (
        "DataImage",
        "DataArray",
        "DataMatrix",
        "DataText",
    )

    STRING_CLASS_MARKER = "basic_string"

    FUNCTION_KINDS = ("FUNCTION_DECL", "CXX_METHOD", "CONSTRUCTOR", "DESTRUCTOR", "CONVERSION_FUNCTION")

    HANDLERS: Dict[str, str] = dict(
        [(kind, "enter_function") for kind in FUNCTION_KINDS] +
        [("VAR_DECL", "visit_variable"), ("CALL_EXPR", "visit_call")]
    )

    def __init__(self, state: Optional[HarnessState] = None):
        """検出器を初期化する。

        Args:
            state: 検出状態（省略時は新規作成）
        """
        self.state = state or HarnessState()

    @property
    def readiness(self) -> HarnessReadiness:
        return self.state.readiness

    def enter_function(self, cursor) -> None:
        """関数定義に入るときにエントリ関数内かどうかを切り替える。"""
        if not cursor.is_definition() or not has_body(cursor):
            return

        scopes = self.state.scopes
        if scopes:
            # ローカルクラスのメソッドなど、関数内で定義されたものは外側を引き継ぐ
            inside = scopes[-1][1]
        else:
            inside = (
                cursor.kind.name == "FUNCTION_DECL" and
                cursor.spelling == self.ENTRY_FUNCTION
            )
        scopes.append((cursor, inside))

    def leave(self, cursor) -> None:
        scopes = self.state.scopes
        if scopes and scopes[-1][0] is cursor:
            scopes.pop()

    def visit_variable(self, cursor) -> None:
        """エントリ関数内のローカル変数宣言から必須オブジェクトを探す。"""
        if not self.state.inside_entry_function:
            return

        type_spelling = cursor.type.spelling
        for marker, flag in self.REQUIRED_OBJECTS:
            if marker in type_spelling and not getattr(self.readiness, flag):
                setattr(self.readiness, flag, True)
                logger.debug(f"Found {marker} object: {cursor.spelling}")

    def visit_call(self, cursor) -> None:
        """呼び出し式を調べる。"""
        class_name = self._constructed_class(cursor)
        if class_name is not None:
            self._collect_literal(cursor, class_name)
            return

        if (
            self.state.inside_entry_function and
            self.readiness.all_objects_found() and
            self._is_runner_call(cursor)
        ):
            if not self.readiness.ready:
                logger.info("Found all required objects and TestFunctions::run() call in main()")
            self.readiness.ready = True

    @staticmethod
    def _constructed_class(cursor) -> Optional[str]:
        """コンストラクタ呼び出しであれば構築されるクラス名を返す。"""
        constructor = cursor.referenced
        if constructor is None or constructor.kind.name != "CONSTRUCTOR":
            return None
        parent = constructor.semantic_parent
        if parent is not None and parent.spelling:
            return parent.spelling
        return cursor.spelling

    def _is_runner_call(self, cursor) -> bool:
        """``変数.run()`` 形式で、変数の型が TestFunctions かを判定する。"""
        method = cursor.referenced
        if method is None or method.kind.name != "CXX_METHOD":
            return False
        if method.spelling != self.RUNNER_METHOD:
            return False

        callee = expression_children(cursor)
        if not callee or callee[0].kind.name != "MEMBER_REF_EXPR":
            return False

        # 暗黙の this による呼び出しにはレシーバーがない
        receiver = expression_children(callee[0])
        if not receiver:
            return False

        base = strip_implicit(receiver[0])
        return (
            base.kind.name == "DECL_REF_EXPR" and
            self.RUNNER_TYPE_MARKER in base.type.spelling
        )

    def _collect_literal(self, cursor, class_name: str) -> None:
        """データラッパーの第1引数から文字列リテラルを収集する。"""
        if not any(marker in class_name for marker in self.DATA_WRAPPER_MARKERS):
            return

        arguments = call_arguments(cursor)
        if not arguments:
            return

        value = self._literal_value(arguments[0])
        if value:
            self.readiness.discovered_literals.append(DiscoveredLiteral(class_name, value))
            logger.debug(f"Discovered literal for {class_name}: {value!r}")

    def _literal_value(self, expression, depth: int = 0) -> Optional[str]:
        """式を文字列リテラルの値に解決する。

        文字列リテラル、関数形式キャスト、一時オブジェクト、basic_stringの
        構築、変数の初期化子、文字の波括弧初期化を順にたどる。

        Args:
            expression: 解決する式
            depth: 現在のたどり深さ

        Returns:
            文字列、解決できない場合はNone
        """
        if depth > MAX_LITERAL_DEPTH:
            return None

        expression = strip_implicit(expression)
        kind = expression.kind.name

        if kind == "STRING_LITERAL":
            return string_literal_value(expression)

        if kind == "CXX_FUNCTIONAL_CAST_EXPR":
            operands = expression_children(expression)
            if not operands:
                return None
            return self._literal_value(operands[-1], depth + 1)

        if kind == "CALL_EXPR":
            class_name = self._constructed_class(expression)
            if class_name is None or self.STRING_CLASS_MARKER not in class_name:
                return None
            arguments = call_arguments(expression)
            if not arguments:
                return None
            return self._literal_value(arguments[0], depth + 1)

        if kind == "DECL_REF_EXPR":
            declaration = expression.referenced
            if declaration is None or declaration.kind.name not in VARIABLE_DECL_KINDS:
                return None
            initializer = expression_children(declaration)
            if not initializer:
                return None
            return self._literal_value(initializer[-1], depth + 1)

        if kind == "INIT_LIST_EXPR":
            characters = []
            for element in expression_children(expression):
                element = strip_implicit(element)
                if element.kind.name == "CHARACTER_LITERAL":
                    value = character_literal_value(element)
                    if value is not None:
                        characters.append(value)
            return "".join(characters).rstrip("\0") or None

        return None
