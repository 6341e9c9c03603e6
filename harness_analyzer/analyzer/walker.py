"""構文木の読み取り専用走査。"""

from typing import Callable, Dict, List, Sequence, Set, Tuple
import logging

from .boundary import BoundaryFilter

logger = logging.getLogger(__name__)


class CursorVisitor:
    """走査時に呼び出されるビジターの基底クラス。

    サブクラスは ``HANDLERS`` にカーソル種別名とメソッド名の対応を定義する。
    走査器は種別名で表を引いてハンドラーを呼び出す。
    """

    HANDLERS: Dict[str, str] = {}

    def dispatch_table(self) -> Dict[str, Callable]:
        """カーソル種別名からハンドラーへの対応表を作成する。"""
        return {kind: getattr(self, method) for kind, method in self.HANDLERS.items()}

    def leave(self, cursor) -> None:
        """カーソルの部分木の走査が終わったときに呼び出される。"""


class TranslationUnitWalker:
    """TranslationUnitを深さ優先で一度だけ走査する。

    境界フィルタを満たさないカーソル、テンプレート定義、テンプレートの
    メンバーのクラス外定義は部分木ごと枝刈りする。再帰を使わないため
    深い構文木でも再帰制限に達しない。
    """

    # 汎用コード（テンプレートの定義）は解析対象外
    TEMPLATE_KINDS: Set[str] = {
        "FUNCTION_TEMPLATE",
        "CLASS_TEMPLATE",
        "CLASS_TEMPLATE_PARTIAL_SPECIALIZATION",
        "TYPE_ALIAS_TEMPLATE_DECL",
    }

    # クラス外で定義できるメンバーの種別
    OUT_OF_LINE_MEMBER_KINDS: Set[str] = {
        "CXX_METHOD",
        "CONSTRUCTOR",
        "DESTRUCTOR",
        "CONVERSION_FUNCTION",
        "VAR_DECL",
        "CLASS_DECL",
        "STRUCT_DECL",
    }

    def __init__(self, boundary: BoundaryFilter, visitors: Sequence[CursorVisitor]):
        """走査器を初期化する。

        Args:
            boundary: 境界フィルタ
            visitors: 同じ走査で呼び出すビジター（登録順に呼び出す）
        """
        self.boundary = boundary
        self.visitors = list(visitors)
        self._tables = [visitor.dispatch_table() for visitor in self.visitors]
        self.visited = 0
        self.pruned = 0

    def _is_template_member(self, cursor) -> bool:
        """テンプレートのメンバー（クラス外定義を含む）かを判定する。"""
        parent = cursor.semantic_parent
        while parent is not None and parent.kind.name != "TRANSLATION_UNIT":
            if parent.kind.name in self.TEMPLATE_KINDS:
                return True
            parent = parent.semantic_parent
        return False

    def walk(self, tu) -> None:
        """TranslationUnit全体を走査する。

        Args:
            tu: clang.cindex.TranslationUnit
        """
        stack: List[Tuple[object, bool]] = [
            (child, False) for child in reversed(list(tu.cursor.get_children()))
        ]

        while stack:
            cursor, leaving = stack.pop()

            if leaving:
                for visitor in self.visitors:
                    visitor.leave(cursor)
                continue

            kind = cursor.kind.name
            if (
                kind in self.TEMPLATE_KINDS or
                not self.boundary.belongs(cursor) or
                (kind in self.OUT_OF_LINE_MEMBER_KINDS and self._is_template_member(cursor))
            ):
                self.pruned += 1
                continue

            self.visited += 1
            for table in self._tables:
                handler = table.get(kind)
                if handler is not None:
                    handler(cursor)

            stack.append((cursor, True))
            stack.extend(
                (child, False) for child in reversed(list(cursor.get_children()))
            )

        logger.debug(f"Walk finished: {self.visited} visited, {self.pruned} pruned")
