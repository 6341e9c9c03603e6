"""解析対象ファイルとライブラリコードの境界判定。"""

from bisect import bisect_right
from typing import Dict, List, Tuple
import os
import logging

from .source_location import is_in_system_header

logger = logging.getLogger(__name__)


def _normalize(path: str) -> str:
    return os.path.normcase(os.path.abspath(path))


class BoundaryFilter:
    """カーソルが解析対象ファイルに属するかを判定する。

    次のいずれかに該当するカーソルは対象外とする。

    - ファイル情報を持たない（組み込み宣言や暗黙の宣言）
    - 展開位置がシステムヘッダー内
    - システムヘッダーで定義されたマクロの展開範囲内
    - メインファイルから直接インクルードされていないヘッダー内

    マクロ展開の情報は詳細な前処理記録
    （PARSE_DETAILED_PROCESSING_RECORD）から取得する。
    """

    def __init__(self, tu):
        """境界フィルタを初期化する。

        Args:
            tu: 解析対象のclang.cindex.TranslationUnit
        """
        self.main_file = _normalize(tu.spelling)

        # インクルードされたファイル -> インクルード元ファイル
        self._included_from: Dict[str, str] = {}
        for inclusion in tu.get_includes():
            if inclusion.include is None or inclusion.source is None:
                continue
            included = _normalize(inclusion.include.name)
            self._included_from.setdefault(included, _normalize(inclusion.source.name))

        self._system_files: Dict[str, bool] = {}

        # ファイル -> システムヘッダーのマクロが展開された (開始, 終了) オフセット
        self._system_expansions: Dict[str, List[Tuple[int, int]]] = {}
        self._collect_system_expansions(tu)

        logger.debug(
            f"Boundary for {self.main_file}: "
            f"{len(self._included_from)} included files, "
            f"{sum(len(r) for r in self._system_expansions.values())} system macro expansions"
        )

    def _collect_system_expansions(self, tu) -> None:
        """システムヘッダーで定義されたマクロの展開範囲を集める。"""
        for cursor in tu.cursor.get_children():
            if cursor.kind.name != "MACRO_INSTANTIATION":
                continue

            start = cursor.extent.start
            if start.file is None:
                continue
            expansion_file = _normalize(start.file.name)
            if not self._is_candidate_file(expansion_file):
                continue

            definition = cursor.referenced
            if definition is None or definition.location.file is None:
                continue
            if not self._is_system_definition(definition):
                continue

            self._system_expansions.setdefault(expansion_file, []).append(
                (start.offset, cursor.extent.end.offset)
            )

        for ranges in self._system_expansions.values():
            ranges.sort()

    def _is_candidate_file(self, path: str) -> bool:
        return path == self.main_file or self._included_from.get(path) == self.main_file

    def _is_system_definition(self, definition) -> bool:
        """マクロ定義がシステムヘッダー内かを判定する（ファイル単位でメモ化）。"""
        key = _normalize(definition.location.file.name)
        cached = self._system_files.get(key)
        if cached is None:
            cached = is_in_system_header(definition.location)
            self._system_files[key] = cached
        return cached

    def _inside_system_expansion(self, path: str, offset: int) -> bool:
        ranges = self._system_expansions.get(path)
        if not ranges:
            return False
        index = bisect_right(ranges, (offset, float("inf"))) - 1
        return index >= 0 and ranges[index][0] <= offset <= ranges[index][1]

    def belongs(self, cursor) -> bool:
        """カーソルが解析対象ファイルに属するかを判定する。

        Args:
            cursor: 判定するカーソル

        Returns:
            解析対象に属する場合True
        """
        location = cursor.location
        if location.file is None:
            return False

        if is_in_system_header(location):
            return False

        expansion_file = _normalize(location.file.name)
        if not self._is_candidate_file(expansion_file):
            return False

        return not self._inside_system_expansion(expansion_file, location.offset)
