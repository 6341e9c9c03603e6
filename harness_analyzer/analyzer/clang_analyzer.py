"""libclangを使用したC++ソースコード解析のラッパー。"""

from typing import List, Optional, Sequence, Tuple
from pathlib import Path
import glob
import os
import logging

logger = logging.getLogger(__name__)

# libclangが見つからない場合に探索するディレクトリ
COMMON_LIBRARY_DIRS: Tuple[str, ...] = (
    "/usr/lib/llvm-*/lib",
    "/usr/local/opt/llvm/lib",
    "/opt/homebrew/opt/llvm/lib",
    "/Library/Developer/CommandLineTools/usr/lib",
    r"C:\Program Files\LLVM\bin",
    r"C:\Program Files (x86)\LLVM\bin",
)

LIBRARY_NAMES: Tuple[str, ...] = (
    "libclang.so",
    "libclang.so.*",
    "libclang-*.so*",
    "libclang.dylib",
    "libclang.dll",
)

# clang.cindex.Diagnostic.Error
ERROR_SEVERITY = 3


class ClangParseError(Exception):
    """Clangパース時のエラー。"""
    pass


class TranslationUnitError(ClangParseError):
    """構文木を解析に使用できない場合のエラー。

    libclangがTranslationUnitを返せなかった場合、または失敗閾値以上の
    診断が報告された場合に送出される。
    """

    def __init__(self, file_path: str, messages: Optional[List[str]] = None):
        self.file_path = file_path
        self.messages = messages or []
        detail = "; ".join(self.messages[:3]) if self.messages else "no translation unit"
        super().__init__(f"Failed to build syntax tree for {file_path}: {detail}")


class ClangAnalyzer:
    """libclangを使用したC++解析のメインクラス。

    libclangをラップし、関数本体を含む完全な構文木を構築する。
    解析器は構文木を読み取るだけで、構築と失敗判定はこのクラスが担う。
    """

    def __init__(
        self,
        include_paths: Optional[List[str]] = None,
        additional_args: Optional[List[str]] = None,
        library_path: Optional[str] = None,
        cxx_standard: str = "c++17",
        failure_severity: Optional[int] = ERROR_SEVERITY
    ):
        """Clangアナライザーを初期化する。

        Args:
            include_paths: インクルードディレクトリのリスト
            additional_args: 追加のコンパイラ引数
            library_path: libclangライブラリのパス（任意、未指定時は自動検出）
            cxx_standard: C++標準（-std=に渡す値）
            failure_severity: この重大度以上の診断で構文木構築失敗とする。
                Noneの場合は診断を失敗扱いしない
        """
        self._setup_libclang(library_path)

        import clang.cindex as ci
        self._ci = ci

        self.include_paths = include_paths or []
        self.additional_args = additional_args or []
        self.cxx_standard = cxx_standard
        self.failure_severity = failure_severity
        self.index = ci.Index.create()

        logger.info(f"ClangAnalyzer initialized with {len(self.include_paths)} include paths")

    def _setup_libclang(self, library_path: Optional[str] = None) -> None:
        """libclangライブラリパスを設定する。

        Args:
            library_path: libclangへの明示的なパス（任意）
        """
        import clang.cindex as ci

        if ci.Config.loaded:
            return

        if library_path:
            if os.path.isfile(library_path):
                ci.Config.set_library_file(library_path)
            else:
                ci.Config.set_library_path(library_path)
            return

        # pip install libclangでインストールされたライブラリを使用
        try:
            ci.Index.create()
            logger.debug("libclang loaded successfully from pip package")
        except Exception as e:
            found = self._find_library()
            if found:
                ci.Config.set_library_file(found)
                logger.info(f"Using libclang from: {found}")
                return

            raise ClangParseError(
                f"Failed to load libclang: {e}. "
                "Please install libclang with 'pip install libclang' or install LLVM."
            )

    @staticmethod
    def _find_library() -> Optional[str]:
        """一般的なインストール先からlibclangを探す。

        Returns:
            見つかったライブラリファイルのパス、なければNone
        """
        for pattern in COMMON_LIBRARY_DIRS:
            for directory in sorted(glob.glob(os.path.expanduser(pattern)), reverse=True):
                for name in LIBRARY_NAMES:
                    matches = sorted(glob.glob(str(Path(directory) / name)))
                    if matches:
                        return matches[0]
        return None

    def _build_compiler_args(self, extra_args: Optional[Sequence[str]] = None) -> List[str]:
        """パース用のコンパイラ引数を構築する。

        Args:
            extra_args: ファイル固有の引数（compile_commands.json由来など）

        Returns:
            コンパイラ引数のリスト
        """
        args = [
            "-x", "c++",
            f"-std={self.cxx_standard}",
        ]

        for inc_path in self.include_paths:
            args.extend(["-I", inc_path])

        args.extend(self.additional_args)

        # ファイル固有の引数は最後に置き、-std=などを上書きできるようにする
        if extra_args:
            args.extend(extra_args)

        return args

    def _parse_options(self) -> int:
        """完全解析用のパースオプションを取得する。"""
        # インクルードとマクロ展開の由来を保持するため詳細記録を有効にする
        return self._ci.TranslationUnit.PARSE_DETAILED_PROCESSING_RECORD

    def parse_file(self, file_path: str, extra_args: Optional[Sequence[str]] = None):
        """ファイルから関数本体を含む完全なTranslationUnitを構築する。

        Args:
            file_path: ソースファイルのパス
            extra_args: ファイル固有の追加引数

        Returns:
            clang.cindex.TranslationUnit

        Raises:
            TranslationUnitError: 構文木を構築できなかった場合
        """
        abs_path = os.path.abspath(file_path)
        args = self._build_compiler_args(extra_args)

        try:
            tu = self.index.parse(abs_path, args=args, options=self._parse_options())
        except self._ci.TranslationUnitLoadError as e:
            raise TranslationUnitError(abs_path, [str(e)]) from e

        return self._check_translation_unit(tu, abs_path)

    def parse_string(
        self,
        source_code: str,
        filename: str = "temp.cpp",
        extra_args: Optional[Sequence[str]] = None,
        unsaved_files: Optional[List[Tuple[str, str]]] = None
    ):
        """文字列からC++ソースコードをパースする。

        Args:
            source_code: C++ソースコード
            filename: ソースの仮想ファイル名
            extra_args: 追加のコンパイラ引数
            unsaved_files: 追加の仮想ファイル（ヘッダーなど）

        Returns:
            clang.cindex.TranslationUnit

        Raises:
            TranslationUnitError: 構文木を構築できなかった場合
        """
        args = self._build_compiler_args(extra_args)
        files = [(filename, source_code)] + list(unsaved_files or [])

        try:
            tu = self.index.parse(
                filename,
                args=args,
                unsaved_files=files,
                options=self._parse_options()
            )
        except self._ci.TranslationUnitLoadError as e:
            raise TranslationUnitError(filename, [str(e)]) from e

        return self._check_translation_unit(tu, filename)

    def _check_translation_unit(self, tu, file_path: str):
        """診断情報を確認し、使用できない構文木を拒否する。

        Args:
            tu: パース結果
            file_path: ログ用のファイルパス

        Returns:
            検証済みのTranslationUnit
        """
        if tu is None:
            raise TranslationUnitError(file_path)

        failures: List[str] = []
        for diag in tu.diagnostics:
            message = f"{diag.location.line}:{diag.location.column}: {diag.spelling}"
            if self.failure_severity is not None and diag.severity >= self.failure_severity:
                failures.append(message)
            elif diag.severity >= self._ci.Diagnostic.Warning:
                logger.warning(f"Diagnostic in {file_path}: {message}")

        if failures:
            for message in failures:
                logger.error(f"Parse error in {file_path}: {message}")
            raise TranslationUnitError(file_path, failures)

        logger.debug(f"Parsed translation unit: {file_path}")
        return tu
