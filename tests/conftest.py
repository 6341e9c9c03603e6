"""テスト共通のフィクスチャ。"""

import textwrap

import pytest

from harness_analyzer.analyzer.clang_analyzer import ClangAnalyzer


@pytest.fixture(scope="session")
def clang_analyzer():
    """セッション全体で共有するClangアナライザー。"""
    return ClangAnalyzer()


@pytest.fixture
def parse(clang_analyzer):
    """メモリ上のC++コード片をパースするヘルパー。

    標準ヘッダーには依存しないため、コード片は必要な宣言を自前で持つ。
    """
    def _parse(source, filename="main.cpp", extra_args=None):
        return clang_analyzer.parse_string(
            textwrap.dedent(source).lstrip("\n"),
            filename=filename,
            extra_args=extra_args
        )
    return _parse


def line_of(source: str, needle: str) -> int:
    """dedent済みのコード片で needle を含む最初の行番号（1始まり）を返す。"""
    lines = textwrap.dedent(source).lstrip("\n").splitlines()
    for number, line in enumerate(lines, start=1):
        if needle in line:
            return number
    raise ValueError(needle)
