"""テストハーネス解析ツールのメインエントリーポイント。"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional, Sequence
from dataclasses import dataclass
import logging

from .config import Config, DEFAULT_CONFIG_PATH
from .io.compile_commands import CompileCommands
from .analyzer.clang_analyzer import ClangAnalyzer, ClangParseError, TranslationUnitError
from .analyzer.pipeline import AnalysisMode, extract_facts
from .models.records import FunctionAnalysis, VariableAnalysis
from .utils.logger import setup_logging, ProgressLogger

logger = logging.getLogger(__name__)


@dataclass
class ProcessingStats:
    """処理統計情報。"""
    total: int = 0
    processed: int = 0
    errors: int = 0


class HarnessFactExtractor:
    """ソースファイル群から関数・入力箇所・ハーネス適合性を抽出する。"""

    def __init__(
        self,
        config: Config,
        mode: AnalysisMode,
        extra_args: Optional[List[str]] = None
    ):
        """抽出器を初期化する。

        Args:
            config: アプリケーション設定
            mode: 出力する事実の種類
            extra_args: すべてのファイルに追加するコンパイラ引数
        """
        self.config = config
        self.mode = mode
        self.extra_args = extra_args or []
        self.stats = ProcessingStats()

        self.clang_analyzer = ClangAnalyzer(
            include_paths=config.include_paths,
            additional_args=config.compiler_args,
            library_path=config.library_path,
            cxx_standard=config.cxx_standard,
            failure_severity=(
                config.failure_severity_level if config.fail_on_parse_errors else None
            )
        )

        if config.compile_commands_dir:
            self.compile_commands = CompileCommands.load(config.compile_commands_dir)
        else:
            self.compile_commands = CompileCommands()

    def process(self, source_files: Sequence[str]) -> dict:
        """ファイルを順に解析し、結果を入力順に連結する。

        解析に失敗したファイルはログに記録して読み飛ばす。

        Args:
            source_files: 解析するソースファイル

        Returns:
            JSON出力用の辞書
        """
        self.stats.total = len(source_files)
        functions = FunctionAnalysis()
        variables = VariableAnalysis()
        progress = ProgressLogger(self.stats.total, logger, log_interval=10)

        for source_file in source_files:
            try:
                args = self.compile_commands.arguments_for(source_file) + self.extra_args
                tu = self.clang_analyzer.parse_file(source_file, extra_args=args)
                facts = extract_facts(tu, [self.mode])
            except TranslationUnitError as e:
                logger.error(str(e))
                self.stats.errors += 1
                progress.update(source_file, failed=True)
            except ClangParseError as e:
                logger.error(f"Error processing {source_file}: {e}")
                self.stats.errors += 1
                progress.update(source_file, failed=True)
            else:
                if facts.functions is not None:
                    functions.merge(facts.functions)
                if facts.variables is not None:
                    variables.merge(facts.variables)
                self.stats.processed += 1
                progress.update(source_file)

        progress.complete()

        if self.mode is AnalysisMode.FUNCTIONS:
            return functions.to_dict()
        return variables.to_dict()


def _load_config(config_path: Optional[str]) -> Config:
    """設定を読み込む。

    既定の設定ファイルが無い場合はデフォルト値を使用する。

    Args:
        config_path: 明示的に指定された設定ファイル（省略可）

    Returns:
        Configインスタンス

    Raises:
        FileNotFoundError: 明示的に指定したファイルが存在しない場合
    """
    if config_path is not None:
        if not Path(config_path).exists():
            raise FileNotFoundError(config_path)
        return Config.from_yaml(config_path)

    if Path(DEFAULT_CONFIG_PATH).exists():
        return Config.from_yaml(DEFAULT_CONFIG_PATH)

    return Config.from_dict({})


def build_parser() -> argparse.ArgumentParser:
    """コマンドライン引数パーサーを構築する。"""
    parser = argparse.ArgumentParser(
        prog="harness-analyzer",
        description="C++ソースからテストハーネス生成用の事実を抽出するツール"
    )
    parser.add_argument(
        "sources",
        nargs="+",
        metavar="SOURCE",
        help="解析するC++ソースファイル"
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in AnalysisMode],
        default=AnalysisMode.VARIABLES.value,
        help="出力モード: vars=入力箇所とハーネス適合性, funcs=関数定義"
    )
    parser.add_argument(
        "-p", "--build-dir",
        help="compile_commands.jsonを含むビルドディレクトリ"
    )
    parser.add_argument(
        "-c", "--config",
        help=f"設定ファイルパス（省略時は {DEFAULT_CONFIG_PATH} があれば使用）"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="詳細ログを有効にする"
    )
    parser.add_argument(
        "--extra-arg",
        action="append",
        default=[],
        metavar="ARG",
        help=(
            "コンパイラに追加で渡す引数（複数指定可）。"
            "-で始まる値は --extra-arg=-DNAME=value の形式で指定する"
        )
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """メインエントリーポイント。

    Args:
        argv: コマンドライン引数（省略時は sys.argv）

    Returns:
        終了コード
    """
    args = build_parser().parse_args(argv)

    try:
        config = _load_config(args.config)
    except FileNotFoundError:
        print(f"Error: 設定ファイルが見つかりません: {args.config}", file=sys.stderr)
        return 1

    if args.verbose:
        config.log_level = "DEBUG"
    if args.build_dir:
        config.compile_commands_dir = args.build_dir

    # 標準出力はJSON専用のため、ログは標準エラーへ
    setup_logging(level=config.log_level, log_file=config.log_file)

    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 1
    logger.debug(f"Configuration: {config.to_dict()}")

    missing = [source for source in args.sources if not Path(source).exists()]
    for source in missing:
        logger.error(f"ソースファイルが見つかりません: {source}")

    try:
        extractor = HarnessFactExtractor(
            config,
            AnalysisMode(args.mode),
            extra_args=args.extra_arg
        )
    except ClangParseError as e:
        logger.error(str(e))
        return 1

    sources = [source for source in args.sources if source not in missing]
    result = extractor.process(sources)

    sys.stdout.write(json.dumps(result, indent=4, ensure_ascii=False))
    sys.stdout.write("\n")
    sys.stdout.flush()

    if missing or extractor.stats.errors:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
