"""ロギング設定モジュール。"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _handlers(stream: TextIO, log_file: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(stream)]
    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))
    return handlers


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_string: str = DEFAULT_FORMAT,
    stream: Optional[TextIO] = None
) -> logging.Logger:
    """ルートロガーを設定する。

    標準出力は解析結果のJSON専用のため、コンソール出力は標準エラーに書き込む。
    既存のハンドラーは置き換える。

    Args:
        level: ログレベル名（不明な名前はINFO）
        log_file: 追加で書き込むログファイル（省略可）
        format_string: ログのフォーマット
        stream: コンソール出力先（省略時は標準エラー）

    Returns:
        ルートロガー
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(format_string)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    for handler in _handlers(stream or sys.stderr, log_file):
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    return root_logger


class ProgressLogger:
    """ファイル単位の解析進捗をログ出力する。"""

    def __init__(
        self,
        total: int,
        logger: Optional[logging.Logger] = None,
        log_interval: int = 10
    ):
        """
        Args:
            total: 解析するファイル数
            logger: 出力先ロガー
            log_interval: 何ファイルごとに出力するか
        """
        self.total = total
        self.current = 0
        self.failed = 0
        self.logger = logger or logging.getLogger(__name__)
        self.log_interval = log_interval

    def update(self, source_file: str, failed: bool = False) -> None:
        """1ファイル分進める。

        間隔ごとと最後のファイルでのみ出力する。
        """
        self.current += 1
        if failed:
            self.failed += 1

        if self.current % self.log_interval == 0 or self.current == self.total:
            percent = self.current / self.total * 100 if self.total else 100.0
            self.logger.info(
                f"Progress: {self.current}/{self.total} ({percent:.1f}%) - {source_file}"
            )

    def complete(self) -> None:
        """解析件数と失敗件数をまとめて出力する。"""
        self.logger.info(
            f"Analyzed {self.current - self.failed}/{self.total} files"
            f" ({self.failed} failed)"
        )
