"""設定管理モジュール。"""

from dataclasses import dataclass, field, fields
from typing import List, Dict, Optional, Any
from pathlib import Path
import os
import logging

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/default_config.yaml"

# libclangの診断重大度名（clang.cindex.Diagnostic の値に対応）
SEVERITY_LEVELS: Dict[str, int] = {
    "warning": 2,
    "error": 3,
    "fatal": 4,
}


@dataclass
class Config:
    """アプリケーション設定。"""

    # libclang共有ライブラリのディレクトリ（未指定時は自動検出）
    library_path: Optional[str] = None

    # C++パース用インクルードパス
    include_paths: List[str] = field(default_factory=list)

    # 追加のコンパイラ引数
    compiler_args: List[str] = field(default_factory=list)

    # C++標準
    cxx_standard: str = "c++17"

    # compile_commands.json を含むビルドディレクトリ
    compile_commands_dir: Optional[str] = None

    # 構文木構築失敗とみなす診断の扱い
    fail_on_parse_errors: bool = True
    failure_severity: str = "error"

    # ロギング設定
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_yaml(cls, file_path: str) -> "Config":
        """YAMLファイルから設定を読み込む。

        Args:
            file_path: YAML設定ファイルのパス

        Returns:
            Configインスタンス
        """
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        config = cls.from_dict(data)

        # libclangのパスは環境変数が優先
        config.library_path = os.getenv(
            "LIBCLANG_LIBRARY_PATH",
            config.library_path
        )

        logger.info(f"Configuration loaded from {file_path}")
        return config

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """辞書から設定を作成する。

        Args:
            data: 設定辞書

        Returns:
            Configインスタンス
        """
        config = cls()
        known = {f.name for f in fields(cls)}

        for key, value in data.items():
            if key in known:
                setattr(config, key, value)
            else:
                logger.warning(f"Unknown configuration key ignored: {key}")

        return config

    def validate(self) -> List[str]:
        """設定を検証する。

        Returns:
            検証エラーのリスト（有効な場合は空）
        """
        errors = []

        if self.failure_severity not in SEVERITY_LEVELS:
            errors.append(
                f"failure_severityが不正です: {self.failure_severity} "
                f"(有効値: {', '.join(SEVERITY_LEVELS)})"
            )

        if not self.cxx_standard:
            errors.append("cxx_standardは必須です")

        if self.library_path and not Path(self.library_path).exists():
            errors.append(f"libclangのパスが存在しません: {self.library_path}")

        if self.compile_commands_dir and not Path(self.compile_commands_dir).exists():
            errors.append(
                f"compile_commands_dirが存在しません: {self.compile_commands_dir}"
            )

        # インクルードパスの欠落は警告のみ
        for path in self.include_paths:
            if not Path(path).exists():
                logger.warning(f"Include path does not exist: {path}")

        return errors

    @property
    def failure_severity_level(self) -> int:
        """失敗とみなす診断重大度の数値を取得する。"""
        return SEVERITY_LEVELS.get(self.failure_severity, SEVERITY_LEVELS["error"])

    def to_dict(self) -> Dict[str, Any]:
        """設定を辞書に変換する。

        Returns:
            辞書形式の設定
        """
        return {
            "library_path": self.library_path,
            "include_paths": self.include_paths,
            "compiler_args": self.compiler_args,
            "cxx_standard": self.cxx_standard,
            "compile_commands_dir": self.compile_commands_dir,
            "fail_on_parse_errors": self.fail_on_parse_errors,
            "failure_severity": self.failure_severity,
            "log_level": self.log_level,
            "log_file": self.log_file,
        }
