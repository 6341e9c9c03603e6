"""compile_commands.json reader for per-file front-end arguments."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
from pathlib import Path
import json
import logging
import os
import shlex

logger = logging.getLogger(__name__)

# 値を伴うフラグ（-I dir / -Idir の両形式）と、値がパスかどうか
VALUE_FLAGS: Dict[str, bool] = {
    "-I": True,
    "-isystem": True,
    "-iquote": True,
    "-include": True,
    "-D": False,
    "-U": False,
}


@dataclass
class CompileCommand:
    """compile_commands.json の1エントリ。

    Attributes:
        directory: コンパイル時の作業ディレクトリ
        file: ソースファイルの絶対パス
        arguments: フロントエンドに渡す引数（-I, -D, -std= など）
    """
    directory: str
    file: str
    arguments: List[str] = field(default_factory=list)


class CompileCommands:
    """コンパイルデータベース。

    CMakeなどが出力した compile_commands.json から、ソースファイルごとの
    インクルードパスやマクロ定義を取り出す。
    """

    # compile_commands.json を探すディレクトリ（指定ディレクトリからの相対）
    SEARCH_DIRS: Tuple[str, ...] = (
        ".",
        "build",
        "cmake-build-debug",
        "cmake-build-release",
        "out/build",
    )

    def __init__(self, commands: Optional[Dict[str, CompileCommand]] = None):
        self._commands: Dict[str, CompileCommand] = commands or {}

    def __len__(self) -> int:
        return len(self._commands)

    @classmethod
    def find(cls, path: str) -> Optional[Path]:
        """compile_commands.json を検索。

        Args:
            path: compile_commands.json 自体、またはそれを含むディレクトリ

        Returns:
            compile_commands.json のパス、見つからない場合は None
        """
        root = Path(path)
        if root.is_file():
            return root

        for directory in cls.SEARCH_DIRS:
            candidate = root / directory / "compile_commands.json"
            if candidate.exists():
                return candidate
        return None

    @classmethod
    def load(cls, path: str) -> "CompileCommands":
        """compile_commands.json を読み込む。

        読み込めない場合はログを出力し、空のデータベースを返す。

        Args:
            path: compile_commands.json、またはそれを含むディレクトリ

        Returns:
            CompileCommands
        """
        found = cls.find(path)
        if found is None:
            logger.warning(f"compile_commands.json not found under {path}")
            return cls()

        try:
            with open(found, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error(f"Failed to parse compile_commands.json: {e}")
            return cls()

        if not isinstance(data, list):
            logger.error(f"Unexpected compile_commands.json format: {found}")
            return cls()

        commands: Dict[str, CompileCommand] = {}
        for entry in data:
            command = cls._parse_entry(entry, found.parent)
            if command is not None:
                commands.setdefault(_normalize(command.file), command)

        logger.info(f"Loaded {len(commands)} entries from {found}")
        return cls(commands)

    @classmethod
    def _parse_entry(cls, entry: dict, base_dir: Path) -> Optional[CompileCommand]:
        """エントリ1件をパース。

        Args:
            entry: JSONエントリ
            base_dir: directory が無い場合の基準ディレクトリ

        Returns:
            CompileCommand、ファイル名が無い場合は None
        """
        if not isinstance(entry, dict):
            return None

        directory = entry.get("directory") or str(base_dir)
        source_file = entry.get("file", "")
        if not source_file:
            return None
        if not os.path.isabs(source_file):
            source_file = os.path.join(directory, source_file)

        command = entry.get("arguments") or entry.get("command", "")
        if isinstance(command, list):
            args = [str(arg) for arg in command]
        else:
            args = shlex.split(command)

        return CompileCommand(
            directory=directory,
            file=os.path.abspath(source_file),
            arguments=cls._frontend_arguments(args, directory),
        )

    @staticmethod
    def _frontend_arguments(args: List[str], directory: str) -> List[str]:
        """コンパイラ引数から構文木の構築に影響するものだけを取り出す。

        Args:
            args: コンパイラ引数（先頭はコンパイラ名）
            directory: 相対パスの基準ディレクトリ

        Returns:
            フロントエンド用引数のリスト
        """
        result: List[str] = []
        i = 0
        while i < len(args):
            arg = args[i]

            if arg.startswith("-std="):
                result.append(arg)
                i += 1
                continue

            for flag, is_path in VALUE_FLAGS.items():
                if not arg.startswith(flag):
                    continue
                # -I/path と -I /path の両方に対応
                if len(arg) > len(flag):
                    value = arg[len(flag):]
                elif i + 1 < len(args):
                    i += 1
                    value = args[i]
                else:
                    value = ""
                if value:
                    if is_path and not os.path.isabs(value):
                        value = os.path.normpath(os.path.join(directory, value))
                    result.extend([flag, value])
                break

            i += 1

        return result

    def arguments_for(self, source_path: str) -> List[str]:
        """ソースファイルのフロントエンド引数を取得する。

        Args:
            source_path: ソースファイルのパス

        Returns:
            引数のリスト、エントリが無い場合は空リスト
        """
        command = self._commands.get(_normalize(source_path))
        if command is None:
            logger.debug(f"No compile command for {source_path}")
            return []
        return list(command.arguments)


def _normalize(path: str) -> str:
    return os.path.normcase(os.path.abspath(path))
