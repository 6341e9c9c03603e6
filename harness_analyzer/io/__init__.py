"""コンパイルデータベース入力モジュール。"""

from .compile_commands import CompileCommand, CompileCommands

__all__ = ["CompileCommand", "CompileCommands"]
