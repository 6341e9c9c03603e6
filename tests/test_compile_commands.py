"""compile_commands.json読み込みのテスト。"""

import json
from pathlib import Path
from tempfile import TemporaryDirectory

from harness_analyzer.io.compile_commands import CompileCommands


def _write_database(build_dir: Path, entries) -> None:
    build_dir.mkdir(parents=True, exist_ok=True)
    (build_dir / "compile_commands.json").write_text(json.dumps(entries))


class TestCompileCommandsParsing:
    """エントリのパーステスト。"""

    def test_command_string(self):
        """command文字列形式のエントリから引数を取り出す。"""
        with TemporaryDirectory() as tmpdir:
            project_root = Path(tmpdir)
            build_dir = project_root / "build"
            source = project_root / "src" / "main.cpp"

            _write_database(build_dir, [
                {
                    "directory": str(build_dir),
                    "command": (
                        f"g++ -I{project_root}/include -DDEBUG -std=c++14 "
                        f"-O2 -Wall -c {source} -o main.o"
                    ),
                    "file": str(source)
                }
            ])

            database = CompileCommands.load(str(project_root))

            assert len(database) == 1
            assert database.arguments_for(str(source)) == [
                "-I", f"{project_root}/include",
                "-D", "DEBUG",
                "-std=c++14",
            ]

    def test_arguments_list(self):
        """arguments配列形式と、値が分かれたフラグのテスト。"""
        with TemporaryDirectory() as tmpdir:
            project_root = Path(tmpdir)
            build_dir = project_root / "build"
            source = project_root / "src" / "main.cpp"

            _write_database(build_dir, [
                {
                    "directory": str(build_dir),
                    "arguments": [
                        "clang++",
                        "-isystem", "/opt/vendor/include",
                        "-include", "config.h",
                        "-U", "NDEBUG",
                        "-std=c++17",
                        "-c", str(source)
                    ],
                    "file": str(source)
                }
            ])

            database = CompileCommands.load(str(build_dir))

            assert database.arguments_for(str(source)) == [
                "-isystem", "/opt/vendor/include",
                "-include", str(build_dir / "config.h"),
                "-U", "NDEBUG",
                "-std=c++17",
            ]

    def test_relative_paths_resolved_against_directory(self):
        with TemporaryDirectory() as tmpdir:
            project_root = Path(tmpdir)
            build_dir = project_root / "build"

            _write_database(build_dir, [
                {
                    "directory": str(build_dir),
                    "command": "g++ -I../include -c ../src/main.cpp",
                    "file": "../src/main.cpp"
                }
            ])

            database = CompileCommands.load(str(build_dir))
            source = project_root / "src" / "main.cpp"

            assert database.arguments_for(str(source)) == [
                "-I", str(project_root / "include"),
            ]

    def test_unknown_file(self):
        with TemporaryDirectory() as tmpdir:
            build_dir = Path(tmpdir)
            _write_database(build_dir, [
                {"directory": tmpdir, "command": "g++ -c a.cpp", "file": "a.cpp"}
            ])

            database = CompileCommands.load(tmpdir)

            assert database.arguments_for(str(build_dir / "b.cpp")) == []


class TestCompileCommandsLookup:
    """compile_commands.jsonの検索テスト。"""

    def test_find_in_various_locations(self):
        """様々なビルドディレクトリでのcompile_commands.json検索テスト。"""
        with TemporaryDirectory() as tmpdir:
            project_root = Path(tmpdir)
            _write_database(project_root / "cmake-build-debug", [])

            found = CompileCommands.find(str(project_root))

            assert found is not None
            assert "cmake-build-debug" in str(found)

    def test_explicit_file(self):
        with TemporaryDirectory() as tmpdir:
            _write_database(Path(tmpdir), [])
            path = Path(tmpdir) / "compile_commands.json"

            assert CompileCommands.find(str(path)) == path

    def test_missing_database_is_empty(self):
        with TemporaryDirectory() as tmpdir:
            database = CompileCommands.load(tmpdir)
            assert len(database) == 0

    def test_invalid_json_is_empty(self):
        with TemporaryDirectory() as tmpdir:
            (Path(tmpdir) / "compile_commands.json").write_text("{not json")

            database = CompileCommands.load(tmpdir)

            assert len(database) == 0
