"""C/C++の文字列・文字リテラルの綴りをPython文字列に変換する。"""

from typing import List, Optional
import re

_PREFIX_RE = re.compile(r'^(?:u8|u|U|L)?')
_RAW_RE = re.compile(r'^(?:u8|u|U|L)?R"([^()\\ ]{0,16})\((.*)\)\1"$', re.DOTALL)
_SEGMENT_RE = re.compile(r'(?:u8|u|U|L)?"((?:[^"\\]|\\.)*)"', re.DOTALL)
_ESCAPE_RE = re.compile(
    r'\\(x[0-9a-fA-F]+|[0-7]{1,3}|u[0-9a-fA-F]{4}|U[0-9a-fA-F]{8}|.)',
    re.DOTALL
)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
    "?": "?",
}


def _byte_value(code: str) -> Optional[int]:
    """8進・16進エスケープが1バイトに収まる場合はその値を返す。"""
    if code[0] in "01234567":
        value = int(code, 8)
    elif len(code) > 1 and code[0] == "x":
        value = int(code[1:], 16)
    else:
        return None
    return value if value <= 0xFF else None


def _decode_bytes(data: bytearray) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def _replace_escape(code: str) -> str:
    if code in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[code]
    if len(code) > 1 and code[0] in "xuU":
        return chr(min(int(code[1:], 16), 0x10FFFF))
    # 未定義のエスケープは文字そのものとして扱う
    return code


def unescape(body: str) -> str:
    """エスケープシーケンスを展開する。

    連続する8進・16進のバイトエスケープはUTF-8のバイト列として復号する
    （libclangは非ASCII文字を ``\\303\\251`` のようにエスケープして綴る）。
    UTF-8として不正な場合は1バイト1文字とする。

    Args:
        body: 引用符を除いたリテラル本体

    Returns:
        展開後の文字列
    """
    pieces: List[str] = []
    pending = bytearray()
    position = 0

    def flush() -> None:
        if pending:
            pieces.append(_decode_bytes(pending))
            pending.clear()

    for match in _ESCAPE_RE.finditer(body):
        text = body[position:match.start()]
        position = match.end()
        if text:
            flush()
            pieces.append(text)

        code = match.group(1)
        value = _byte_value(code)
        if value is not None:
            pending.append(value)
        else:
            flush()
            pieces.append(_replace_escape(code))

    flush()
    pieces.append(body[position:])
    return "".join(pieces)


def decode_string_literal(spelling: str) -> Optional[str]:
    """文字列リテラルの綴りを値に変換する。

    エンコーディング接頭辞、raw文字列、隣接リテラルの連結に対応する。

    Args:
        spelling: リテラルの綴り（例: ``"input.txt"``、``u8"a" "b"``）

    Returns:
        リテラルの値、文字列リテラルでない場合はNone
    """
    text = spelling.strip()

    raw = _RAW_RE.match(text)
    if raw:
        return raw.group(2)

    segments: List[str] = _SEGMENT_RE.findall(text)
    if not segments:
        return None
    return "".join(unescape(segment) for segment in segments)


def decode_character_literal(spelling: str) -> Optional[str]:
    """文字リテラルの綴りを値に変換する。

    Args:
        spelling: リテラルの綴り（例: ``'a'``、``L'\\n'``）

    Returns:
        文字、文字リテラルでない場合はNone
    """
    text = _PREFIX_RE.sub("", spelling.strip(), count=1)
    if len(text) < 3 or text[0] != "'" or text[-1] != "'":
        return None
    return unescape(text[1:-1])
