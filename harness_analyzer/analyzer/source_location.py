"""libclangのソース位置情報へのアクセス。

Pythonバインディングが公開していない位置情報API（presumed location、
システムヘッダー判定）をlibclangのC関数から直接呼び出す。
"""

from ctypes import POINTER, byref, c_int, c_uint
from functools import lru_cache
from typing import Tuple
import logging

from clang.cindex import SourceLocation, _CXString, conf

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _libclang_function(name: str, argtypes: tuple, restype):
    """libclangのC関数を型情報付きで取得する。

    Args:
        name: C関数名
        argtypes: 引数の型
        restype: 戻り値の型

    Returns:
        ctypes関数オブジェクト
    """
    function = getattr(conf.lib, name)
    function.argtypes = list(argtypes)
    function.restype = restype
    return function


def presumed_position(location: SourceLocation) -> Tuple[int, int]:
    """位置のpresumed location（1始まりの行, 列）を取得する。

    マクロ展開位置を基準とし、#lineディレクティブを反映した座標を返す。

    Args:
        location: libclangのソース位置

    Returns:
        (行, 列) のタプル
    """
    get_presumed = _libclang_function(
        "clang_getPresumedLocation",
        (SourceLocation, POINTER(_CXString), POINTER(c_uint), POINTER(c_uint)),
        None,
    )
    filename = _CXString()
    line = c_uint()
    column = c_uint()
    get_presumed(location, byref(filename), byref(line), byref(column))
    return line.value, column.value


def is_in_system_header(location: SourceLocation) -> bool:
    """位置（展開位置基準）がシステムヘッダー内かを判定する。

    Args:
        location: libclangのソース位置

    Returns:
        システムヘッダー内の場合True
    """
    in_system_header = _libclang_function(
        "clang_Location_isInSystemHeader",
        (SourceLocation,),
        c_int,
    )
    return bool(in_system_header(location))
