"""C++ソースからテストハーネス生成用の事実を抽出するツール。"""

__version__ = "0.1.0"
