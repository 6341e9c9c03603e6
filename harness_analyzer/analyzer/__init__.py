"""libclangを使用したC++ソースコード解析モジュール。"""

from .clang_analyzer import ClangAnalyzer, ClangParseError, TranslationUnitError
from .boundary import BoundaryFilter
from .walker import CursorVisitor, TranslationUnitWalker
from .function_extractor import FunctionExtractor
from .input_sites import InputSiteExtractor
from .harness_detector import HarnessReadinessDetector, HarnessState
from .pipeline import AnalysisMode, TranslationUnitFacts, extract_facts

__all__ = [
    "ClangAnalyzer",
    "ClangParseError",
    "TranslationUnitError",
    "BoundaryFilter",
    "CursorVisitor",
    "TranslationUnitWalker",
    "FunctionExtractor",
    "InputSiteExtractor",
    "HarnessReadinessDetector",
    "HarnessState",
    "AnalysisMode",
    "TranslationUnitFacts",
    "extract_facts",
]
