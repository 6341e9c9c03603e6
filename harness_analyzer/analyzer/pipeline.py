"""1回の走査で複数の解析器を組み合わせて実行する。"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
import logging

from ..models.records import FunctionAnalysis, VariableAnalysis
from .boundary import BoundaryFilter
from .function_extractor import FunctionExtractor
from .harness_detector import HarnessReadinessDetector, HarnessState
from .input_sites import InputSiteExtractor
from .walker import CursorVisitor, TranslationUnitWalker

logger = logging.getLogger(__name__)


class AnalysisMode(Enum):
    """出力する事実の種類。"""
    VARIABLES = "vars"
    FUNCTIONS = "funcs"


@dataclass
class TranslationUnitFacts:
    """1つのTranslationUnitから抽出した事実。"""
    file_path: str
    functions: Optional[FunctionAnalysis] = None
    variables: Optional[VariableAnalysis] = None


def extract_facts(tu, modes: List[AnalysisMode]) -> TranslationUnitFacts:
    """指定された解析を1回の走査で実行する。

    出力コレクションは走査ごとに新しく作成し、解析器間で共有しない。

    Args:
        tu: clang.cindex.TranslationUnit
        modes: 実行する解析の種類

    Returns:
        TranslationUnitFacts
    """
    boundary = BoundaryFilter(tu)
    facts = TranslationUnitFacts(file_path=tu.spelling)
    visitors: List[CursorVisitor] = []

    if AnalysisMode.FUNCTIONS in modes:
        facts.functions = FunctionAnalysis()
        visitors.append(FunctionExtractor(tu, facts.functions.functions))

    if AnalysisMode.VARIABLES in modes:
        facts.variables = VariableAnalysis()
        input_sites = InputSiteExtractor(boundary, facts.variables.variables)
        visitors.append(input_sites)
        visitors.append(
            HarnessReadinessDetector(HarnessState(readiness=facts.variables.readiness))
        )

    walker = TranslationUnitWalker(boundary, visitors)
    walker.walk(tu)

    if facts.functions is not None:
        logger.info(f"{facts.file_path}: {len(facts.functions.functions)} functions")
    if facts.variables is not None:
        readiness = facts.variables.readiness
        logger.info(
            f"{facts.file_path}: {len(facts.variables.variables)} input sites, "
            f"ready={readiness.ready}, "
            f"{len(readiness.discovered_literals)} literals"
        )
        logger.debug(f"Variable cache hits: {input_sites.cache.hits}")

    return facts
