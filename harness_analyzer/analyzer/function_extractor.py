"""Function signature extraction from C++ translation units using libclang."""

from typing import Dict, List, Set, Tuple
import logging

from ..models.records import (
    CandidateArgument,
    EnumSelector,
    FunctionRecord,
    Parameter,
)
from .classification import classify_parameters
from .expressions import enum_declaration, has_body, is_enum_type, position_of
from .walker import CursorVisitor

logger = logging.getLogger(__name__)

ENUM_TYPE_PREFIX = "enumeration "


def collect_file_scope_variables(tu) -> List[Tuple[str, str]]:
    """Collect variables declared outside any function or class body.

    Args:
        tu: clang.cindex.TranslationUnit

    Returns:
        (type spelling, name) pairs in declaration order
    """
    variables: List[Tuple[str, str]] = []
    pending = list(tu.cursor.get_children())
    while pending:
        cursor = pending.pop(0)
        kind = cursor.kind.name
        if kind == "VAR_DECL" and cursor.spelling:
            variables.append((cursor.type.spelling, cursor.spelling))
        elif kind == "LINKAGE_SPEC":
            # extern "C" { ... } does not open a new scope
            pending[0:0] = list(cursor.get_children())
    return variables


class FunctionExtractor(CursorVisitor):
    """Extract function definitions and their data-shape facts."""

    # Cursor kinds that represent function definitions
    FUNCTION_KINDS: Set[str] = {
        "FUNCTION_DECL",
        "CXX_METHOD",
        "CONSTRUCTOR",
        "DESTRUCTOR",
        "CONVERSION_FUNCTION",
    }

    HANDLERS: Dict[str, str] = {kind: "visit_function" for kind in FUNCTION_KINDS}

    def __init__(self, tu, functions: List[FunctionRecord]):
        """Initialize the function extractor.

        Args:
            tu: Translation unit being walked
            functions: Output collection the records are appended to
        """
        self.functions = functions
        self._file_scope_variables = collect_file_scope_variables(tu)

    def visit_function(self, cursor) -> None:
        """Record a function definition; prototypes are skipped."""
        if not cursor.is_definition() or not has_body(cursor):
            return

        record = self.extract(cursor)
        self.functions.append(record)
        logger.debug(f"Function: {record}")

    def extract(self, cursor) -> FunctionRecord:
        """Convert a function definition cursor to a FunctionRecord.

        Args:
            cursor: Function definition cursor

        Returns:
            FunctionRecord instance
        """
        params = list(cursor.get_arguments())

        parameters: List[Parameter] = []
        for param in params:
            type_spelling = param.type.spelling
            if is_enum_type(param.type):
                type_spelling = ENUM_TYPE_PREFIX + type_spelling
            parameters.append(Parameter(type_spelling, param.spelling))

        # Classification works on its own copy of the type list
        classification = classify_parameters([p.type_spelling for p in parameters])

        enum_selectors: List[EnumSelector] = []
        candidate_arguments: List[CandidateArgument] = []

        if classification.is_known:
            for param in params[classification.consumed:]:
                enumerators = self._enumerators(param)
                if enumerators is not None:
                    enum_selectors.append(EnumSelector(param.spelling, enumerators))

                candidate_arguments.append(
                    CandidateArgument(param.spelling, self._matching_variables(param))
                )

        return FunctionRecord(
            return_type=cursor.result_type.spelling,
            name=cursor.spelling,
            parameters=parameters,
            start_pos=position_of(cursor.extent.start),
            end_pos=position_of(self._last_token_location(cursor)),
            category=classification.category,
            enum_selectors=enum_selectors,
            candidate_arguments=candidate_arguments,
        )

    @staticmethod
    def _enumerators(param):
        """Return ``Enum::Enumerator`` names for an enum-typed parameter.

        Args:
            param: PARM_DECL cursor

        Returns:
            Qualified enumerator names in declaration order, or None
        """
        declaration = enum_declaration(param.type)
        if declaration is None:
            return None

        enum_name = declaration.spelling
        return [
            f"{enum_name}::{child.spelling}"
            for child in declaration.get_children()
            if child.kind.name == "ENUM_CONSTANT_DECL"
        ]

    def _matching_variables(self, param) -> List[str]:
        """Names of file-scope variables spelled with the parameter's type."""
        type_spelling = param.type.spelling
        return [
            name for variable_type, name in self._file_scope_variables
            if variable_type == type_spelling
        ]

    @staticmethod
    def _last_token_location(cursor):
        """Location of the definition's last token (the closing brace)."""
        last = None
        for token in cursor.get_tokens():
            last = token
        if last is None:
            return cursor.extent.end
        return last.location
