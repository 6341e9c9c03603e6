"""Expression helpers shared by the analyzers.

libclang exposes most implicit nodes (implicit casts, temporaries,
materializations) as UNEXPOSED_EXPR with a single child, so "ignoring"
them means descending through single-child wrapper cursors.
"""

from typing import Dict, List, Optional, Set, Tuple
import logging

from .literals import decode_character_literal, decode_string_literal
from .source_location import presumed_position
from ..models.records import Position

logger = logging.getLogger(__name__)

# Implicit conversions and parentheses
IMPLICIT_WRAPPER_KINDS: Set[str] = {
    "UNEXPOSED_EXPR",
    "PAREN_EXPR",
}

# Explicit casts
CAST_KINDS: Set[str] = {
    "CSTYLE_CAST_EXPR",
    "CXX_STATIC_CAST_EXPR",
    "CXX_DYNAMIC_CAST_EXPR",
    "CXX_REINTERPRET_CAST_EXPR",
    "CXX_CONST_CAST_EXPR",
    "CXX_FUNCTIONAL_CAST_EXPR",
}

VARIABLE_DECL_KINDS: Set[str] = {
    "VAR_DECL",
    "PARM_DECL",
}

FUNCTION_BODY_KINDS: Set[str] = {
    "COMPOUND_STMT",
    "CXX_TRY_STMT",
}

TYPE_QUALIFIERS: Tuple[str, ...] = ("const", "volatile", "restrict")


def expression_children(cursor) -> List:
    """Return the child cursors that are expressions, in source order."""
    return [child for child in cursor.get_children() if child.kind.is_expression()]


def _strip(cursor, kinds: Set[str]):
    while cursor.kind.name in kinds:
        children = expression_children(cursor)
        if len(children) != 1:
            break
        cursor = children[0]
    return cursor


def strip_implicit(cursor):
    """Skip parentheses and implicit conversions."""
    return _strip(cursor, IMPLICIT_WRAPPER_KINDS)


def strip_parens_and_casts(cursor):
    """Skip parentheses, implicit conversions and explicit casts."""
    return _strip(cursor, IMPLICIT_WRAPPER_KINDS | CAST_KINDS)


def call_arguments(cursor) -> List:
    """Return the argument cursors of a call or construct expression.

    Args:
        cursor: CALL_EXPR cursor

    Returns:
        Argument cursors; empty when libclang reports none
    """
    return [arg for arg in cursor.get_arguments() if arg is not None]


def first_token(cursor) -> Optional[str]:
    """Return the spelling of the first token in the cursor's extent."""
    for token in cursor.get_tokens():
        return token.spelling
    return None


def resolve_variable(expression):
    """Resolve an expression to the variable it names.

    Parentheses and casts are skipped. Only a direct reference to a named
    variable (or parameter) resolves; anything else is a miss.

    Args:
        expression: expression cursor

    Returns:
        VAR_DECL/PARM_DECL cursor, or None
    """
    expression = strip_parens_and_casts(expression)
    if expression.kind.name != "DECL_REF_EXPR":
        return None

    declaration = expression.referenced
    if declaration is None or declaration.kind.name not in VARIABLE_DECL_KINDS:
        return None
    if not declaration.spelling:
        return None
    return declaration


def unqualified_type_spelling(ctype) -> str:
    """Spell a type without its top-level cv-qualifiers.

    ``const int`` becomes ``int`` and ``int *const`` becomes ``int *``;
    qualifiers below the top level (``const char *``) are kept.
    """
    spelling = ctype.spelling
    if not (
        ctype.is_const_qualified()
        or ctype.is_volatile_qualified()
        or ctype.is_restrict_qualified()
    ):
        return spelling

    words = spelling.split()
    if words and words[-1] in TYPE_QUALIFIERS:
        while words and words[-1] in TYPE_QUALIFIERS:
            words.pop()
    else:
        while words and words[0] in TYPE_QUALIFIERS:
            words.pop(0)
    return " ".join(words)


def is_enum_type(ctype) -> bool:
    return ctype.get_canonical().kind.name == "ENUM"


def enum_declaration(ctype):
    """Return the ENUM_DECL cursor of an enumeration type, or None."""
    if not is_enum_type(ctype):
        return None
    declaration = ctype.get_canonical().get_declaration()
    if declaration is None or declaration.kind.name != "ENUM_DECL":
        return None
    return declaration


def has_body(cursor) -> bool:
    """Check whether a function declaration carries a body."""
    return any(child.kind.name in FUNCTION_BODY_KINDS for child in cursor.get_children())


def is_in_std_namespace(declaration) -> bool:
    """Check whether a declaration lives in ``std`` (inline namespaces included)."""
    outermost = None
    parent = declaration.semantic_parent
    while parent is not None and parent.kind.name != "TRANSLATION_UNIT":
        if parent.kind.name == "NAMESPACE":
            outermost = parent
        parent = parent.semantic_parent
    return outermost is not None and outermost.spelling == "std"


def position_of(location) -> Position:
    """Convert a libclang location into a presumed Position."""
    line, column = presumed_position(location)
    return Position(line, column)


def string_literal_value(cursor) -> Optional[str]:
    """Decode a STRING_LITERAL cursor.

    The source tokens are preferred: libclang's cursor spelling re-escapes
    every non-ASCII byte. The spelling is the fallback for literals whose
    extent does not cover their tokens (macro expansions).
    """
    tokens = [
        token.spelling for token in cursor.get_tokens()
        if token.kind.name == "LITERAL" and token.spelling.endswith('"')
    ]
    if tokens:
        value = decode_string_literal(" ".join(tokens))
        if value is not None:
            return value
    return decode_string_literal(cursor.spelling or "")


def character_literal_value(cursor) -> Optional[str]:
    """Decode a CHARACTER_LITERAL cursor."""
    spelling = first_token(cursor)
    if spelling is None:
        return None
    return decode_character_literal(spelling)


class VariableCache:
    """Memoized (type spelling, name) per referenced variable declaration.

    Keyed by declaration identity so repeated reads of the same variable do
    not re-spell its type. Records are still produced per input site.
    """

    def __init__(self):
        self._entries: Dict[Tuple[int, str, int, int], Tuple[str, str]] = {}
        self.hits = 0

    @staticmethod
    def _key(declaration) -> Tuple[int, str, int, int]:
        location = declaration.location
        return (declaration.hash, declaration.spelling, location.line, location.column)

    def lookup(self, declaration) -> Tuple[str, str]:
        """Return the unqualified type spelling and name of a declaration."""
        key = self._key(declaration)
        entry = self._entries.get(key)
        if entry is not None:
            self.hits += 1
            return entry

        entry = (unqualified_type_spelling(declaration.type), declaration.spelling)
        self._entries[key] = entry
        return entry
