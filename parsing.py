"""
DSH Expression Parsing
Literal, identifier and statement recognition with pyparsing, plus the
operator-precedence split used by the calculator
"""

from typing import Any, Optional, Tuple

# Import pyparsing with error handling
try:
    from pyparsing import (
        Word, alphas, alphanums, Regex, Suppress, ParseException, ParserElement
    )
    # Enable packrat parsing for performance
    ParserElement.enable_packrat()
except ImportError:
    raise ImportError("pyparsing library not found. Install with: pip install pyparsing")

from utilities import has_balanced_parentheses, paren_depths
from values import Value, INT32_MIN, INT32_MAX


# Lowest precedence first; within a level the listed order is the search order
PRECEDENCE_LEVELS = (
    ('+', '-'),
    ('*', '/'),
)


class DshGrammar:
    """Token-level grammar for shell expressions and statements"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._setup_grammar()

    def _setup_grammar(self):
        """Setup literal, identifier and assignment patterns"""

        # Numbers: decimals must contain a point, integers carry an optional sign
        self.integer_literal = Regex(r'[+-]?[0-9]+').set_parse_action(
            lambda t: ("INTEGER", int(t[0]))
        )
        self.decimal_literal = Regex(
            r'[+-]?(?:[0-9]+\.[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?'
        ).set_parse_action(lambda t: ("DECIMAL", float(t[0])))

        # Identifiers: a letter followed by letters, digits or underscores
        name = Word(alphas, alphanums + "_")
        self.identifier = name.copy().set_parse_action(lambda t: ("IDENTIFIER", t[0]))

        # Statements: "name = expression"
        self.assignment = (
            name.copy() + Suppress("=") + Regex(r'.+')
        ).set_parse_action(
            lambda t: ("ASSIGN", {"name": t[0], "expression": t[1].strip()})
        )

        if self.debug:
            for element in (self.integer_literal, self.decimal_literal,
                            self.identifier, self.assignment):
                element.set_debug()

    def _match(self, element: ParserElement, text: str) -> Optional[Tuple[str, Any]]:
        try:
            return element.parse_string(text, parse_all=True)[0]
        except ParseException:
            return None

    def parse_literal(self, text: str) -> Optional[Value]:
        """Integer or decimal literal as a Value, None when text is not one"""
        if '.' in text:
            token = self._match(self.decimal_literal, text)
            return Value.of_double(token[1]) if token else None

        token = self._match(self.integer_literal, text)
        if token is None:
            return None
        number = token[1]
        # Out-of-range integer text is not an integer literal
        if not INT32_MIN <= number <= INT32_MAX:
            return None
        return Value.of_int(number)

    def is_identifier(self, text: str) -> bool:
        return self._match(self.identifier, text) is not None

    def parse_statement(self, line: str) -> Tuple[str, Any]:
        """Classify a shell line as an assignment or a bare expression"""
        line = line.strip()
        token = self._match(self.assignment, line)
        if token is not None:
            return token
        return ("EXPRESSION", line)


# ============================================================================
# STRUCTURAL HELPERS
# ============================================================================

def strip_outer_parentheses(text: str) -> str:
    """Remove wrapping parentheses while the interior stays balanced on its own.

    The interior check is repeated for every layer so that "(a)+(b)" is left
    intact.
    """
    while (text.startswith('(') and text.endswith(')')
           and has_balanced_parentheses(text[1:-1])):
        text = text[1:-1]
    return text


def find_operator_index(text: str, op: str) -> int:
    """Index of the rightmost op at depth 0 that is neither first nor last, or -1"""
    last_index = -1
    end = len(text) - 1
    for index, char, depth in paren_depths(text):
        if char == op and depth == 0 and 0 < index < end:
            last_index = index
    return last_index


def split_by_precedence(text: str) -> Optional[Tuple[str, str, str]]:
    """Split text at its lowest-precedence operator.

    Returns (left, op, right), or None when no eligible operator exists.
    Taking the rightmost occurrence makes equal-precedence operators
    associate to the left.
    """
    for level in PRECEDENCE_LEVELS:
        for op in level:
            index = find_operator_index(text, op)
            if index > 0:
                return text[:index], op, text[index + 1:]
    return None


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_grammar(debug: bool = False) -> DshGrammar:
    return DshGrammar(debug=debug)


default_grammar = DshGrammar()


def parse_statement(line: str) -> Tuple[str, Any]:
    return default_grammar.parse_statement(line)
