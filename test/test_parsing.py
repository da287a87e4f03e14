"""
Parsing tests for DSH
Literal and identifier recognition, statements, and the precedence split
"""

import pytest

from parsing import (
    DshGrammar,
    create_grammar,
    find_operator_index,
    parse_statement,
    split_by_precedence,
    strip_outer_parentheses,
)
from utilities import has_balanced_parentheses
from values import Tag


class TestLiterals:
    """Literal recognition"""

    @pytest.fixture
    def grammar(self):
        """Provide a fresh grammar instance for each test"""
        return DshGrammar()

    @pytest.mark.parametrize("text, expected", [
        ("42", 42),
        ("-5", -5),
        ("+7", 7),
        ("2147483647", 2147483647),
    ])
    def test_integer_literals(self, grammar, text, expected):
        value = grammar.parse_literal(text)
        assert value.tag is Tag.INTEGER
        assert value.raw == expected

    @pytest.mark.parametrize("text, expected", [
        ("3.14", 3.14),
        ("5.", 5.0),
        (".5", 0.5),
        ("-1.25", -1.25),
        ("1.5e3", 1500.0),
    ])
    def test_decimal_literals(self, grammar, text, expected):
        value = grammar.parse_literal(text)
        assert value.tag is Tag.DOUBLE
        assert value.raw == expected

    @pytest.mark.parametrize("text", [
        "2147483648",
        "1.2.3",
        "1_000",
        "- 5",
        "abc",
        "2 + 3",
        "",
    ])
    def test_non_literals(self, grammar, text):
        assert grammar.parse_literal(text) is None

    @pytest.mark.parametrize("text, expected", [
        ("x", True),
        ("total_2", True),
        ("A1b", True),
        ("_x", False),
        ("1x", False),
        ("a b", False),
        ("a-b", False),
    ])
    def test_identifiers(self, grammar, text, expected):
        assert grammar.is_identifier(text) is expected


class TestStatements:
    """Shell line classification"""

    def test_assignment(self):
        kind, payload = parse_statement("total = 2 + 3 ")
        assert kind == "ASSIGN"
        assert payload == {"name": "total", "expression": "2 + 3"}

    def test_expression(self):
        assert parse_statement("  2 + 3 ") == ("EXPRESSION", "2 + 3")

    def test_assignment_without_expression_is_an_expression(self):
        kind, _ = parse_statement("x =")
        assert kind == "EXPRESSION"

    def test_debug_grammar_still_parses(self):
        grammar = create_grammar(debug=True)
        assert grammar.is_identifier("x")


class TestStructure:
    """Parenthesis handling and operator splitting"""

    @pytest.mark.parametrize("text, expected", [
        ("(1 + 2)", True),
        ("(a)+(b)", True),
        ("((1)", False),
        (")(", False),
        ("(1))", False),
    ])
    def test_balance(self, text, expected):
        assert has_balanced_parentheses(text) is expected

    @pytest.mark.parametrize("text, expected", [
        ("((2 + 3))", "2 + 3"),
        ("(a)+(b)", "(a)+(b)"),
        ("((a)+(b))", "(a)+(b)"),
        ("x", "x"),
    ])
    def test_strip_outer_parentheses(self, text, expected):
        assert strip_outer_parentheses(text) == expected

    def test_rightmost_operator_at_depth_zero(self):
        assert find_operator_index("1 - 2 - (3 - 4)", '-') == 6

    def test_first_and_last_characters_are_not_eligible(self):
        assert find_operator_index("-5", '-') == -1
        assert find_operator_index("5 +", '+') == -1

    def test_addition_is_split_before_multiplication(self):
        assert split_by_precedence("2 + 3 * 4") == ("2 ", '+', " 3 * 4")

    def test_plus_is_searched_before_minus(self):
        assert split_by_precedence("8 - 3 + 2") == ("8 - 3 ", '+', " 2")

    def test_multiplication_is_searched_before_division(self):
        assert split_by_precedence("12 / 3 * 2") == ("12 / 3 ", '*', " 2")

    def test_no_split(self):
        assert split_by_precedence("(1 + 2)x") is None
