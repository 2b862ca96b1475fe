import pytest

from kpieval.errors import FormulaSyntaxError
from kpieval.formula import TokenType, tokenize
from kpieval.formula.tokenizer import MAX_EXPRESSION_LENGTH


class TestTokenize:
    def test_token_types_and_positions(self):
        tokens = tokenize("a + 1.5")
        assert [t.type for t in tokens] == [
            TokenType.IDENT,
            TokenType.OPERATOR,
            TokenType.NUMBER,
            TokenType.EOF,
        ]
        assert [t.position for t in tokens] == [0, 2, 4, 7]
        assert tokens[2].value == 1.5

    def test_call_tokens(self):
        tokens = tokenize("sum(a, b)")
        assert [t.type for t in tokens] == [
            TokenType.IDENT,
            TokenType.LPAREN,
            TokenType.IDENT,
            TokenType.COMMA,
            TokenType.IDENT,
            TokenType.RPAREN,
            TokenType.EOF,
        ]

    @pytest.mark.parametrize(
        "text, expected",
        [("42", 42.0), ("3.", 3.0), (".5", 0.5), ("1e3", 1000.0), ("2.5E-1", 0.25)],
    )
    def test_number_forms(self, text, expected):
        tokens = tokenize(text)
        assert tokens[0].type == TokenType.NUMBER
        assert tokens[0].value == expected
        assert tokens[1].type == TokenType.EOF

    def test_identifiers_with_underscores_and_digits(self):
        tokens = tokenize("actual_cost_q2")
        assert tokens[0].type == TokenType.IDENT
        assert tokens[0].text == "actual_cost_q2"

    def test_empty_expression_is_only_eof(self):
        tokens = tokenize("   ")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF

    @pytest.mark.parametrize("expression, position", [("a % b", 2), ("a ** b; c", 6), ("__import__('os')", 11)])
    def test_unexpected_character(self, expression, position):
        with pytest.raises(FormulaSyntaxError) as exc_info:
            tokenize(expression)
        assert exc_info.value.position == position
        assert f"(at position {position})" in str(exc_info.value)

    def test_expression_too_long(self):
        with pytest.raises(FormulaSyntaxError):
            tokenize("a" * (MAX_EXPRESSION_LENGTH + 1))
