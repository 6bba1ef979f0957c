import pytest

from dslc.lexer import Lexer, Token, TokenType, tokenize


def types(source):
    return [t.type for t in tokenize(source)]


def values(source):
    return [t.value for t in tokenize(source)[:-1]]


def test_empty_source_gives_only_eof():
    tokens = tokenize("")
    assert len(tokens) == 1
    assert tokens[0].type is TokenType.EOF
    assert tokens[0].value == ""


def test_function_header():
    assert types("fn main() -> i32 { return 0; }") == [
        TokenType.FN,
        TokenType.IDENTIFIER,
        TokenType.LPAREN,
        TokenType.RPAREN,
        TokenType.ARROW,
        TokenType.I32,
        TokenType.LBRACE,
        TokenType.RETURN,
        TokenType.INT_LITERAL,
        TokenType.SEMICOLON,
        TokenType.RBRACE,
        TokenType.EOF,
    ]


@pytest.mark.parametrize(
    ("word", "kind"),
    [
        ("fn", TokenType.FN),
        ("let", TokenType.LET),
        ("return", TokenType.RETURN),
        ("if", TokenType.IF),
        ("else", TokenType.ELSE),
        ("while", TokenType.WHILE),
        ("for", TokenType.FOR),
        ("true", TokenType.TRUE),
        ("false", TokenType.FALSE),
        ("i32", TokenType.I32),
        ("i64", TokenType.I64),
        ("f32", TokenType.F32),
        ("f64", TokenType.F64),
        ("bool", TokenType.BOOL),
        ("void", TokenType.VOID),
        ("main", TokenType.IDENTIFIER),
        ("_tmp1", TokenType.IDENTIFIER),
        ("fnx", TokenType.IDENTIFIER),
    ],
)
def test_words(word, kind):
    tokens = tokenize(word)
    assert tokens[0] == Token(kind, word, 1, 1)


@pytest.mark.parametrize(
    ("text", "kind"),
    [
        ("+", TokenType.PLUS),
        ("-", TokenType.MINUS),
        ("*", TokenType.STAR),
        ("/", TokenType.SLASH),
        ("%", TokenType.MOD),
        ("==", TokenType.EQ),
        ("!=", TokenType.NE),
        ("<", TokenType.LT),
        ("<=", TokenType.LE),
        (">", TokenType.GT),
        (">=", TokenType.GE),
        ("&&", TokenType.AND),
        ("||", TokenType.OR),
        ("!", TokenType.NOT),
        ("=", TokenType.ASSIGN),
        ("->", TokenType.ARROW),
        (",", TokenType.COMMA),
        (":", TokenType.COLON),
    ],
)
def test_operators(text, kind):
    token = tokenize(text)[0]
    assert token.type is kind
    assert token.value == text


@pytest.mark.parametrize("text", ["&", "|"])
def test_lone_and_or_are_errors(text):
    token = tokenize(text)[0]
    assert token.type is TokenType.ERROR
    assert token.value == text


def test_numbers():
    tokens = tokenize("42 3.14")
    assert (tokens[0].type, tokens[0].value) == (TokenType.INT_LITERAL, "42")
    assert (tokens[1].type, tokens[1].value) == (TokenType.FLOAT_LITERAL, "3.14")


def test_number_takes_only_one_dot():
    tokens = tokenize("1.2.3")
    assert tokens[0].type is TokenType.FLOAT_LITERAL
    assert tokens[0].value == "1.2"
    assert tokens[1].type is TokenType.ERROR


def test_unexpected_character_is_reported(capsys):
    tokens = tokenize("@x")
    assert tokens[0].type is TokenType.ERROR
    assert tokens[0].value == "Unexpected character: @"
    assert tokens[1].type is TokenType.IDENTIFIER
    assert "[ERROR] Unexpected character: @" in capsys.readouterr().out


def test_comments_are_skipped():
    assert values("// a comment\nlet // trailing\nx") == ["let", "x"]


def test_comment_at_end_of_input():
    assert types("x // done") == [TokenType.IDENTIFIER, TokenType.EOF]


def test_slash_alone_is_division():
    assert types("a / b") == [
        TokenType.IDENTIFIER,
        TokenType.SLASH,
        TokenType.IDENTIFIER,
        TokenType.EOF,
    ]


def test_line_tracking_across_newlines():
    tokens = tokenize("a\nb")
    assert (tokens[0].line, tokens[0].column) == (1, 1)
    assert (tokens[1].line, tokens[1].column) == (2, 1)


def test_columns_increase_on_a_line():
    tokens = tokenize("let x: i32 = 1;")[:-1]
    assert all(t.line == 1 for t in tokens)
    columns = [t.column for t in tokens]
    assert columns == sorted(columns)
    assert len(set(columns)) == len(columns)


def test_token_columns_point_at_their_text():
    source = "fn add(a: i32, b: i32) -> i32 { return a + b; }"
    for token in tokenize(source)[:-1]:
        start = token.column - 1
        assert source[start:start + len(token.value)] == token.value


def test_tokenize_ends_with_exactly_one_eof():
    tokens = tokenize("let y: f64 = 2.5;")
    eofs = [t for t in tokens if t.type is TokenType.EOF]
    assert eofs == [tokens[-1]]


def test_next_token_keeps_returning_eof():
    lexer = Lexer("x")
    assert lexer.next_token().type is TokenType.IDENTIFIER
    assert lexer.next_token().type is TokenType.EOF
    assert lexer.next_token().type is TokenType.EOF


def test_method_and_function_agree():
    source = "fn f(a: bool) -> bool { return !a; }"
    assert Lexer(source).tokenize() == tokenize(source)