"""Abstract syntax tree and recursive descent parser for tinyscript.

Formally, tinyscript grammar can be defined as

```
<program>   ::= <stmt>* <end>
<stmt>      ::= "let" <ident> "=" <expr> ";"                   ; VariableDeclaration
              | <ident> "=" <expr> ";"                         ; Assignment (name must already be declared)
              | "if" <expr> <block> [ "else" <block> ]         ; IfElse (non-zero condition selects the first block)
              | "while" <expr> <block>                         ; WhileLoop
              | <name> "(" <expr> ")" ";"                      ; FunctionCall (<name> is an <ident> or <builtin>)
<block>     ::= "{" <stmt>* "}"
<expr>      ::= <term> [ ( "+" | "==" | "<" ) <term> ]         ; at most one operator: "a + b + c" is rejected
<term>      ::= <integer> | <ident>
```

Every production is chosen by at most two tokens of lookahead, so there is no backtracking. Parsing is all or nothing:
the first mismatch raises a ParseError and no partial tree is returned.
"""

from dataclasses import dataclass, field, fields
from typing import List

from tinyscript.core.lexical import Lexer, Token
from tinyscript.lang.error import ParseError


OPERATORS = {
    "Plus": "+",
    "EqualsEquals": "==",
    "LessThan": "<",
}


class Node:
    """Superclass for every AST node. Subclasses are dataclasses whose position field (offset of the token the node
    starts at) is left out of equality and repr.
    """

    def display(self, indents=0):
        """Recursively displays node with readable format. Blocks are expanded one statement per line.

        Format:
        <Node>(<attr>=<expr>, ..., <block>=[
            <Node>(...),
            ...
        ])
        """
        padding = "    " * indents
        attrs = []
        blocks = []
        for attr in fields(self):
            if not attr.repr:
                continue
            value = getattr(self, attr.name)
            if isinstance(value, list):
                blocks.append((attr.name, value))
            else:
                attrs.append(f"{attr.name}={value!r}")

        result = f"{padding}{type(self).__name__}({', '.join(attrs)}"
        for idx, (name, block) in enumerate(blocks):
            if attrs or idx:
                result += ", "
            result += f"{name}=["
            if block:
                result += "\n" + ",\n".join(stmt.display(indents + 1) for stmt in block) + f"\n{padding}"
            result += "]"
        return result + ")"

    def __str__(self):
        return self.display()


class Statement(Node):
    pass


class Expression(Node):
    pass


@dataclass
class Literal(Expression):
    value: int
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class VariableReference(Expression):
    name: str
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class BinaryOp(Expression):
    op: str  # one of OPERATORS.values()
    left: Expression
    right: Expression
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class VariableDeclaration(Statement):
    name: str
    initializer: Expression
    position: int = field(default=0, compare=False, repr=False)
    name_position: int = field(default=0, compare=False, repr=False)


@dataclass
class Assignment(Statement):
    name: str
    expression: Expression
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class IfElse(Statement):
    condition: Expression
    then_branch: List[Statement]
    else_branch: List[Statement] = field(default_factory=list)
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class WhileLoop(Statement):
    condition: Expression
    body: List[Statement]
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class FunctionCall(Statement):
    name: str
    arguments: List[Expression]
    position: int = field(default=0, compare=False, repr=False)


@dataclass
class Program(Node):
    """Top-level sequence of statements. Can be evaluated any number of times."""
    statements: List[Statement] = field(default_factory=list)

    def __iter__(self):
        return iter(self.statements)

    def __len__(self):
        return len(self.statements)


class Parser:
    """Recursive descent parser over any iterable of Tokens (usually a Lexer). Tokens are pulled lazily, so a LexError
    surfaces from whichever parse method first needs the bad token.
    """
    DESCRIPTIONS = {
        "Identifier": "identifier",
        "IntegerLiteral": "integer",
        "Builtin": "built-in name",
        "EndOfInput": "end of input",
    }

    def __init__(self, tokens):
        self._tokens = iter(tokens)
        self._lookahead = []
        self._last = Token("EndOfInput")  # repeated if the stream runs dry

    @classmethod
    def describe(cls, kind):
        """Returns readable description of a token kind, used as ParseError.expected."""
        return cls.DESCRIPTIONS.get(kind, f"'{Token(kind).text}'")

    def _peek(self, offset=0):
        """Returns token offset places past the current one without consuming anything."""
        while len(self._lookahead) <= offset:
            self._last = next(self._tokens, self._last)
            self._lookahead.append(self._last)
        return self._lookahead[offset]

    def _advance(self):
        self._peek()
        return self._lookahead.pop(0)

    def _expect(self, kind, expected=None):
        """Consumes and returns current token if it is of kind, otherwise raises ParseError."""
        token = self._peek()
        if token.kind != kind:
            raise ParseError(expected if expected else Parser.describe(kind), token)
        return self._advance()

    def parse_program(self):
        """Parses statements until end of input."""
        statements = []
        while self._peek().kind != "EndOfInput":
            statements.append(self.parse_statement())
        self._expect("EndOfInput")
        return Program(statements)

    def parse_statement(self):
        """Picks the statement production from the current token (and the one after it, for names)."""
        token = self._peek()

        if token.kind == "Let":
            return self._parse_declaration()
        elif token.kind == "If":
            return self._parse_if_else()
        elif token.kind == "While":
            return self._parse_while_loop()
        elif token.kind in ("Identifier", "Builtin"):
            following = self._peek(1)
            if token.kind == "Identifier" and following.kind == "Equals":
                return self._parse_assignment()
            elif following.kind == "LeftParen":
                return self._parse_function_call()

            expected = "'=' or '('" if token.kind == "Identifier" else "'('"
            raise ParseError(expected, following)

        raise ParseError("statement", token)

    def parse_expression(self):
        """Parses a term, optionally followed by a single operator and another term."""
        left = self._parse_term()

        if self._peek().kind in OPERATORS:
            op = OPERATORS[self._advance().kind]
            right = self._parse_term()
            return BinaryOp(op, left, right, position=left.position)
        return left

    def _parse_term(self):
        token = self._peek()

        if token.kind == "IntegerLiteral":
            self._advance()
            return Literal(token.value, position=token.position)
        elif token.kind == "Identifier":
            self._advance()
            return VariableReference(token.value, position=token.position)

        raise ParseError("integer or identifier", token)

    def _parse_block(self):
        """Parses "{" <stmt>* "}" and returns the statements as a list."""
        self._expect("LeftBrace")
        statements = []
        while self._peek().kind not in ("RightBrace", "EndOfInput"):
            statements.append(self.parse_statement())
        self._expect("RightBrace")
        return statements

    def _parse_declaration(self):
        start = self._expect("Let")
        name = self._expect("Identifier")
        self._expect("Equals")
        initializer = self.parse_expression()
        self._expect("Semicolon")
        return VariableDeclaration(name.value, initializer, position=start.position, name_position=name.position)

    def _parse_assignment(self):
        start = self._expect("Identifier")
        self._expect("Equals")
        expression = self.parse_expression()
        self._expect("Semicolon")
        return Assignment(start.value, expression, position=start.position)

    def _parse_function_call(self):
        start = self._advance()  # Identifier or Builtin, checked by parse_statement
        self._expect("LeftParen")
        argument = self.parse_expression()
        self._expect("RightParen")
        self._expect("Semicolon")
        return FunctionCall(start.value, [argument], position=start.position)

    def _parse_if_else(self):
        start = self._expect("If")
        condition = self.parse_expression()
        then_branch = self._parse_block()

        else_branch = []
        if self._peek().kind == "Else":
            self._advance()
            else_branch = self._parse_block()

        return IfElse(condition, then_branch, else_branch, position=start.position)

    def _parse_while_loop(self):
        start = self._expect("While")
        condition = self.parse_expression()
        body = self._parse_block()
        return WhileLoop(condition, body, position=start.position)


def parse(source):
    """Lexes and parses source in one go. Returns a Program."""
    return Parser(Lexer(source)).parse_program()
