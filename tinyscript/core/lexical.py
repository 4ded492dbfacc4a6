"""Lexical analysis for tinyscript: converts source text into a stream of Tokens.

Tokens are loosely defined as follows:

```
<keyword>    ::= "let" | "if" | "else" | "while"
<builtin>    ::= "print"                              ; built-in function names are reserved
<identifier> ::= [A-Za-z_] [A-Za-z0-9_]*              ; anything that isn't a keyword or builtin
<integer>    ::= "-"? [0-9]+                          ; "-" only counts if a digit follows right away
<operator>   ::= "==" | "=" | "<" | "+"               ; "==" is matched before "="
<punctuator> ::= "{" | "}" | "(" | ")" | ";"

<comment>    ::= "//" <char>*                         ; runs to end of line
```

Whitespace and comments are skipped. Anything else is a LexError.
"""

from dataclasses import dataclass, field

from tinyscript.lang.error import LexError


KEYWORDS = {
    "let": "Let",
    "if": "If",
    "else": "Else",
    "while": "While",
}

BUILTINS = ["print"]

DOUBLE_CHAR_TOKENS = {
    "==": "EqualsEquals",
}

SINGLE_CHAR_TOKENS = {
    "=": "Equals",
    "<": "LessThan",
    "+": "Plus",
    "{": "LeftBrace",
    "}": "RightBrace",
    "(": "LeftParen",
    ")": "RightParen",
    ";": "Semicolon",
}

SYMBOLS = {kind: char for char, kind in {**DOUBLE_CHAR_TOKENS, **SINGLE_CHAR_TOKENS}.items()}


@dataclass
class Token:
    """One lexical unit. value holds the name of Identifier/Builtin tokens and the int of IntegerLiteral tokens."""
    kind: str
    value: object = None
    position: int = field(default=0, compare=False)

    @property
    def text(self):
        """Source text this token was read from."""
        if self.kind == "EndOfInput":
            return ""
        elif self.value is not None:
            return str(self.value)
        elif self.kind in SYMBOLS:
            return SYMBOLS[self.kind]
        return next(word for word, kind in KEYWORDS.items() if kind == self.kind)

    def __str__(self):
        if self.kind == "EndOfInput":
            return "end of input"
        elif self.kind == "Identifier":
            return f"identifier '{self.value}'"
        elif self.kind == "IntegerLiteral":
            return f"integer {self.value}"
        return f"'{self.text}'"


class Lexer:
    """Lazy token stream over source. Every iteration starts over from the beginning of source and ends with exactly
    one EndOfInput token.
    """

    def __init__(self, source):
        self.source = source

    def __iter__(self):
        source = self.source
        position = 0

        while True:
            position = self._skip_ignored(position)
            if position >= len(source):
                break

            char = source[position]

            if char.isalpha() or char == "_":
                end = position + 1
                while end < len(source) and (source[end].isalnum() or source[end] == "_"):
                    end += 1
                word = source[position:end]

                if word in KEYWORDS:
                    yield Token(KEYWORDS[word], position=position)
                elif word in BUILTINS:
                    yield Token("Builtin", word, position)
                else:
                    yield Token("Identifier", word, position)
                position = end

            elif char.isdecimal() or (char == "-" and source[position + 1:position + 2].isdecimal()):
                end = position + 1
                while end < len(source) and source[end].isdecimal():
                    end += 1
                yield Token("IntegerLiteral", int(source[position:end]), position)
                position = end

            elif source[position:position + 2] in DOUBLE_CHAR_TOKENS:
                yield Token(DOUBLE_CHAR_TOKENS[source[position:position + 2]], position=position)
                position += 2

            elif char in SINGLE_CHAR_TOKENS:
                yield Token(SINGLE_CHAR_TOKENS[char], position=position)
                position += 1

            else:
                raise LexError(char, position)

        yield Token("EndOfInput", position=len(source))

    def _skip_ignored(self, position):
        """Returns the first position at or after position that isn't whitespace or part of a comment."""
        source = self.source
        while position < len(source):
            if source[position].isspace():
                position += 1
            elif source.startswith("//", position):
                end = source.find("\n", position)
                position = len(source) if end == -1 else end
            else:
                break
        return position

    def tokens(self):
        """Returns every token in source as a list."""
        return list(self)
