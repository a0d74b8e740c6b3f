from typing import Optional


class BoxError(Exception):
    """Base class for every error raised while lexing, parsing or running BoxLang."""
    def __init__(self, name: str, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.name = name
        self.message = message
        self.line = line
        self.column = column
        super().__init__(self.describe())

    def describe(self) -> str:
        text = f"{self.name}: {self.message}"
        if self.line is not None:
            text += f" at line {self.line}, column {self.column}"
        return text


class LexError(BoxError):
    """Raised by the tokenizer on the first malformed lexeme."""


class ParseError(BoxError):
    """Raised by the parser on the first grammar violation."""
    def __init__(self, message: str, token=None):
        line = getattr(token, 'line', None)
        column = getattr(token, 'column', None)
        super().__init__('UnexpectedToken', message, line, column)
        self.token = token


class EvalError(BoxError):
    """Raised by the interpreter for binding, type and runtime faults."""
