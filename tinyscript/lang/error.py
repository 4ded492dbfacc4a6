"""Error handling for the tinyscript language. Only GenericExceptions should be encountered during running: if another
type of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Errors raised by the interpreter fall into three kinds, all of which abort the operation that raised them:
    1. LexError: a character in the source that no token starts with
    2. ParseError: the token stream doesn't match the grammar production being parsed
    3. ScriptRuntimeError: raised during evaluation (UndefinedVariable, UnknownFunction)
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a tinyscript error/warning. position is the
    offset of the offending text in the source that is currently registered with the ErrorHandler (None if unknown).
    """

    def __init__(self, msg, exprs=None, position=None, length=1, diagnosis=True, internal=False):
        """Parses args for GenericException or warning."""
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        super().__init__(msg.format(*exprs))
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = exprs[0]  # exprs[0] should be the offending expr that caused the error

        self.position = position
        self.length = length
        self.diagnosis = diagnosis
        self.internal = internal


class LexError(GenericException):
    """Raised when the lexer meets a character that doesn't start any token."""

    def __init__(self, character, position):
        self.character = character
        super().__init__("unrecognized character '{}'", character, position=position)


class ParseError(GenericException):
    """Raised when the token stream doesn't match the grammar. expected is a description of what the parser wanted and
    found is the Token it got instead.
    """

    def __init__(self, expected, found):
        self.expected = expected
        self.found = found
        super().__init__("expected {} but found {}", (expected, str(found)), position=found.position,
                         length=max(len(found.text), 1))


class ScriptRuntimeError(GenericException):
    """Superclass for errors raised while evaluating a parsed program."""

    def __init__(self, msg, name, position=None):
        self.name = name
        super().__init__(msg, name, position=position, length=len(name))


class UndefinedVariable(ScriptRuntimeError):
    """Reference to, or assignment of, a variable that was never declared with let."""

    def __init__(self, name, position=None):
        super().__init__("'{}' is not defined", name, position)


class UnknownFunction(ScriptRuntimeError):
    """Call to a name that isn't a built-in function."""

    def __init__(self, name, position=None):
        super().__init__("unknown function '{}'", name, position)


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom tinyscript errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.sources = {}  # dict of path: source text currently being run from that path

    def register_file(self, path):
        """Registers path with no source attached yet."""
        self.sources[path] = None

    def register_source(self, path, source):
        """Registers source text under path. Should be called prior to lexing/parsing/running source."""
        self.sources[path] = source

    def remove_source(self, path):
        """Detaches source text from path. Should be called after source ran without errors."""
        self.sources[path] = None

    @staticmethod
    def locate(source, position):
        """Returns (line, line_num, col) of position in source. line_num is 1-indexed, col is 0-indexed."""
        position = max(0, min(position, len(source)))

        line_start = source.rfind("\n", 0, position) + 1
        line_end = source.find("\n", position)
        if line_end == -1:
            line_end = len(source)

        return source[line_start:line_end], source.count("\n", 0, position) + 1, position - line_start

    @staticmethod
    def diagnose(line, col, length=1, warning=False):
        """Returns line with the offending part highlighted and bolded, followed by a caret underline."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR
        end = max(col + length, col + 1)

        diagnosis = "  " + line[:col]
        diagnosis += colored(line[col:end], color, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * col
        diagnosis += colored("^" + "~" * (end - col - 1), color, attrs=["bold"])

        return diagnosis

    def _location(self, error):
        """Returns (path, line, line_num, col) of error in the most recently registered source, or None."""
        if error.position is None:
            return None

        for path, source in reversed(list(self.sources.items())):
            if source is not None:
                return (path, *self.locate(source, error.position))
        return None

    def _report(self, error, label, color):
        """Builds and prints the message for error, including its diagnosis if one can be made."""
        location = self._location(error)

        report = ""
        if location is not None:
            path, line, line_num, col = location
            report += colored(f"{path}:{line_num}:{col + 1}: ", attrs=["bold"])

        if error.internal:
            report += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        report += colored(f"{label}: ", color, attrs=["bold"]) + error.msg
        print(report)

        if location is not None and not error.internal and error.diagnosis:
            print(ErrorHandler.diagnose(line, col, error.length, warning=color == ErrorHandler.WARNING))

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args."""
        self._report(GenericException(*args, **kwargs), "warning", ErrorHandler.WARNING)

    def throw(self, error):
        """Throws error, which must be a GenericException. Exits the interpreter if this handler is fatal."""
        self._report(error, "error", ErrorHandler.ERROR)

        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum block nesting depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit
