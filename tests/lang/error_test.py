import io
import re
import unittest
from contextlib import redirect_stdout

from tinyscript.core.syntax import parse
from tinyscript.lang.error import (ErrorHandler, GenericException, LexError, ParseError, UndefinedVariable,
                                   UnknownFunction)


def plain(text):
    """Strips ANSI color codes from text."""
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


class GenericExceptionTestCase(unittest.TestCase):

    def test_messages(self):
        cases = [
            (LexError("#", 3), "unrecognized character '#'"),
            (UndefinedVariable("y"), "'y' is not defined"),
            (UnknownFunction("foo"), "unknown function 'foo'"),
            (GenericException("'{}' could not be opened", "a.tiny"), "'a.tiny' could not be opened"),
        ]
        for error, expected in cases:
            self.assertEqual(expected, str(error))
            self.assertEqual(expected, plain(error.msg))

    def test_parse_error_message(self):
        with self.assertRaises(ParseError) as context:
            parse("let x = 5")
        self.assertEqual("expected ';' but found end of input", str(context.exception))

    def test_fields(self):
        error = UndefinedVariable("total", position=12)
        self.assertEqual("total", error.name)
        self.assertEqual(12, error.position)
        self.assertEqual(5, error.length)


class ErrorHandlerTestCase(unittest.TestCase):

    def test_locate(self):
        source = "let x = 1;\ny = 3;\n"
        cases = {
            0: ("let x = 1;", 1, 0),
            8: ("let x = 1;", 1, 8),
            11: ("y = 3;", 2, 0),
            15: ("y = 3;", 2, 4),
            len(source): ("", 3, 0),
        }
        for position, expected in cases.items():
            self.assertEqual(expected, ErrorHandler.locate(source, position), position)

    def test_diagnose(self):
        self.assertEqual("  let x = #;\n          ^", plain(ErrorHandler.diagnose("let x = #;", 8)))
        self.assertEqual("  y = z;\n      ^", plain(ErrorHandler.diagnose("y = z;", 4)))
        self.assertEqual("  foo(1);\n  ^~~", plain(ErrorHandler.diagnose("foo(1);", 0, 3)))

    def test_throw(self):
        error_handler = ErrorHandler(fatal=False)
        error_handler.register_source("prog.tiny", "let x = 1;\ny = 3;")

        out = io.StringIO()
        with redirect_stdout(out):
            error_handler.throw(UndefinedVariable("y", position=11))

        lines = plain(out.getvalue()).splitlines()
        self.assertEqual("prog.tiny:2:1: error: 'y' is not defined", lines[0])
        self.assertEqual(["  y = 3;", "  ^"], lines[1:])

    def test_throw_without_position(self):
        out = io.StringIO()
        with redirect_stdout(out):
            ErrorHandler(fatal=False).throw(GenericException("keyboard interrupt"))
        self.assertEqual("error: keyboard interrupt\n", plain(out.getvalue()))

    def test_throw_fatal(self):
        with redirect_stdout(io.StringIO()):
            with self.assertRaises(SystemExit) as context:
                ErrorHandler().throw(GenericException("boom"))
        self.assertEqual(1, context.exception.code)

    def test_warn(self):
        error_handler = ErrorHandler()
        error_handler.register_source("<in>", "let x = 1;")

        out = io.StringIO()
        with redirect_stdout(out):
            error_handler.warn("'{}' redeclared", "x", position=0)

        self.assertTrue(plain(out.getvalue()).startswith("<in>:1:1: warning: 'x' redeclared"))

    def test_removed_source_has_no_location(self):
        error_handler = ErrorHandler(fatal=False)
        error_handler.register_source("prog.tiny", "y = 3;")
        error_handler.remove_source("prog.tiny")

        out = io.StringIO()
        with redirect_stdout(out):
            error_handler.throw(UndefinedVariable("y", position=0))
        self.assertEqual("error: 'y' is not defined\n", plain(out.getvalue()))

    def test_context_manager_suppresses_generic_exceptions(self):
        out = io.StringIO()
        with redirect_stdout(out):
            with ErrorHandler(fatal=False):
                raise UnknownFunction("foo")
        self.assertIn("error: unknown function 'foo'", plain(out.getvalue()))

    def test_context_manager_reraises_internal_errors(self):
        out = io.StringIO()
        with redirect_stdout(out):
            with self.assertRaises(ValueError):
                with ErrorHandler(fatal=False):
                    raise ValueError("{not a template}")
        self.assertIn("[internal] error: unknown error: 'ValueError: {not a template}'", plain(out.getvalue()))

    def test_context_manager_keyboard_interrupt(self):
        out = io.StringIO()
        with redirect_stdout(out):
            with ErrorHandler(fatal=False):
                raise KeyboardInterrupt
        self.assertIn("error: keyboard interrupt", plain(out.getvalue()))

    def test_context_manager_passes_system_exit(self):
        with self.assertRaises(SystemExit):
            with ErrorHandler(fatal=False):
                raise SystemExit(0)


if __name__ == '__main__':
    unittest.main()
