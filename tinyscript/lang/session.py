"""Session control for the tinyscript language. Runs the lexer, parser, and evaluator over source text, either from a
file or line by line from the interactive shell.
"""

from tinyscript.core.evaluation import Environment, Evaluator
from tinyscript.core.lexical import Lexer
from tinyscript.core.syntax import Parser
from tinyscript.lang.error import GenericException


class Session:
    """Governs a tinyscript session. In command-line mode, variables persist between shell lines; in file mode, the file
    is one program and runs against a fresh Environment.
    """
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, cmd_line, echo=True, show_tokens=False, show_ast=False):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path                # used for error messages
        self.cmd_line = cmd_line        # whether or not in command-line mode
        self.echo = echo                # whether or not printed values go to stdout
        self.show_tokens = show_tokens  # display token stream of each added source
        self.show_ast = show_ast        # display syntax tree of each added source

        self.environment = Environment()  # only shared between runs in command-line mode
        self.to_exec = []                 # list of (source, Program) waiting to be run
        self.results = []                 # every value printed in this session, in order

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r") as file:
                    source = file.read()
            except OSError:
                raise GenericException("'{}' could not be opened", path, diagnosis=False)

            self.add(source)

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

    @staticmethod
    def preprocess_line(line, prev=""):
        """Preprocesses a line from the command-line. prev is the unfinished input from previous lines (if any). Returns
        the updated line and whether or not a line continuation is necessary (braces still open).
        """
        if "//" in line:
            line = line[:line.index("//")]  # get rid of comments

        line = line.rstrip()
        if prev:
            line = prev + "\n" + line

        return line, line.count("{") > line.count("}")

    def add(self, source):
        """Lexes and parses source, queueing the resulting Program. Evaluation is delayed until run is called."""
        self.error_handler.register_source(self.path, source)  # in case error is raised

        if self.show_tokens:
            print(" ".join(Session.display_token(token) for token in Lexer(source)))

        program = Parser(Lexer(source)).parse_program()
        if self.show_ast:
            print(program.display())

        self.to_exec.append((source, program))
        self.error_handler.remove_source(self.path)  # error was not raised

    def run(self):
        """Runs this session's queued programs in order. Will raise any errors that are encountered, leaving values
        printed before the error in self.results.
        """
        while self.to_exec:
            source, program = self.to_exec.pop(0)
            self.error_handler.register_source(self.path, source)

            evaluator = Evaluator(sink=self._emit, error_handler=self.error_handler)
            evaluator.evaluate(program, self.environment if self.cmd_line else None)

            self.error_handler.remove_source(self.path)

    def _emit(self, value):
        """Output sink for the print built-in."""
        self.results.append(value)
        if self.echo:
            print(value)

    @staticmethod
    def display_token(token):
        """Returns compact form of token, e.g. Identifier(x) or Semicolon."""
        if token.value is None:
            return token.kind
        return f"{token.kind}({token.value})"
