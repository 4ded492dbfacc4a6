"""Handles interactive/command-line mode for tinyscript interpreter. Uses cmd as backend."""

import cmd

from tinyscript.lang.session import Session


class Shell(cmd.Cmd):
    """tinyscript interpreter shell."""
    intro = "tinyscript interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continutations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations
    commands = ["help", "?", "exit", "EOF"]  # only looked up when typed alone

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""

    def parseline(self, line):
        """Only a bare shell command is dispatched as a command, since names like exit are also valid variables.
        Everything else, including any line typed while a block is still open, goes to default. EOF always exits.
        """
        line = line.strip()
        if line == "EOF" or (not self._tmp_line and line in Shell.commands):
            return super().parseline(line)
        return None, None, line

    def default(self, line):
        """Executes arbitrary tinyscript statements."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line, add_to_prev = Session.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt

            if line.strip():
                self.sess.add(line)
                self.sess.run()

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the tinyscript interpreter!\n\n"
              "tinyscript is a tiny imperative language: integer variables, '+', '==' and '<',\n"
              "if/else, while loops, and the print built-in. Variables you declare stay around\n"
              "until you exit.\n\n"
              "Try it out by typing 'let x = 0;' and then 'while x < 3 { x = x + 1; print(x); }'.\n"
              "A line with unclosed '{' continues on the next line, so type '} else {' on one line:\n"
              "an if block whose '}' closes the line runs right away.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
