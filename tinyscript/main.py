"""Uses implementation of the tinyscript language to interpret source files/run in command-line mode. Also uses error
handling context manager. Installed as the tinyscript executable.
"""

import argparse

from tinyscript.lang.error import ErrorHandler
from tinyscript.lang.shell import Shell
from tinyscript.lang.session import Session


def main():
    """Runs tinyscript interpreter. Called from tinyscript executable."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="tinyscript")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("--tokens", help="display the token stream of the source", action="store_true")
        parser.add_argument("--ast", help="display the syntax tree of the source", action="store_true")
        args = parser.parse_args()

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, show_tokens=args.tokens, show_ast=args.ast)
            sess.run()

        else:
            sess = Session(error_handler, Session.SH_FILE, cmd_line=True, show_tokens=args.tokens, show_ast=args.ast)
            Shell(sess).cmdloop()


if __name__ == "__main__":
    main()
