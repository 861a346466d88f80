"""Runs .lim files or the interactive shell. Also uses the error handling context manager. Called from the lim
console script.
"""

import argparse
import os

from lim.lang.error import ErrorHandler
from lim.lang.session import Session
from lim.lang.shell import Shell


def main(argv=None):
    """Runs the lim interpreter. Called from the lim console script."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="lim")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        parser.add_argument("--ast", action="store_true", help="print the parsed program instead of running it")
        parser.add_argument("--recursion-limit", type=int, default=None, metavar="N",
                            help="recursion limit of the host interpreter while evaluating")
        parser.add_argument("--no-color", action="store_true", help="disable colored diagnostics")
        args = parser.parse_args(argv)

        if args.no_color:
            os.environ["ANSI_COLORS_DISABLED"] = "1"

        if args.file is not None:
            sess = Session(error_handler, args.file, cmd_line=False, recursion_limit=args.recursion_limit)

            if args.ast:
                for program in sess.to_exec:
                    print(program)
            else:
                sess.run()

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True,
                          recursion_limit=args.recursion_limit)).cmdloop()


if __name__ == "__main__":
    main()
