"""Error handling for the lim language. Only LimExceptions should be encountered during running: if another type of
error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Lexical and syntactic problems are collected as LimException values by the lexer and parser instead of being raised
out of them, so a single run can report every problem in a source file. Runtime problems live inside the evaluator as
Error objects and are only turned into a LimRuntimeError by the session.
"""

import sys

from termcolor import colored


class LimException(Exception):
    """Templates an error/warning message so that it can be used to report a lim error/warning. msg is a str.format
    template whose slots are filled with exprs (bolded when printed). source is the offending source line, and start/end
    delimit the offending columns within it.
    """

    def __init__(self, msg, exprs=None, source=None, line=0, start=0, end=-1, diagnosis=True, internal=False):
        if exprs is None:
            exprs = []
        if isinstance(exprs, str):
            exprs = [exprs]

        self.text = msg.format(*exprs)                                             # plain message
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = source if source is not None else (exprs[0] if exprs else "")
        self.end = end if end != -1 else len(self.expr)  # needed for error display

        self.line = line
        self.start = start
        self.diagnosis = diagnosis
        self.internal = internal

        super().__init__(self.text)

    @property
    def col(self):
        return self.start

    def location(self, path):
        """Returns 'path:line:col' (1-based column), or just path if the error has no position."""
        if not self.line:
            return path
        return f"{path}:{self.line}:{self.start + 1}"


class LexicalError(LimException):
    """Malformed input found by the lexer (illegal character, number-led identifier, unterminated literal)."""


class ParseError(LimException):
    """Unmet grammar expectation found by the parser."""


class ParseFailure(LimException):
    """Wraps every diagnostic of a source text that could not be parsed."""

    def __init__(self, errors, path=""):
        self.errors = list(errors)
        count = len(self.errors)
        super().__init__("could not parse {}: " + f"{count} error{'s' if count != 1 else ''}", path or "<input>",
                         diagnosis=False)


class LimRuntimeError(LimException):
    """An evaluation that ended in an Error object."""

    def __init__(self, message):
        super().__init__(message.replace("{", "{{").replace("}", "}}"), diagnosis=False)


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report lim errors/warnings instead."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.path = "<input>"

    def register_file(self, path):
        """Registers path as the origin of subsequent diagnostics."""
        self.path = path

    @staticmethod
    def diagnose(error, warning=False):
        """Returns offending line of error.expr with the offending part highlighted and a caret underneath."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        diagnosis = "  " + error.expr[:error.start]

        end = max(error.end, error.start + 1)
        diagnosis += colored(error.expr[error.start:end], color, attrs=["bold"])
        diagnosis += error.expr[end:] + "\n"

        diagnosis += "  " + " " * error.start
        diagnosis += colored("^" + "~" * (end - error.start - 1), color, attrs=["bold"])

        return diagnosis

    def format(self, error, warning=False):
        """Returns the full text of a diagnostic: location, severity, message and (if available) the caret line."""
        if warning:
            label = colored("warning: ", ErrorHandler.WARNING, attrs=["bold"])
        else:
            label = colored("error: ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg = colored(f"{error.location(self.path)}: ", attrs=["bold"]) if error.line else ""
        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
        error_msg += label + error.msg

        if not error.internal and error.expr and error.diagnosis:
            error_msg += "\n" + ErrorHandler.diagnose(error, warning)

        return error_msg

    def warn(self, error):
        """Prints a warning diagnostic; never exits."""
        print(self.format(error, warning=True))

    def throw(self, error):
        """Prints error (and every diagnostic it wraps) and exits if this handler is fatal."""
        for wrapped in getattr(error, "errors", []):
            print(self.format(wrapped))

        print(self.format(error))

        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(LimException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(LimException("maximum recursion depth exceeded during evaluation"))
        elif exc_type is not None and issubclass(exc_type, LimException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(LimException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            do_exit = True

        return not do_exit
