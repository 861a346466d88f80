"""Session control for the lim language. Ties the lexer, parser and evaluator together to run lim source, either in
command-line mode or file interpretation mode.
"""

import sys

from lim.lang.error import LimException, LimRuntimeError, ParseFailure
from lim.runtime.environment import Environment
from lim.runtime.evaluator import evaluate
from lim.runtime.objects import NULL, is_error
from lim.syntax.lexer import Lexer
from lim.syntax.parser import Parser
from lim.syntax.tokens import TokenType


class Session:
    """Governs a lim session. Every program added to a session runs in the same global environment."""
    SH_FILE = "<in>"         # command-line interpreter filename
    RECURSION_LIMIT = 10000  # minimum host recursion limit while evaluating

    OPENERS = (TokenType.LPAREN, TokenType.LBRACK, TokenType.LBRACE)
    CLOSERS = (TokenType.RPAREN, TokenType.RBRACK, TokenType.RBRACE)

    def __init__(self, error_handler, path, cmd_line, recursion_limit=None):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode
        self.recursion_limit = recursion_limit  # None: at least RECURSION_LIMIT

        self.env = Environment()  # global scope, lives as long as the session
        self.to_exec = []         # parsed Programs waiting to be run
        self.results = []         # non-null values of the programs run so far

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            try:
                with open(path, "r") as file:
                    source = file.read()
            except OSError:
                raise LimException("'{}' could not be opened", path, diagnosis=False)

            self.add(source)

        elif not cmd_line:
            raise LimException("'<in>' is a reserved filename", diagnosis=False)

    @staticmethod
    def preprocess_line(line, prev=""):
        """Appends line to prev, the unfinished input so far. Returns the joined source and whether it still needs a
        continuation line, i.e. whether a (, [ or { is left open.
        """
        source = prev + line + "\n" if prev else line + "\n"

        depth = 0
        for tok in Lexer(source):
            if tok.type in Session.OPENERS:
                depth += 1
            elif tok.type in Session.CLOSERS:
                depth -= 1

        return source, depth > 0

    def add(self, source, line_num=1):
        """Parses source and queues the resulting Program. Evaluation is delayed until run is called. Raises
        ParseFailure, carrying every lexical and syntactic error, if source is malformed.
        """
        lexer = Lexer(source, first_line=line_num)
        parser = Parser(lexer)
        program = parser.parse_program()

        for warning in lexer.warnings:
            self.error_handler.warn(warning)

        if parser.errors:
            raise ParseFailure(parser.errors, self.path)

        self.to_exec.append(program)
        return program

    def run(self):
        """Evaluates the queued programs in order. Raises LimRuntimeError on the first one that evaluates to an
        error; the programs before it have already taken effect.
        """
        prev_limit = sys.getrecursionlimit()
        if self.recursion_limit is None:
            sys.setrecursionlimit(max(prev_limit, Session.RECURSION_LIMIT))
        else:
            sys.setrecursionlimit(self.recursion_limit)

        try:
            while self.to_exec:
                program = self.to_exec.pop(0)
                result = evaluate(program, self.env)

                if is_error(result):
                    raise LimRuntimeError(result.message)
                if result is not NULL:
                    self.results.append(result)
        finally:
            sys.setrecursionlimit(prev_limit)

    def pop(self):
        """Removes and returns the most recent result."""
        return self.results.pop()
