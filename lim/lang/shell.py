"""Handles interactive/command-line mode for the lim interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """lim interpreter shell."""
    intro = "lim interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_line = ""
        self._first_line = 1  # line number of the first line of the pending input
        self.line_num = 0

    def default(self, line):
        """Executes arbitrary lim code."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            if not self._tmp_line:
                self._first_line = self.line_num

            source, add_to_prev = self.sess.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = source
                self.prompt = self.secondary_prompt
            else:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                self.sess.add(source, self._first_line)
                self.sess.run()

                if self.sess.results:
                    print(self.sess.pop().inspect())

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the lim interpreter!\n\n"
              "lim is a small statically-flavoured language with integers, booleans, strings, arrays and \n"
              "first-class functions. Statements end at a newline or ';'.\n\n"
              "Try it out by typing 'x := 5'. This binds 5 to the name 'x'. Next, define a function with \n"
              "'fn double(int n) int { return n * 2 }' and call it with 'double(x)', giving 10. \n"
              "Braces, brackets and parentheses left open continue onto the next line.")

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
