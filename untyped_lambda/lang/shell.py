"""Handles interactive/command-line mode for the untyped lambda interpreter. Uses cmd as backend."""

import cmd

from untyped_lambda.pure.bindings import BindingTable
from untyped_lambda.pure.parser import parse_all


class Shell(cmd.Cmd):
    """Untyped lambda calculus interpreter shell."""
    intro = "Untyped lambda calculus interpreter :: Python backend\nType '?' or 'help' for more information."
    prompt = "> "

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self.line_num = 0

    def default(self, line):
        """Parses and evaluates arbitrary formulas."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.line_num += 1
            self.sess.add(line, self.line_num)
            self.sess.run()

    def _as_formula(self, name, arg):
        """Commands followed by anything are formulas that happen to start with the command's name."""
        self.default(f"{name} {arg}")
        return False

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        if arg:
            return self._as_formula("help", arg)
        print("Welcome to the untyped lambda calculus interpreter!\n\n"
              "Formulas are variables, lambdas such as '\\x y. x' (or '/x y. x'), and applications\n"
              "written by juxtaposition. Several formulas on one line are separated by '.', and\n"
              "'(* ... *)' is a comment.\n\n"
              "Try it out by typing 'id = \\x. x'. This will bind the lambda term '\\x. x' to the\n"
              "name 'id'. Next, try typing 'id y'. This will apply 'id' to 'y', giving 'y' as the\n"
              "result.\n\n"
              "Commands: 'bindings' lists bound names, 'reset' forgets them, 'tree FORMULA' shows\n"
              "the syntax tree of FORMULA, 'exit' or 'quit' leaves.\n\n"
              "Only results are shown unless the interpreter was started with -s (--step): then\n"
              "every rewrite is printed and waits for enter ('c' runs to the end, 'q' gives up).")

    def do_bindings(self, arg):
        """Lists every name bound in this session."""
        if arg:
            return self._as_formula("bindings", arg)
        for name, term in self.sess.namespace.items():
            print(f"{name} = {term}.")

    def do_reset(self, arg):
        """Forgets every binding."""
        if arg:
            return self._as_formula("reset", arg)
        self.sess.reset()

    def do_tree(self, arg):
        """Displays the syntax tree of each formula in arg, without binding or evaluating anything."""
        if not arg:
            return self._as_formula("tree", arg)
        with self.sess.error_handler:
            for statement in parse_all(arg, BindingTable()):
                print(statement.term.display())

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        if arg:
            return self._as_formula("exit", arg)
        return True

    def do_quit(self, arg):
        """Exits interpreter."""
        if arg:
            return self._as_formula("quit", arg)
        return True
