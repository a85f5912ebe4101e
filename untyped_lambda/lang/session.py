"""Session control for the untyped lambda interpreter, either in command-line mode or file interpretation mode.

A session owns the binding table. Statements are parsed as soon as they are added (which binds names right away) and
evaluated lazily by run. Output formats:

```
file mode, -b (default)      file mode, -o        file mode, -s          command-line mode
<formula>                    <result>.            <formula>               = <step>.
-> <result>.                                      <wait>                  = <result>.
                                                  <step>.
                                                  <wait>
                                                  -> <result>.
```

Steps are only shown with step mode on. After each one the session waits for a signal: "c" runs the statement to
completion, "q" abandons it, anything else shows the next step.
"""

import os
import sys

from untyped_lambda.lang.error import GenericException, NoFileExist, OpenFileError
from untyped_lambda.pure.bindings import BindingTable
from untyped_lambda.pure.parser import parse_all
from untyped_lambda.pure.reducer import NormalOrderReducer


def read_signal():
    """Blocks until a line is read from stdin and returns its first character. End of input means "c"."""
    line = sys.stdin.readline()
    return line[:1] if line else Session.CONTINUE


class Session:
    """Governs a session, with control over the scope of bindings."""
    SH_FILE = "<in>"  # command-line interpreter filename

    BEFORE = "before"  # show each formula before its result
    ONLY = "only"      # show results only

    CONTINUE = "c"  # signal: run to completion
    QUIT = "q"      # signal: abandon the statement

    _STEP, _RUN, _STOP = range(3)

    def __init__(self, error_handler, path, cmd_line, show=BEFORE, step=False, max_steps=None, hygienic=False,
                 wait=read_signal):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path          # used for error messages
        self.cmd_line = cmd_line  # whether or not in command-line mode

        self.show = show
        self.step = step
        self.max_steps = max_steps
        self.hygienic = hygienic
        self.wait = wait

        self.namespace = BindingTable()  # names bound in the current session
        self.to_exec = []                # expression statements waiting to be evaluated
        self.results = []                # rendered results, in evaluation order

        if self.cmd_line:
            self.error_handler.fatal = False

        if path != Session.SH_FILE:
            self.add(Session.read_file(path))

        elif not cmd_line:
            raise GenericException("'<in>' is a reserved filename")

    @staticmethod
    def read_file(path):
        """Returns the contents of path. Raises NoFileExist or OpenFileError."""
        if not os.path.exists(path):
            raise NoFileExist(path)

        try:
            with open(path, "r", encoding="utf-8") as file:
                return file.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise OpenFileError(path, getattr(exc, "strerror", None) or exc)

    def add(self, source, line_num=1):
        """Parses source and queues its expression statements. Bindings take effect immediately. Beta-reduction is
        lazy and is delayed until run is called.
        """
        if self.cmd_line:
            self.error_handler.register_line(self.path, source.strip(), line_num)  # in case error is raised

        for statement in parse_all(source, self.namespace):
            if not statement.is_binding:
                self.to_exec.append(statement)

        self.error_handler.remove_line(self.path)  # error was not raised

    def run(self):
        """Runs this session's queued statements, printing as it goes. Will raise any errors that are encountered."""
        while self.to_exec:
            statement = self.to_exec.pop(0)
            self.error_handler.register_line(self.path, statement.text, statement.line)

            result = self.evaluate(statement)
            self.results.append(result)

            if self.cmd_line:
                print(f" = {result}.")
            elif self.show == Session.BEFORE or self.step:
                print(f"-> {result}.")
            else:
                print(f"{result}.")

            self.error_handler.remove_line(self.path)

    def evaluate(self, statement):
        """Resolves the global names of statement, reduces it and returns the rendered result."""
        term, __ = statement.term.replace({}, self.namespace)
        reducer = NormalOrderReducer(term, self.namespace, self.hygienic)

        mode = Session._STEP if self.step else Session._RUN
        if not self.cmd_line and (self.show == Session.BEFORE or self.step):
            print(statement.term)
            if self.step:
                mode = self._resume()

        while mode != Session._STOP:
            if self.max_steps is not None and reducer.steps >= self.max_steps:
                if NormalOrderReducer(reducer.tree.copy(), self.namespace, self.hygienic).beta_reduce(step=True):
                    msg = "'{}' has no normal form within " + str(self.max_steps) + " steps"
                    self.error_handler.warn(msg, statement.text)
                break

            bounded = self.max_steps is not None
            if not reducer.beta_reduce(step=mode == Session._STEP or bounded):
                break

            if mode == Session._STEP:
                print(f" = {reducer}." if self.cmd_line else f"{reducer}.")
                mode = self._resume()
            elif not bounded:
                break

        return str(reducer)

    def _resume(self):
        """Waits for a signal and returns the mode to continue in."""
        signal = self.wait()
        if signal == Session.CONTINUE:
            return Session._RUN
        elif signal == Session.QUIT:
            return Session._STOP
        return Session._STEP

    def reset(self):
        """Forgets every binding and every pending statement."""
        self.namespace.clear()
        self.to_exec = []
