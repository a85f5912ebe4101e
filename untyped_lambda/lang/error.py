"""Diagnostics for the untyped lambda interpreter.

Every problem a user can cause is a GenericException subclass. The ErrorHandler context manager sits around each unit
of work (a file, a shell line) and turns those into colored messages, with the file and line being processed and a
caret under the offending columns. Anything else reaching the handler is reported as an internal error.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Base of all interpreter errors. msg is a format string whose "{}" fields are filled with the bolded exprs;
    exprs[0] is the source snippet shown under the message, with start:end marking the columns to underline.
    """

    def __init__(self, msg, exprs=None, start=0, end=-1, diagnosis=True, internal=False):
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]

        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))
        self.expr = exprs[0]
        self.start = start
        self.end = len(self.expr) if end == -1 else end

        self.diagnosis = diagnosis  # whether to underline the snippet
        self.internal = internal

        super().__init__(self.msg)

    @property
    def shows_snippet(self):
        return self.diagnosis and bool(self.expr) and not self.internal


class UnexpectedEof(GenericException):
    """A block comment was opened with '(*' but never closed."""

    def __init__(self, line, source_line="", column=0):
        self.line = line
        super().__init__(f"detected unexpected eof: comment opened on line {line} is never closed",
                         source_line, start=column, end=column + 2)


class ParsingError(GenericException):
    """No production of the grammar matches, or a parenthesis is never closed. line is 1-based."""

    def __init__(self, line, source_line="", column=0):
        self.line = line
        super().__init__(f"parsing error: line {line}", source_line, start=column, end=column + 1)


class ParsingFailed(GenericException):
    """The statements of a source could not consume its whole token stream."""

    def __init__(self, line, source_line="", column=0):
        self.line = line
        super().__init__(f"parsing failed: unexpected token on line {line}", source_line, start=column, end=column + 1)


class NoFileExist(GenericException):

    def __init__(self, path):
        super().__init__("no file exist: '{}'", path, diagnosis=False)


class OpenFileError(GenericException):

    def __init__(self, path, reason):
        super().__init__("file open failed: '{}': {}", [path, str(reason)], diagnosis=False)


class ErrorHandler:
    """Reports interpreter errors on exit of a with block. A fatal handler ends the process with status 1; a non-fatal
    one swallows the error and forgets the lines being processed, so the caller can go on.

    traceback maps each registered file to (line text, line number) of the statement in progress, or (None, None).
    """
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.traceback = {}

    def register_file(self, path):
        self.traceback[path] = (None, None)

    def register_line(self, path, line, line_num):
        """Marks line as the statement in progress for path, until remove_line."""
        self.traceback[path] = (line, line_num)

    def remove_line(self, path):
        self.register_file(path)

    def _active(self):
        return [(path, line, line_num) for path, (line, line_num) in self.traceback.items() if line]

    @staticmethod
    def diagnose(error, warning=False):
        """Two lines: error.expr with columns start:end highlighted, and a caret underline beneath them."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR
        start = error.start
        end = max(error.end, start + 1)

        def highlight(text):
            return colored(text, color, attrs=["bold"])

        snippet = error.expr[:start] + highlight(error.expr[start:end]) + error.expr[end:]
        underline = " " * start + highlight("^" + "~" * (end - start - 1))
        return f"  {snippet}\n  {underline}"

    def warn(self, *args, **kwargs):
        """Builds a GenericException from args and prints it as a warning, prefixed by the statement in progress."""
        error = GenericException(*args, **kwargs)

        active = self._active()
        prefix = colored(f"{active[0][0]}:{active[0][2]}: ", attrs=["bold"]) if active else ""
        print(prefix + colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.msg)

        if error.shows_snippet:
            print(ErrorHandler.diagnose(error, warning=True))

    def throw(self, error):
        """Prints error below the statements in progress, outermost file first."""
        active = self._active()
        report = "".join(f"  File '{path}', line {line_num}:\n    {line}\n" for path, line, line_num in active)
        if len(active) > 1:
            report = "Traceback:\n" + report

        if error.internal:
            report += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
        print(report + colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg)

        if error.shows_snippet:
            print(ErrorHandler.diagnose(error))

        if self.fatal:
            sys.exit(1)
        for path in self.traceback:
            self.register_file(path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            return True
        if issubclass(exc_type, SystemExit):
            return False

        if issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif issubclass(exc_type, KeyboardInterrupt):
            self.throw(GenericException("keyboard interrupt"))
        elif issubclass(exc_type, RecursionError):
            self.throw(GenericException("normal form might exist, but maximum recursion depth exceeded"))
        else:
            self.throw(GenericException(f"unknown error: '{exc_type.__name__}: {exc_val}'", internal=True))
            return False  # let the internal error propagate
        return True
