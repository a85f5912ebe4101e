import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from untyped_lambda.lang.error import ErrorHandler, GenericException, NoFileExist, OpenFileError, ParsingError
from untyped_lambda.lang.session import Session


class Signals:
    """Stands in for stdin: hands out the given signals in order, then "" forever."""

    def __init__(self, *signals):
        self.signals = list(signals)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.signals.pop(0) if self.signals else ""


class FileSessionTestCase(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, contents, name="test.lc", mode="w"):
        path = os.path.join(self.tmp.name, name)
        with open(path, mode) as file:
            file.write(contents)
        return path

    def run_file(self, contents, **kwargs):
        path = self.write(contents)
        out = io.StringIO()
        with redirect_stdout(out):
            sess = Session(ErrorHandler(), path, cmd_line=False, **kwargs)
            sess.run()
        return out.getvalue(), sess

    def test_before(self):
        out, sess = self.run_file("id = \\x. x.\nid z.\n(\\x y. x) a b.")
        self.assertEqual("id z\n-> z.\n(\\x y. x) a b\n-> a.\n", out)
        self.assertEqual(["z", "a"], sess.results)

    def test_only(self):
        out, __ = self.run_file("id = \\x. x.\nid z.\n(\\x y. x) a b.", show=Session.ONLY)
        self.assertEqual("z.\na.\n", out)

    def test_bindings_only(self):
        out, sess = self.run_file("id = \\x. x.\nk = \\x y. x.")
        self.assertEqual("", out)
        self.assertEqual(["id", "k"], list(sess.namespace))

    def test_comments_and_blank_lines(self):
        out, __ = self.run_file("(* identity *)\n\nid = \\x. x. (* done *)\n\n  id a (* apply *).\n")
        self.assertEqual("id a\n-> a.\n", out)

    def test_later_binding_visible(self):
        out, __ = self.run_file("f x.\nf = \\y. y.", show=Session.ONLY)
        self.assertEqual("x.\n", out)

    def test_rebinding(self):
        out, __ = self.run_file("a = x.\na = y.\na.", show=Session.ONLY)
        self.assertEqual("y.\n", out)

    def test_church_numerals(self):
        source = ("zero = \\f x. x.\n"
                  "succ = \\n f x. f (n f x).\n"
                  "plus = \\m n f x. m f (n f x).\n"
                  "plus (succ zero) (succ (succ zero)).\n")
        out, __ = self.run_file(source, show=Session.ONLY)
        self.assertEqual("\\f x. f (f (f x)).\n", out)

    def test_step(self):
        signals = Signals()
        out, __ = self.run_file("(\\x. x) ((\\y. y) a).", step=True, wait=signals)
        self.assertEqual("(\\x. x) ((\\y. y) a)\n(\\y. y) a.\na.\n-> a.\n", out)
        self.assertEqual(3, signals.calls)

    def test_step_ignores_only(self):
        out, __ = self.run_file("(\\x. x) a.", show=Session.ONLY, step=True, wait=Signals())
        self.assertEqual("(\\x. x) a\na.\n-> a.\n", out)

    def test_step_continue(self):
        signals = Signals("c")
        out, __ = self.run_file("(\\x. x) ((\\y. y) a).\n(\\x. x) b.", step=True, wait=signals)
        self.assertEqual("(\\x. x) ((\\y. y) a)\n-> a.\n(\\x. x) b\nb.\n-> b.\n", out)
        self.assertEqual(3, signals.calls)

    def test_step_quit(self):
        out, sess = self.run_file("(\\x. x) ((\\y. y) a).\n(\\x. x) b.", step=True, wait=Signals("", "q"))
        self.assertEqual("(\\x. x) ((\\y. y) a)\n(\\y. y) a.\n-> (\\y. y) a.\n(\\x. x) b\nb.\n-> b.\n", out)
        self.assertEqual(["(\\y. y) a", "b"], sess.results)

    def test_step_quit_before_first_rewrite(self):
        out, __ = self.run_file("(\\x. x) a.", step=True, wait=Signals("q"))
        self.assertEqual("(\\x. x) a\n-> (\\x. x) a.\n", out)

    def test_max_steps(self):
        out, sess = self.run_file("(\\x. x x) (\\x. x x).", show=Session.ONLY, max_steps=3)
        self.assertIn("has no normal form within 3 steps", out)
        self.assertTrue(out.endswith("(\\x. x x) (\\x. x x).\n"))
        self.assertEqual(["(\\x. x x) (\\x. x x)"], sess.results)

    def test_max_steps_not_reached(self):
        cases = {
            "(\\x. x) ((\\y. y) a).": 5,
            "(\\x. x) a.": 1,
            "a.": 0,
        }
        for case, max_steps in cases.items():
            out, __ = self.run_file(case, show=Session.ONLY, max_steps=max_steps)
            self.assertNotIn("warning", out, case)
            self.assertTrue(out.endswith("a.\n"), case)

    def test_max_steps_stops_partway(self):
        out, sess = self.run_file("(\\x. x) ((\\y. y) ((\\z. z) a)).", show=Session.ONLY, max_steps=1)
        self.assertIn("has no normal form within 1 steps", out)
        self.assertEqual(["(\\y. y) ((\\z. z) a)"], sess.results)

    def test_hygienic(self):
        out, __ = self.run_file("(\\x y. x) y.", show=Session.ONLY)
        self.assertEqual("\\y. y.\n", out)

        out, __ = self.run_file("(\\x y. x) y.", show=Session.ONLY, hygienic=True)
        self.assertEqual("\\y₀. y.\n", out)

    def test_parsing_error(self):
        path = self.write("a.\n(b c.")
        self.assertRaises(ParsingError, Session, ErrorHandler(), path, False)

    def test_no_file(self):
        path = os.path.join(self.tmp.name, "missing.lc")
        self.assertRaises(NoFileExist, Session, ErrorHandler(), path, False)

    def test_open_file_error(self):
        self.assertRaises(OpenFileError, Session, ErrorHandler(), self.tmp.name, False)

        path = self.write(b"\xff\xfe\xfa", name="binary.lc", mode="wb")
        self.assertRaises(OpenFileError, Session, ErrorHandler(), path, False)

    def test_reserved_filename(self):
        self.assertRaises(GenericException, Session, ErrorHandler(), Session.SH_FILE, False)


class CommandLineSessionTestCase(unittest.TestCase):

    def setUp(self):
        self.error_handler = ErrorHandler()

    def run_line(self, sess, line, line_num=1):
        out = io.StringIO()
        with redirect_stdout(out):
            sess.add(line, line_num)
            sess.run()
        return out.getvalue()

    def test_not_fatal(self):
        Session(self.error_handler, Session.SH_FILE, cmd_line=True)
        self.assertFalse(self.error_handler.fatal)

    def test_output(self):
        sess = Session(self.error_handler, Session.SH_FILE, cmd_line=True)
        self.assertEqual(" = y.\n", self.run_line(sess, "id = \\x. x. id y"))
        self.assertEqual(" = a.\n = b.\n", self.run_line(sess, "(\\x. x) a. (\\x. x) b"))

    def test_bindings_persist(self):
        sess = Session(self.error_handler, Session.SH_FILE, cmd_line=True)
        self.assertEqual("", self.run_line(sess, "id = \\x. x"))
        self.assertEqual(" = y.\n", self.run_line(sess, "id y", 2))

    def test_reset(self):
        sess = Session(self.error_handler, Session.SH_FILE, cmd_line=True)
        self.run_line(sess, "id = \\x. x")
        sess.reset()
        self.assertEqual(0, len(sess.namespace))
        self.assertEqual(" = id y.\n", self.run_line(sess, "id y", 2))

    def test_step(self):
        signals = Signals()
        sess = Session(self.error_handler, Session.SH_FILE, cmd_line=True, step=True, wait=signals)
        self.assertEqual(" = (\\y. y) a.\n = a.\n = a.\n", self.run_line(sess, "(\\x. x) ((\\y. y) a)"))
        self.assertEqual(2, signals.calls)

    def test_failed_line_is_registered(self):
        sess = Session(self.error_handler, Session.SH_FILE, cmd_line=True)
        self.assertRaises(ParsingError, sess.add, "  (a b  ", 7)
        self.assertEqual(("(a b", 7), self.error_handler.traceback[Session.SH_FILE])

        sess.add("a", 8)
        self.assertEqual((None, None), self.error_handler.traceback[Session.SH_FILE])


if __name__ == '__main__':
    unittest.main()
