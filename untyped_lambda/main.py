"""Runs the untyped lambda calculus interpreter on a file, or in command-line mode. Also uses error handling context
manager. Called from the untyped-lambda executable script.
"""

import argparse
import sys

from untyped_lambda import __version__
from untyped_lambda.lang.error import ErrorHandler
from untyped_lambda.lang.session import Session
from untyped_lambda.lang.shell import Shell


def build_parser():
    parser = argparse.ArgumentParser(prog="untyped-lambda", description="untyped lambda calculus interpreter")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("-b", "--before", dest="show", action="store_const", const=Session.BEFORE,
                        default=Session.BEFORE, help="show each formula before its evaluation (default)")
    parser.add_argument("-o", "--only", dest="show", action="store_const", const=Session.ONLY,
                        help="show only evaluation results")
    parser.add_argument("-s", "--step", action="store_true",
                        help="pause after every rewrite ('c' + enter runs to the end, 'q' + enter abandons)")
    parser.add_argument("--max-steps", type=int, default=None, metavar="N",
                        help="abandon a formula after N rewrites")
    parser.add_argument("--hygienic", action="store_true",
                        help="rename bound variables that would capture a substituted term's free variables")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv=None):
    """Runs interpreter. Called from the untyped-lambda executable script."""
    assert sys.version_info >= (3, 7), "untyped-lambda cannot be run with python < 3.7"

    with ErrorHandler() as error_handler:
        args = build_parser().parse_args(argv)
        options = dict(show=args.show, step=args.step, max_steps=args.max_steps, hygienic=args.hygienic)

        if args.file is not None:
            Session(error_handler, args.file, cmd_line=False, **options).run()

        else:
            Shell(Session(error_handler, Session.SH_FILE, cmd_line=True, **options)).cmdloop()


if __name__ == "__main__":
    main()
