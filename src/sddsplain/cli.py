"""sdds-plaindata's command line interface utilities."""

from __future__ import annotations

import argparse
import logging
import sys

from . import __version__, convert
from . import logging as sddslogging
from .exceptions import ConfigurationError, SDDSPlainError
from .plain import FieldSpec, InputConfig, OutputConfig, SDDSConfig, Selection
from .plain.config import parse_mode, parse_order

log = logging.getLogger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """Report usage errors on the package logger and exit with status 1."""

    def error(self, message: str) -> None:
        sddslogging.setup()
        log.error(f"{self.prog}: {message}")
        sys.exit(1)


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--version",
        action="store_true",
        help="""Print sdds-plaindata version and exit""",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="""Increase the program verbosity""",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="""Increase the program verbosity to maximum""",
    )
    parser.add_argument(
        "files",
        nargs="*",
        metavar="file",
        help="""Input and output files, unless piped""",
    )
    parser.add_argument(
        "-pipe",
        nargs="?",
        const="input,output",
        default=None,
        help="""Read from the standard input and/or write to the standard
        output. Takes 'input', 'output' or 'input,output' (the default)""",
    )
    parser.add_argument(
        "-nowarnings",
        action="store_true",
        help="""Do not report recoverable problems""",
    )


def _setup_logging(args: argparse.Namespace) -> None:
    if args.verbose:
        sddslogging.setup(logging.DEBUG, logging.getLogger("sddsplain"))
    elif args.debug:
        sddslogging.setup(logging.DEBUG, logging.root)
    else:
        sddslogging.setup()

    if args.version:
        print(__version__)  # noqa: T201
        sys.exit()


def _channels(files: list[str], pipe: str | None) -> tuple[str | None, str | None]:
    """Map positional file names and the ``-pipe`` option to input/output."""
    pipe_in = pipe_out = False
    if pipe is not None:
        for item in pipe.split(","):
            item = item.strip()
            if item and "input".startswith(item):
                pipe_in = True
            elif item and "output".startswith(item):
                pipe_out = True
            else:
                msg = f"invalid -pipe syntax '{pipe}'"
                raise ConfigurationError(msg)

    expected = 2 - pipe_in - pipe_out
    if len(files) != expected:
        msg = f"expected {expected} file names, got {len(files)}"
        raise ConfigurationError(msg)

    files = list(files)
    input_ = None if pipe_in else files.pop(0)
    output = None if pipe_out else files.pop(0)
    if input_ is not None and input_ == output:
        msg = "input and output files must differ"
        raise ConfigurationError(msg)
    return input_, output


def _skipped(text: str) -> tuple[str, str]:
    return ("skip", text)


def _input_config(args: argparse.Namespace) -> tuple[InputConfig, SDDSConfig]:
    columns = []
    for item in args.columns or []:
        if isinstance(item, tuple):
            columns.append(FieldSpec.skip_column(item[1]))
        else:
            columns.append(FieldSpec.parse(item))

    binary_rows = None
    if args.binaryRows is not None:
        try:
            binary_rows = int(args.binaryRows)
        except ValueError:
            msg = f"invalid -binaryRows value '{args.binaryRows}'"
            raise ConfigurationError(msg) from None

    skip_lines = 0
    if args.skiplines is not None:
        try:
            skip_lines = int(args.skiplines)
        except ValueError:
            skip_lines = -1
        if skip_lines <= 0:
            msg = f"invalid -skiplines value '{args.skiplines}'"
            raise ConfigurationError(msg)

    config = InputConfig(
        binary=parse_mode(args.inputMode) if args.inputMode else False,
        separator=args.separator,
        comment_chars=args.commentCharacters or "",
        no_row_count=args.noRowCount or binary_rows is not None,
        binary_rows=binary_rows,
        column_major=parse_order(args.order) if args.order else False,
        parameters=[FieldSpec.parse(p) for p in args.parameters or []],
        columns=columns,
        skip_lines=skip_lines,
        eof_sequence=args.eofSequence,
        fillin=args.fillin,
        no_warnings=args.nowarnings,
    )
    sdds = SDDSConfig(
        binary=parse_mode(args.outputMode) if args.outputMode else True,
        column_major=parse_order(args.majorOrder) if args.majorOrder else False,
    )
    return config, sdds


def plaindata2sdds_cli(args=None):
    """Command line interface for converting plain-data streams to SDDS."""
    parser = _ArgumentParser(
        prog="plaindata2sdds",
        description="""
Convert a plain ASCII or binary data stream into an SDDS file.

Examples
--------

Read a parameter and two columns from an ASCII file with row counts:

  $ plaindata2sdds data.txt data.sdds -parameter=Run,long \\
      -column=Idx,long -column=Val,double,units=m

Read a headerless binary stream of two doubles per row:

  $ plaindata2sdds data.bin data.sdds -inputMode=binary -binaryRows=100 \\
      -column=X,double -column=Y,double
        """,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    _add_global_options(parser)

    parser.add_argument(
        "-inputMode",
        help="""Input format: ascii (default) or binary""",
    )
    parser.add_argument(
        "-outputMode",
        help="""SDDS data mode: ascii or binary (default)""",
    )
    parser.add_argument(
        "-separator",
        help="""Single-character field separator of ASCII input. Fields are
        separated by whitespace if not given""",
    )
    parser.add_argument(
        "-commentCharacters",
        help="""Skip ASCII lines starting with any of these characters""",
    )
    parser.add_argument(
        "-noRowCount",
        action="store_true",
        help="""The input carries no row counts""",
    )
    parser.add_argument(
        "-binaryRows",
        help="""Number of rows of a binary input without row counts""",
    )
    parser.add_argument(
        "-order",
        help="""Input order: rowMajor (default) or columnMajor""",
    )
    parser.add_argument(
        "-majorOrder",
        help="""SDDS output order: rowMajor (default) or columnMajor""",
    )
    parser.add_argument(
        "-parameter",
        dest="parameters",
        action="append",
        help="""Parameter declaration:
        <name>,<type>[,units=<s>][,description=<s>][,symbol=<s>][,count=<n>]
        The option can be passed multiple times, in input order""",
    )
    parser.add_argument(
        "-column",
        dest="columns",
        action="append",
        help="""Column declaration, same syntax as -parameter.
        The option can be passed multiple times, in input order""",
    )
    parser.add_argument(
        "-skipcolumn",
        dest="columns",
        action="append",
        type=_skipped,
        help="""Type of an input column that is read and discarded""",
    )
    parser.add_argument(
        "-fillin",
        action="store_true",
        help="""Fill missing trailing fields of ASCII rows with 0 or ''""",
    )
    parser.add_argument(
        "-skiplines",
        help="""Number of lines to skip at the start of ASCII input""",
    )
    parser.add_argument(
        "-eofSequence",
        help="""ASCII input ends at a line starting with this text""",
    )

    args = parser.parse_intermixed_args(args)
    _setup_logging(args)

    try:
        input_, output = _channels(args.files, args.pipe)
        config, sdds = _input_config(args)
    except SDDSPlainError as e:
        log.error(str(e))
        sys.exit(1)

    if convert.run(config, sdds, input_, output) != 0:
        sys.exit(1)


def sdds2plaindata_cli(args=None):
    """Command line interface for converting SDDS files to plain-data streams."""
    parser = _ArgumentParser(
        prog="sdds2plaindata",
        description="""
Write parameters and columns of an SDDS file as a plain ASCII or binary stream.

Examples
--------

Write two columns as comma-separated text with labels:

  $ sdds2plaindata data.sdds data.txt -separator=, -labeled \\
      -column=Idx -column=Val,format=%.3f

Write all columns starting with 'x' as a binary stream:

  $ sdds2plaindata data.sdds data.bin -outputMode=binary -column=x*
        """,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    _add_global_options(parser)

    parser.add_argument(
        "-outputMode",
        help="""Output format: ascii (default) or binary""",
    )
    parser.add_argument(
        "-separator",
        help="""Field separator of ASCII output, a single space by default""",
    )
    parser.add_argument(
        "-noRowCount",
        action="store_true",
        help="""Omit the row counts of ASCII output""",
    )
    parser.add_argument(
        "-order",
        help="""Output order: rowMajor (default) or columnMajor""",
    )
    parser.add_argument(
        "-parameter",
        dest="parameters",
        action="append",
        help="""Parameter to write: <name>[,format=<string>]""",
    )
    parser.add_argument(
        "-column",
        dest="columns",
        action="append",
        help="""Column to write: <name>[,format=<string>]. The name may hold
        wildcards""",
    )
    parser.add_argument(
        "-labeled",
        action="store_true",
        help="""Label ASCII parameter values and columns with names and units""",
    )

    args = parser.parse_intermixed_args(args)
    _setup_logging(args)

    try:
        input_, output = _channels(args.files, args.pipe)
        config = OutputConfig(
            binary=parse_mode(args.outputMode) if args.outputMode else False,
            separator=args.separator,
            no_row_count=args.noRowCount,
            column_major=parse_order(args.order) if args.order else False,
            parameters=[Selection.parse(p) for p in args.parameters or []],
            columns=[Selection.parse(c) for c in args.columns or []],
            labeled=args.labeled,
            no_warnings=args.nowarnings,
        )
        convert.sdds2plaindata(config, input_, output)
    except SDDSPlainError as e:
        log.error(str(e))
        sys.exit(1)
