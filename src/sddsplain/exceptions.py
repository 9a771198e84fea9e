"""Exceptions raised while reading and writing plain-data and SDDS streams."""

from __future__ import annotations


class SDDSPlainError(Exception):
    """Base class for all the errors raised by this package.

    Parameters
    ----------
    message
        the error description.
    stream
        name of the file or stream being processed, if any.
    obj
        name of the parameter or column being processed, if any.
    where
        free-form position information (e.g. ``"page 2, line 14"``).
    """

    def __init__(
        self,
        message: str,
        stream: str | None = None,
        obj: str | None = None,
        where: str | None = None,
    ) -> None:
        super().__init__(message)

        self.stream = stream
        self.obj = obj
        self.where = where

    def __str__(self) -> str:
        ctx = []
        if self.stream is not None:
            ctx.append(f"in {self.stream}")
        if self.where is not None:
            ctx.append(self.where)
        if self.obj is not None:
            ctx.append(f"while processing '{self.obj}'")

        msg = super().__str__()
        return (", ".join(ctx) + ": " + msg) if ctx else msg

    def __reduce__(self) -> tuple:  # for pickling.
        return self.__class__, (*self.args, self.stream, self.obj, self.where)


class ConfigurationError(SDDSPlainError, ValueError):
    """Invalid or inconsistent configuration, detected before any I/O."""


class StreamError(SDDSPlainError):
    """The stream could not be opened or ended in the middle of a value."""


class ShortReadError(StreamError):
    """Fewer bytes than required were available in a binary stream."""


class ModeMismatchError(StreamError):
    """The stream content does not match the declared input mode."""

    def __str__(self) -> str:
        return super().__str__() + " (check -inputMode)"


class FormatError(SDDSPlainError):
    """Malformed data: bad token, bad row count, oversized string..."""


class BadNumericError(FormatError):
    """A token could not be interpreted as a number of the requested type."""


class StringTooLongError(FormatError):
    """A string exceeds the maximum allowed length."""


class BadRowError(FormatError):
    """A row is missing fields or holds an unparsable value."""


class LayoutError(SDDSPlainError):
    """Dataset layout misuse, which indicates a programming error."""


class TypeMismatchError(LayoutError):
    """A value does not match the type declared for its parameter or column."""


class IncompletePageError(LayoutError):
    """A page was written before every declared column was set."""
