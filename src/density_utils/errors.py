"""Exceptions raised by density-utils."""


class DensityUtilsError(Exception):
    """Base class for density-utils errors."""


class TransportError(DensityUtilsError):
    """The completion service could not be reached or returned an error."""


class ParseError(DensityUtilsError):
    """A model reply did not follow either of the accepted formats."""

    def __init__(self, text: str):
        super().__init__(f"could not parse response: {text!r}")
        self.text = text
