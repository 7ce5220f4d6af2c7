from asalang.types import ErrorVal


class AsaError(Exception):
    """Exception type used to propagate Asa runtime errors."""
    def __init__(self, err: ErrorVal):
        super().__init__(f"AsaError: {err.name}: {err.message}")
        self.err = err


class ParseError(Exception):
    """A production could not match the input at `pos`."""
    def __init__(self, message: str, source: str, pos: int):
        super().__init__(f"{message} at offset {pos}")
        self.message = message
        self.source = source
        self.pos = pos

    @property
    def remaining(self) -> str:
        return self.source[self.pos:]


class FatalParseError(ParseError):
    """Input was recognised but is invalid; ordered choice does not backtrack past it."""
