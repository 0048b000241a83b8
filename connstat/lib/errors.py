"""Error types raised by connstat."""


class ConnstatError(Exception):
    """Base class for connstat errors."""

    pass


class SourceUnavailable(ConnstatError):
    """A socket table or ASN table source could not be read."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Unable to read {path}: {reason}")


class MalformedRecord(ConnstatError):
    """A socket table line could not be decoded."""

    def __init__(self, message: str, source: str, line_number: int, line: str):
        self.source = source
        self.line_number = line_number
        self.line = line
        super().__init__(f"{source}:{line_number}: {message}: {line.rstrip()!r}")


class MalformedAsnRow(ConnstatError):
    """An ASN table row has an invalid network field."""

    def __init__(self, message: str, source: str, row_number: int, value: str | None):
        self.source = source
        self.row_number = row_number
        self.value = value
        super().__init__(f"{source}:{row_number}: {message}")


class AddressError(ValueError):
    """A packed hex address could not be decoded."""

    pass


class ConfigError(ConnstatError):
    """Invalid configuration value."""

    pass
