from typing import Any


class ATSPError(Exception):
    """Base class for every error raised by the search core."""


class InvalidIndex(ATSPError, IndexError):
    pass


class MalformedInput(ATSPError, ValueError):
    pass


class InvalidConfig(ATSPError, ValueError):
    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"invalid {field}={value!r}: {reason}")
