"""Exception types raised by the object database."""


class ObjectError(Exception):
    """Base class for object database errors."""


class ObjectNotFoundError(ObjectError):
    """No object file exists for the requested hash."""

    def __init__(self, hash: str):
        super().__init__(f"Object {hash} not found")
        self.hash = hash


class CorruptObjectError(ObjectError):
    """Stored object could not be inflated or decoded."""


class MalformedHeaderError(CorruptObjectError):
    """Object header is not of the form '<kind> <size>\\0'."""


class UnknownModeError(CorruptObjectError):
    """Tree entry carries a mode that is not one of the four known modes."""


class WrongKindError(ObjectError):
    """Object exists but is not of the kind the caller asked for."""

    def __init__(self, hash: str, expected, actual):
        super().__init__(f"Object {hash} is a {actual}, not a {expected}")
        self.hash = hash
        self.expected = expected
        self.actual = actual


class NotATreeError(WrongKindError):
    """Commit creation was given a hash that is not a tree."""


class RepositoryExistsError(Exception):
    """Repository metadata directory already exists."""
