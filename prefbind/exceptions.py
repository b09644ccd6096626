"""Exceptions for the prefbind package."""


class PrefsError(Exception):
    """Base exception for all prefbind errors."""

    pass


class ConfigurationError(PrefsError):
    """Preference path or binding declaration is invalid."""

    pass


class InvalidArgumentError(PrefsError, ValueError):
    """A None object was handed to persist() or restore()."""

    pass


class UnsupportedTypeError(PrefsError, TypeError):
    """Declared field type cannot be written to the store."""

    def __init__(self, declared: object):
        self.declared = declared
        super().__init__(f"Unsupported preference type: {_type_name(declared)}")


class UnresolvableTypeError(PrefsError, TypeError):
    """Declared field type cannot be read back from the store."""

    def __init__(self, declared: object):
        self.declared = declared
        super().__init__(f"Not sure how to restore type: {_type_name(declared)}")


class BackingStoreError(PrefsError):
    """The underlying preference backend failed."""

    pass


class SerializationError(PrefsError):
    """Stored JSON does not decode to the expected collection shape."""

    pass


def _type_name(declared: object) -> str:
    return getattr(declared, "__name__", None) or repr(declared)
