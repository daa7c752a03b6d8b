class UsageError(Exception): ...


class MalformedSourceError(UsageError): ...


class InvalidInputError(UsageError, ValueError): ...


class FrameError(UsageError): ...


class TransformError(UsageError): ...


class IngestError(UsageError): ...


class StoreError(UsageError): ...


def require(condition: bool, message: str, exc: type[UsageError] = UsageError):
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)
