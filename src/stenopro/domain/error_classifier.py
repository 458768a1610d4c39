"""Maps pipeline failures to the diagnostic persisted on the record."""

from stenopro.exceptions import ErrorKind, PipelineError

LABELS: dict[ErrorKind, str] = {
    ErrorKind.CONFIGURATION: "Configuration error",
    ErrorKind.NOT_FOUND: "Not found",
    ErrorKind.NETWORK: "Network error",
    ErrorKind.TIMEOUT: "Provider timeout",
    ErrorKind.PROVIDER: "Provider error",
    ErrorKind.UNKNOWN: "Unexpected error",
}


def classify(error: BaseException) -> tuple[ErrorKind, str]:
    """
    Classifies an exception by type.

    Pipeline errors carry their own kind. Builtin timeouts and connection
    failures that escape a provider adapter unwrapped are still recognised;
    anything else is unknown and keeps its raw text.

    Returns:
        Tuple of (kind, user-facing message).
    """
    if isinstance(error, PipelineError):
        kind = error.kind
    elif isinstance(error, TimeoutError):
        kind = ErrorKind.TIMEOUT
    elif isinstance(error, ConnectionError):
        kind = ErrorKind.NETWORK
    else:
        kind = ErrorKind.UNKNOWN

    detail = str(error) or type(error).__name__
    return kind, f"{LABELS[kind]}: {detail}"
