"""imagetrust exception hierarchy.

All public exceptions inherit from ImageTrustError, giving callers a single
base class to catch when they want to handle any imagetrust-specific failure
without swallowing unrelated errors.
"""


class ImageTrustError(Exception):
    """Base exception for all imagetrust errors."""


class InputError(ImageTrustError):
    """Raised when required evaluation input is missing.

    An empty or whitespace-only image reference is the only fatal input
    condition. Malformed references are parsed best-effort instead.
    """


class ConfigError(ImageTrustError):
    """Raised for invalid or unreadable configuration.

    Covers unreadable YAML files, unknown keys, wrongly typed values,
    and thresholds that are out of range or inverted.
    """


class SignalSourceError(ImageTrustError):
    """Raised when an external signal source returns unusable output.

    The evaluation engine catches this and degrades the affected
    criterion to its "unavailable" score. It never aborts an evaluation.
    """
