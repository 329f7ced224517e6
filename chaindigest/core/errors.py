class ChainDigestError(Exception):
    """
    Base exception for all chaindigest failures.
    """

    pass


class InvalidInput(ChainDigestError, ValueError):
    """
    Raised when a buffer cannot be processed by the digest engine.

    Reaching this from ``sha256`` means the padding step produced a buffer
    that is not a whole number of 32-bit words.
    """

    pass


class EmptyInput(ChainDigestError, ValueError):
    """
    Raised when a hash tree is requested over zero items.
    """

    pass


class ProofError(ChainDigestError):
    """
    Raised when an inclusion proof cannot be produced or parsed.
    """

    pass


class KeyFormatError(ChainDigestError, TypeError):
    """
    Raised when a key file is unreadable as PEM or holds the wrong key type.
    """

    pass
