"""Core digest primitives.

Security notes
- The engine is a pure function of its input; no state survives a call.
- Output must match FIPS 180-4 exactly. Any drift is a correctness defect.
"""

from .errors import (  # noqa: F401
    ChainDigestError,
    EmptyInput,
    InvalidInput,
    KeyFormatError,
    ProofError,
)
from .sha256 import (  # noqa: F401
    DIGEST_SIZE,
    hex_digest,
    pad,
    sha256,
    sha256_hex,
)
