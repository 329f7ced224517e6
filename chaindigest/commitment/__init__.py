"""Root commitment tools.

Security notes
- A signature covers the canonical root payload only, never the items.
- Verify against a public key obtained out of band.
"""

from .cipher import CipherProvider, RsaOaepCipher  # noqa: F401
from .signing import (  # noqa: F401
    KeyPairPaths,
    generate_ed25519_keypair,
    load_public_key_pem,
    root_payload,
    sign_root,
    verify_root_signature,
)
