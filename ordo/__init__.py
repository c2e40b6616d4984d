"""
ordo - Transparent Encryption for Edited Documents
===================================================

Lets an editing host show and edit the plaintext of an encrypted file
while only ciphertext ever reaches disk.

Guarantees:
- Every save of an encrypted document goes through encryption
- Failures never write plaintext and never desynchronize mode state
- Passphrases and content are never logged
"""

from ordo.core.config import OrdoConfig
from ordo.core.document import Document, DocumentMode
from ordo.core.errors import OrdoError, PreconditionViolation, UserCancelled
from ordo.core.lifecycle import LifecycleController, SaveInterceptHandle
from ordo.core.logging import get_secure_logger
from ordo.core.suffix import SuffixPolicy
from ordo.crypto.backend import CryptoBackend, DecryptedContent, DecryptionError, EncryptionError

__version__ = "0.1.0"

__all__ = [
    "OrdoConfig",
    "Document",
    "DocumentMode",
    "OrdoError",
    "PreconditionViolation",
    "UserCancelled",
    "LifecycleController",
    "SaveInterceptHandle",
    "get_secure_logger",
    "SuffixPolicy",
    "CryptoBackend",
    "DecryptedContent",
    "DecryptionError",
    "EncryptionError",
    "__version__",
]
