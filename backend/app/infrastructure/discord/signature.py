"""Ed25519 verification of Discord interaction requests."""

import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

logger = logging.getLogger(__name__)


def verify_interaction_signature(
    public_key_hex: str, signature_hex: str, timestamp: str, body: bytes
) -> bool:
    """True when ``signature`` signs ``timestamp + body`` under the application key."""
    if not (public_key_hex and signature_hex and timestamp):
        return False
    try:
        key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key_hex))
        key.verify(bytes.fromhex(signature_hex), timestamp.encode() + body)
    except (InvalidSignature, ValueError) as exc:
        logger.debug("Rejected interaction signature: %s", type(exc).__name__)
        return False
    return True
