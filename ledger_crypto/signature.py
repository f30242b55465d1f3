"""
ECDSA signing and verification for ledger transactions.

Keys are secp256k1. Signatures are DER encoded and computed over the
SHA-256 digest of the message. verify_signature is the default signature
verifier used by ledger_handler.TxHandler.
"""

import hashlib
from typing import Optional, Tuple

from ecdsa import BadSignatureError, SECP256k1, SigningKey, VerifyingKey
from ecdsa.der import UnexpectedDER
from ecdsa.keys import MalformedPointError
from ecdsa.util import sigdecode_der, sigencode_der_canonize


def generate_keypair() -> Tuple[bytes, bytes]:
    """
    Generate a new secp256k1 key pair.

    Returns:
        Tuple of (private_key: 32 bytes, public_key: 33-byte compressed point)
    """
    sk = SigningKey.generate(curve=SECP256k1)
    return sk.to_string(), sk.get_verifying_key().to_string("compressed")


def private_key_to_public_key(private_key: bytes, compressed: bool = True) -> bytes:
    """
    Derive the public key for a private key.

    Args:
        private_key: 32-byte private key
        compressed: Return the 33-byte compressed encoding instead of the
            65-byte uncompressed one

    Raises:
        ValueError: If the private key is malformed
    """
    try:
        sk = SigningKey.from_string(private_key, curve=SECP256k1)
    except MalformedPointError as e:
        raise ValueError(f"Public key derivation failed: {str(e)}") from e
    return sk.get_verifying_key().to_string("compressed" if compressed else "uncompressed")


def sign_message(private_key: bytes, message: bytes) -> bytes:
    """
    Sign a message deterministically (RFC 6979).

    Args:
        private_key: 32-byte private key
        message: Payload to sign, e.g. Transaction.get_raw_data_to_sign(i)

    Returns:
        bytes: DER encoded signature with low S

    Raises:
        ValueError: If the private key is malformed
    """
    try:
        sk = SigningKey.from_string(private_key, curve=SECP256k1)
    except MalformedPointError as e:
        raise ValueError(f"Signing failed: {str(e)}") from e
    return sk.sign_deterministic(message, hashfunc=hashlib.sha256, sigencode=sigencode_der_canonize)


def verify_signature(public_key: bytes, message: bytes, signature: Optional[bytes]) -> bool:
    """
    Verify an ECDSA signature over message.

    Args:
        public_key: Compressed, uncompressed or raw secp256k1 public key
        message: Payload the signature should cover
        signature: DER encoded signature, or None for an unsigned input

    Returns:
        bool: True only if the signature is valid; malformed keys and
        signatures yield False rather than an exception
    """
    if not signature:
        return False

    try:
        vk = VerifyingKey.from_string(public_key, curve=SECP256k1)
        return vk.verify(signature, message, hashfunc=hashlib.sha256, sigdecode=sigdecode_der)
    except (BadSignatureError, UnexpectedDER, MalformedPointError, ValueError):
        return False
