"""
Ethereum Wallet Authentication Utilities

This module handles the Ethereum-specific cryptographic operations for wallet authentication.
It implements the challenge/response flow on top of EIP-191 ``personal_sign`` messages.

Authentication Flow:
1. Backend generates a random nonce -> generate_nonce()
2. Backend wraps the nonce in a human-readable message -> login_message() / link_message()
3. Frontend signs the message with the wallet (personal_sign)
4. Frontend sends: address, signature
5. Backend recovers the signer: recover_address()
   - Hashes the message with the EIP-191 prefix
   - Recovers the secp256k1 public key from the signature
   - Returns the lowercase address derived from that key
6. Caller compares the recovered address to the claimed one (services/wallet_auth.py)

The recovery uses the eth_account library; there is no I/O in this module.
"""

import re
import secrets

from eth_account import Account
from eth_account.messages import encode_defunct


NONCE_NUM_BYTES = 32  # 32 bytes = 64 hex characters

LOGIN_MESSAGE_PREFIX = "Sign this message to log in: "
LINK_MESSAGE_PREFIX = "Sign this message to link your wallet to your account: "

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


class InvalidSignatureError(ValueError):
    """Raised when a signature cannot be parsed or no key can be recovered from it."""


def generate_nonce(num_bytes: int = NONCE_NUM_BYTES) -> str:
    """
    Generate a cryptographically secure random nonce for wallet authentication.

    Args:
        num_bytes: Number of random bytes to generate (default: 32 = 64 hex chars)

    Returns:
        Hex-encoded random string (e.g., "a1b2c3d4...")
    """
    if num_bytes <= 0:
        num_bytes = NONCE_NUM_BYTES
    return secrets.token_hex(num_bytes)


def login_message(nonce: str) -> str:
    return f"{LOGIN_MESSAGE_PREFIX}{nonce}"


def link_message(nonce: str) -> str:
    return f"{LINK_MESSAGE_PREFIX}{nonce}"


def is_valid_address(address: str) -> bool:
    return bool(address) and _ADDRESS_RE.match(address.strip()) is not None


def normalize_address(address: str) -> str:
    """
    Normalize an Ethereum address to its lowercase hex form.

    Checksummed and lowercase inputs map to the same value, which is the
    form stored in the wallets table.

    Raises:
        ValueError: If the address is not 0x followed by 40 hex characters
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid wallet address: {address!r}")
    return address.strip().lower()


def recover_address(message: str, signature: str) -> str:
    """
    Recover the address that signed ``message``.

    Args:
        message: The exact text that was passed to personal_sign
        signature: 65-byte r||s||v signature, hex encoded (with or without 0x)

    Returns:
        The signer's address, lowercase

    Raises:
        InvalidSignatureError: If the signature is malformed or unrecoverable
    """
    if not signature or not signature.strip():
        raise InvalidSignatureError("Signature is empty")

    signable = encode_defunct(text=message)
    try:
        recovered = Account.recover_message(signable, signature=signature.strip())
    except Exception as exc:
        # eth_account surfaces bad hex, bad length and bad v/r/s as different types
        raise InvalidSignatureError(f"Malformed signature: {exc}") from exc
    return recovered.lower()
