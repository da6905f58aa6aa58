# Copyright 2025 R5
# This file is part of the R5 Core library.
#
# This software is provided "as is", without warranty of any kind,
# express or implied, including but not limited to the warranties
# of merchantability, fitness for a particular purpose and
# noninfringement. In no event shall the authors or copyright
# holders be liable for any claim, damages, or other liability,
# whether in an action of contract, tort or otherwise, arising
# from, out of or in connection with the software or the use or
# other dealings in the software.

import logging
from dataclasses import dataclass, field

from ecdsa import SigningKey, SECP256k1
from web3 import Account, Web3

from autotx.errors import ConfigurationError, RetryError, SigningError
from autotx.units import to_intermediate_unit

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 21000


@dataclass
class SigningIdentity:
    """A private key bound to its address, chain and latest nonce/gas price snapshot."""
    private_key: str = field(repr=False)
    address: str
    chain_id: int
    current_nonce: int = 0
    last_known_gas_price: int = 0
    gas_limit: int = DEFAULT_GAS_LIMIT
    value: int = 0


@dataclass(frozen=True)
class TransferIntent:
    sender: SigningIdentity
    recipient: str
    amount: int
    gas_price: int
    gas_limit: int
    nonce: int
    chain_id: int

    def to_transaction(self) -> dict:
        return {
            "nonce": self.nonce,
            "to": self.recipient,
            "value": self.amount,
            "gas": self.gas_limit,
            "gasPrice": self.gas_price,
            "chainId": self.chain_id,
        }


@dataclass(frozen=True)
class SignedTransaction:
    raw: bytes
    hash: str
    nonce: int


def normalize_private_key(private_key_hex: str) -> str:
    """
    Validate a hex private key and return it 0x-prefixed.
    Raises ValueError if it is not a usable secp256k1 key.
    """
    if not isinstance(private_key_hex, str):
        raise ValueError("private key must be a hex string")
    key = private_key_hex.strip()
    if key.startswith(("0x", "0X")):
        key = key[2:]
    if len(key) != 64:
        raise ValueError("private key must be 32 bytes (64 hex characters)")
    raw = bytes.fromhex(key)
    try:
        SigningKey.from_string(raw, curve=SECP256k1)
    except Exception:
        raise ValueError("private key is outside the secp256k1 curve order") from None
    return "0x" + key.lower()


class WalletManager:
    """
    Owns the signing identities and turns transfer parameters into signed
    transactions. The pending nonce is always read from the node right
    before signing; nothing is cached between transactions.
    """

    def __init__(self, ledger, query, chain_id: int, gas_limit: int = DEFAULT_GAS_LIMIT):
        self.ledger = ledger
        self.query = query
        self.chain_id = chain_id
        self.gas_limit = gas_limit

    def create_identity(self, private_key_hex: str, index: int = 0) -> SigningIdentity:
        try:
            private_key = normalize_private_key(private_key_hex)
            address = Account.from_key(private_key).address
        except Exception as e:
            # The key itself never goes into the message.
            raise ConfigurationError(f"Failed to load private key #{index + 1}: {e}") from None

        nonce = self.query.read(lambda: self.ledger.get_pending_nonce(address), "get nonce", fallback=0)
        try:
            gas_price = self.query.call(self.ledger.suggest_gas_price, "suggest gas price")
        except RetryError as e:
            raise ConfigurationError(f"Failed to suggest gas price: {e.last_error}") from e

        identity = SigningIdentity(
            private_key=private_key,
            address=address,
            chain_id=self.chain_id,
            current_nonce=nonce,
            last_known_gas_price=gas_price,
            gas_limit=self.gas_limit,
        )
        logger.debug("Loaded wallet %s (nonce %d, suggested gas price %s gwei)",
                     address, nonce, to_intermediate_unit(gas_price))
        return identity

    def create_identities(self, private_keys) -> list:
        identities = []
        seen = set()
        for index, key in enumerate(private_keys):
            identity = self.create_identity(key, index)
            if identity.address in seen:
                raise ConfigurationError(f"Private key #{index + 1} is a duplicate of an earlier key")
            seen.add(identity.address)
            identities.append(identity)
        return identities

    def refresh_nonce(self, identity: SigningIdentity) -> int:
        nonce = self.query.read(lambda: self.ledger.get_pending_nonce(identity.address),
                                "get nonce", fallback=0)
        identity.current_nonce = nonce
        return nonce

    def build_intent(self, identity: SigningIdentity, recipient: str, amount: int,
                     gas_price: int) -> TransferIntent:
        return TransferIntent(
            sender=identity,
            recipient=recipient,
            amount=amount,
            gas_price=gas_price,
            gas_limit=identity.gas_limit,
            nonce=self.refresh_nonce(identity),
            chain_id=identity.chain_id,
        )

    def sign(self, intent: TransferIntent) -> SignedTransaction:
        try:
            signed = Account.sign_transaction(intent.to_transaction(), intent.sender.private_key)
        except Exception as e:
            raise SigningError(f"Transaction signing failed: {e}") from e
        return SignedTransaction(
            raw=bytes(signed.raw_transaction),
            hash=Web3.to_hex(signed.hash),
            nonce=intent.nonce,
        )
