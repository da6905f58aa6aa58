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

import random
from decimal import Decimal

from ecdsa import SigningKey, SECP256k1
from web3 import Account

from autotx.errors import ConfigurationError
from autotx.units import to_smallest_unit


class RandomParameterGenerator:
    """
    Draws the per-transaction parameters: amount, gas price and a throwaway
    recipient address.

    The generator owns its own random.Random so a run can be replayed by
    passing the same seed. Recipient keys come from the system entropy pool
    regardless of the seed; they are discarded as soon as the address is
    derived, so nothing sent to them can be recovered.
    """

    def __init__(self, seed=None, rng=None):
        self.rng = rng if rng is not None else random.Random(seed)

    def random_amount(self, min_amount, max_amount) -> int:
        """Uniform amount in [min_amount, max_amount) display units, returned in wei."""
        low = Decimal(str(min_amount))
        high = Decimal(str(max_amount))
        if low < 0 or high < low:
            raise ConfigurationError(f"Invalid amount bounds: [{low}, {high}]")
        fraction = Decimal(repr(self.rng.random()))
        return to_smallest_unit(low + fraction * (high - low))

    def random_gas_price(self, min_price: int, max_price: int) -> int:
        if min_price < 0 or max_price < min_price:
            raise ConfigurationError(f"Invalid gas price bounds: [{min_price}, {max_price}]")
        return self.rng.randint(min_price, max_price)

    def random_recipient_address(self) -> str:
        sk = SigningKey.generate(curve=SECP256k1)
        return Account.from_key(sk.to_string()).address
