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

"""
Thin web3 client for the four remote operations the issuer needs, plus the
chain id check done at startup.

Every call goes through an optional client-side rate limiter (fixed window,
requests per minute, 0 = unlimited) so a public RPC endpoint is not hammered
by retries. Calls over the limit block until the window resets or the run is
cancelled, in which case they raise CancelledError without reaching the node.
"""

import logging
import time

from limits import RateLimitItemPerMinute
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter
from web3 import Web3

from autotx.errors import CancelledError, ConfigurationError

logger = logging.getLogger(__name__)

RATE_LIMIT_KEY = "rpc"


class RemoteLedger:
    def __init__(self, w3: Web3, rate_limit: int = 0, sleep=None, cancel=None):
        self.w3 = w3
        self.cancel = cancel
        if sleep is not None:
            self._sleep = sleep
        elif cancel is not None:
            self._sleep = cancel.wait
        else:
            self._sleep = time.sleep
        self._limiter = FixedWindowRateLimiter(MemoryStorage())
        self._limit = RateLimitItemPerMinute(rate_limit) if rate_limit > 0 else None

    @classmethod
    def connect(cls, rpc_url: str, timeout: int = 10, rate_limit: int = 0, cancel=None):
        """Open an HTTP provider and make sure the node answers."""
        w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
        try:
            connected = w3.is_connected()
        except Exception as e:
            logger.debug("Connection check against %s raised: %s", rpc_url, e)
            connected = False
        if not connected:
            raise ConfigurationError(f"Unable to connect to the RPC address: {rpc_url}")
        logger.info("Connected to RPC at %s", rpc_url)
        return cls(w3, rate_limit=rate_limit, cancel=cancel)

    @property
    def endpoint(self) -> str:
        return getattr(self.w3.provider, "endpoint_uri", "")

    def _cancelled(self):
        return self.cancel is not None and self.cancel.is_set()

    def _throttle(self):
        if self._limit is None:
            return
        while not self._limiter.hit(self._limit, RATE_LIMIT_KEY):
            if self._cancelled():
                raise CancelledError("Stopped while waiting for the RPC rate limit")
            reset_time, _ = self._limiter.get_window_stats(self._limit, RATE_LIMIT_KEY)
            wait = max(reset_time - time.time(), 0.1)
            logger.debug("RPC rate limit reached, waiting %.1fs", wait)
            self._sleep(wait)

    def get_balance(self, address: str) -> int:
        self._throttle()
        return self.w3.eth.get_balance(address)

    def get_pending_nonce(self, address: str) -> int:
        self._throttle()
        return self.w3.eth.get_transaction_count(address, "pending")

    def suggest_gas_price(self) -> int:
        self._throttle()
        return self.w3.eth.gas_price

    def broadcast(self, raw_transaction: bytes) -> str:
        self._throttle()
        tx_hash = self.w3.eth.send_raw_transaction(raw_transaction)
        return Web3.to_hex(tx_hash)

    def chain_id(self) -> int:
        self._throttle()
        return self.w3.eth.chain_id
