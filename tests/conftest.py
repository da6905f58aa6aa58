from collections import Counter
from decimal import Decimal

import pytest
from web3 import Account

from autotx.config import Settings
from autotx.retry import RetryableRemoteQuery
from autotx.wallet import WalletManager

# Well-known development keys, never funded on a real network.
KEY_1 = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ADDRESS_1 = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
KEY_2 = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
ADDRESS_2 = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"

CHAIN_ID = 88817


class FakeLedger:
    """In-memory stand-in for the RPC node."""

    def __init__(self, balance=10 ** 16, gas_price=1000000, chain=CHAIN_ID):
        self.default_balance = balance
        self.balances = {}
        self.nonces = {}
        self.gas_price = gas_price
        self.chain = chain
        self.failures = Counter()
        self.calls = Counter()
        self.broadcasts = []

    def fail(self, method, times):
        self.failures[method] = times

    def _maybe_fail(self, method):
        self.calls[method] += 1
        if self.failures[method] > 0:
            self.failures[method] -= 1
            raise ConnectionError(f"{method} timed out")

    def get_balance(self, address):
        self._maybe_fail("get_balance")
        return self.balances.get(address, self.default_balance)

    def get_pending_nonce(self, address):
        self._maybe_fail("get_pending_nonce")
        return self.nonces.get(address, 0)

    def suggest_gas_price(self):
        self._maybe_fail("suggest_gas_price")
        return self.gas_price

    def broadcast(self, raw):
        self._maybe_fail("broadcast")
        sender = Account.recover_transaction(raw)
        self.nonces[sender] = self.nonces.get(sender, 0) + 1
        self.broadcasts.append(raw)
        return "0x" + "ab" * 32

    def chain_id(self):
        self._maybe_fail("chain_id")
        return self.chain


class RecordingReporter:
    def __init__(self):
        self.loaded = []
        self.successes = []
        self.skips = []
        self.summaries = []

    def wallet_loaded(self, address, transactions):
        self.loaded.append((address, transactions))

    def success(self, report):
        self.successes.append(report)

    def skip(self, slot, address, reason):
        self.skips.append((slot, address, reason))

    def summary(self, summary):
        self.summaries.append(summary)


class Sleeps:
    """Records requested sleeps instead of sleeping."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def sleeps():
    return Sleeps()


@pytest.fixture
def query(sleeps):
    return RetryableRemoteQuery(attempts=5, delay=5, sleep=sleeps)


@pytest.fixture
def manager(ledger, query):
    return WalletManager(ledger, query, CHAIN_ID, 21000)


@pytest.fixture
def settings():
    return Settings(
        min_amount=Decimal("0.000001"),
        max_amount=Decimal("0.000005"),
        min_balance=Decimal("0.001"),
        retry_delay=5,
    )


@pytest.fixture
def reporter():
    return RecordingReporter()
