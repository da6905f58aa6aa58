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
The issuance loop.

Each slot walks SELECT_WALLET -> CHECK_BALANCE -> BUILD -> SIGN -> BROADCAST
-> RECORD -> WAIT, dropping out to a skip at the first step that fails.
Slots run strictly one after another, so at most one transaction is ever in
flight and the nonce read right before signing is the one broadcast.
"""

import enum
import logging
import time
from collections import Counter
from dataclasses import dataclass, field

from autotx.errors import BroadcastError, ConfigurationError, SigningError
from autotx.report import SuccessReport
from autotx.units import to_display_unit, to_intermediate_unit, to_smallest_unit

logger = logging.getLogger(__name__)


class Outcome(enum.Enum):
    SENT = "sent"
    INSUFFICIENT_BALANCE = "insufficient balance"
    SIGNING_FAILED = "transaction signing failed"
    BROADCAST_FAILED = "failed to send transaction"
    CANCELLED = "cancelled"


class WalletCounters:
    """Successful broadcasts per wallet index. Counts only ever go up."""

    def __init__(self, wallet_count: int):
        self._counts = [0] * wallet_count

    def increment(self, index: int) -> int:
        self._counts[index] += 1
        return self._counts[index]

    def __getitem__(self, index: int) -> int:
        return self._counts[index]

    def __len__(self):
        return len(self._counts)

    def total(self) -> int:
        return sum(self._counts)


@dataclass
class RunSummary:
    scheduled: int
    attempted: int = 0
    successes: int = 0
    skips: Counter = field(default_factory=Counter)
    cancelled: bool = False
    per_wallet: list = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return sum(self.skips.values())


def select_wallet(slot: int, wallet_count: int) -> int:
    return slot % wallet_count


class TransactionIssuer:
    def __init__(self, manager, identities, generator, query, settings, reporter,
                 cancel=None, sleep=None):
        if not identities:
            raise ConfigurationError("No wallets loaded")
        self.manager = manager
        self.identities = list(identities)
        self.generator = generator
        self.query = query
        self.settings = settings
        self.reporter = reporter
        self.cancel = cancel
        if sleep is not None:
            self._sleep = sleep
        elif cancel is not None:
            self._sleep = cancel.wait
        else:
            self._sleep = time.sleep
        self.min_balance = to_smallest_unit(settings.min_balance)
        self.counters = WalletCounters(len(self.identities))

    def _cancelled(self) -> bool:
        return self.cancel is not None and self.cancel.is_set()

    def run(self, transactions_per_wallet: int, wait_seconds: int) -> RunSummary:
        if transactions_per_wallet < 0:
            raise ConfigurationError("Number of transactions per wallet must not be negative")
        if wait_seconds < 0:
            raise ConfigurationError("Time between transactions must not be negative")
        total = transactions_per_wallet * len(self.identities)
        summary = RunSummary(scheduled=total)
        logger.info("Issuing %d transactions across %d wallets", total, len(self.identities))

        for slot in range(total):
            if self._cancelled():
                summary.cancelled = True
                break
            summary.attempted += 1
            outcome = self.run_slot(slot)
            if outcome is Outcome.CANCELLED:
                summary.cancelled = True
                break
            if outcome is Outcome.SENT:
                summary.successes += 1
            else:
                summary.skips[outcome] += 1
            if slot == total - 1:
                break
            if outcome is Outcome.SENT or self.settings.wait_after_skip:
                self._sleep(wait_seconds)

        summary.per_wallet = [(identity.address, self.counters[i])
                              for i, identity in enumerate(self.identities)]
        return summary

    def run_slot(self, slot: int) -> Outcome:
        index = select_wallet(slot, len(self.identities))
        identity = self.identities[index]
        s = self.settings

        # CHECK_BALANCE
        balance = self.query.read(lambda: self.manager.ledger.get_balance(identity.address),
                                  "get balance", fallback=0)
        if self._cancelled():
            self.reporter.skip(slot, identity.address, "cancelled")
            return Outcome.CANCELLED
        if balance < self.min_balance:
            self.reporter.skip(slot, identity.address, "insufficient balance")
            return Outcome.INSUFFICIENT_BALANCE

        # BUILD
        recipient = self.generator.random_recipient_address()
        amount = self.generator.random_amount(s.min_amount, s.max_amount)
        gas_price = self.generator.random_gas_price(s.min_gas_price, s.max_gas_price)
        intent = self.manager.build_intent(identity, recipient, amount, gas_price)
        if self._cancelled():
            self.reporter.skip(slot, identity.address, "cancelled")
            return Outcome.CANCELLED

        # SIGN
        try:
            signed = self.manager.sign(intent)
        except SigningError as e:
            logger.debug("Slot %d: %s", slot, e)
            self.reporter.skip(slot, identity.address, "transaction signing failed")
            return Outcome.SIGNING_FAILED

        # BROADCAST
        try:
            self.query.write(lambda: self.manager.ledger.broadcast(signed.raw), "send transaction")
        except BroadcastError as e:
            if self._cancelled():
                self.reporter.skip(slot, identity.address, "cancelled")
                return Outcome.CANCELLED
            logger.debug("Slot %d: %s", slot, e)
            self.reporter.skip(slot, identity.address, "failed to send transaction")
            return Outcome.BROADCAST_FAILED

        # RECORD
        count = self.counters.increment(index)
        logger.debug("Slot %d: nonce %d, gas price %s gwei", slot, signed.nonce,
                     to_intermediate_unit(gas_price))
        self.reporter.success(SuccessReport(
            sender=identity.address,
            recipient=recipient,
            amount=to_display_unit(amount),
            tx_hash=signed.hash,
            count=count,
        ))
        return Outcome.SENT
