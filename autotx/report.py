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

import sys
from dataclasses import dataclass

from autotx import __version__


def shorten_address(address: str) -> str:
    if len(address) < 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


@dataclass(frozen=True)
class SuccessReport:
    sender: str
    recipient: str
    amount: str
    tx_hash: str
    count: int


def print_header(stream=None):
    stream = stream or sys.stdout
    print("", file=stream)
    print("                         ┌ R5 AUTOTX ┐", file=stream)
    print("                         └  v" + __version__ + "  ┘", file=stream)
    print("", file=stream)
    print("-" * 68, file=stream)


class ConsoleReporter:
    """One line per transaction outcome, written to stdout."""

    def __init__(self, symbol="ETH", stream=None):
        self.symbol = symbol
        self.stream = stream or sys.stdout

    def _print(self, line):
        print(line, file=self.stream, flush=True)

    def wallet_loaded(self, address, transactions):
        self._print(f"Wallet {shorten_address(address)} will perform {transactions} transactions")

    def success(self, report: SuccessReport):
        self._print(
            f"From: {shorten_address(report.sender)}, "
            f"To: {shorten_address(report.recipient)}, "
            f"Amount: {report.amount} {self.symbol}, "
            f"Tx: {report.tx_hash}, "
            f"Transactions: {report.count}"
        )

    def skip(self, slot, address, reason):
        self._print(f"[{slot + 1}] Wallet {shorten_address(address)}: {reason}, skipping to next transaction")

    def summary(self, summary):
        self._print("-" * 68)
        state = "cancelled" if summary.cancelled else "finished"
        self._print(f"Run {state}: {summary.successes} sent, {summary.skipped} skipped, "
                    f"{summary.attempted}/{summary.scheduled} slots attempted")
        for address, count in summary.per_wallet:
            self._print(f"  {shorten_address(address)}: {count} transactions")
        self._print("-" * 68)
