#!/usr/bin/env python3
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
#
# Author: ZNX

import argparse
import getpass
import logging
import signal
import sys
import threading

from autotx.config import SETTINGS_FILENAME, apply_overrides, load_settings
from autotx.errors import ConfigurationError, RetryError
from autotx.issuer import TransactionIssuer
from autotx.keys import load_private_keys, write_encrypted_keys
from autotx.params import RandomParameterGenerator
from autotx.report import ConsoleReporter, print_header
from autotx.retry import RetryableRemoteQuery
from autotx.rpc import RemoteLedger
from autotx.wallet import WalletManager, normalize_private_key

logger = logging.getLogger("autotx")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="R5 AutoTX - send randomized low-value transfers from a pool of wallets"
    )
    parser.add_argument("--config", default=SETTINGS_FILENAME,
                        help=f"Settings file (default: {SETTINGS_FILENAME}, created if missing)")
    parser.add_argument("--rpc-url", dest="rpc_url", help="Override the RPC URL from the settings file")
    parser.add_argument("--chain-id", dest="chain_id", type=int, help="Override the chain id")
    parser.add_argument("--keys", dest="keys_file", help="Private keys file (JSON list or encrypted)")
    parser.add_argument("--transactions", type=int,
                        help="Transactions per wallet (prompted for when omitted)")
    parser.add_argument("--wait", type=int, help="Seconds between transactions (prompted for when omitted)")
    parser.add_argument("--seed", type=int, help="Seed for amounts and gas prices")
    parser.add_argument("--encrypt-keys", metavar="OUTPUT",
                        help="Encrypt the keys file with a password, write it to OUTPUT and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def prompt_int(prompt, minimum, input_func=input):
    """Ask until the answer is an integer >= minimum."""
    while True:
        answer = input_func(prompt).strip()
        try:
            value = int(answer)
        except ValueError:
            print("Invalid number. Try again.")
            continue
        if value < minimum:
            print(f"Please enter a number greater than or equal to {minimum}.")
            continue
        return value


def prompt_for_password() -> str:
    while True:
        pwd1 = getpass.getpass("Create Encryption Password: ")
        pwd2 = getpass.getpass("Confirm Encryption Password: ")
        if pwd1 != pwd2:
            print("Passwords don't match. Try again.")
        elif not pwd1:
            print("Password must not be empty.")
        else:
            return pwd1


def encrypt_key_file(settings, output):
    keys = load_private_keys(settings.keys_file)
    for index, key in enumerate(keys):
        try:
            normalize_private_key(key)
        except ValueError as e:
            raise ConfigurationError(f"Failed to load private key #{index + 1}: {e}") from None
    write_encrypted_keys(keys, output, prompt_for_password())
    print(f"Encrypted {len(keys)} keys to {output}. Point keys_file at it and remove the plain file.")


def check_chain_id(ledger, query, chain_id):
    try:
        remote_chain_id = query.call(ledger.chain_id, "get chain id")
    except RetryError as e:
        logger.warning("Could not verify chain id against the node: %s", e.last_error)
        return
    if remote_chain_id != chain_id:
        raise ConfigurationError(
            f"Configured chain id {chain_id} does not match the node's chain id {remote_chain_id}")


def install_interrupt_handler(cancel):
    """First Ctrl+C stops the run after the current step, the second one exits."""
    def handler(signum, frame):
        print("\nStopping after the current step. Press Ctrl+C again to exit immediately.")
        cancel.set()
        signal.signal(signal.SIGINT, signal.default_int_handler)
    signal.signal(signal.SIGINT, handler)


def run(args):
    settings = apply_overrides(load_settings(args.config), args)

    if args.encrypt_keys:
        encrypt_key_file(settings, args.encrypt_keys)
        return 0

    keys = load_private_keys(settings.keys_file)
    cancel = threading.Event()
    ledger = RemoteLedger.connect(settings.rpc_url, timeout=settings.rpc_timeout,
                                  rate_limit=settings.rpc_rate_limit, cancel=cancel)
    query = RetryableRemoteQuery(settings.retry_attempts, settings.retry_delay, cancel=cancel)
    check_chain_id(ledger, query, settings.chain_id)

    manager = WalletManager(ledger, query, settings.chain_id, settings.gas_limit)
    identities = manager.create_identities(keys)

    if args.transactions is not None:
        transactions = args.transactions
    else:
        transactions = prompt_int("Enter the number of transactions per wallet: ", 1)
    if args.wait is not None:
        wait = args.wait
    else:
        wait = prompt_int("Enter the time between transactions (in seconds): ", 0)

    reporter = ConsoleReporter(symbol=settings.currency_symbol)
    for identity in identities:
        reporter.wallet_loaded(identity.address, transactions)

    issuer = TransactionIssuer(
        manager,
        identities,
        RandomParameterGenerator(seed=settings.seed),
        query,
        settings,
        reporter,
        cancel=cancel,
    )
    install_interrupt_handler(cancel)
    summary = issuer.run(transactions, wait)
    reporter.summary(summary)
    return 0


def main():
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%d-%m|%H:%M:%S"
    )
    # web3 and urllib3 are chatty at debug level
    logging.getLogger("web3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    print_header()
    try:
        sys.exit(run(args))
    except ConfigurationError as e:
        logger.error("%s", e)
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        print("\nExiting R5 AutoTX.")
        sys.exit(130)


if __name__ == "__main__":
    main()
