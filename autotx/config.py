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

import configparser
import logging
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

from autotx.errors import ConfigurationError

logger = logging.getLogger(__name__)

SETTINGS_FILENAME = "autotx.ini"
SECTION = "AutoTX"

DEFAULT_INI = """[AutoTX]
rpc_url = https://rpc-testnet.unit0.dev
chain_id = 88817
keys_file = privateKeys.json
currency_symbol = ETH
# Transfer amount bounds, in display units
min_amount = 0.000001
max_amount = 0.000005
# Gas price bounds, in wei
min_gas_price = 900000
max_gas_price = 1500000
gas_limit = 21000
# Wallets holding less than this (display units) are skipped
min_balance = 0.001
retry_attempts = 5
# Seconds between retries
retry_delay = 5
# Also wait the full interval after a skipped transaction
wait_after_skip = false
# Maximum RPC requests per minute. 0 means unlimited.
rpc_rate_limit = 0
# Seconds before an RPC request times out
rpc_timeout = 10
# Seed for amounts and gas prices. Empty means random.
seed =
"""


@dataclass
class Settings:
    rpc_url: str = "https://rpc-testnet.unit0.dev"
    chain_id: int = 88817
    keys_file: str = "privateKeys.json"
    currency_symbol: str = "ETH"
    min_amount: Decimal = Decimal("0.000001")
    max_amount: Decimal = Decimal("0.000005")
    min_gas_price: int = 900000
    max_gas_price: int = 1500000
    gas_limit: int = 21000
    min_balance: Decimal = Decimal("0.001")
    retry_attempts: int = 5
    retry_delay: float = 5.0
    wait_after_skip: bool = False
    rpc_rate_limit: int = 0
    rpc_timeout: int = 10
    seed: Optional[int] = None

    def validate(self):
        if self.min_amount < 0 or self.max_amount < self.min_amount:
            raise ConfigurationError(f"Invalid amount bounds: [{self.min_amount}, {self.max_amount}]")
        if self.min_gas_price < 0 or self.max_gas_price < self.min_gas_price:
            raise ConfigurationError(
                f"Invalid gas price bounds: [{self.min_gas_price}, {self.max_gas_price}]")
        if self.min_balance <= self.max_amount:
            logger.warning("min_balance (%s) does not exceed max_amount (%s); gas may not be covered",
                           self.min_balance, self.max_amount)
        if self.gas_limit <= 0:
            raise ConfigurationError("gas_limit must be positive")
        if self.retry_attempts < 1:
            raise ConfigurationError("retry_attempts must be at least 1")
        if self.retry_delay < 0:
            raise ConfigurationError("retry_delay must not be negative")
        if self.rpc_rate_limit < 0:
            raise ConfigurationError("rpc_rate_limit must not be negative")
        return self


def _get_int(section, key, default):
    value = section.get(key, fallback="").strip()
    if value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"Setting '{key}' must be an integer, got {value!r}") from None


def _get_decimal(section, key, default):
    value = section.get(key, fallback="").strip()
    if value == "":
        return default
    try:
        return Decimal(value)
    except InvalidOperation:
        raise ConfigurationError(f"Setting '{key}' must be a number, got {value!r}") from None


def _get_float(section, key, default):
    value = section.get(key, fallback="").strip()
    if value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"Setting '{key}' must be a number, got {value!r}") from None


def _get_bool(section, key, default):
    try:
        return section.getboolean(key, fallback=default)
    except ValueError:
        raise ConfigurationError(f"Setting '{key}' must be true or false") from None


def parse_settings(config: configparser.ConfigParser) -> Settings:
    if not config.has_section(SECTION):
        raise ConfigurationError(f"Settings file is missing the [{SECTION}] section")
    section = config[SECTION]
    d = Settings()
    settings = Settings(
        rpc_url=section.get("rpc_url", fallback=d.rpc_url).strip() or d.rpc_url,
        chain_id=_get_int(section, "chain_id", d.chain_id),
        keys_file=section.get("keys_file", fallback=d.keys_file).strip() or d.keys_file,
        currency_symbol=section.get("currency_symbol", fallback=d.currency_symbol).strip() or d.currency_symbol,
        min_amount=_get_decimal(section, "min_amount", d.min_amount),
        max_amount=_get_decimal(section, "max_amount", d.max_amount),
        min_gas_price=_get_int(section, "min_gas_price", d.min_gas_price),
        max_gas_price=_get_int(section, "max_gas_price", d.max_gas_price),
        gas_limit=_get_int(section, "gas_limit", d.gas_limit),
        min_balance=_get_decimal(section, "min_balance", d.min_balance),
        retry_attempts=_get_int(section, "retry_attempts", d.retry_attempts),
        retry_delay=_get_float(section, "retry_delay", d.retry_delay),
        wait_after_skip=_get_bool(section, "wait_after_skip", d.wait_after_skip),
        rpc_rate_limit=_get_int(section, "rpc_rate_limit", d.rpc_rate_limit),
        rpc_timeout=_get_int(section, "rpc_timeout", d.rpc_timeout),
        seed=_get_int(section, "seed", d.seed),
    )
    return settings.validate()


def load_settings(settings_file=SETTINGS_FILENAME) -> Settings:
    """Read the settings file, creating one with default values if necessary."""
    config = configparser.ConfigParser()
    if not os.path.exists(settings_file):
        with open(settings_file, "w") as f:
            f.write(DEFAULT_INI)
        logger.info("Created default %s", settings_file)
    try:
        config.read(settings_file)
    except configparser.Error as e:
        raise ConfigurationError(f"Settings file {settings_file} is corrupted: {e}") from None
    return parse_settings(config)


def apply_overrides(settings: Settings, args) -> Settings:
    """Command line flags win over the settings file when given."""
    for key in ("rpc_url", "chain_id", "keys_file", "seed"):
        value = getattr(args, key, None)
        if value is not None:
            setattr(settings, key, value)
    return settings.validate()
