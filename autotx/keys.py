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
Key file handling.

Two formats are accepted:

  * a plain JSON array of hex private keys: ["0xabc...", "def..."]
  * an encrypted file {"salt": ..., "keys": ...} written by
    `autotx --encrypt-keys`, where "keys" is a Fernet token over the JSON
    array and the Fernet key is derived from a password with PBKDF2.
"""

import base64
import getpass
import json
import os

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from autotx.errors import ConfigurationError

KDF_ITERATIONS = 100000


def derive_key(password: str, salt: bytes) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=KDF_ITERATIONS,
    )
    return base64.urlsafe_b64encode(kdf.derive(password.encode()))


def encrypt_keys(keys: list, password: str) -> dict:
    salt = os.urandom(16)
    f = Fernet(derive_key(password, salt))
    token = f.encrypt(json.dumps(keys).encode())
    return {
        "salt": base64.urlsafe_b64encode(salt).decode(),
        "keys": token.decode(),
    }


def decrypt_keys(file_data: dict, password: str) -> list:
    try:
        salt = base64.urlsafe_b64decode(file_data["salt"])
        f = Fernet(derive_key(password, salt))
        return json.loads(f.decrypt(file_data["keys"].encode()).decode())
    except InvalidToken:
        raise ConfigurationError("Incorrect password or corrupt key file") from None
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Corrupt encrypted key file: {e}") from None


def is_encrypted(file_data) -> bool:
    return isinstance(file_data, dict) and "salt" in file_data and "keys" in file_data


def load_private_keys(filename: str, password_prompt=getpass.getpass) -> list:
    """Read the key list, prompting for a password if the file is encrypted."""
    try:
        with open(filename, "r") as f:
            file_data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Failed to read private keys file: {e}") from None
    except ValueError as e:
        raise ConfigurationError(f"Failed to unmarshal private keys: {e}") from None

    if is_encrypted(file_data):
        keys = decrypt_keys(file_data, password_prompt("Key file password: "))
    else:
        keys = file_data

    if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
        raise ConfigurationError("Private keys file must contain a JSON list of hex strings")
    if not keys:
        raise ConfigurationError(f"No private keys found in {filename}")
    return keys


def write_encrypted_keys(keys: list, filename: str, password: str):
    with open(filename, "w") as f:
        json.dump(encrypt_keys(keys, password), f)
