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

class AutoTXError(Exception):
    """Base class for every error raised by AutoTX."""


class ConfigurationError(AutoTXError):
    """
    Startup problem the run cannot recover from: unreadable or malformed key
    file, bad settings, unreachable RPC endpoint. Only the entry point turns
    this into a process exit.
    """


class RetryError(AutoTXError):
    """A remote operation kept failing until the attempt budget ran out."""

    def __init__(self, description, attempts, last_error):
        super().__init__(f"{description} failed after {attempts} attempt(s): {last_error}")
        self.description = description
        self.attempts = attempts
        self.last_error = last_error


class BroadcastError(RetryError):
    """The signed transaction could not be submitted to the node."""


class SigningError(AutoTXError):
    """The transaction could not be built or signed locally."""


class CancelledError(AutoTXError):
    """The run was asked to stop before the remote call could be made."""
