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
import time

from autotx.errors import BroadcastError, RetryError

logger = logging.getLogger(__name__)


def retry(attempts, delay, operation, sleep=time.sleep, description="operation", should_stop=None):
    """
    Call operation() until it succeeds or attempts run out.

    Attempts are strictly sequential with a fixed delay between them (no
    backoff, no jitter). There is no sleep after the final failure. When
    should_stop() returns True the loop gives up early with the last error.
    Raises RetryError wrapping the last exception.
    """
    if attempts < 1:
        raise ValueError("attempts must be at least 1")
    last_error = None
    made = 0
    for attempt in range(1, attempts + 1):
        made = attempt
        try:
            return operation()
        except Exception as e:
            last_error = e
            logger.warning("Failed to %s (attempt %d/%d): %s", description, attempt, attempts, e)
        if attempt == attempts:
            break
        if should_stop is not None and should_stop():
            break
        sleep(delay)
        if should_stop is not None and should_stop():
            break
    raise RetryError(description, made, last_error)


class RetryableRemoteQuery:
    """
    Applies the retry policy to every remote call.

    Reads (nonce, balance) degrade to a fallback value once retries are
    exhausted; writes (broadcast) raise BroadcastError so the caller can drop
    the slot. If a cancel event is given, the retry delay waits on it so a
    shutdown request cuts the delay short.
    """

    def __init__(self, attempts=5, delay=5.0, sleep=None, cancel=None):
        self.attempts = attempts
        self.delay = delay
        self.cancel = cancel
        if sleep is not None:
            self._sleep = sleep
        elif cancel is not None:
            self._sleep = cancel.wait
        else:
            self._sleep = time.sleep

    def _should_stop(self):
        return self.cancel is not None and self.cancel.is_set()

    def call(self, operation, description):
        return retry(self.attempts, self.delay, operation, sleep=self._sleep,
                     description=description, should_stop=self._should_stop)

    def read(self, operation, description, fallback=0):
        try:
            return self.call(operation, description)
        except RetryError as e:
            logger.warning("Failed to %s after %d attempt(s), using fallback value %r",
                           description, e.attempts, fallback)
            return fallback

    def write(self, operation, description):
        try:
            return self.call(operation, description)
        except RetryError as e:
            raise BroadcastError(description, e.attempts, e.last_error) from e.last_error
