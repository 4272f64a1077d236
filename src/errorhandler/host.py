"""Capabilities supplied by the host environment.

The retry executor and the reporter never reach for ambient globals;
everything environment-specific arrives through a HostServices instance
injected once by the host.
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from errorhandler.utils.time import utc_now


@dataclass(frozen=True)
class HostServices:
    """Injected host capabilities.

    Attributes:
        sleep: Blocking delay, in seconds.
        now: Current time as a timezone-aware datetime.
        random: Uniform float in [0, 1), used for backoff jitter.
        active_locale: Locale of the active user. May raise; None means
            the host cannot tell, and the locale is inferred from the message.
        script_identifier: Identifier used to build deep links. None, or a
            failure, leaves the identifier empty.
    """

    sleep: Callable[[float], None] = time.sleep
    now: Callable[[], datetime] = utc_now
    random: Callable[[], float] = random.random
    active_locale: Callable[[], str] | None = None
    script_identifier: Callable[[], str] | None = None


DEFAULT_HOST = HostServices()
