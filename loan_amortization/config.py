"""Runtime settings read from the environment.

Only the command-line front end consults these; the engine itself takes all
of its inputs as arguments.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .data_models import Frequency, InterestMethod

ENV_PREFIX = "LOAN_AMORTIZATION_"


@dataclass(frozen=True)
class Settings:
    log_level: str = "WARNING"
    max_rows: int = 120  # rows printed before the schedule is truncated
    default_method: InterestMethod = InterestMethod.REDUCING_BALANCE
    default_frequency: Frequency = Frequency.MONTHLY


def _env(environ: Mapping[str, str], name: str) -> Optional[str]:
    value = environ.get(ENV_PREFIX + name, "").strip()
    return value or None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build ``Settings`` from ``environ`` (``os.environ`` by default).

    Raises
    ------
    ValueError
        If a variable is set to a value that cannot be used; the message
        names the variable.
    """
    environ = os.environ if environ is None else environ
    defaults = Settings()

    log_level = (_env(environ, "LOG_LEVEL") or defaults.log_level).upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"{ENV_PREFIX}LOG_LEVEL: unknown level {log_level!r}")

    max_rows = defaults.max_rows
    raw_rows = _env(environ, "MAX_ROWS")
    if raw_rows is not None:
        try:
            max_rows = int(raw_rows)
        except ValueError:
            raise ValueError(f"{ENV_PREFIX}MAX_ROWS must be an integer, got {raw_rows!r}") from None
        if max_rows <= 0:
            raise ValueError(f"{ENV_PREFIX}MAX_ROWS must be positive, got {max_rows}")

    try:
        method = InterestMethod.parse(_env(environ, "DEFAULT_METHOD") or defaults.default_method)
        frequency = Frequency.parse(
            _env(environ, "DEFAULT_FREQUENCY") or defaults.default_frequency
        )
    except ValueError as exc:
        raise ValueError(f"{ENV_PREFIX}DEFAULT_*: {exc}") from None

    return Settings(
        log_level=log_level,
        max_rows=max_rows,
        default_method=method,
        default_frequency=frequency,
    )
