from dataclasses import dataclass
from typing import Any

from stmtadapter.constants import SUPPORTED_FETCH_MODES, FetchMode

from libb import ConfigOptions

__all__ = ['AdapterOptions']


@dataclass
class AdapterOptions(ConfigOptions):
    """Options

    Seed the adapter's fetch configuration. set_fetch_mode() replaces it
    later without validation.

    - fetch_mode: default fetch mode (default: FetchMode.BOTH)
    - fetch_argument: class (or dotted class path) for CLASS, column index for COLUMN
    - ctor_args: constructor arguments for CLASS
    - log_sql: log SQL text, bind signature and timing at DEBUG (default: True)
    """
    fetch_mode: FetchMode = FetchMode.BOTH
    fetch_argument: Any = None
    ctor_args: Any = None
    log_sql: bool = True

    def __post_init__(self):
        try:
            self.fetch_mode = FetchMode(self.fetch_mode)
        except ValueError:
            self.fetch_mode = None
        if self.fetch_mode not in SUPPORTED_FETCH_MODES:
            available = sorted(mode.name for mode in SUPPORTED_FETCH_MODES)
            raise ValueError(f'fetch_mode must be one of: {available}')
