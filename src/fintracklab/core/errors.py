"""
Error classes for FinTrackLab.

The calculation engines do not raise for missing data; they return neutral
values instead. The classes below are raised at the edges of the library:
while coercing raw storage payloads into records and while reading settings
or command-line arguments.
"""


class ConfigError(Exception):
    """
    Configuration error in settings or command-line arguments.

    **Common Causes:**
    - A non-numeric or negative ``FINTRACKLAB_CACHE_TTL``
    - An unknown log level
    - A date-range bound that is not a ``YYYY-MM`` month key

    **Example Usage:**
        ```python
        from fintracklab.core.errors import ConfigError
        from fintracklab.core.settings import TrackerSettings

        try:
            TrackerSettings(cache_ttl=-1)
        except ConfigError as e:
            print(f"Configuration error: {e}")
        ```
    """

    pass


class RecordError(ValueError):
    """
    Malformed record payload.

    Raised by ``InvestmentRecord.from_dict`` and friends when a required field
    is missing or cannot be coerced to its type. Engine functions never raise
    this; they expect already-built records.

    Attributes:
        record_id: Identifier of the offending record, when known
    """

    def __init__(self, message: str, record_id: str | None = None):
        self.record_id = record_id
        prefix = f"[record {record_id}] " if record_id else ""
        super().__init__(f"{prefix}{message}")
