"""Internal constants shared across the library."""

BASE_URL = "https://api.netatmo.com"
USER_AGENT = "pynetatmo"

TOKEN_ENDPOINT = "/oauth2/token"
STATIONS_ENDPOINT = "/api/getstationsdata"
MEASURE_ENDPOINT = "/api/getmeasure"

#: Seconds shaved off ``expires_in`` and checked again before each use.
TOKEN_REFRESH_MARGIN: float = 60.0

#: Lifetime of cached device lists and station snapshots.
CACHE_TTL: float = 60.0

# ------------------------------------------------------------------
# Historical query defaults
# ------------------------------------------------------------------

DEFAULT_SCALE = "1hour"
DEFAULT_SENSOR_TYPES = "Temperature,Humidity,Pressure"
DEFAULT_DAYS_BACK = 7
DEFAULT_LIMIT = 1024

#: Scales accepted by ``getmeasure``.
VALID_SCALES: tuple[str, ...] = ("30min", "1hour", "3hours", "1day", "1week", "1month")

DATE_FORMAT = "%Y-%m-%d"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"
SECONDS_PER_DAY = 86400
END_OF_DAY_OFFSET = SECONDS_PER_DAY - 1
