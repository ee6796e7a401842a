"""Internal constants shared across the library."""

AGENT_ID = "shipsio-signalk-plugin"
AGENT_NAME = "ShipsIO AIS Network Exchanger"
AGENT_DESCRIPTION = (
    "Exchange AIS messages with ShipsIO open AIS Network. Enabling this will automatically "
    "return close by ships and integrate them into your AIS stream."
)

SIGNALK_URL = "http://localhost:3000"
SIGNALK_VESSELS_PATH = "/signalk/v1/api/vessels"

SHIPSIO_URL = "https://shipsio.com"
SHIPSIO_POST_PATH = "/public/ais/signalk"

#: Largest response body either endpoint may return (1 MiB).
MAX_BODY_BYTES = 1024 * 1024

# ------------------------------------------------------------------
# Scheduling (seconds)
# ------------------------------------------------------------------

DEFAULT_INTERVAL = 600.0
MIN_INTERVAL = 120.0
FIRST_CYCLE_DELAY = 30.0

# ------------------------------------------------------------------
# ShipsIO wire protocol
# ------------------------------------------------------------------

POSTED_PREFIX = '{"Posted":'
INVALID_KEY_BODY = "Invalid key"
IMO_PREFIX = "IMO "
MMSI_CONTEXT_PREFIX = "vessels.urn:mrn:imo:mmsi:"
