"""Protocol and tuning defaults shared by servers and clients."""

DEFAULT_MAX_STREAMS = 128
DEFAULT_MAX_RECIEVE_WINDOW_SIZE = 24 * 1024 * 1024  # 24 MB
DEFAULT_CONNECTION_TIMEOUT = 10
DEFAULT_MAX_NB_CONNECTIONS = 10
DEFAULT_MAX_ACK_DELAY = 25
DEFAULT_ACK_EXPONENT = 3
ALPN_GEYSER_PROTOCOL_ID = b"geyser"
MAX_DATAGRAM_SIZE = 1350
MAX_PAYLOAD_BUFFER = 5 * MAX_DATAGRAM_SIZE
DEFAULT_ENABLE_PACING = True
DEFAULT_CC_ALGORITHM = "cubic"
DEFAULT_INCREMENTAL_PRIORITY = True
DEFAULT_ENABLE_GSO = True
DEFAULT_DISCOVER_PMTU = True
DEFAULT_PARALLEL_STREAMS = 32
DEFAULT_DISCONNECT_LAGGY_CLIENTS = True