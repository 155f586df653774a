"""Protocol constants for the offer fill engine.

Centralizes well-known addresses and settlement parameters.
"""

# Taker value meaning "anyone may fill"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# EIP-712 domain the settlement contract signs offers under
DEFAULT_DOMAIN_NAME = "DIVA Protocol"
DEFAULT_DOMAIN_VERSION = "1"

# Extra base units added on top of a required allowance when approving.
# The engine's proportional amounts and the settlement layer's own
# recomputation may differ by one unit after truncating division.
ALLOWANCE_BUFFER = 1

# Seconds to wait for an approval or fill transaction to be mined
DEFAULT_TX_TIMEOUT_SECONDS = 120.0

# Seconds to wait for a relay API response
DEFAULT_RELAY_TIMEOUT_SECONDS = 10.0
