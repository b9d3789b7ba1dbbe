"""Covenant spec configuration constants.

Keep this file aligned with the consensus constants of the target chain
(nLockTime semantics, sighash flags) and with the contract templates in
`covenant_spec.contracts`.
"""

# Locktime
LOCKTIME_BLOCK_HEIGHT_MARKER = 500_000_000  # below: block height, at/above: UNIX time
UINT_MAX = 0xFFFFFFFF  # final sequence number, disables nLockTime

# Sighash
SIGHASH_ALL = 0x01
SIGHASH_FORKID = 0x40
DEFAULT_SIGHASH_TYPE = SIGHASH_ALL | SIGHASH_FORKID

# Transactions
DEFAULT_TX_VERSION = 1
OUTPOINT_SIZE = 36
TXID_SIZE = 32
PKH_SIZE = 20
MAX_SATOSHIS = 21_000_000 * 10**8

# Public keys (SEC1)
COMPRESSED_PUBKEY_SIZE = 33
UNCOMPRESSED_PUBKEY_SIZE = 65

# Oracle stamps are raw r || s
STAMP_SIZE = 64

# Contract layout
STATE_VERSION = 0x00
ORDINAL_OUTPUT_VALUE = 1  # inscriptions are carried on a single satoshi

# Hashed map limits
MAX_MAP_SIZE = 10_000
MAX_MAP_VALUE_SIZE = 1_000_000
