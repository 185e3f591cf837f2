"""Account record protocol constants.

Single source of truth for on-wire header layout values.
Keep this file stable. Stored records depend on every value here.
"""

# Header: always 8 bytes, whatever the format.
ACCOUNT_HEADER_SIZE = 8

# Legacy header: [Disc(8)]
DEPRECATED_ACCOUNT_DISCRIMINATOR_SIZE = 8
DEPRECATED_DISCRIMINATOR_OFFSET = 0

# Versioned header: [Version(1) | Bump(1) | Disc(4) | Unused(2)]
ACCOUNT_DISCRIMINATOR_SIZE = 4
DISCRIMINATOR_OFFSET = 2
VERSIONED_HEADER_FMT = "<BB4s2s"
HEADER_VERSION = 0
HEADER_BUMP = 0
HEADER_UNUSED = b"\x00\x00"

# Digest input is "<namespace>:<CanonicalName>"
DEFAULT_NAMESPACE = "account"

# Borsh-style tag and key sizes
OPTION_TAG_SIZE = 1
ENUM_TAG_SIZE = 1
PUBLIC_KEY_SIZE = 32
