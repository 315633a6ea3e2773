"""
Central constants for apt-repo-tool.

This module consolidates all constants used throughout the codebase
to eliminate magic numbers and strings.
"""

# ============================================================================
# Configuration Defaults
# ============================================================================

# Default configuration file location
DEFAULT_CONFIG_PATH = "~/.config/apt-repo-tool/config.toml"

# Default filesystem locations (relative to path.cwd)
DEFAULT_REPOS_PATH = "repos"
DEFAULT_FILES_PATH = "files"
DEFAULT_TMP_PATH = "tmp"

# Default OpenPGP keyring file
DEFAULT_KEYRING_PATH = "keyring"

# Default listen address of the control server (informational)
DEFAULT_LISTEN = ":8080"

# ============================================================================
# Repository Layout
# ============================================================================

# Per-repository persisted state file
STATE_FILENAME = ".meta"

# Persisted log of issued ephemeral names (under the repository root)
NAMES_FILENAME = "names.dat"

# Prefix marking ephemeral repositories
EPHEMERAL_PREFIX = "@"

DISTS_DIR = "dists"
POOL_DIR = "pool"

RELEASE_FILENAME = "Release"
RELEASE_SIGNATURE_FILENAME = "Release.gpg"
INRELEASE_FILENAME = "InRelease"
PACKAGES_FILENAME = "Packages"
SOURCES_FILENAME = "Sources"
GZIP_EXTENSION = ".gz"
DEB_EXTENSION = ".deb"

# Suffix of exported public key files
PUBLIC_KEY_SUFFIX = ".gpg.key"

# Architectures advertised by the top-level Release file
RELEASE_ARCHITECTURES = ["i386", "amd64"]

# Release file timestamp format (always UTC)
RELEASE_DATE_FORMAT = "%a, %d %b %Y %H:%M:%S UTC"

# Defaults for a freshly created repository
DEFAULT_ORIGIN = "<origin>"
DEFAULT_LABEL = "<label>"
DEFAULT_DESCRIPTION = "<description>"
DEFAULT_CODENAME = "<codename>"
DEFAULT_COMPONENT = "main"

# ============================================================================
# Debian Archive Format
# ============================================================================

DEBIAN_BINARY_SECTION = "debian-binary"
DEBIAN_BINARY_VERSION = "2.0"
CONTROL_SECTION = "control.tar.gz"
CONTROL_MEMBER = "control"

# Builder signature section appended by Sign
SIGNATURE_SECTION = "_gpgbuilder"
SIGNATURE_MODE = 0o644
SIGNATURE_DATE_FORMAT = "%a %b %d %H:%M:%S %Y"

# ============================================================================
# Name Allocation
# ============================================================================

NAME_WIDTH = 10
NAME_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
NAME_BASE = 36
NAME_PAD = "="
NAME_MAX = NAME_BASE**NAME_WIDTH

# ============================================================================
# I/O
# ============================================================================

# Chunk size for streaming copies and digests
COPY_CHUNK_SIZE = 64 * 1024

# ============================================================================
# Exit Codes
# ============================================================================

EXIT_INTERNAL_ERROR = 1
EXIT_BAD_INPUT = 2
EXIT_FORBIDDEN = 3
EXIT_NOT_FOUND = 4
EXIT_CANCELLED = 130

# ============================================================================
# Logging and Display Constants
# ============================================================================

# Default width for log message wrapping
DEFAULT_LOG_WIDTH = 120
