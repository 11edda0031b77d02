"""Core constants for component-txn.

This module defines constants used throughout the package:
- Labels passed to primitive file operations
- Environment variable names for configuration
- Naming rules for temporary backups
"""

# ============================================================================
# Labels
# ============================================================================

#: Label used in error messages for operations on installed components
COMPONENT_LABEL: str = "component"

# ============================================================================
# Configuration
# ============================================================================

#: Overrides the directory that holds temporary backups
TEMP_DIR_ENV: str = "COMPONENT_TXN_TEMP_DIR"

#: Enables debug() output when set to 1/true/yes
DEBUG_ENV: str = "COMPONENT_TXN_DEBUG"

#: Log level name used by configure_logging() when none is passed
LOG_LEVEL_ENV: str = "COMPONENT_TXN_LOG_LEVEL"

#: Directory name created under the system temp dir when no override is set
DEFAULT_TEMP_DIRNAME: str = "component-txn"

#: Directory created beside an install root to hold its backups
LOCAL_TEMP_DIRNAME: str = ".component-txn-tmp"

# ============================================================================
# Backups
# ============================================================================

#: Prefix of allocated backup files
BACKUP_FILE_PREFIX: str = "file-"

#: Prefix of allocated backup directories
BACKUP_DIR_PREFIX: str = "dir-"

#: Child of a backup directory that holds a removed directory tree
BACKUP_DIR_CHILD: str = "bk"

#: Length of the hex suffix used for backup names
BACKUP_ID_LENGTH: int = 16
