"""
Jester Constants

Shared constants used across the codebase.
"""

# Telegram hard limit for a single text message
MAX_MESSAGE_LENGTH = 4096

# Room reserved in every chunk for the "part i of n" marker
PART_MARKER_MARGIN = 100

PART_MARKER = "\n\n📄 Часть {index} из {total}"

COMMAND_PREFIX = "/"

USER_AGENT = "Mozilla/5.0 (compatible; JesterBot/2.0)"

BOT_VERSION = "2.0.0"
