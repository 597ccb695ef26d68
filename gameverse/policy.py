"""
Policy Module (Centralized Delays, Backoff & Limits)

Constants only. No side effects. No imports from other gameverse modules.
"""

# Background recognition restart policy
MAX_CONSECUTIVE_ERRORS = 3
BACKOFF_BASE_SECONDS = 3.0
BACKOFF_CAP_SECONDS = 30.0
RESTART_AFTER_END_SECONDS = 1.0
MANUAL_RESTART_DELAY_SECONDS = 0.5

# Wake word -> command capture
COMMAND_PROMPT_DELAY_SECONDS = 1.0
WAKE_COOLDOWN_SECONDS = 5.0

# Dispatcher delays (let the spoken reply start before the screen changes)
NAVIGATION_DELAY_SECONDS = 1.0
CLOSE_DELAY_SECONDS = 1.5

# Speech output
SPEECH_RATE = 1.0
SPEECH_PITCH = 1.0
SPEECH_VOLUME = 1.0
VOLUME_STEP = 0.1

# Chat transcript
CHAT_HISTORY_LIMIT = 50

# Recognition error codes that mean "the user said no"
PERMISSION_ERROR_CODES = ("not-allowed", "service-not-allowed")
