"""
Centralized Validation Limits

All caps and ceilings in one place for consistency.
Import these in the API routes, the client flow and the services.
"""

# =============================================================================
# QUIZ LIMITS
# =============================================================================

# Free-text quiz answers keep at most this many words
QUIZ_MAX_WORDS = 4

# Upper bound on any single raw answer accepted by the API
ANSWER_MAX_LENGTH = 500

# =============================================================================
# GENERATION LIMITS
# =============================================================================

# Seconds between two status checks of a prediction
POLL_INTERVAL_SECONDS = 2.0

# Status checks before giving up (~2 minutes at the default interval)
MAX_POLL_ATTEMPTS = 60

# Prompts passed verbatim to the image model
PROMPT_MAX_LENGTH = 8000

# =============================================================================
# NAMING LIMITS
# =============================================================================

# Generated hero names are cut to this many characters
HERO_NAME_MAX_LENGTH = 60

# Tokens requested from the chat model for a hero name
HERO_NAME_MAX_TOKENS = 12

# =============================================================================
# DIALOGUE LIMITS
# =============================================================================

# Sentences kept per speech bubble
MAX_SENTENCES_PER_BUBBLE = 2
