"""Application constants - all magic numbers centralized."""

# Adaptive difficulty
DEFAULT_DIFFICULTY = "medium"
MIN_ATTEMPTS_FOR_DIFFICULTY_CHANGE = 3  # Difficulty is frozen below this many attempts
HARD_ACCURACY_THRESHOLD = 80  # accuracy >= 80: hard
MEDIUM_ACCURACY_THRESHOLD = 60  # 60 <= accuracy < 80: medium, below: easy

# Content generation
MIN_GENERATION_COUNT = 1
MAX_GENERATION_COUNT = 5
DEFAULT_GENERATION_COUNT = 3
QUIZ_OPTION_COUNT = 4

# LLM token budgets (defaults; overridable through settings)
CHAT_MAX_TOKENS = 2048
GENERATION_MAX_TOKENS = 3000
RESEARCH_MAX_TOKENS = 2048
SCENARIO_MAX_TOKENS = 3000
