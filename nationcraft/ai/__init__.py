from .relay import AIRelay, filter_blocked, BLOCKED_PHRASES
