"""
Discord Bot for the NationCraft community server

- Coordinates, teams and server info slash commands
- AI relay (/ask and !ask)
- Spam detection and warnings
- Touch grass voice tracker with a persistent leaderboard display
"""

from .bot import NationBot, run_bot
from .faq import match_faq
from .views import GrassView

__all__ = ["NationBot", "run_bot", "match_faq", "GrassView"]
