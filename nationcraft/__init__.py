"""NationCraft community Discord bot"""

__version__ = "0.1.0"
