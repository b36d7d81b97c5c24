"""
slideplay - playback, live-edit and export core for HTML slide decks.
"""

__version__ = "0.1.0"
