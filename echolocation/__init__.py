"""
Echolocation

Core of a spatial-audio guessing game: the player pings an arena to hear
echoes from a hidden target, then places a single final guess. This
package holds the game rules only; rendering and audio live in the
consuming application.
"""

__version__ = '0.1.0'

__all__ = ['__version__']
