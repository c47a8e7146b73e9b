"""StreamToShelf - find where to buy the music you stream."""

__version__ = "1.0.0"
