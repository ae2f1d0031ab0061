"""Rules engine for a five-round price prediction game: vault, oracle, game engine, scoring and prizes."""

__version__ = "0.1.0"