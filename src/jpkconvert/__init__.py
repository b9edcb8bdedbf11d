"""jpk-convert - Map accounting system exports onto JPK document fields."""

__version__ = "0.1.0"
