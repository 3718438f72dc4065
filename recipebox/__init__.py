"""RecipeBox: capture, extract, merge and keep recipes."""

__version__ = "1.0.0"
