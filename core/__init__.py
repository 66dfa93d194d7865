"""core package initialization.

Making `core` an explicit package so imports like `import core.save`
work reliably when running `main.py` from the project root.
"""

__all__ = ["app", "events", "rng", "save", "scene", "storage", "tuning"]
