"""Content provider plugins. Each module exposes load() which registers its adapters."""
