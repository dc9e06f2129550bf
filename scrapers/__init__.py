"""Provider plugin system for content sources.

Plugin architecture for episode hosts:
- loader: Provider contract and plugin discovery
- plugins: Actual provider adapters
"""

from scrapers import loader

__all__ = ["loader"]
