# moviefan/__init__.py
# Movie-fan community backend: catalog browsing, social graph and fan feeds.

__version__ = "0.1.0"
