"""
styx - provisión convergente de un bastión WireGuard con reverse proxy.
"""

__version__ = "1.0.0"
