"""
subsweep - wordlist-driven subdomain discovery
"""

__version__ = "1.0.0"
