"""pdk - Puppet Development Kit command dispatcher."""

__version__ = "0.1.0"
commit = "none"
date = "unknown"
