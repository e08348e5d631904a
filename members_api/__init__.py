"""Members API - member management service with bearer-token auth"""

__version__ = "0.1.0"
