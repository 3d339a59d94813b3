"""Review Responder Service - Google Business Profile review sync and reply management"""

__version__ = "1.0.0"
