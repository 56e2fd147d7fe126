"""
CloudFront access-log query tool
"""

__version__ = "1.0.0"
