"""Signed CloudFront redirects for large stored binaries."""

__version__ = "1.0.0"
