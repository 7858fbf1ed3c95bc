"""Utility helpers shared by proxyview components."""
