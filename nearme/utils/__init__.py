"""Utility helpers."""
from nearme.utils.hostname_parser import HostnameParser

__all__ = ["HostnameParser"]
