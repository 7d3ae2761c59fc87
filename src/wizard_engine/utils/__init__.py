"""Utility helpers"""
from .data import MISSING, deep_merge, flatten, get_path

__all__ = ["MISSING", "deep_merge", "flatten", "get_path"]
