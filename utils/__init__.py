"""Utility functions and helpers"""
from .helpers import truncate, summarize_changes
from .paths import find_file_index

__all__ = ['truncate', 'summarize_changes', 'find_file_index']
