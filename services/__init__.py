"""Services module containing file I/O, watching and the diff session"""
from .file_watcher import FileWatcher, FileEventHandler
from .session import DiffSession

__all__ = ['FileWatcher', 'FileEventHandler', 'DiffSession']
