"""Errors raised by the file I/O collaborators"""


class FileReadError(OSError):
    """A watched or loaded file could not be read"""
    def __init__(self, path, cause):
        super().__init__(f"Failed to read file {path}: {cause}")
        self.path = path
        self.cause = cause


class FileWriteError(OSError):
    """Patched content could not be written back"""
    def __init__(self, path, cause):
        super().__init__(f"Failed to write file {path}: {cause}")
        self.path = path
        self.cause = cause
