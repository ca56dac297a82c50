"""Core module containing the diff/patch engine"""
from .models import Line, ParsedFile, DiffRow, PendingChange, FileChangeEntry
from .events import FileChangeEvent
from .errors import FileReadError, FileWriteError
from .env_format import parse_content, parse_lines, build_assignment_line
from .differ import compute_diff
from .pending import PendingChangeStore
from .patcher import patch_file_content, group_changes_by_file
from .reconciler import reconcile_file_change, ReconcileResult

__all__ = [
    'Line', 'ParsedFile', 'DiffRow', 'PendingChange', 'FileChangeEntry',
    'FileChangeEvent', 'FileReadError', 'FileWriteError',
    'parse_content', 'parse_lines', 'build_assignment_line',
    'compute_diff', 'PendingChangeStore',
    'patch_file_content', 'group_changes_by_file',
    'reconcile_file_change', 'ReconcileResult',
]
