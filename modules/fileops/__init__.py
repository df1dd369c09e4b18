"""
File operations module for filekit.

Copying, deleting, creating and listing files with validated preconditions.
"""

from .file_ops import FileOperator, DeleteStatus
from .listing import FileFilter, iter_files, list_files, suffix_filter
from .streams import (
    close_quietly,
    closing_quietly,
    copy_input_stream_to_file,
    open_input_stream,
    open_output_stream,
)

__all__ = [
    'FileOperator',
    'DeleteStatus',
    'FileFilter',
    'iter_files',
    'list_files',
    'suffix_filter',
    'close_quietly',
    'closing_quietly',
    'copy_input_stream_to_file',
    'open_input_stream',
    'open_output_stream',
]
