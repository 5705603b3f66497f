"""リバート

記録された変更をファイルシステム・エディタに対して逆順に取り消す。
"""

from .editor import EditorSurface, FileEditorSurface
from .filesystem import FileKind, Filesystem, PathOutsideWorkspaceError, WorkspaceFilesystem
from .service import (
    CancellationToken,
    RevertCancelledError,
    RevertOutcome,
    RevertResult,
    RevertService,
)

__all__ = [
    # Filesystem / Editor
    "FileKind",
    "Filesystem",
    "WorkspaceFilesystem",
    "PathOutsideWorkspaceError",
    "EditorSurface",
    "FileEditorSurface",
    # Service
    "RevertService",
    "RevertResult",
    "RevertOutcome",
    "CancellationToken",
    "RevertCancelledError",
]
