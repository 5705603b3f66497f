"""エディタ抽象

旧ドキュメント座標のTextEdit列をドキュメントに適用する契約と、
ファイルを直接書き換える実装。
"""

from __future__ import annotations

from typing import Protocol

from ..diff.engine import TextEdit, apply_text_edits
from .filesystem import Filesystem


class EditorSurface(Protocol):
    """編集を適用するエディタの契約

    edits は非重複で、適用前のドキュメント座標で表現される。
    """

    async def apply_edits(self, path: str, edits: list[TextEdit]) -> str:
        """編集を適用し、適用後のドキュメント全文を返す"""
        ...


class FileEditorSurface:
    """ファイルを読み込み、編集を適用して書き戻すエディタ"""

    def __init__(self, filesystem: Filesystem) -> None:
        self._fs = filesystem

    async def apply_edits(self, path: str, edits: list[TextEdit]) -> str:
        content = await self._fs.read(path)
        if not edits:
            return content
        updated = apply_text_edits(content, edits)
        await self._fs.write(path, updated)
        return updated
