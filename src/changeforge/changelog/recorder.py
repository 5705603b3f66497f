"""変更レコーダー

生成されたコンテンツをワークスペースに適用し、その変更を変更ログに記録する。
modified はエディタ経由で最小編集として適用する。
"""

from __future__ import annotations

import logging
from typing import Protocol

from ..core.config import DiffConfig
from ..core.models import ChangeType, FileChangeEntry
from ..diff.engine import compute_precise_text_edits
from ..diff.entities import ContentAnalyzer
from ..diff.summarizer import generate_change_summary
from ..revert.editor import EditorSurface, FileEditorSurface
from ..revert.filesystem import FileKind, Filesystem
from .manager import ChangeLogManager

logger = logging.getLogger(__name__)


class ContentGenerator(Protocol):
    """指示と現在の内容から新しい内容を生成する外部コラボレータ"""

    async def generate(self, file_path: str, instruction: str, current_content: str) -> str: ...


class ChangeRecorder:
    """ファイル変更の適用と記録"""

    def __init__(
        self,
        change_log: ChangeLogManager,
        filesystem: Filesystem,
        editor: EditorSurface | None = None,
        diff_config: DiffConfig | None = None,
        analyzer: ContentAnalyzer | None = None,
    ) -> None:
        self._log = change_log
        self._fs = filesystem
        self._editor = editor or FileEditorSurface(filesystem)
        self._diff_config = diff_config
        self._analyzer = analyzer

    async def write_file(self, path: str, content: str) -> FileChangeEntry | None:
        """ファイルを作成または更新して記録

        Returns:
            記録したエントリ。内容に変化が無ければNone

        Raises:
            IsADirectoryError: パスがディレクトリの場合
        """
        kind = await self._fs.stat(path)
        if kind == FileKind.DIRECTORY:
            raise IsADirectoryError(f"Cannot write file over directory: {path}")

        if kind == FileKind.NOT_FOUND:
            await self._fs.write(path, content)
            summary = generate_change_summary(
                "", content, path, self._analyzer, self._diff_config
            )
            return self._log.log_change(
                FileChangeEntry(
                    file_path=path,
                    change_type=ChangeType.CREATED,
                    new_content=content,
                    summary=summary.summary,
                    added_lines=tuple(summary.added_lines),
                    diff_content=summary.formatted_diff,
                )
            )

        current = await self._fs.read(path)
        if current == content:
            logger.debug(f"内容に変化なし: {path}")
            return None

        edits = compute_precise_text_edits(current, content, self._diff_config)
        updated = await self._editor.apply_edits(path, edits)
        summary = generate_change_summary(current, updated, path, self._analyzer, self._diff_config)
        return self._log.log_change(
            FileChangeEntry(
                file_path=path,
                change_type=ChangeType.MODIFIED,
                original_content=current,
                new_content=updated,
                summary=summary.summary,
                added_lines=tuple(summary.added_lines),
                removed_lines=tuple(summary.removed_lines),
                diff_content=summary.formatted_diff,
            )
        )

    async def delete_file(self, path: str, to_trash: bool = True) -> FileChangeEntry:
        """ファイルを削除して記録（削除前の内容を保持する）

        Raises:
            FileNotFoundError: ファイルが存在しない場合
        """
        content = await self._fs.read(path)
        await self._fs.delete(path, to_trash=to_trash, recursive=False)
        summary = generate_change_summary(content, "", path, self._analyzer, self._diff_config)
        return self._log.log_change(
            FileChangeEntry(
                file_path=path,
                change_type=ChangeType.DELETED,
                original_content=content,
                summary=summary.summary,
                removed_lines=tuple(summary.removed_lines),
                diff_content=summary.formatted_diff,
            )
        )

    async def apply_generated_content(
        self,
        path: str,
        instruction: str,
        generator: ContentGenerator,
    ) -> FileChangeEntry | None:
        """ContentGenerator の出力をファイルに適用して記録

        ファイルが存在しなければ空の内容から生成する。
        """
        current = ""
        if await self._fs.stat(path) == FileKind.FILE:
            current = await self._fs.read(path)

        new_content = await generator.generate(path, instruction, current)
        logger.debug(f"コンテンツ生成完了: {path} ({len(new_content)}文字)")
        return await self.write_file(path, new_content)
