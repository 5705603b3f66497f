"""リバートサービス

記録された変更を新しい順に取り消す。
各エントリの失敗はそのエントリ内で捕捉・報告し、バッチは継続する（非アトミック）。
バッチを途中で止めるのはキャンセルのみ。
"""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..changelog.manager import ChangeLogManager
from ..core.config import DiffConfig, get_settings
from ..core.models import ChangeType, FileChangeEntry, FullSnapshot
from ..diff.engine import PatchApplyError, apply_patch, compute_precise_text_edits
from ..diff.entities import ContentAnalyzer
from ..diff.summarizer import generate_change_summary
from .editor import EditorSurface, FileEditorSurface
from .filesystem import FileKind, Filesystem, PathOutsideWorkspaceError

logger = logging.getLogger(__name__)


class RevertOutcome(str, Enum):
    """エントリごとのリバート結果"""

    REVERTED = "reverted"
    SKIPPED = "skipped"
    FAILED = "failed"


class RevertResult(BaseModel):
    """1エントリのリバート結果"""

    model_config = ConfigDict(frozen=True)

    entry_id: str = Field(..., description="対象エントリID")
    file_path: str = Field(..., description="対象ファイル")
    change_type: str = Field(..., description="対象エントリの変更種別")
    outcome: RevertOutcome = Field(..., description="結果")
    reason: str = Field(default="", description="結果の説明")
    error: str | None = Field(default=None, description="失敗時のエラー内容")


class CancellationToken:
    """協調的キャンセルシグナル

    各エントリの処理開始前に確認される。処理中のエントリは中断されない。
    """

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def is_cancellation_requested(self) -> bool:
        return self._cancelled


class RevertCancelledError(Exception):
    """リバートがキャンセルされた

    Attributes:
        results: キャンセルまでに完了したエントリの結果
    """

    def __init__(self, results: list[RevertResult]) -> None:
        super().__init__(f"Revert cancelled after {len(results)} entries")
        self.results = results


def _change_type_name(entry: FileChangeEntry) -> str:
    if isinstance(entry.change_type, ChangeType):
        return entry.change_type.value
    return str(entry.change_type)


class RevertService:
    """変更の取り消しを実行するサービス

    取り消しに成功した操作は、補完する種別の新しいエントリとして変更ログに記録する
    （created の取り消し → deleted、deleted の取り消し → created、modified → modified）。
    """

    def __init__(
        self,
        change_log: ChangeLogManager,
        filesystem: Filesystem,
        editor: EditorSurface | None = None,
        use_trash: bool | None = None,
        diff_config: DiffConfig | None = None,
        analyzer: ContentAnalyzer | None = None,
    ) -> None:
        """
        Args:
            change_log: 取り消し操作の記録先
            filesystem: ファイル操作
            editor: modified の復元に使うエディタ（省略時はファイルを直接編集）
            use_trash: 作成ファイルの取り消しをゴミ箱移動で行うか（省略時は設定値）
            diff_config: 差分設定（省略時はグローバル設定）
            analyzer: サマリー生成用の外部エンティティ抽出器（任意）
        """
        self._log = change_log
        self._fs = filesystem
        self._editor = editor or FileEditorSurface(filesystem)
        self._use_trash = get_settings().revert.use_trash if use_trash is None else use_trash
        self._diff_config = diff_config
        self._analyzer = analyzer

    async def revert_changes(
        self,
        changes: list[FileChangeEntry],
        token: CancellationToken | None = None,
    ) -> list[RevertResult]:
        """変更を新しい順に取り消す

        入力リストは変更しない。後の変更は前の変更の上に適用されている可能性があるため、
        記録順の逆で1件ずつ処理する。

        Args:
            changes: 記録順のエントリ
            token: キャンセルシグナル

        Returns:
            処理順のRevertResultリスト

        Raises:
            RevertCancelledError: エントリ処理開始前にキャンセルが要求された場合
        """
        results: list[RevertResult] = []

        for entry in reversed(changes):
            if token is not None and token.is_cancellation_requested:
                logger.warning(f"リバートがキャンセルされました（{len(results)}件処理済み）")
                raise RevertCancelledError(results)
            results.append(await self._revert_entry(entry))

        return results

    async def revert_last_completed_plan(
        self, token: CancellationToken | None = None
    ) -> list[RevertResult]:
        """最後に完了したプランを取り出して取り消す。プランが無ければ空リスト

        1件も取り消せず失敗を含む場合は、プランをスタックに戻す。
        """
        change_set = self._log.pop_last_completed_plan_changes()
        if change_set is None:
            return []

        results = await self.revert_changes(list(change_set.changes), token)
        outcomes = {result.outcome for result in results}
        if RevertOutcome.FAILED in outcomes and RevertOutcome.REVERTED not in outcomes:
            logger.warning(f"プランを取り消せなかったためスタックに戻します: {change_set.id}")
            self._log.push_completed_plan(change_set)
        return results

    async def _revert_entry(self, entry: FileChangeEntry) -> RevertResult:
        """1エントリを取り消す（例外はここで捕捉して FAILED にする）"""
        try:
            if entry.change_type == ChangeType.CREATED:
                return await self._revert_created(entry)
            if entry.change_type == ChangeType.MODIFIED:
                return await self._revert_modified(entry)
            if entry.change_type == ChangeType.DELETED:
                return await self._revert_deleted(entry)

            logger.warning(
                f"未対応の変更種別をスキップ: {_change_type_name(entry)} ({entry.file_path})"
            )
            return self._skipped(
                entry, f"Skipped unknown change type '{_change_type_name(entry)}'"
            )
        except Exception as e:
            logger.exception(f"リバート失敗: {entry.file_path}")
            return RevertResult(
                entry_id=entry.entry_id,
                file_path=entry.file_path,
                change_type=_change_type_name(entry),
                outcome=RevertOutcome.FAILED,
                reason=f"Failed to revert '{entry.file_path}': {e}",
                error=str(e),
            )

    async def _revert_created(self, entry: FileChangeEntry) -> RevertResult:
        """created の取り消し: ファイルを非再帰で削除"""
        path = entry.file_path
        kind = await self._fs.stat(path)

        if kind == FileKind.NOT_FOUND:
            logger.warning(f"削除対象が既に存在しません: {path}")
            return self._skipped(entry, f"File '{path}' was already gone")

        if kind == FileKind.DIRECTORY:
            logger.error(f"安全のためディレクトリの削除を中止: {path}")
            return self._skipped(entry, f"Skipped revert: '{path}' is a directory, not deleting")

        try:
            content: str | None = await self._fs.read(path)
        except (UnicodeDecodeError, FileNotFoundError, PathOutsideWorkspaceError):
            # リンク切れやワークスペース外を指すシンボリックリンクは内容を保存しない
            content = None

        try:
            await self._fs.delete(path, to_trash=self._use_trash, recursive=False)
        except FileNotFoundError:
            logger.warning(f"削除対象が既に存在しません: {path}")
            return self._skipped(entry, f"File '{path}' was already gone")

        summary = generate_change_summary(
            content or "", "", path, self._analyzer, self._diff_config
        )
        self._log.log_change(
            FileChangeEntry(
                file_path=path,
                change_type=ChangeType.DELETED,
                original_content=content,
                summary=summary.summary,
                removed_lines=tuple(summary.removed_lines),
                diff_content=summary.formatted_diff,
            )
        )
        logger.info(f"作成を取り消し: {path} を削除")
        return self._reverted(entry, f"Reverted creation: deleted '{path}'")

    async def _revert_modified(self, entry: FileChangeEntry) -> RevertResult:
        """modified の取り消し: 変更前の内容を復元"""
        path = entry.file_path
        kind = await self._fs.stat(path)

        if kind == FileKind.DIRECTORY:
            logger.warning(f"変更ファイルのパスがディレクトリです: {path}")
            return self._skipped(entry, f"Skipped revert: '{path}' is a directory")

        if kind == FileKind.NOT_FOUND:
            if entry.original_content is None:
                logger.warning(f"変更ファイルが存在せず、元の内容もありません: {path}")
                return self._skipped(
                    entry, f"No content available to recreate missing modified file '{path}'"
                )
            await self._fs.write(path, entry.original_content)
            self._log_created(path, entry.original_content)
            logger.info(f"変更を取り消し: 存在しない {path} を元の内容で再作成")
            return self._reverted(
                entry, f"Reverted modification: recreated missing '{path}' with original content"
            )

        current = await self._fs.read(path)
        restored = self._restore_content(entry, current)
        if restored is None:
            logger.warning(f"復元できる内容がありません: {path}")
            return self._skipped(entry, f"No content available to restore '{path}'")

        if restored == current:
            return self._skipped(entry, f"'{path}' already matches its original content")

        edits = compute_precise_text_edits(current, restored, self._diff_config)
        updated = await self._editor.apply_edits(path, edits)

        summary = generate_change_summary(
            current, updated, path, self._analyzer, self._diff_config
        )
        self._log.log_change(
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
        logger.info(f"変更を取り消し: {path} を復元")
        return self._reverted(
            entry, f"Reverted modification: restored original content of '{path}'"
        )

    async def _revert_deleted(self, entry: FileChangeEntry) -> RevertResult:
        """deleted の取り消し: 元の内容でファイルを再作成"""
        path = entry.file_path

        if entry.original_content is None:
            logger.warning(f"削除ファイルを再作成する内容がありません: {path}")
            return self._skipped(entry, f"No content available to recreate deleted '{path}'")

        if await self._fs.stat(path) != FileKind.NOT_FOUND:
            logger.warning(f"再作成先に既に存在するためスキップ: {path}")
            return self._skipped(entry, f"Skipped revert for deleted '{path}': file already exists")

        await self._fs.write(path, entry.original_content)
        self._log_created(path, entry.original_content)
        logger.info(f"削除を取り消し: {path} を再作成")
        return self._reverted(entry, f"Reverted deletion: recreated '{path}'")

    def _restore_content(self, entry: FileChangeEntry, current: str) -> str | None:
        """復元後の内容を決定。全文スナップショットを優先し、無ければ逆パッチを適用"""
        source = entry.restore_source
        if source is None:
            return None
        if isinstance(source, FullSnapshot):
            return source.content
        try:
            return apply_patch(current, source.patch, self._diff_config)
        except PatchApplyError as e:
            logger.warning(f"逆パッチを適用できません: {entry.file_path}: {e}")
            return None

    def _log_created(self, path: str, content: str) -> None:
        summary = generate_change_summary("", content, path, self._analyzer, self._diff_config)
        self._log.log_change(
            FileChangeEntry(
                file_path=path,
                change_type=ChangeType.CREATED,
                new_content=content,
                summary=summary.summary,
                added_lines=tuple(summary.added_lines),
                diff_content=summary.formatted_diff,
            )
        )

    @staticmethod
    def _reverted(entry: FileChangeEntry, reason: str) -> RevertResult:
        return RevertResult(
            entry_id=entry.entry_id,
            file_path=entry.file_path,
            change_type=_change_type_name(entry),
            outcome=RevertOutcome.REVERTED,
            reason=reason,
        )

    @staticmethod
    def _skipped(entry: FileChangeEntry, reason: str) -> RevertResult:
        return RevertResult(
            entry_id=entry.entry_id,
            file_path=entry.file_path,
            change_type=_change_type_name(entry),
            outcome=RevertOutcome.SKIPPED,
            reason=reason,
        )
