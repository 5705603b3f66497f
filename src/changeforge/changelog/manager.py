"""変更ログマネージャ

現在のプランで記録中の変更ログと、完了プランの変更セットスタック（LIFO）を管理する。
プロセス（セッション）ごとに1インスタンスを生成し、必要なコンポーネントに参照で渡す。
"""

from __future__ import annotations

import logging
import os

from ..core.config import DiffConfig
from ..core.models import ChangeType, FileChangeEntry, RevertibleChangeSet
from ..diff.engine import create_inverse_patch
from .store import ChangeSetStore

logger = logging.getLogger(__name__)

_SEPARATORS = "/" + os.sep


class ChangeLogManager:
    """変更ログの単一所有者

    記録中のログは log_change / clear / save_changes_as_last_completed_plan でのみ変更される。
    同時に複数のプランから書き込まれることは想定しない。
    """

    def __init__(
        self,
        store: ChangeSetStore | None = None,
        diff_config: DiffConfig | None = None,
    ) -> None:
        """
        Args:
            store: 完了プランの永続化先（任意）。指定時は既存の変更セットを読み込む
            diff_config: 逆パッチ生成に使う差分設定（省略時はグローバル設定）
        """
        self._store = store
        self._diff_config = diff_config
        self._changes: list[FileChangeEntry] = []
        self._completed: list[RevertibleChangeSet] = store.load() if store else []

    def log_change(self, entry: FileChangeEntry) -> FileChangeEntry:
        """変更を記録

        - created のパス末尾の区切り文字を除去する（リバート時の再帰削除を防ぐ）
        - modified で変更前後の全文があれば、この時点で逆パッチを生成して付与する
        - 重複排除・マージは行わない

        Returns:
            記録されたエントリ（正規化済み）

        Raises:
            ValueError: created のパスが区切り文字のみの場合
        """
        updates: dict[str, object] = {}

        if entry.change_type == ChangeType.CREATED:
            normalized = entry.file_path.rstrip(_SEPARATORS)
            if not normalized:
                raise ValueError(f"Invalid created path: {entry.file_path!r}")
            if normalized != entry.file_path:
                logger.warning(
                    f"created パスの末尾区切り文字を除去: '{entry.file_path}' -> '{normalized}'"
                )
                updates["file_path"] = normalized

        if (
            entry.change_type == ChangeType.MODIFIED
            and entry.original_content is not None
            and entry.new_content is not None
        ):
            updates["inverse_patch"] = create_inverse_patch(
                entry.original_content, entry.new_content, self._diff_config
            )

        recorded = entry.model_copy(update=updates) if updates else entry
        self._changes.append(recorded)
        logger.debug(f"変更記録: {recorded.file_path}: {recorded.headline}")
        return recorded

    def get_change_log(self) -> list[FileChangeEntry]:
        """記録中の変更ログのコピーを取得"""
        return list(self._changes)

    def clear(self) -> None:
        """記録中の変更ログを破棄（キャンセル時など）"""
        self._changes = []
        logger.debug("変更ログをクリア")

    def save_changes_as_last_completed_plan(
        self, summary: str | None = None
    ) -> RevertibleChangeSet | None:
        """記録中のログを完了プランとしてアーカイブ

        ログが空なら何も積まない。いずれの場合もログはクリアされる。

        Args:
            summary: プランの要約

        Returns:
            作成した変更セット。ログが空ならNone
        """
        change_set: RevertibleChangeSet | None = None
        if self._changes:
            change_set = RevertibleChangeSet(changes=tuple(self._changes), summary=summary)
            self._completed.append(change_set)
            if self._store:
                self._store.append(change_set)
            logger.info(f"完了プランを保存: {change_set.id} ({len(self._changes)}件)")
        else:
            logger.debug("保存する変更がありません")

        self._changes = []
        return change_set

    def get_last_completed_plan_changes(self) -> list[FileChangeEntry] | None:
        """最後に完了したプランの変更を取得。無ければNone"""
        if not self._completed:
            return None
        return list(self._completed[-1].changes)

    def get_completed_plan_change_sets(self) -> list[RevertibleChangeSet]:
        """完了プランの変更セットスタックのコピーを取得（古い順）"""
        return list(self._completed)

    def pop_last_completed_plan_changes(self) -> RevertibleChangeSet | None:
        """最後に完了したプランの変更セットを取り出す。無ければNone"""
        if not self._completed:
            logger.debug("取り出す完了プランがありません")
            return None

        change_set = self._completed.pop()
        if self._store:
            self._store.rewrite(self._completed)
        logger.debug(f"完了プランを取り出し: {change_set.id}")
        return change_set

    def push_completed_plan(self, change_set: RevertibleChangeSet) -> None:
        """取り出した変更セットをスタックの先頭に戻す"""
        self._completed.append(change_set)
        if self._store:
            self._store.append(change_set)
        logger.info(f"完了プランを戻しました: {change_set.id}")

    def clear_all_completed_plan_changes(self) -> None:
        """完了プランの変更セットを全て破棄"""
        self._completed = []
        if self._store:
            self._store.rewrite([])
        logger.debug("完了プランを全てクリア")
