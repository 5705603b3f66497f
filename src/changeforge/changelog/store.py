"""変更セットストア: JSONL永続化

完了プランの変更セットを1行1セットのJSONLで保存する。
ファイルロックで同時書き込みを防止。
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

import portalocker
from pydantic import ValidationError

from ..core.models import RevertibleChangeSet

logger = logging.getLogger(__name__)

LOCK_TIMEOUT_SECONDS = 10


class ChangeSetStore:
    """変更セットの永続化ストレージ

    Attributes:
        path: JSONLファイルのパス
    """

    def __init__(self, path: Path | str) -> None:
        """
        Args:
            path: JSONLファイルのパス（親ディレクトリは自動作成）
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, change_set: RevertibleChangeSet) -> None:
        """変更セットを末尾に追記"""
        with portalocker.Lock(
            self.path, mode="a", encoding="utf-8", timeout=LOCK_TIMEOUT_SECONDS
        ) as f:
            f.write(change_set.to_jsonl() + "\n")
        logger.debug(f"変更セット保存: {change_set.id} ({len(change_set.changes)}件)")

    def rewrite(self, change_sets: Iterable[RevertibleChangeSet]) -> None:
        """全変更セットで書き直す（pop・clear後の同期用）"""
        with portalocker.Lock(
            self.path, mode="w", encoding="utf-8", timeout=LOCK_TIMEOUT_SECONDS
        ) as f:
            for change_set in change_sets:
                f.write(change_set.to_jsonl() + "\n")

    def load(self) -> list[RevertibleChangeSet]:
        """保存済みの変更セットを記録順に読み込む

        破損行・ハッシュ不一致の行は警告を出してスキップする。
        """
        if not self.path.exists():
            return []

        change_sets: list[RevertibleChangeSet] = []
        with portalocker.Lock(
            self.path, mode="r", encoding="utf-8", timeout=LOCK_TIMEOUT_SECONDS
        ) as f:
            for line_num, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    data = json.loads(line)
                    change_set = RevertibleChangeSet.model_validate(data)
                except (json.JSONDecodeError, ValidationError) as e:
                    logger.warning(f"変更セット読み込みエラー: {self.path}:{line_num}: {e}")
                    continue

                if data.get("hash") != change_set.hash:
                    logger.warning(f"変更セットのハッシュ不一致: {self.path}:{line_num}")
                    continue
                change_sets.append(change_set)

        return change_sets
