"""変更ログのデータモデル

FileChangeEntry, RestoreSource, RevertibleChangeSet の定義。
エントリは記録後イミュータブルで、リバートは新しいエントリを生成する。
"""

from __future__ import annotations

import hashlib
import logging
import time
import uuid
from enum import Enum
from typing import Annotated, Any, Literal

import jcs
from pydantic import BaseModel, ConfigDict, Field, computed_field
from ulid import ULID

logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    """変更種別"""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"


def generate_entry_id() -> str:
    """エントリIDを生成 (ULID形式)"""
    return str(ULID())


def generate_change_set_id() -> str:
    """変更セットIDを生成 (UUID4)"""
    return str(uuid.uuid4())


def now_ms() -> int:
    """現在時刻（エポックミリ秒）"""
    return time.time_ns() // 1_000_000


def compute_hash(data: dict[str, Any]) -> str:
    """JCS正規化JSONのSHA-256ハッシュを計算"""
    data_for_hash = {k: v for k, v in data.items() if k != "hash"}
    return hashlib.sha256(jcs.canonicalize(data_for_hash)).hexdigest()


class FullSnapshot(BaseModel):
    """変更前の全文スナップショット"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["full_snapshot"] = "full_snapshot"
    content: str


class PatchAgainst(BaseModel):
    """現在の内容に適用する逆パッチ"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["patch_against"] = "patch_against"
    patch: str


RestoreSource = Annotated[FullSnapshot | PatchAgainst, Field(discriminator="kind")]


class FileChangeEntry(BaseModel):
    """1件のファイル変更記録

    change_type が未知の文字列でも読み込めるようにし（前方互換性）、
    リバート時にスキップさせる。
    """

    model_config = ConfigDict(frozen=True)

    entry_id: str = Field(default_factory=generate_entry_id, description="エントリID (ULID)")
    file_path: str = Field(..., description="ワークスペース相対パス")
    change_type: ChangeType | str = Field(
        ..., union_mode="left_to_right", description="変更種別（未知の種別は文字列のまま保持）"
    )
    original_content: str | None = Field(default=None, description="変更前の全文")
    new_content: str | None = Field(default=None, description="変更後の全文")
    inverse_patch: str | None = Field(default=None, description="変更後→変更前の逆パッチ")
    summary: str = Field(default="", description="変更の要約")
    added_lines: tuple[str, ...] = Field(default=(), description="追加行")
    removed_lines: tuple[str, ...] = Field(default=(), description="削除行")
    diff_content: str = Field(default="", description="整形済み差分")
    timestamp: int = Field(default_factory=now_ms, description="記録時刻（エポックミリ秒）")

    def model_post_init(self, _context: Any) -> None:
        """復元手段の無い modified エントリを警告（リバート時はスキップされる）"""
        if self.change_type == ChangeType.MODIFIED and self.restore_source is None:
            logger.warning(f"復元手段の無い変更エントリ: {self.file_path} ({self.entry_id})")

    @property
    def restore_source(self) -> FullSnapshot | PatchAgainst | None:
        """変更前の内容を復元する手段

        全文スナップショットを優先し、無ければ逆パッチ。どちらも無ければNone。
        """
        if self.original_content is not None:
            return FullSnapshot(content=self.original_content)
        if self.inverse_patch is not None:
            return PatchAgainst(patch=self.inverse_patch)
        return None

    @property
    def headline(self) -> str:
        """要約の1行目"""
        return self.summary.split("\n", 1)[0]


class RevertibleChangeSet(BaseModel):
    """完了したプランの変更セット

    プラン完了時に作成され、以後変更されない。
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_change_set_id, description="変更セットID (UUID)")
    timestamp: int = Field(default_factory=now_ms, description="作成時刻（エポックミリ秒）")
    changes: tuple[FileChangeEntry, ...] = Field(default=(), description="記録順の変更")
    summary: str | None = Field(default=None, description="プランの要約")

    @computed_field
    @property
    def hash(self) -> str:
        """変更セットのハッシュ値を計算"""
        return compute_hash(self.model_dump(mode="json", exclude={"hash"}))

    def to_jsonl(self) -> str:
        """JSONL形式（改行なし）でシリアライズ"""
        return self.model_dump_json()
