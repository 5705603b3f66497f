"""変更サマリー生成

行単位の差分から、人が読める1行要約・追加/削除行リスト・整形済み差分を作る。
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field

from ..core.config import DiffConfig, get_settings
from .engine import DiffOperation, compute_line_diff
from .entities import ContentAnalyzer, EntityMap, collect_entities

logger = logging.getLogger(__name__)


class ChangeSummary(BaseModel):
    """ファイル変更の要約"""

    model_config = ConfigDict(frozen=True)

    summary: str = Field(..., description="'<path>: <内容> (Added N lines, ...)' 形式の要約")
    added_lines: list[str] = Field(default_factory=list, description="追加された非空行")
    removed_lines: list[str] = Field(default_factory=list, description="削除された非空行")
    formatted_diff: str = Field(default="", description="+/- 接頭辞付きの差分（EQUAL行は省略）")


def _split_lines(text: str) -> list[str]:
    """差分テキストを行に分割（末尾改行による空要素は除く）"""
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return lines


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _line_counts(added: int, removed: int) -> str:
    """' (Added N lines, Removed M lines)' 形式。どちらも0なら空文字"""
    parts = []
    if added:
        parts.append(f"Added {_plural(added, 'line')}")
    if removed:
        parts.append(f"Removed {_plural(removed, 'line')}")
    return f" ({', '.join(parts)})" if parts else ""


def classify_entities(added: EntityMap, removed: EntityMap) -> dict[str, EntityMap]:
    """エンティティを modified / added / removed に分類

    同じ kind+name が両方にあれば modified、追加側のみなら added、削除側のみなら removed。
    """
    result: dict[str, EntityMap] = {"modified": {}, "added": {}, "removed": {}}

    for kind, names in added.items():
        for name in names:
            bucket = "modified" if name in removed.get(kind, []) else "added"
            result[bucket].setdefault(kind, []).append(name)

    for kind, names in removed.items():
        for name in names:
            if name not in added.get(kind, []):
                result["removed"].setdefault(kind, []).append(name)

    return result


def _format_group(prefix: str, grouped: EntityMap) -> list[str]:
    entries = []
    for kind, names in grouped.items():
        if not names:
            continue
        display = kind if len(names) == 1 or kind.endswith("s") else f"{kind}s"
        formatted = ", ".join(f"`{name}`" for name in names)
        entries.append(f"{prefix} {display} {formatted}")
    return entries


def generate_change_summary(
    old: str,
    new: str,
    file_path: str,
    analyzer: ContentAnalyzer | None = None,
    config: DiffConfig | None = None,
) -> ChangeSummary:
    """2つの内容から変更サマリーを生成

    追加+削除行数が large_change_threshold を超える場合は
    エンティティ解析を行わず規模のみの要約を返す。

    Args:
        old: 変更前の内容
        new: 変更後の内容
        file_path: 要約に含めるファイルパス
        analyzer: 外部エンティティ抽出器（任意）
        config: 差分設定（省略時はグローバル設定）

    Returns:
        ChangeSummary
    """
    cfg = config or get_settings().diff
    added_lines: list[str] = []
    removed_lines: list[str] = []
    formatted: list[str] = []

    for op in compute_line_diff(old, new, cfg):
        if op.operation == DiffOperation.EQUAL:
            continue
        if op.operation == DiffOperation.INSERT:
            sign, target = "+", added_lines
        else:
            sign, target = "-", removed_lines
        for line in _split_lines(op.text):
            formatted.append(f"{sign} {line}")
            if line:
                target.append(line)

    added_count = len(added_lines)
    removed_count = len(removed_lines)
    counts = _line_counts(added_count, removed_count)

    def _result(text: str) -> ChangeSummary:
        return ChangeSummary(
            summary=f"{file_path}: {text}{counts}",
            added_lines=added_lines,
            removed_lines=removed_lines,
            formatted_diff="\n".join(formatted),
        )

    if added_count + removed_count > cfg.large_change_threshold:
        logger.debug(f"大規模変更のためエンティティ解析を省略: {file_path}")
        return _result("major changes detected")

    added_entities = collect_entities("\n".join(added_lines), file_path, analyzer)
    removed_entities = collect_entities("\n".join(removed_lines), file_path, analyzer)
    classified = classify_entities(added_entities, removed_entities)

    parts: list[str] = []
    for prefix in ("modified", "added", "removed"):
        parts.extend(_format_group(prefix, classified[prefix]))

    if parts:
        return _result(", ".join(parts))

    if added_count and not removed_count:
        text = "added new content"
    elif removed_count and not added_count:
        text = "removed content"
    elif added_count and removed_count:
        if added_count + removed_count > cfg.major_change_lines:
            text = "major changes detected"
        else:
            text = "modified existing content"
    else:
        text = "no significant changes"
    return _result(text)
