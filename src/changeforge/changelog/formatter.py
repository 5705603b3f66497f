"""変更履歴の整形

直近の完了プランをLLMプロンプト用の簡潔なテキストにまとめる。
"""

from __future__ import annotations

from datetime import datetime

from ..core.models import ChangeType, RevertibleChangeSet


def format_successful_changes_for_prompt(
    change_sets: list[RevertibleChangeSet],
    max_sets: int = 3,
    max_changes: int = 3,
) -> str:
    """完了プランの変更セットを文字列に整形

    Args:
        change_sets: 古い順の変更セット
        max_sets: 出力する直近の変更セット数
        max_changes: 1セットあたりに列挙する変更数

    Returns:
        整形済みテキスト。変更セットが無ければ空文字
    """
    if not change_sets:
        return ""

    lines = ["--- Recent Successful Project Changes (Context for AI) ---"]
    for change_set in change_sets[-max_sets:]:
        date = datetime.fromtimestamp(change_set.timestamp / 1000).strftime("%Y-%m-%d %H:%M:%S")
        lines.append("")
        lines.append(f"**Plan Executed on {date} (ID: {change_set.id[:8]})**")
        if change_set.summary:
            lines.append(f"Summary: {change_set.summary}")
        lines.append("Changes:")
        for change in change_set.changes[:max_changes]:
            change_type = (
                change.change_type.value
                if isinstance(change.change_type, ChangeType)
                else change.change_type
            )
            lines.append(f"- **{change_type.upper()}**: `{change.file_path}` - {change.headline}")
        remaining = len(change_set.changes) - max_changes
        if remaining > 0:
            lines.append(f"  ...and {remaining} more changes.")

    lines.append("")
    lines.append("--- End Recent Successful Project Changes ---")
    return "\n".join(lines) + "\n"
