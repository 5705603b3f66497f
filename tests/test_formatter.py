"""変更履歴整形のテスト"""

from changeforge.changelog import format_successful_changes_for_prompt
from changeforge.core.models import ChangeType, FileChangeEntry, RevertibleChangeSet


def _change_set(summary: str, count: int) -> RevertibleChangeSet:
    return RevertibleChangeSet(
        changes=tuple(
            FileChangeEntry(
                file_path=f"src/file{i}.py",
                change_type=ChangeType.MODIFIED,
                summary=f"src/file{i}.py: modified existing content\nsecond line",
            )
            for i in range(count)
        ),
        summary=summary,
    )


class TestFormatSuccessfulChanges:
    """format_successful_changes_for_prompt のテスト"""

    def test_empty(self):
        """変更セットが無ければ空文字"""
        assert format_successful_changes_for_prompt([]) == ""

    def test_single_change_set(self):
        """見出し・要約・変更行を出力する"""
        # Arrange
        change_set = _change_set("Add parser", 2)

        # Act
        text = format_successful_changes_for_prompt([change_set])

        # Assert
        assert text.startswith("--- Recent Successful Project Changes (Context for AI) ---\n")
        assert text.endswith("--- End Recent Successful Project Changes ---\n")
        assert f"(ID: {change_set.id[:8]})**" in text
        assert "Summary: Add parser" in text
        assert "- **MODIFIED**: `src/file0.py` - src/file0.py: modified existing content" in text
        assert "second line" not in text
        assert "more changes" not in text

    def test_changes_are_truncated(self):
        """1セットあたりの変更数を制限する"""
        # Act
        text = format_successful_changes_for_prompt([_change_set("big", 5)])

        # Assert
        assert "`src/file2.py`" in text
        assert "`src/file3.py`" not in text
        assert "  ...and 2 more changes." in text

    def test_only_recent_sets(self):
        """直近の max_sets 件のみ出力する"""
        # Arrange
        sets = [_change_set(f"plan {i}", 1) for i in range(5)]

        # Act
        text = format_successful_changes_for_prompt(sets, max_sets=2)

        # Assert
        assert "Summary: plan 3" in text
        assert "Summary: plan 4" in text
        assert "Summary: plan 2" not in text

    def test_unknown_change_type(self):
        """未知の種別も大文字で表示する"""
        # Arrange
        change_set = RevertibleChangeSet(
            changes=(FileChangeEntry(file_path="a", change_type="renamed", summary="moved"),)
        )

        # Act
        text = format_successful_changes_for_prompt([change_set])

        # Assert
        assert "- **RENAMED**: `a` - moved" in text
        assert "Summary:" not in text
