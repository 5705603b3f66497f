"""エディタ抽象のテスト"""

import pytest

from changeforge.diff import TextEdit
from changeforge.revert import FileEditorSurface


class TestFileEditorSurface:
    """FileEditorSurface のテスト"""

    @pytest.mark.asyncio
    async def test_applies_edits_in_old_coordinates(self, fs, workspace):
        """編集は適用前の座標で解釈される"""
        # Arrange
        (workspace / "a.txt").write_text("hello world")
        editor = FileEditorSurface(fs)
        edits = [TextEdit(0, 5, "goodbye"), TextEdit(6, 11, "moon")]

        # Act
        result = await editor.apply_edits("a.txt", edits)

        # Assert
        assert result == "goodbye moon"
        assert (workspace / "a.txt").read_text() == "goodbye moon"

    @pytest.mark.asyncio
    async def test_no_edits_leaves_file_untouched(self, fs, workspace):
        """編集が無ければ書き込まない"""
        # Arrange
        target = workspace / "a.txt"
        target.write_text("unchanged")
        mtime = target.stat().st_mtime_ns
        editor = FileEditorSurface(fs)

        # Act
        result = await editor.apply_edits("a.txt", [])

        # Assert
        assert result == "unchanged"
        assert target.stat().st_mtime_ns == mtime
