"""CLIモジュールのテスト"""

import sys
from unittest.mock import patch

import pytest

from changeforge.changelog import ChangeLogManager, ChangeSetStore
from changeforge.cli import main
from changeforge.core.models import ChangeType, FileChangeEntry


def _run(*args):
    # ルートロガーにハンドラを追加しない
    with (
        patch.object(sys, "argv", ["changeforge", *args]),
        patch("changeforge.cli.logging.basicConfig"),
    ):
        main()


class TestMainFunction:
    """main関数のテスト"""

    def test_no_command_shows_help(self):
        """コマンドなしでヘルプが表示される"""
        with pytest.raises(SystemExit) as excinfo:
            _run()
        assert excinfo.value.code == 1

    def test_summarize_command_dispatch(self):
        """summarizeコマンドが正しく処理される"""
        # Arrange
        with patch("changeforge.cli.run_summarize") as mock_run:
            # Act
            _run("summarize", "old.txt", "new.txt", "--path", "shown.txt")

            # Assert
            args = mock_run.call_args[0][0]
            assert args.old == "old.txt"
            assert args.new == "new.txt"
            assert args.path == "shown.txt"


class TestDiffCommands:
    """summarize / inverse-patch / apply-patch のテスト"""

    def test_summarize(self, tmp_path, capsys):
        """変更サマリーを表示する"""
        # Arrange
        old = tmp_path / "old.js"
        new = tmp_path / "new.js"
        old.write_text("")
        new.write_text("class Widget {}\n")

        # Act
        _run("summarize", str(old), str(new), "--path", "src/widget.js", "--diff")

        # Assert
        out = capsys.readouterr().out
        assert "src/widget.js: added class `Widget` (Added 1 line)" in out
        assert "+ class Widget {}" in out

    def test_inverse_patch_round_trip(self, tmp_path, capsys):
        """inverse-patch の出力を apply-patch --in-place すると元に戻る"""
        # Arrange
        old = tmp_path / "old.txt"
        new = tmp_path / "new.txt"
        old.write_text("alpha\nbeta\ngamma\n")
        new.write_text("alpha\nBETA\ngamma\ndelta\n")
        _run("inverse-patch", str(old), str(new))
        patch_file = tmp_path / "undo.patch"
        patch_file.write_text(capsys.readouterr().out)

        # Act
        _run("apply-patch", str(new), str(patch_file), "--in-place")

        # Assert
        assert new.read_text() == "alpha\nbeta\ngamma\n"
        assert "パッチを適用しました" in capsys.readouterr().out

    def test_apply_patch_to_stdout(self, tmp_path, capsys):
        """--in-place なしなら結果を標準出力に出す"""
        # Arrange
        target = tmp_path / "t.txt"
        target.write_text("one\n")
        empty_patch = tmp_path / "empty.patch"
        empty_patch.write_text("")

        # Act
        _run("apply-patch", str(target), str(empty_patch))

        # Assert
        assert capsys.readouterr().out == "one\n"

    def test_apply_invalid_patch_fails(self, tmp_path, capsys):
        """適用できないパッチは終了コード1"""
        # Arrange
        target = tmp_path / "t.txt"
        target.write_text("content\n")
        bad = tmp_path / "bad.patch"
        bad.write_text("not a patch\n")

        # Act & Assert
        with pytest.raises(SystemExit) as excinfo:
            _run("apply-patch", str(target), str(bad))
        assert excinfo.value.code == 1
        assert "パッチを適用できません" in capsys.readouterr().err
        assert target.read_text() == "content\n"


class TestHistoryCommands:
    """history / revert-last のテスト"""

    def _save_created_plan(self, workspace, path, content):
        (workspace / path).write_text(content)
        store = ChangeSetStore(workspace / ".changeforge" / "history.jsonl")
        manager = ChangeLogManager(store=store)
        manager.log_change(
            FileChangeEntry(file_path=path, change_type=ChangeType.CREATED, new_content=content)
        )
        manager.save_changes_as_last_completed_plan(f"create {path}")

    def test_history_empty(self, tmp_path, monkeypatch, capsys):
        """履歴が無ければメッセージを表示"""
        # Arrange
        monkeypatch.chdir(tmp_path)

        # Act
        _run("history")

        # Assert
        assert "履歴がありません" in capsys.readouterr().out

    def test_history_lists_plans(self, tmp_path, monkeypatch, capsys):
        """保存済みのプランを表示する"""
        # Arrange
        monkeypatch.chdir(tmp_path)
        self._save_created_plan(tmp_path, "a.txt", "a\n")

        # Act
        _run("history")

        # Assert
        out = capsys.readouterr().out
        assert "Summary: create a.txt" in out
        assert "- **CREATED**: `a.txt`" in out

    def test_revert_last(self, workspace, capsys):
        """最後のプランを取り消し、取り消し自体も新しいプランとして保存する"""
        # Arrange
        self._save_created_plan(workspace, "a.txt", "a\n")

        # Act
        _run("revert-last", "--workspace", str(workspace))

        # Assert
        assert not (workspace / "a.txt").exists()
        assert "✓ [created]" in capsys.readouterr().out
        store = ChangeSetStore(workspace / ".changeforge" / "history.jsonl")
        saved = store.load()
        assert len(saved) == 1
        assert saved[0].changes[0].change_type == ChangeType.DELETED

    def test_revert_last_twice_restores(self, workspace):
        """2回目の revert-last で1回目の取り消しを元に戻す"""
        # Arrange
        self._save_created_plan(workspace, "a.txt", "a\n")
        _run("revert-last", "--workspace", str(workspace))

        # Act
        _run("revert-last", "--workspace", str(workspace))

        # Assert
        assert (workspace / "a.txt").read_text() == "a\n"

    def test_revert_last_without_plans(self, workspace, capsys):
        """取り消すプランが無ければメッセージを表示"""
        _run("revert-last", "--workspace", str(workspace))
        assert "取り消すプランがありません" in capsys.readouterr().out
