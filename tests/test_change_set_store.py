"""変更セットストアのテスト"""

import json

from changeforge.changelog import ChangeSetStore
from changeforge.core.models import ChangeType, FileChangeEntry, RevertibleChangeSet


def _change_set(summary: str) -> RevertibleChangeSet:
    return RevertibleChangeSet(
        changes=(
            FileChangeEntry(file_path="a.txt", change_type=ChangeType.CREATED, new_content="a\n"),
        ),
        summary=summary,
    )


class TestChangeSetStore:
    """ChangeSetStore のテスト"""

    def test_load_missing_file(self, tmp_path):
        """ファイルが無ければ空"""
        # Arrange
        store = ChangeSetStore(tmp_path / "nested" / "history.jsonl")

        # Act & Assert
        assert store.load() == []
        assert (tmp_path / "nested").is_dir()

    def test_append_and_load(self, store):
        """追記した順に読み込まれる"""
        # Arrange
        first, second = _change_set("first"), _change_set("second")

        # Act
        store.append(first)
        store.append(second)
        loaded = store.load()

        # Assert
        assert [s.id for s in loaded] == [first.id, second.id]
        assert loaded[0].changes[0].new_content == "a\n"

    def test_rewrite_replaces_contents(self, store):
        """rewrite で全内容を置き換える"""
        # Arrange
        store.append(_change_set("old"))
        replacement = _change_set("new")

        # Act
        store.rewrite([replacement])

        # Assert
        assert [s.summary for s in store.load()] == ["new"]

    def test_corrupted_line_is_skipped(self, store, caplog):
        """破損行は警告してスキップ"""
        # Arrange
        store.append(_change_set("good"))
        with open(store.path, "a", encoding="utf-8") as f:
            f.write("{not json\n")

        # Act
        loaded = store.load()

        # Assert
        assert [s.summary for s in loaded] == ["good"]
        assert "読み込みエラー" in caplog.text

    def test_hash_mismatch_is_skipped(self, store, caplog):
        """ハッシュが一致しない行は改ざんとみなしてスキップ"""
        # Arrange
        data = json.loads(_change_set("original").to_jsonl())
        data["summary"] = "tampered"
        store.path.write_text(json.dumps(data) + "\n", encoding="utf-8")

        # Act
        loaded = store.load()

        # Assert
        assert loaded == []
        assert "ハッシュ不一致" in caplog.text

    def test_blank_lines_are_ignored(self, store):
        """空行は無視"""
        # Arrange
        change_set = _change_set("only")
        store.path.write_text("\n" + change_set.to_jsonl() + "\n\n", encoding="utf-8")

        # Act & Assert
        assert [s.id for s in store.load()] == [change_set.id]
