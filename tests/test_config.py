"""設定管理モジュールのテスト"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from changeforge.core.config import (
    ChangeForgeSettings,
    DiffConfig,
    get_settings,
    reload_settings,
)


class TestChangeForgeSettings:
    """ChangeForgeSettingsのテスト"""

    def test_default_values(self):
        """デフォルト値が正しく設定される"""
        # Arrange & Act
        settings = ChangeForgeSettings()

        # Assert
        assert settings.diff.large_change_threshold == 500
        assert settings.diff.major_change_lines == 10
        assert settings.revert.use_trash is True
        assert settings.workspace.history_path == ".changeforge/history.jsonl"
        assert settings.logging.level == "INFO"

    def test_from_yaml_with_valid_file(self, tmp_path):
        """有効なYAMLファイルから設定を読み込む"""
        # Arrange
        config_file = tmp_path / "changeforge.config.yaml"
        config_file.write_text("""
diff:
  large_change_threshold: 200
revert:
  use_trash: false
logging:
  level: DEBUG
""")

        # Act
        settings = ChangeForgeSettings.from_yaml(config_file)

        # Assert
        assert settings.diff.large_change_threshold == 200
        assert settings.diff.major_change_lines == 10
        assert settings.revert.use_trash is False
        assert settings.logging.level == "DEBUG"

    def test_from_yaml_with_nonexistent_file(self):
        """存在しないファイルパスを指定した場合はデフォルト値"""
        settings = ChangeForgeSettings.from_yaml(Path("/nonexistent/config.yaml"))
        assert settings.diff.large_change_threshold == 500

    def test_from_yaml_finds_default_config_file(self, tmp_path, monkeypatch):
        """カレントディレクトリの設定ファイルを自動検出する"""
        # Arrange
        (tmp_path / "changeforge.config.yaml").write_text("diff:\n  patch_margin: 8\n")
        monkeypatch.chdir(tmp_path)

        # Act
        settings = ChangeForgeSettings.from_yaml(None)

        # Assert
        assert settings.diff.patch_margin == 8

    def test_empty_yaml_uses_defaults(self, tmp_path):
        """空のYAMLはデフォルト値"""
        config_file = tmp_path / "changeforge.config.yaml"
        config_file.write_text("")
        assert ChangeForgeSettings.from_yaml(config_file).revert.use_trash is True

    def test_env_override(self, monkeypatch):
        """環境変数で入れ子の設定を上書きできる"""
        # Arrange
        monkeypatch.setenv("CHANGEFORGE_DIFF__LARGE_CHANGE_THRESHOLD", "100")

        # Act
        settings = ChangeForgeSettings()

        # Assert
        assert settings.diff.large_change_threshold == 100

    def test_invalid_value_rejected(self):
        """範囲外の値は ValidationError"""
        with pytest.raises(ValidationError):
            DiffConfig(match_threshold=1.5)


class TestPaths:
    """パス解決のテスト"""

    def test_relative_history_path_is_under_workspace(self, tmp_path):
        """相対パスの履歴はワークスペースルート配下"""
        # Arrange
        settings = ChangeForgeSettings.model_validate({"workspace": {"root": str(tmp_path)}})

        # Act & Assert
        assert settings.get_workspace_root() == tmp_path.resolve()
        assert settings.get_history_path() == tmp_path.resolve() / ".changeforge" / "history.jsonl"

    def test_absolute_history_path(self, tmp_path):
        """絶対パスの履歴はそのまま"""
        history = tmp_path / "elsewhere.jsonl"
        settings = ChangeForgeSettings.model_validate({"workspace": {"history_path": str(history)}})
        assert settings.get_history_path() == history

    def test_relative_root_is_resolved_from_cwd(self, tmp_path, monkeypatch):
        """相対のワークスペースルートはカレントディレクトリ基準"""
        monkeypatch.chdir(tmp_path)
        assert ChangeForgeSettings().get_workspace_root() == tmp_path.resolve()


class TestSingleton:
    """get_settings / reload_settings のテスト"""

    def test_reload_settings(self, tmp_path):
        """reload_settings で読み直した設定が get_settings から返る"""
        # Arrange
        config_file = tmp_path / "changeforge.config.yaml"
        config_file.write_text("diff:\n  major_change_lines: 3\n")

        # Act
        reloaded = reload_settings(config_file)

        # Assert
        assert get_settings() is reloaded
        assert get_settings().diff.major_change_lines == 3
