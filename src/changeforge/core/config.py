"""ChangeForge 設定管理モジュール

Pydantic Settingsを使用した型安全な設定管理。
changeforge.config.yaml と環境変数から設定を読み込む。
"""

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DiffConfig(BaseModel):
    """差分エンジン設定"""

    large_change_threshold: int = Field(
        default=500, ge=1, description="大規模変更とみなす追加+削除行数（超過でエンティティ解析を省略）"
    )
    major_change_lines: int = Field(
        default=10, ge=1, description="エンティティ未検出時に「major changes」とする行数"
    )
    diff_timeout_seconds: float = Field(
        default=1.0, ge=0.0, description="差分計算のタイムアウト秒（0=無制限）"
    )
    match_threshold: float = Field(
        default=0.5, ge=0.0, le=1.0, description="パッチ適用時のコンテキスト一致しきい値"
    )
    patch_delete_threshold: float = Field(
        default=0.5, ge=0.0, le=1.0, description="削除ハンクの許容不一致率"
    )
    patch_margin: int = Field(default=4, ge=1, le=16, description="パッチのコンテキスト文字数")


class RevertConfig(BaseModel):
    """リバート設定"""

    use_trash: bool = Field(default=True, description="作成ファイルの取り消しをゴミ箱移動で行うか")
    trash_dir: str = Field(
        default=".changeforge/trash", description="ゴミ箱ディレクトリ（ワークスペース相対）"
    )


class WorkspaceConfig(BaseModel):
    """ワークスペース設定"""

    root: str = Field(default=".", description="ワークスペースルート")
    history_path: str = Field(
        default=".changeforge/history.jsonl",
        description="完了プランの変更セット保存先（ワークスペース相対）",
    )


class LoggingConfig(BaseModel):
    """ロギング設定"""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


class ChangeForgeSettings(BaseSettings):
    """ChangeForge全体設定

    設定の優先順位:
    1. 環境変数
    2. changeforge.config.yaml
    3. デフォルト値
    """

    model_config = SettingsConfigDict(
        env_prefix="CHANGEFORGE_",
        env_nested_delimiter="__",
    )

    diff: DiffConfig = Field(default_factory=DiffConfig)
    revert: RevertConfig = Field(default_factory=RevertConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, config_path: Path | str | None = None) -> "ChangeForgeSettings":
        """YAMLファイルから設定を読み込む

        Args:
            config_path: 設定ファイルパス。Noneの場合はデフォルトパスを探索

        Returns:
            ChangeForgeSettings インスタンス
        """
        if config_path is None:
            search_paths = [
                Path.cwd() / "changeforge.config.yaml",
                Path.cwd() / "changeforge.config.yml",
                Path.home() / ".changeforge" / "config.yaml",
            ]
            for path in search_paths:
                if path.exists():
                    config_path = path
                    break

        if config_path and Path(config_path).exists():
            with open(config_path, encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
            return cls.model_validate(yaml_config)

        return cls()

    def get_workspace_root(self) -> Path:
        """ワークスペースルートを絶対パスで取得"""
        root = Path(self.workspace.root)
        if not root.is_absolute():
            root = Path.cwd() / root
        return root.resolve()

    def get_history_path(self) -> Path:
        """変更セット保存先を絶対パスで取得"""
        history = Path(self.workspace.history_path)
        if not history.is_absolute():
            history = self.get_workspace_root() / history
        return history


# グローバル設定インスタンス（遅延初期化）
_settings: ChangeForgeSettings | None = None


def get_settings() -> ChangeForgeSettings:
    """設定シングルトンを取得"""
    global _settings
    if _settings is None:
        _settings = ChangeForgeSettings.from_yaml()
    return _settings


def reload_settings(config_path: Path | str | None = None) -> ChangeForgeSettings:
    """設定を再読み込み"""
    global _settings
    _settings = ChangeForgeSettings.from_yaml(config_path)
    return _settings
