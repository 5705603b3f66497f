"""ChangeForge テスト設定"""

import pytest

from changeforge.changelog import ChangeLogManager, ChangeSetStore
from changeforge.core.config import ChangeForgeSettings
from changeforge.revert import RevertService, WorkspaceFilesystem


@pytest.fixture(autouse=True)
def default_settings(monkeypatch):
    """ユーザー環境の設定ファイルに依存しないようデフォルト設定を固定"""
    settings = ChangeForgeSettings()
    monkeypatch.setattr("changeforge.core.config._settings", settings)
    return settings


@pytest.fixture
def workspace(tmp_path):
    """テスト用のワークスペースルート"""
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def fs(workspace):
    """ワークスペースに限定したファイルシステム"""
    return WorkspaceFilesystem(workspace)


@pytest.fixture
def manager():
    """永続化なしの変更ログマネージャ"""
    return ChangeLogManager()


@pytest.fixture
def store(tmp_path):
    """一時ディレクトリ上の変更セットストア"""
    return ChangeSetStore(tmp_path / "history" / "history.jsonl")


@pytest.fixture
def service(manager, fs):
    """ゴミ箱を使わないリバートサービス"""
    return RevertService(manager, fs, use_trash=False)
