"""ChangeForge Core モジュール

- Config: 設定管理
- Models: 変更エントリ・変更セットのデータモデル
"""

from .config import ChangeForgeSettings, get_settings, reload_settings
from .models import (
    ChangeType,
    FileChangeEntry,
    FullSnapshot,
    PatchAgainst,
    RestoreSource,
    RevertibleChangeSet,
    generate_change_set_id,
    generate_entry_id,
)

__all__ = [
    # Config
    "get_settings",
    "reload_settings",
    "ChangeForgeSettings",
    # Models
    "ChangeType",
    "FileChangeEntry",
    "FullSnapshot",
    "PatchAgainst",
    "RestoreSource",
    "RevertibleChangeSet",
    "generate_entry_id",
    "generate_change_set_id",
]
