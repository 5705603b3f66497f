"""変更ログ

- Manager: 記録中の変更ログと完了プランのスタック
- Store: 完了プランのJSONL永続化
- Recorder: 生成コンテンツの適用と記録
- Formatter: プロンプト用の変更履歴整形
"""

from .formatter import format_successful_changes_for_prompt
from .manager import ChangeLogManager
from .recorder import ChangeRecorder, ContentGenerator
from .store import ChangeSetStore

__all__ = [
    "ChangeLogManager",
    "ChangeSetStore",
    "ChangeRecorder",
    "ContentGenerator",
    "format_successful_changes_for_prompt",
]
