"""差分の妥当性チェック

生成された変更が過剰でないかを簡易判定する。
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# 行数変化率がこれを超えると過剰な変更とみなす
DRASTIC_CHANGE_RATIO = 0.8


class DiffAnalysis(BaseModel):
    """差分の妥当性判定結果"""

    model_config = ConfigDict(frozen=True)

    is_reasonable: bool = Field(..., description="妥当な変更か")
    issues: list[str] = Field(default_factory=list, description="検出された問題")
    change_ratio: float = Field(..., ge=0.0, description="行数の変化率")


def analyze_diff(original: str, modified: str) -> DiffAnalysis:
    """変更前後の内容を比較して妥当性を判定"""
    original_lines = original.split("\n")
    modified_lines = modified.split("\n")
    issues: list[str] = []

    if not original:
        change_ratio = 1.0 if modified else 0.0
    else:
        change_ratio = abs(len(modified_lines) - len(original_lines)) / len(original_lines)

    if change_ratio > DRASTIC_CHANGE_RATIO:
        issues.append("Modification seems too drastic - consider a more targeted approach")

    original_imports = [line for line in original_lines if line.strip().startswith("import")]
    modified_imports = [line for line in modified_lines if line.strip().startswith("import")]
    if original_imports and not modified_imports:
        issues.append("All imports were removed - this may be incorrect")

    return DiffAnalysis(is_reasonable=not issues, issues=issues, change_ratio=change_ratio)
