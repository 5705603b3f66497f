"""差分エンジンとサマリー生成"""

from .analysis import DiffAnalysis, analyze_diff
from .engine import (
    DiffOp,
    DiffOperation,
    PatchApplyError,
    TextEdit,
    apply_patch,
    apply_text_edits,
    compute_char_diff,
    compute_line_diff,
    compute_precise_text_edits,
    create_inverse_patch,
    create_patch,
)
from .entities import ContentAnalyzer, Entity, extract_entities_heuristic
from .summarizer import ChangeSummary, classify_entities, generate_change_summary

__all__ = [
    # Engine
    "DiffOp",
    "DiffOperation",
    "TextEdit",
    "PatchApplyError",
    "compute_line_diff",
    "compute_char_diff",
    "compute_precise_text_edits",
    "apply_text_edits",
    "create_patch",
    "create_inverse_patch",
    "apply_patch",
    # Summarizer
    "ChangeSummary",
    "generate_change_summary",
    "classify_entities",
    "ContentAnalyzer",
    "Entity",
    "extract_entities_heuristic",
    # Analysis
    "DiffAnalysis",
    "analyze_diff",
]
