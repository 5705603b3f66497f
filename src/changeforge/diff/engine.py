"""差分エンジン

2つのテキストに対する純粋関数群。I/O・状態を持たない。

- compute_line_diff: 行単位の差分（要約用）
- compute_precise_text_edits: 文字単位の最小編集（エディタ適用用）
- create_inverse_patch / apply_patch: 逆パッチの生成と適用
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from diff_match_patch import diff_match_patch

from ..core.config import DiffConfig, get_settings


class PatchApplyError(ValueError):
    """パッチが現在の内容に適用できない"""

    pass


class DiffOperation(IntEnum):
    """差分操作の種別（diff-match-patch の定数と同値）"""

    DELETE = -1
    EQUAL = 0
    INSERT = 1


@dataclass(frozen=True)
class DiffOp:
    """差分の1単位"""

    operation: DiffOperation
    text: str


@dataclass(frozen=True)
class TextEdit:
    """旧テキスト座標での置換編集

    start == end の場合は挿入、replacement が空の場合は削除。
    """

    start: int
    end: int
    replacement: str

    @property
    def range(self) -> tuple[int, int]:
        return (self.start, self.end)


def _make_dmp(config: DiffConfig | None = None) -> diff_match_patch:
    """設定を反映した diff_match_patch を生成"""
    cfg = config or get_settings().diff
    dmp = diff_match_patch()
    dmp.Diff_Timeout = cfg.diff_timeout_seconds
    dmp.Match_Threshold = cfg.match_threshold
    dmp.Patch_DeleteThreshold = cfg.patch_delete_threshold
    dmp.Patch_Margin = cfg.patch_margin
    return dmp


def _to_ops(diffs: list[tuple[int, str]]) -> list[DiffOp]:
    return [DiffOp(DiffOperation(op), text) for op, text in diffs]


def old_text(ops: list[DiffOp]) -> str:
    """差分列から旧テキストを復元"""
    return "".join(op.text for op in ops if op.operation != DiffOperation.INSERT)


def new_text(ops: list[DiffOp]) -> str:
    """差分列から新テキストを復元"""
    return "".join(op.text for op in ops if op.operation != DiffOperation.DELETE)


def compute_line_diff(old: str, new: str, config: DiffConfig | None = None) -> list[DiffOp]:
    """行単位の差分を計算

    各行を1文字に写像して差分を取り（コストは行数に比例）、
    行に戻した後にセマンティッククリーンアップを適用する。

    Args:
        old: 変更前テキスト
        new: 変更後テキスト
        config: 差分設定（省略時はグローバル設定）

    Returns:
        DiffOpのリスト
    """
    dmp = _make_dmp(config)
    chars1, chars2, line_array = dmp.diff_linesToChars(old, new)
    diffs = dmp.diff_main(chars1, chars2, False)
    dmp.diff_charsToLines(diffs, line_array)
    dmp.diff_cleanupSemantic(diffs)
    return _to_ops(diffs)


def compute_char_diff(old: str, new: str, config: DiffConfig | None = None) -> list[DiffOp]:
    """文字単位の差分を計算（行写像なし）"""
    dmp = _make_dmp(config)
    return _to_ops(dmp.diff_main(old, new, False))


def compute_precise_text_edits(
    old: str, new: str, config: DiffConfig | None = None
) -> list[TextEdit]:
    """旧テキストを新テキストに変換する最小の編集列を計算

    差分を左から走査し、旧テキスト上のカーソルを進める。
    EQUALはカーソルを進めるだけ、INSERTはカーソル位置への挿入、
    DELETEは削除範囲を出力してカーソルを進める。

    Returns:
        旧テキスト座標のTextEditリスト（昇順・非重複）
    """
    edits: list[TextEdit] = []
    cursor = 0

    for op in compute_char_diff(old, new, config):
        if op.operation == DiffOperation.EQUAL:
            cursor += len(op.text)
        elif op.operation == DiffOperation.INSERT:
            edits.append(TextEdit(cursor, cursor, op.text))
        else:
            edits.append(TextEdit(cursor, cursor + len(op.text), ""))
            cursor += len(op.text)

    return edits


def apply_text_edits(content: str, edits: list[TextEdit]) -> str:
    """旧テキスト座標の編集列を一括適用

    各編集は元の座標で解釈される（適用ごとに再計算しない）。
    同一開始位置の編集は与えられた順序で適用する。

    Raises:
        ValueError: 編集範囲が重複・範囲外の場合
    """
    pieces: list[str] = []
    cursor = 0

    for edit in sorted(edits, key=lambda e: e.start):
        if edit.start > edit.end or edit.end > len(content):
            raise ValueError(f"Edit range out of bounds: {edit.range} (length {len(content)})")
        if edit.start < cursor:
            raise ValueError(f"Overlapping edit at {edit.range}")
        pieces.append(content[cursor : edit.start])
        pieces.append(edit.replacement)
        cursor = edit.end

    pieces.append(content[cursor:])
    return "".join(pieces)


def create_patch(old: str, new: str, config: DiffConfig | None = None) -> str:
    """old に適用すると new になるパッチを生成（テキスト形式）"""
    dmp = _make_dmp(config)
    diffs = dmp.diff_main(old, new)
    return dmp.patch_toText(dmp.patch_make(old, diffs))


def create_inverse_patch(old: str, new: str, config: DiffConfig | None = None) -> str:
    """new に適用すると old に戻る逆パッチを生成"""
    return create_patch(new, old, config)


def apply_patch(content: str, patch: str, config: DiffConfig | None = None) -> str:
    """パッチを適用

    Args:
        content: 適用対象のテキスト
        patch: create_patch / create_inverse_patch が生成したパッチ
        config: 差分設定（省略時はグローバル設定）

    Returns:
        適用後のテキスト

    Raises:
        PatchApplyError: パッチが不正、またはいずれかのハンクがコンテキストを特定できない場合
    """
    dmp = _make_dmp(config)
    try:
        patches = dmp.patch_fromText(patch)
    except ValueError as e:
        raise PatchApplyError(f"Invalid patch: {e}") from e

    result, applied = dmp.patch_apply(patches, content)
    failed = [i for i, ok in enumerate(applied) if not ok]
    if failed:
        raise PatchApplyError(
            f"Patch context not found for hunk(s) {failed} ({len(failed)}/{len(applied)} failed)"
        )
    return result
