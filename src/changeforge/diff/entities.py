"""エンティティ抽出

追加・削除されたテキストから関数・クラス・変数などの名前付き構造を
軽量なパターンマッチで抽出する。外部の ContentAnalyzer を差し込める。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Entity:
    """抽出されたエンティティ"""

    kind: str
    name: str


class ContentAnalyzer(Protocol):
    """高精度なエンティティ抽出を提供する外部コラボレータ"""

    def extract_entities(self, content: str, file_path: str) -> list[Entity]: ...


# kind -> 名前リスト（出現順、重複なし）
EntityMap = dict[str, list[str]]

_FUNCTION_RE = re.compile(
    r"(?:(?:export|declare)\s+)?(?:async\s+)?function\s+(\w+)\s*\("
    r"|(?:\b(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?(?:\([^)]*\)\s*=>|function\s*\(|$))"
    r"|(?:\b(?:public|private|protected|static|async)?\s*(\w+)\s*\([^)]*\)\s*\{)"
)
_PY_FUNCTION_RE = re.compile(r"^\s*(?:async\s+)?def\s+(\w+)\s*\(", re.MULTILINE)
_CLASS_RE = re.compile(r"(?:(?:export|declare)\s+)?\bclass\s+(\w+)")
_VARIABLE_RE = re.compile(
    r"(?:(?:export|declare)\s+)?\b(?:const|let|var)\s+(\w+)\s*=\s*(?!async\s+)(?!function\s*)"
    r"[^;,\n]*;?\s*(?:\n|$)"
)
_TYPE_RE = re.compile(r"(?:(?:export|declare)\s+)?\b(?:interface|type)\s+(\w+)")
_ENUM_RE = re.compile(r"(?:(?:export|declare)\s+)?\benum\s+(\w+)")
_IMPORT_LINE_RE = re.compile(r"^\s*(?:import\s+\S|from\s+\S+\s+import\s)", re.MULTILINE)
_EXPORT_LINE_RE = re.compile(r"^\s*export\s+\S", re.MULTILINE)

# メソッド呼び出し形に見える制御構文
_NOT_METHODS = frozenset({"if", "for", "while", "switch", "catch", "function", "return", "with"})


def _add(target: EntityMap, kind: str, name: str) -> None:
    names = target.setdefault(kind, [])
    if name not in names:
        names.append(name)


def extract_entities_heuristic(content: str) -> EntityMap:
    """パターンマッチによるエンティティ抽出

    パターンは言語構文に依存するベストエフォート。
    import/export は個数を "(N)" という名前で記録する。
    """
    found: EntityMap = {}
    if not content.strip():
        return found

    for match in _FUNCTION_RE.finditer(content):
        name = match.group(1) or match.group(2) or match.group(3)
        if not name:
            continue
        if match.group(3):
            if name not in _NOT_METHODS:
                _add(found, "method", name)
        else:
            _add(found, "function", name)

    for match in _PY_FUNCTION_RE.finditer(content):
        _add(found, "function", match.group(1))

    for match in _CLASS_RE.finditer(content):
        _add(found, "class", match.group(1))

    callables = set(found.get("function", [])) | set(found.get("method", []))
    for match in _VARIABLE_RE.finditer(content):
        if match.group(1) not in callables:
            _add(found, "variable", match.group(1))

    for match in _TYPE_RE.finditer(content):
        _add(found, "type/interface", match.group(1))

    for match in _ENUM_RE.finditer(content):
        _add(found, "enum", match.group(1))

    import_count = len(_IMPORT_LINE_RE.findall(content))
    if import_count:
        _add(found, "import statement", f"({import_count})")

    export_count = len(_EXPORT_LINE_RE.findall(content))
    if export_count:
        _add(found, "export statement", f"({export_count})")

    return found


def collect_entities(
    content: str,
    file_path: str,
    analyzer: ContentAnalyzer | None = None,
) -> EntityMap:
    """エンティティを収集

    analyzer が指定されていればそれを使い、失敗時はヒューリスティックにフォールバックする。
    """
    if not content.strip():
        return {}

    if analyzer is not None:
        try:
            found: EntityMap = {}
            for entity in analyzer.extract_entities(content, file_path):
                _add(found, entity.kind, entity.name)
            return found
        except Exception as e:
            logger.warning(f"エンティティ抽出に失敗、ヒューリスティックを使用: {file_path}: {e}")

    return extract_entities_heuristic(content)
