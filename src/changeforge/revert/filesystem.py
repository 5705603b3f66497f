"""ファイルシステム抽象

リバートが依存するファイル操作の契約と、ワークスペース内に限定した実装。

セキュリティ:
  - 操作は workspace root 配下に制限（パストラバーサル防止）
  - 削除は既定で非再帰。ディレクトリは明示しない限り削除しない
"""

from __future__ import annotations

import logging
import shutil
from enum import Enum
from pathlib import Path
from typing import Protocol

from ..core.models import generate_entry_id

logger = logging.getLogger(__name__)


class FileKind(str, Enum):
    """パスの実体種別"""

    FILE = "file"
    DIRECTORY = "directory"
    NOT_FOUND = "not_found"


class PathOutsideWorkspaceError(ValueError):
    """ワークスペース外のパスへのアクセス"""

    pass


class Filesystem(Protocol):
    """リバートが使うファイル操作の契約"""

    async def stat(self, path: str) -> FileKind: ...

    async def read(self, path: str) -> str: ...

    async def write(self, path: str, content: str) -> None: ...

    async def delete(
        self, path: str, *, to_trash: bool = True, recursive: bool = False
    ) -> None: ...


class WorkspaceFilesystem:
    """ワークスペース内に限定したファイルシステム

    内容はUTF-8で、改行コードを変換せずに読み書きする。
    ゴミ箱はワークスペース内のディレクトリで、削除されたファイルは
    <trash_dir>/<相対パス>.<ULID>.deleted に移動される（同一パスを繰り返し削除しても衝突しない）。
    """

    def __init__(self, root: Path | str, trash_dir: str = ".changeforge/trash") -> None:
        """
        Args:
            root: ワークスペースルート
            trash_dir: ゴミ箱ディレクトリ（ワークスペース相対）
        """
        self.root = Path(root).resolve()
        self.trash_dir = self.root / trash_dir

    def resolve(self, path: str, follow_symlinks: bool = True) -> Path:
        """ワークスペース相対パスを検証済みの絶対パスに解決

        Args:
            path: ワークスペース相対パス
            follow_symlinks: 末尾要素のシンボリックリンクを辿るか。
                False の場合は親ディレクトリのみ解決し、リンク自体を指すパスを返す

        Raises:
            PathOutsideWorkspaceError: パスがワークスペース外の場合
        """
        candidate = self.root / path
        if follow_symlinks or candidate.name in ("", ".", ".."):
            resolved = candidate.resolve()
        else:
            resolved = candidate.parent.resolve() / candidate.name
        if not resolved.is_relative_to(self.root):
            logger.warning("Path traversal attempt blocked: %s", path)
            raise PathOutsideWorkspaceError(
                f"Access denied: path '{path}' is outside workspace '{self.root}'"
            )
        return resolved

    async def stat(self, path: str) -> FileKind:
        """パスの実体種別を取得（シンボリックリンクはリンク自体を FILE とみなす）"""
        target = self.resolve(path, follow_symlinks=False)
        if target.is_symlink():
            return FileKind.FILE
        if target.is_dir():
            return FileKind.DIRECTORY
        if target.exists():
            return FileKind.FILE
        return FileKind.NOT_FOUND

    async def read(self, path: str) -> str:
        """ファイル内容を読み込む

        Raises:
            FileNotFoundError: ファイルが存在しない場合
        """
        return self.resolve(path).read_bytes().decode("utf-8")

    async def write(self, path: str, content: str) -> None:
        """ファイルに書き込む（親ディレクトリは自動作成）"""
        target = self.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content.encode("utf-8"))

    async def delete(self, path: str, *, to_trash: bool = True, recursive: bool = False) -> None:
        """ファイルを削除

        Args:
            path: ワークスペース相対パス
            to_trash: ゴミ箱へ移動するか（Falseなら完全削除）
            recursive: ディレクトリの削除を許可するか

        Raises:
            FileNotFoundError: パスが存在しない場合
            IsADirectoryError: recursive=False でディレクトリを指定した場合
        """
        # シンボリックリンクはリンク先ではなくリンク自体を削除する
        target = self.resolve(path, follow_symlinks=False)
        is_link = target.is_symlink()
        if not is_link and not target.exists():
            raise FileNotFoundError(f"No such file: {path}")
        if not is_link and target.is_dir() and not recursive:
            raise IsADirectoryError(f"Refusing non-recursive delete of directory: {path}")

        if to_trash:
            relative = target.relative_to(self.root)
            trash_path = self.trash_dir / f"{relative}.{generate_entry_id()}.deleted"
            trash_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(target), str(trash_path))
            logger.debug(f"ゴミ箱へ移動: {path} -> {trash_path}")
        elif not is_link and target.is_dir():
            shutil.rmtree(target)
        else:
            target.unlink()
