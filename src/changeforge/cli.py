"""ChangeForge CLI

コマンドラインインターフェース。
"""

import argparse
import logging
import sys
from pathlib import Path


def main(argv: list[str] | None = None):
    """メインエントリーポイント"""
    parser = argparse.ArgumentParser(
        description="ChangeForge - 変更追跡・リバートエンジン",
        prog="changeforge",
    )

    subparsers = parser.add_subparsers(dest="command", help="利用可能なコマンド")

    # summarize コマンド
    summarize_parser = subparsers.add_parser("summarize", help="2つのファイルの変更サマリーを表示")
    summarize_parser.add_argument("old", help="変更前のファイル")
    summarize_parser.add_argument("new", help="変更後のファイル")
    summarize_parser.add_argument("--path", help="サマリーに表示するパス（省略時は new）")
    summarize_parser.add_argument("--diff", action="store_true", help="整形済み差分も表示")

    # inverse-patch コマンド
    inverse_parser = subparsers.add_parser("inverse-patch", help="new → old に戻す逆パッチを出力")
    inverse_parser.add_argument("old", help="変更前のファイル")
    inverse_parser.add_argument("new", help="変更後のファイル")

    # apply-patch コマンド
    apply_parser = subparsers.add_parser("apply-patch", help="パッチをファイルに適用")
    apply_parser.add_argument("target", help="適用対象のファイル")
    apply_parser.add_argument("patch", help="パッチファイル")
    apply_parser.add_argument(
        "--in-place", action="store_true", help="結果を標準出力ではなく対象ファイルに書き込む"
    )

    # history コマンド
    history_parser = subparsers.add_parser("history", help="完了プランの変更履歴を表示")
    history_parser.add_argument("--limit", type=int, default=3, help="表示する変更セット数")

    # revert-last コマンド
    revert_parser = subparsers.add_parser("revert-last", help="最後に完了したプランを取り消す")
    revert_parser.add_argument("--workspace", help="ワークスペースルート（省略時は設定値）")

    args = parser.parse_args(argv)

    from .core import get_settings

    logging.basicConfig(
        level=get_settings().logging.level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command == "summarize":
        run_summarize(args)
    elif args.command == "inverse-patch":
        run_inverse_patch(args)
    elif args.command == "apply-patch":
        run_apply_patch(args)
    elif args.command == "history":
        run_history(args)
    elif args.command == "revert-last":
        run_revert_last(args)
    else:
        parser.print_help()
        sys.exit(1)


def _read(path: str) -> str:
    return Path(path).read_bytes().decode("utf-8")


def run_summarize(args):
    """変更サマリーを表示"""
    from .diff import generate_change_summary

    result = generate_change_summary(_read(args.old), _read(args.new), args.path or args.new)
    print(result.summary)
    if args.diff and result.formatted_diff:
        print()
        print(result.formatted_diff)


def run_inverse_patch(args):
    """逆パッチを出力"""
    from .diff import create_inverse_patch

    sys.stdout.write(create_inverse_patch(_read(args.old), _read(args.new)))


def run_apply_patch(args):
    """パッチを適用"""
    from .diff import PatchApplyError, apply_patch

    try:
        result = apply_patch(_read(args.target), _read(args.patch))
    except PatchApplyError as e:
        print(f"❌ パッチを適用できません: {e}", file=sys.stderr)
        sys.exit(1)

    if args.in_place:
        Path(args.target).write_bytes(result.encode("utf-8"))
        print(f"✓ パッチを適用しました: {args.target}")
    else:
        sys.stdout.write(result)


def run_history(args):
    """完了プランの変更履歴を表示"""
    from .changelog import ChangeSetStore, format_successful_changes_for_prompt
    from .core import get_settings

    change_sets = ChangeSetStore(get_settings().get_history_path()).load()
    if not change_sets:
        print("完了プランの履歴がありません。")
        return

    print(format_successful_changes_for_prompt(change_sets, max_sets=args.limit), end="")


def run_revert_last(args):
    """最後に完了したプランを取り消す"""
    import asyncio

    async def _revert():
        from .changelog import ChangeLogManager, ChangeSetStore
        from .core import get_settings
        from .revert import RevertOutcome, RevertService, WorkspaceFilesystem

        settings = get_settings()
        root = Path(args.workspace).resolve() if args.workspace else settings.get_workspace_root()
        history_path = Path(settings.workspace.history_path)
        if not history_path.is_absolute():
            history_path = root / history_path

        manager = ChangeLogManager(store=ChangeSetStore(history_path))
        filesystem = WorkspaceFilesystem(root, trash_dir=settings.revert.trash_dir)
        service = RevertService(manager, filesystem)

        results = await service.revert_last_completed_plan()
        if not results:
            print("取り消すプランがありません。")
            return

        icons = {
            RevertOutcome.REVERTED: "✓",
            RevertOutcome.SKIPPED: "-",
            RevertOutcome.FAILED: "❌",
        }
        for result in results:
            print(f"{icons[result.outcome]} [{result.change_type}] {result.reason}")

        # 取り消し操作自体を新しいプランとして記録（再度 revert-last で元に戻せる）
        manager.save_changes_as_last_completed_plan("Revert of last completed plan")

        if any(r.outcome == RevertOutcome.FAILED for r in results):
            sys.exit(1)

    asyncio.run(_revert())


if __name__ == "__main__":
    main()
