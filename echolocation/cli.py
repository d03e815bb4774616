#!/usr/bin/env python3
"""
Echolocation command line.

Inspect the chapter track and manage saved progress without a UI.

Usage:
    python -m echolocation chapters
    python -m echolocation level 20
    python -m echolocation cheat activate UNLOCK_ALL
    python -m echolocation cheat list
    python -m echolocation stats
    python -m echolocation --store /tmp/state.json stats
"""
import argparse
import sys
from typing import List, Optional

from echolocation import __version__, config
from echolocation.game.chapters import (
    CHAPTERS,
    MechanicRules,
    get_chapter_from_level,
    get_level_config,
)
from echolocation.game.cheats import CheatGate
from echolocation.game.progress import ProgressRepository
from echolocation.game.unlocks import UnlockGate
from echolocation.storage import JsonFileStore, KeyValueStore


def _cmd_chapters(store: KeyValueStore, args) -> int:
    progress = ProgressRepository(store)
    unlocks = UnlockGate(CheatGate(store), progress)
    stats = progress.load_stats()

    print("\nChapters")
    print("=" * 50)
    for chapter in CHAPTERS:
        status = 'unlocked' if unlocks.is_chapter_unlocked(chapter.id) else 'locked'
        if chapter.id in stats and stats[chapter.id].completed:
            status = 'completed'
        print(f"\n  {chapter.id}. {chapter.name} [{status}]")
        print(f"    {chapter.description}")
        print(f"    Pings: {chapter.base_pings}  Target: {chapter.target_size:g}px  "
              f"Mechanic: {chapter.special_mechanic.value}")
    print()
    return 0


def _cmd_level(store: KeyValueStore, args) -> int:
    if args.level < 1:
        print(f"Invalid level: {args.level}", file=sys.stderr)
        return 2

    chapter_id = get_chapter_from_level(args.level)
    level = get_level_config(chapter_id, args.level)
    rules = MechanicRules.for_chapter(CHAPTERS[chapter_id - 1])

    print(f"Level {level.level} (chapter {level.chapter}, {level.level_in_chapter}/{config.LEVELS_PER_CHAPTER})")
    print(f"  Pings: {level.pings}")
    print(f"  Target size: {level.target_size:g}px")
    print(f"  Difficulty: {level.difficulty.value}")
    print(f"  Boss: {'yes' if level.is_boss else 'no'}")
    print(f"  Mechanic: {rules.mechanic.value}")
    return 0


def _cmd_cheat(store: KeyValueStore, args) -> int:
    cheats = CheatGate(store)

    if args.action == 'list':
        for cheat in cheats.all_cheats():
            marker = '*' if cheats.is_active(cheat.code) else ' '
            print(f"  [{marker}] {cheat.code:<48} {cheat.name} ({cheat.category.value})")
        return 0

    if not args.code:
        print(f"cheat {args.action} needs a code", file=sys.stderr)
        return 2

    if args.action == 'activate':
        ok = cheats.activate(args.code)
    else:
        ok = cheats.deactivate(args.code)

    if not ok:
        print(f"Unknown cheat code: {args.code}", file=sys.stderr)
        return 1
    print(f"{args.code.strip().upper()} {args.action}d")
    return 0


def _cmd_stats(store: KeyValueStore, args) -> int:
    progress = ProgressRepository(store)
    stats = progress.load_stats()
    pointer = progress.load_save_pointer()

    print(f"Classic progress: chapter {pointer.chapter}, level {pointer.level}")
    if not stats:
        print("No rounds played yet.")
        return 0

    for chapter in CHAPTERS:
        entry = stats.get(chapter.id)
        if entry is None:
            continue
        print(f"\n  {chapter.id}. {chapter.name}{' (completed)' if entry.completed else ''}")
        print(f"    Levels completed: {entry.levels_completed}/{config.LEVELS_PER_CHAPTER}")
        print(f"    Attempts: {entry.successful_attempts}/{entry.total_attempts} successful")
        print(f"    Best score: {entry.best_score}  Average: {entry.avg_score:.0f}")
        if entry.best_ping_count is not None:
            print(f"    Fewest pings: {entry.best_ping_count}")
        if entry.fastest_time is not None:
            print(f"    Fastest: {entry.fastest_time:.1f}s")
        print(f"    Perfect rounds: {entry.perfect_rounds}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='echolocation',
        description='Echolocation game core: chapters, progress and cheats',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument(
        '--store',
        default=config.STORAGE_PATH,
        help=f'Path to the saved state file (default: {config.STORAGE_PATH})',
    )

    sub = parser.add_subparsers(dest='command', required=True)

    chapters = sub.add_parser('chapters', help='List chapters and their unlock state')
    chapters.set_defaults(func=_cmd_chapters)

    level = sub.add_parser('level', help='Show the derived config for a global level')
    level.add_argument('level', type=int, help='Global level number (1-50)')
    level.set_defaults(func=_cmd_level)

    cheat = sub.add_parser('cheat', help='Manage cheat codes')
    cheat.add_argument('action', choices=['activate', 'deactivate', 'list'])
    cheat.add_argument('code', nargs='?', help='Cheat code (case-insensitive)')
    cheat.set_defaults(func=_cmd_cheat)

    stats = sub.add_parser('stats', help='Show chapter statistics')
    stats.set_defaults(func=_cmd_stats)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    store = JsonFileStore(args.store)
    return args.func(store, args)


if __name__ == '__main__':
    sys.exit(main())
