"""MV Languages: extract and apply per-language game text.

Launch with: python -m mvlanguages <command> <project> [...]
"""

import argparse
import logging
import sys

from . import DEFAULT_LANGUAGE
from .config import GenerationPolicy, LanguageMap, PluginConfig
from .game_data import load_game_data, save_game_data
from .session import LanguageSession
from .storage import FileLanguageStorage

log = logging.getLogger("mvlanguages")


def _session(project_dir: str, policy: str = None) -> LanguageSession:
    config = PluginConfig.from_project(project_dir)
    if policy:
        config.generate_policy = GenerationPolicy.parse(policy)
    return LanguageSession(config, FileLanguageStorage.for_project(project_dir))


def cmd_extract(args) -> int:
    session = _session(args.project, args.policy)
    game = load_game_data(args.project, pristine=True)
    document = session.generate_files(game)
    if document is None:
        print("Nothing generated (policy: "
              f"{session.config.generate_policy.value})")
    else:
        print(f"Wrote {session.storage.path_for(DEFAULT_LANGUAGE)} "
              f"({document.run_count} text runs)")
    return 0


def cmd_apply(args) -> int:
    session = _session(args.project)
    ids = session.config.language_ids
    if args.language in ids:
        session.select_language(ids.index(args.language))
    else:
        # Not in the plugin's list, apply it anyway if a document exists
        session.config.languages.append(
            LanguageMap(args.language, args.language))
        session.select_language(len(session.config.languages) - 1)

    # Always translate from the untranslated game, not a previous apply
    game = load_game_data(args.project, pristine=True)
    if not session.update(game):
        print(f"No usable document for language {args.language!r}",
              file=sys.stderr)
        return 1
    save_game_data(args.project, game, output_dir=args.output)
    print(f"Applied {args.language!r} to {args.output or args.project}")
    return 0


def cmd_languages(args) -> int:
    session = _session(args.project)
    for i, lang in enumerate(session.languages):
        state = "ok" if session.storage.has_language(lang.language) else "missing"
        print(f"{i}: {lang.language:<12} {lang.label:<16} [{state}]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mvlanguages",
        description="Multiple language support for RPG Maker MV games.")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("extract", help="write the language documents")
    p.add_argument("project", help="game folder (parent of data/ or www/)")
    p.add_argument("--policy", choices=[x.value for x in GenerationPolicy],
                   help="override the plugin's generation policy")
    p.set_defaults(func=cmd_extract)

    p = sub.add_parser("apply", help="inject a language into the game data")
    p.add_argument("project")
    p.add_argument("language")
    p.add_argument("-o", "--output",
                   help="write data files here instead of the project's data/")
    p.set_defaults(func=cmd_apply)

    p = sub.add_parser("languages", help="list configured languages")
    p.add_argument("project")
    p.set_defaults(func=cmd_languages)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args)
    except FileNotFoundError as exc:
        log.error("%s", exc)
        return 2

