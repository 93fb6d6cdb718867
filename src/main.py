# Command line entry point: build a bracket from a text file and print it

import argparse
import logging
import random
import sys

from core.elimination import build_bracket, derive_rounds, get_round_name, pick_winner
from core.entrants import parse_entrants
from core.outcomes import OutcomeStore
from core.state import DEFAULT_TITLE

logger = logging.getLogger(__name__)


def load_entrants(file_path):
    with open(file_path, mode='r', encoding='utf-8') as file:
        return parse_entrants(file.read())


def parse_pick(value):
    """Parse a ``MATCH_ID=NAME`` pick argument."""
    match_key, sep, name = value.partition('=')
    if not sep or not match_key.strip() or not name.strip():
        raise argparse.ArgumentTypeError(f"Invalid pick '{value}', expected MATCH_ID=NAME")
    return match_key.strip(), name.strip()


def apply_pick(round0, outcomes, match_key, name):
    """Record the competitor called ``name`` as winner of ``match_key``. Returns True on success."""
    rounds, _ = derive_rounds(round0, outcomes)
    for r, matches in enumerate(rounds):
        for i, match in enumerate(matches):
            if match.id != match_key:
                continue
            for player in match.players:
                if player is not None and player.name == name:
                    return pick_winner(rounds, outcomes, r, i, player.id)
            logger.warning(f"{name} is not playing in {match_key}; pick skipped")
            return False
    logger.warning(f"No match {match_key}; pick skipped")
    return False


def format_player(player):
    if player is None:
        return "TBD"
    return f"{player.name} (#{player.seed})"


def print_bracket(title, rounds, champion):
    print(f"\n--- {title} ---")
    for r, matches in enumerate(rounds):
        print(f"\n{get_round_name(r, len(rounds))}")
        for match in matches:
            line = f"  [{match.id}] {format_player(match.player_a)} vs {format_player(match.player_b)}"
            winner = match.find_player(match.winner_id)
            if winner:
                line += f" -> {winner.name}"
            print(line)
    if champion:
        print(f"\nChampion: {champion.name}")
    else:
        print("\nNo champion yet.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Build a single elimination bracket from a list of entrants.")
    parser.add_argument('entrants_file', help="Text file with one entrant per line")
    parser.add_argument('--no-shuffle', action='store_true', help="Seed entrants in file order")
    parser.add_argument('--seed', type=int, default=None, help="Random seed for the shuffle")
    parser.add_argument('--pick', type=parse_pick, action='append', default=[], metavar='MATCH_ID=NAME',
                        help="Record a winner, e.g. r0-m1=Tea (repeatable, applied in order)")
    parser.add_argument('--title', default=DEFAULT_TITLE)
    parser.add_argument('--verbose', '-v', action='store_true')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s: %(message)s')

    entrants = load_entrants(args.entrants_file)
    if not entrants:
        print(f"No entrants loaded. Check {args.entrants_file}")
        return 1

    rng = random.Random(args.seed)
    round0, auto_wins = build_bracket(entrants, shuffle=not args.no_shuffle, rng=rng)
    outcomes = OutcomeStore(auto_wins)
    logger.debug(f"Built {len(round0)} first round matches, {len(auto_wins)} decided by byes")

    for match_key, name in args.pick:
        if apply_pick(round0, outcomes, match_key, name):
            logger.debug(f"Recorded {name} as winner of {match_key}")

    rounds, champion = derive_rounds(round0, outcomes)
    print_bracket(args.title, rounds, champion)
    return 0


if __name__ == '__main__':
    sys.exit(main())
