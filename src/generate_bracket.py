import argparse
import random
import sys
import yaml
from engine.codes import generate_codes
from engine.elimination import generate_bracket, empty_results, advance_byes, get_bracket_display
from engine.errors import BracketError


def load_team_names(file_path):
    """Read team names from a YAML list, or from the keys of a team -> players mapping."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        data = yaml.safe_load(file)
    if not data:
        return []
    if isinstance(data, dict):
        return [str(name) for name in data.keys()]
    return [str(name) for name in data]


def format_bracket(display):
    lines = []
    for round_data in display['rounds']:
        if lines:
            lines.append('')  # Blank line between rounds
        lines.append(f"# {round_data['name']}")
        for match in round_data['matches']:
            team1, team2 = match['teams']
            line = f"[{match['code']}] M{match['match_number']}: {team1} vs {team2}"
            if match['winner']:
                line += f" -> {match['winner']}"
            lines.append(line)
    return lines


def main(argv=None):
    parser = argparse.ArgumentParser(description='Generate a single elimination bracket from a teams file.')
    parser.add_argument('teams_file', help='YAML list of team names, or mapping of team name to players')
    parser.add_argument('--seed', type=int, default=None, help='Seed for a reproducible draw')
    parser.add_argument('--no-byes', action='store_true', help='Leave bye matches unresolved')
    args = parser.parse_args(argv)

    rng = random.Random(args.seed) if args.seed is not None else None

    try:
        team_names = load_team_names(args.teams_file)
        bracket = generate_bracket(team_names, rng=rng)
    except (OSError, yaml.YAMLError, BracketError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    codes = generate_codes(bracket, rng=rng)
    results = empty_results(bracket)
    if not args.no_byes:
        bracket, results = advance_byes(bracket, results)

    for line in format_bracket(get_bracket_display(bracket, results, codes)):
        print(line)
    return 0


if __name__ == '__main__':
    sys.exit(main())
