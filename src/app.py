"""
Flask web application for the league tournament bracket.
"""
import os
import re
import shutil
import logging
import yaml
from datetime import datetime
from filelock import FileLock
from flask import Flask, request, jsonify
from engine.models import BYE, MAX_BRACKET_SIZE, Team, Tournament
from engine.errors import BracketError, InvalidInput, OutOfRange, InvalidWinner, AlreadyDecided
from engine.elimination import (
    generate_bracket,
    empty_results,
    set_winner,
    advance_byes,
    is_started,
    get_champion,
    get_bracket_display,
)
from engine.codes import generate_codes

app = Flask(__name__)
app.logger.setLevel(getattr(logging, os.environ.get('LOG_LEVEL', 'INFO').upper(), logging.INFO))

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('TOURNAMENT_DATA_DIR', os.path.join(BASE_DIR, 'data'))

TEAMS_FILE = os.path.join(DATA_DIR, 'teams.yaml')
TOURNAMENTS_FILE = os.path.join(DATA_DIR, 'tournaments.yaml')
TOURNAMENTS_DIR = os.path.join(DATA_DIR, 'tournaments')
LOCK_TIMEOUT = 10

ERROR_STATUS = {
    InvalidInput: 400,
    InvalidWinner: 400,
    OutOfRange: 404,
    AlreadyDecided: 409,
}


def _data_lock() -> FileLock:
    """Lock serializing read-modify-write cycles on the data directory."""
    os.makedirs(DATA_DIR, exist_ok=True)
    return FileLock(os.path.join(DATA_DIR, '.lock'), timeout=LOCK_TIMEOUT)


def _error_response(error: BracketError):
    status = ERROR_STATUS.get(type(error), 400)
    app.logger.warning(f'Rejected {request.path}: {error}')
    return jsonify({'error': str(error)}), status


def _slugify(name: str) -> str:
    """Convert tournament name to filesystem-safe slug."""
    slug = name.lower().strip()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = re.sub(r'[\s-]+', '-', slug)
    slug = slug.strip('-')
    return slug or 'tournament'


def _valid_slug(slug: str) -> bool:
    return bool(slug) and '..' not in slug and '/' not in slug and '\\' not in slug


def _load_yaml(path: str, default):
    if not os.path.exists(path):
        return default
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        return data if data else default
    except yaml.YAMLError as e:
        app.logger.warning(f'Failed to parse {path}: {e}')
        return default


def _save_yaml(path: str, data):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        yaml.dump(data, f, default_flow_style=False)


def load_teams() -> dict:
    """Load registered teams from YAML, keyed by team name."""
    data = _load_yaml(TEAMS_FILE, {})
    return {name: Team.from_dict(name, team_data) for name, team_data in data.items()}


def save_teams(teams: dict):
    """Save registered teams to YAML."""
    _save_yaml(TEAMS_FILE, {name: team.to_dict() for name, team in teams.items()})


def load_tournaments() -> list:
    """Load tournament registry from YAML."""
    data = _load_yaml(TOURNAMENTS_FILE, {})
    return [Tournament.from_dict(t) for t in data.get('tournaments', [])]


def save_tournaments(tournaments: list):
    """Save tournament registry to YAML."""
    _save_yaml(TOURNAMENTS_FILE, {'tournaments': [t.to_dict() for t in tournaments]})


def _find_tournament(tournaments: list, slug: str):
    return next((t for t in tournaments if t.slug == slug), None)


def _bracket_file(slug: str) -> str:
    return os.path.join(TOURNAMENTS_DIR, slug, 'bracket.yaml')


def load_bracket(slug: str):
    """Load the bracket, results and codes of a tournament, or None if not generated."""
    data = _load_yaml(_bracket_file(slug), None)
    if not data or 'bracket' not in data:
        return None
    return data


def save_bracket(slug: str, data: dict):
    """Save the bracket, results and codes of a tournament."""
    _save_yaml(_bracket_file(slug), data)


def delete_bracket(slug: str):
    path = _bracket_file(slug)
    if os.path.exists(path):
        os.remove(path)


def _check_roster_change(tournament: Tournament):
    """
    Return an error message if the roster of this tournament may not change.

    A bracket that exists but has no decided matches is discarded so it can
    be regenerated from the new roster.
    """
    data = load_bracket(tournament.slug)
    if data is None:
        return None
    if is_started(data['bracket'], data['results']):
        return f'Tournament "{tournament.name}" has already started'
    delete_bracket(tournament.slug)
    app.logger.info(f'Discarded bracket of {tournament.slug} after roster change')
    return None


@app.route('/api/teams', methods=['GET'])
def api_list_teams():
    """List registered teams."""
    teams = load_teams()
    return jsonify([{'name': name, 'players': team.players} for name, team in sorted(teams.items())])


@app.route('/api/teams', methods=['POST'])
def api_register_team():
    """Register a team with its players."""
    data = request.get_json(silent=True) or {}
    name = str(data.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Team name required'}), 400

    players = data.get('players')
    if players is None:
        gamertag = str(data.get('gamertag') or '').strip()
        players = [gamertag] if gamertag else []
    if not isinstance(players, list) or not all(isinstance(p, str) and p.strip() for p in players):
        return jsonify({'error': 'Players must be a list of names'}), 400

    if name == BYE:
        return jsonify({'error': f'"{BYE}" is reserved and cannot be used as a team name'}), 400

    with _data_lock():
        teams = load_teams()
        if name in teams:
            return jsonify({'error': 'Team name already registered'}), 409
        teams[name] = Team(name, [p.strip() for p in players])
        save_teams(teams)

    app.logger.info(f'Registered team {name} with {len(players)} player(s)')
    return jsonify({'success': True, 'name': name, 'players': teams[name].players}), 201


@app.route('/api/teams/delete', methods=['POST'])
def api_delete_team():
    """Delete a team and remove it from every roster."""
    data = request.get_json(silent=True) or {}
    name = str(data.get('name') or '').strip()

    with _data_lock():
        teams = load_teams()
        if name not in teams:
            return jsonify({'error': 'Team not found'}), 404

        tournaments = load_tournaments()
        joined = [t for t in tournaments if name in t.teams]
        for tournament in joined:
            data = load_bracket(tournament.slug)
            if data and is_started(data['bracket'], data['results']):
                return jsonify({'error': f'Tournament "{tournament.name}" has already started'}), 409
        for tournament in joined:
            _check_roster_change(tournament)
            tournament.teams.remove(name)

        del teams[name]
        save_teams(teams)
        save_tournaments(tournaments)

    app.logger.info(f'Deleted team {name}')
    return jsonify({'success': True})


@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    """List tournaments with their rosters and bracket state."""
    listing = []
    for tournament in load_tournaments():
        entry = tournament.to_dict()
        data = load_bracket(tournament.slug)
        entry['has_bracket'] = data is not None
        entry['champion'] = get_champion(data['results']) if data else None
        listing.append(entry)
    return jsonify(listing)


@app.route('/api/tournaments/create', methods=['POST'])
def api_create_tournament():
    """Create a new tournament."""
    data = request.get_json(silent=True) or {}
    name = str(data.get('name') or '').strip()
    if not name:
        return jsonify({'error': 'Tournament name is required'}), 400
    date = data.get('date')

    slug = _slugify(name)
    with _data_lock():
        tournaments = load_tournaments()
        if _find_tournament(tournaments, slug):
            return jsonify({'error': f'A tournament with a similar name already exists ("{slug}")'}), 409
        tournament = Tournament(slug, name, str(date) if date else None)
        tournaments.append(tournament)
        save_tournaments(tournaments)

    app.logger.info(f'Created tournament {slug}')
    return jsonify({'success': True, **tournament.to_dict()}), 201


@app.route('/api/tournaments/delete', methods=['POST'])
def api_delete_tournament():
    """Delete a tournament and its bracket."""
    data = request.get_json(silent=True) or {}
    slug = str(data.get('slug') or '').strip()
    if not _valid_slug(slug):
        return jsonify({'error': 'Invalid tournament identifier'}), 400

    with _data_lock():
        tournaments = load_tournaments()
        if not _find_tournament(tournaments, slug):
            return jsonify({'error': 'Tournament not found'}), 404
        save_tournaments([t for t in tournaments if t.slug != slug])
        tournament_path = os.path.join(TOURNAMENTS_DIR, slug)
        if os.path.isdir(tournament_path):
            shutil.rmtree(tournament_path)

    app.logger.info(f'Deleted tournament {slug}')
    return jsonify({'success': True})


@app.route('/api/tournaments/<slug>/join', methods=['POST'])
def api_join_tournament(slug):
    """Add a registered team to a tournament roster."""
    data = request.get_json(silent=True) or {}
    team_name = str(data.get('team') or '').strip()
    if not team_name:
        return jsonify({'error': 'Team name required'}), 400

    with _data_lock():
        tournaments = load_tournaments()
        tournament = _find_tournament(tournaments, slug)
        if tournament is None:
            return jsonify({'error': 'Tournament not found'}), 404
        if team_name not in load_teams():
            return jsonify({'error': f'Team {team_name} is not registered'}), 404
        if team_name in tournament.teams:
            return jsonify({'error': f'Team {team_name} already joined'}), 409
        if len(tournament.teams) >= MAX_BRACKET_SIZE:
            return jsonify({'error': f'Tournament is full ({MAX_BRACKET_SIZE} teams)'}), 409
        message = _check_roster_change(tournament)
        if message:
            return jsonify({'error': message}), 409

        tournament.teams.append(team_name)
        save_tournaments(tournaments)

    app.logger.info(f'Team {team_name} joined {slug}')
    return jsonify({'success': True, 'teams': tournament.teams})


@app.route('/api/tournaments/<slug>/leave', methods=['POST'])
def api_leave_tournament(slug):
    """Remove a team from a tournament roster."""
    data = request.get_json(silent=True) or {}
    team_name = str(data.get('team') or '').strip()

    with _data_lock():
        tournaments = load_tournaments()
        tournament = _find_tournament(tournaments, slug)
        if tournament is None:
            return jsonify({'error': 'Tournament not found'}), 404
        if team_name not in tournament.teams:
            return jsonify({'error': f'Team {team_name} is not in this tournament'}), 404
        message = _check_roster_change(tournament)
        if message:
            return jsonify({'error': message}), 409

        tournament.teams.remove(team_name)
        save_tournaments(tournaments)

    app.logger.info(f'Team {team_name} left {slug}')
    return jsonify({'success': True, 'teams': tournament.teams})


@app.route('/api/tournaments/<slug>/bracket', methods=['POST'])
def api_generate_bracket(slug):
    """Generate (or regenerate, before play starts) the bracket of a tournament."""
    with _data_lock():
        tournament = _find_tournament(load_tournaments(), slug)
        if tournament is None:
            return jsonify({'error': 'Tournament not found'}), 404

        existing = load_bracket(slug)
        if existing and is_started(existing['bracket'], existing['results']):
            return jsonify({'error': f'Tournament "{tournament.name}" has already started'}), 409

        try:
            bracket = generate_bracket(tournament.teams)
        except InvalidInput as e:
            return _error_response(e)

        codes = generate_codes(bracket)
        bracket, results = advance_byes(bracket, empty_results(bracket))
        save_bracket(slug, {
            'teams': list(tournament.teams),
            'bracket': bracket,
            'results': results,
            'codes': codes,
            'generated': datetime.now().isoformat(),
        })

    app.logger.info(f'Generated bracket for {slug} with {len(tournament.teams)} teams')
    return jsonify({'success': True, 'tournament': tournament.name,
                    **get_bracket_display(bracket, results, codes)}), 201


@app.route('/api/tournaments/<slug>/bracket', methods=['GET'])
def api_get_bracket(slug):
    """Bracket of a tournament formatted for display."""
    tournament = _find_tournament(load_tournaments(), slug)
    if tournament is None:
        return jsonify({'error': 'Tournament not found'}), 404
    data = load_bracket(slug)
    if data is None:
        return jsonify({'error': 'Bracket has not been generated'}), 404
    return jsonify({'tournament': tournament.name,
                    **get_bracket_display(data['bracket'], data['results'], data.get('codes'))})


@app.route('/api/tournaments/<slug>/winner', methods=['POST'])
def api_set_winner(slug):
    """Record the winner of a bracket match."""
    data = request.get_json(silent=True) or {}
    try:
        round_idx = int(data.get('round'))
        match_idx = int(data.get('match'))
    except (TypeError, ValueError):
        return jsonify({'error': 'Round and match must be integers'}), 400
    winner = str(data.get('winner') or '').strip()
    if not winner:
        return jsonify({'error': 'Winner required'}), 400

    with _data_lock():
        bracket_data = load_bracket(slug)
        if bracket_data is None:
            return jsonify({'error': 'Bracket has not been generated'}), 404
        try:
            bracket, results = set_winner(bracket_data['bracket'], bracket_data['results'],
                                          round_idx, match_idx, winner)
        except BracketError as e:
            return _error_response(e)
        bracket, results = advance_byes(bracket, results)
        bracket_data['bracket'] = bracket
        bracket_data['results'] = results
        save_bracket(slug, bracket_data)

    champion = get_champion(results)
    app.logger.info(f'{winner} won match {match_idx} of round {round_idx} in {slug}')
    if champion:
        app.logger.info(f'{champion} won tournament {slug}')
    return jsonify({'success': True, 'winner': winner, 'champion': champion})


if __name__ == '__main__':
    app.run(debug=True, port=int(os.environ.get('PORT', 5000)))
