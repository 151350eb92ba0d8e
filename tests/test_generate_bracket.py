"""
Tests for the generate_bracket command-line tool.
"""
import sys
import os
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from generate_bracket import load_team_names, format_bracket, main


def write_teams(tmp_path, data):
    path = tmp_path / "teams.yaml"
    path.write_text(yaml.dump(data, default_flow_style=False))
    return str(path)


class TestLoadTeamNames:

    def test_list_file(self, tmp_path):
        assert load_team_names(write_teams(tmp_path, ['A', 'B'])) == ['A', 'B']

    def test_mapping_file(self, tmp_path):
        path = write_teams(tmp_path, {'A': {'players': ['a1']}, 'B': {'players': []}})
        assert sorted(load_team_names(path)) == ['A', 'B']

    def test_empty_file(self, tmp_path):
        path = tmp_path / "teams.yaml"
        path.write_text("")
        assert load_team_names(str(path)) == []


class TestFormatBracket:

    def test_format(self):
        display = {'rounds': [
            {'name': 'Final', 'matches': [
                {'teams': ['A', 'B'], 'match_number': 1, 'code': 'ABCDEF', 'winner': 'B'},
            ]},
        ]}
        assert format_bracket(display) == ['# Final', '[ABCDEF] M1: A vs B -> B']


class TestMain:

    def test_prints_rounds(self, tmp_path, capsys):
        path = write_teams(tmp_path, ['Ice Wolves', 'Blue Liners', 'Crease Crew'])
        assert main([path, '--seed', '3']) == 0

        out = capsys.readouterr().out
        assert '# Semifinal' in out
        assert '# Final' in out
        for team in ['Ice Wolves', 'Blue Liners', 'Crease Crew']:
            assert team in out
        assert '-> ' in out  # Bye resolved

    def test_seed_is_reproducible(self, tmp_path, capsys):
        path = write_teams(tmp_path, [f'T{i}' for i in range(9)])
        main([path, '--seed', '42'])
        first = capsys.readouterr().out
        main([path, '--seed', '42'])
        assert capsys.readouterr().out == first

    def test_no_byes(self, tmp_path, capsys):
        path = write_teams(tmp_path, ['A', 'B', 'C'])
        assert main([path, '--no-byes']) == 0
        assert '->' not in capsys.readouterr().out

    def test_too_few_teams(self, tmp_path, capsys):
        path = write_teams(tmp_path, ['A'])
        assert main([path]) == 1
        assert 'Error' in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / 'missing.yaml')]) == 1
        assert 'Error' in capsys.readouterr().err
