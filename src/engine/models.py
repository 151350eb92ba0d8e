BYE = 'BYE'
MAX_BRACKET_SIZE = 16
MIN_TEAMS = 2


class Team:
    def __init__(self, name, players=None):
        self.name = name
        self.players = list(players) if players else []

    def to_dict(self):
        return {'players': list(self.players)}

    @classmethod
    def from_dict(cls, name, data):
        data = data or {}
        return cls(name, data.get('players'))

    def __repr__(self):
        return f"Team(name={self.name}, players={self.players})"


class Tournament:
    def __init__(self, slug, name, date=None, teams=None):
        self.slug = slug
        self.name = name
        self.date = date
        self.teams = list(teams) if teams else []  # Roster, in join order

    def to_dict(self):
        return {
            'slug': self.slug,
            'name': self.name,
            'date': self.date,
            'teams': list(self.teams),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(data['slug'], data.get('name', data['slug']), data.get('date'), data.get('teams'))

    def __repr__(self):
        return f"Tournament(slug={self.slug}, name={self.name}, teams={self.teams})"
