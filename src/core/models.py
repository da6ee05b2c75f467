from typing import Dict, List, NamedTuple, Optional

TEAM_COUNT = 8

# Match keys per stage. Finals holds a single match stored without a wrapper.
STAGE_MATCHES = {
    'quarterfinals': ('match1', 'match2', 'match3', 'match4'),
    'semifinals': ('match1', 'match2'),
    'finals': ('final',),
}
FLAT_STAGES = {'finals'}


class Team:
    def __init__(self, id, name, points=0, image=''):
        self.id = id
        self.name = name
        self.points = points
        self.image = image

    def snapshot(self) -> 'TeamSnapshot':
        return TeamSnapshot(self.id, self.name, self.points, self.image)

    def to_dict(self) -> dict:
        return {'id': self.id, 'name': self.name, 'points': self.points, 'image': self.image}

    @classmethod
    def from_dict(cls, data: dict) -> 'Team':
        if not isinstance(data, dict):
            raise ValueError(f"Team must be an object, got {data!r}")
        return cls(
            id=int(data['id']),
            name=str(data['name']),
            points=data.get('points', 0),
            image=data.get('image') or '',
        )

    def __repr__(self):
        return f"Team(id={self.id}, name={self.name}, points={self.points})"


class TeamSnapshot(NamedTuple):
    """Copy of a team's displayable fields, frozen at pairing time."""
    id: int
    name: str
    points: int
    image: str

    def to_dict(self) -> dict:
        return self._asdict()

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional['TeamSnapshot']:
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ValueError(f"Team snapshot must be an object, got {data!r}")
        return cls(int(data['id']), str(data['name']), data.get('points', 0), data.get('image') or '')


class MatchSlot:
    def __init__(self, team1: Optional[TeamSnapshot] = None, team2: Optional[TeamSnapshot] = None):
        self.team1 = team1
        self.team2 = team2

    def is_empty(self) -> bool:
        return self.team1 is None and self.team2 is None

    def to_dict(self) -> dict:
        return {
            'team1': self.team1.to_dict() if self.team1 else None,
            'team2': self.team2.to_dict() if self.team2 else None,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'MatchSlot':
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"Match must be an object, got {data!r}")
        return cls(TeamSnapshot.from_dict(data.get('team1')), TeamSnapshot.from_dict(data.get('team2')))

    def __repr__(self):
        return f"MatchSlot(team1={self.team1}, team2={self.team2})"


class Stage:
    def __init__(self, name: str, matches: Optional[Dict[str, MatchSlot]] = None):
        if name not in STAGE_MATCHES:
            raise ValueError(f"Unknown stage: {name}")
        self.name = name
        matches = matches or {}
        self.matches = {key: matches.get(key) or MatchSlot() for key in STAGE_MATCHES[name]}

    @classmethod
    def empty(cls, name: str) -> 'Stage':
        return cls(name)

    def is_empty(self) -> bool:
        return all(slot.is_empty() for slot in self.matches.values())

    def to_dict(self) -> dict:
        if self.name in FLAT_STAGES:
            (slot,) = self.matches.values()
            return slot.to_dict()
        return {key: slot.to_dict() for key, slot in self.matches.items()}

    @classmethod
    def from_dict(cls, name: str, data: Optional[dict]) -> 'Stage':
        if not data:
            return cls.empty(name)
        if not isinstance(data, dict):
            raise ValueError(f"Stage {name} must be an object, got {data!r}")
        if name in FLAT_STAGES:
            (key,) = STAGE_MATCHES[name]
            return cls(name, {key: MatchSlot.from_dict(data)})
        return cls(name, {key: MatchSlot.from_dict(data.get(key)) for key in STAGE_MATCHES[name]})

    def __repr__(self):
        return f"Stage(name={self.name}, matches={self.matches})"


class TournamentDocument:
    """All teams plus every stage; persisted as a single JSON object."""

    def __init__(self, teams: List[Team], stages: Optional[Dict[str, Stage]] = None):
        self.teams = teams
        stages = stages or {}
        self.stages = {name: stages.get(name) or Stage.empty(name) for name in STAGE_MATCHES}

    @classmethod
    def default(cls) -> 'TournamentDocument':
        teams = [Team(id=i, name=f'Team {i}') for i in range(1, TEAM_COUNT + 1)]
        return cls(teams)

    def find_team(self, team_id) -> Optional[Team]:
        for team in self.teams:
            if team.id == team_id:
                return team
        return None

    def to_dict(self) -> dict:
        data = {'teams': [team.to_dict() for team in self.teams]}
        for name, stage in self.stages.items():
            data[name] = stage.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'TournamentDocument':
        if not isinstance(data, dict) or not isinstance(data.get('teams'), list):
            raise ValueError("Document must be an object with a 'teams' list")
        teams = [Team.from_dict(t) for t in data['teams']]
        stages = {name: Stage.from_dict(name, data.get(name)) for name in STAGE_MATCHES}
        return cls(teams, stages)

    def __repr__(self):
        return f"TournamentDocument(teams={len(self.teams)}, stages={list(self.stages)})"
