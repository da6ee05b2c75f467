"""
Team registry operations: points, names, images.

Each mutation is a full load-mutate-save of the tournament document under
the store lock.
"""
from typing import List

from core.errors import InvalidInput, NotFound
from core.images import MAX_IMAGE_SIZE, to_data_uri, validate_image_size, validate_image_type
from core.models import Team, TournamentDocument
from core.store import TournamentStore


def _require_team(doc: TournamentDocument, team_id) -> Team:
    team = doc.find_team(team_id)
    if team is None:
        raise NotFound('Team not found')
    return team


def parse_points(points) -> int:
    """Accept ints and integral floats; reject everything else (including bools)."""
    if isinstance(points, bool):
        raise InvalidInput('Points must be a number')
    if isinstance(points, int):
        return points
    if isinstance(points, float) and points.is_integer():
        return int(points)
    raise InvalidInput('Points must be a number')


def get_teams(store: TournamentStore) -> List[Team]:
    return store.load().teams


def set_points(store: TournamentStore, team_id, points) -> Team:
    points = parse_points(points)
    with store.locked():
        doc = store.load()
        team = _require_team(doc, team_id)
        team.points = points
        store.save(doc)
    return team


def set_name(store: TournamentStore, team_id, name) -> Team:
    if not name or not isinstance(name, str):
        raise InvalidInput('Name must be a non-empty string')
    with store.locked():
        doc = store.load()
        team = _require_team(doc, team_id)
        team.name = name
        store.save(doc)
    return team


def set_image(store: TournamentStore, team_id, image_bytes: bytes, mime_type: str,
              max_size: int = MAX_IMAGE_SIZE) -> str:
    """Store the image as a data URI on the team, replacing any previous one. Returns the data URI."""
    validate_image_type(mime_type)
    validate_image_size(len(image_bytes), max_size)
    with store.locked():
        doc = store.load()
        team = _require_team(doc, team_id)
        team.image = to_data_uri(image_bytes, mime_type)
        store.save(doc)
    return team.image


def reset_all_points(store: TournamentStore):
    with store.locked():
        doc = store.load()
        for team in doc.teams:
            team.points = 0
        store.save(doc)
