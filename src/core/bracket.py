"""
Bracket stages: quarterfinals, semifinals and finals.

Assigning a stage copies each requested team into a TeamSnapshot, so later
edits to the team do not show up in the bracket. Unknown team ids leave the
position empty instead of failing.
"""
from typing import Dict, Optional, Tuple

from core.errors import NotFound
from core.models import FLAT_STAGES, STAGE_MATCHES, MatchSlot, Stage, TeamSnapshot, TournamentDocument
from core.store import TournamentStore

RequestedIds = Dict[str, Tuple[Optional[int], Optional[int]]]


def _check_stage(stage_name: str):
    if stage_name not in STAGE_MATCHES:
        raise NotFound(f'Unknown stage: {stage_name}')


def parse_team_id(value) -> Optional[int]:
    """Turn a request value into a team id. Missing, falsy or non-numeric values give None.

    Strings must hold a whole integer: ``"3abc"`` is not read as 3 but gives
    None, which leaves the slot empty like any other unknown id.
    """
    if not value or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        if isinstance(value, float):
            return int(value)
        return int(str(value).strip())
    except (ValueError, OverflowError):
        return None


def requested_ids_from_payload(stage_name: str, payload: dict) -> RequestedIds:
    """
    Read the requested team ids for every match of a stage from a request body.

    Quarterfinals and semifinals use ``match<N>Team1Id``/``match<N>Team2Id``;
    finals uses ``team1Id``/``team2Id``.
    """
    _check_stage(stage_name)
    payload = payload or {}
    requested = {}
    for match_key in STAGE_MATCHES[stage_name]:
        if stage_name in FLAT_STAGES:
            fields = ('team1Id', 'team2Id')
        else:
            fields = (f'{match_key}Team1Id', f'{match_key}Team2Id')
        requested[match_key] = tuple(parse_team_id(payload.get(field)) for field in fields)
    return requested


def _snapshot(doc: TournamentDocument, team_id: Optional[int]) -> Optional[TeamSnapshot]:
    if team_id is None:
        return None
    team = doc.find_team(team_id)
    return team.snapshot() if team else None


def build_stage(doc: TournamentDocument, stage_name: str, requested: RequestedIds) -> Stage:
    _check_stage(stage_name)
    matches = {}
    for match_key in STAGE_MATCHES[stage_name]:
        team1_id, team2_id = requested.get(match_key, (None, None))
        matches[match_key] = MatchSlot(_snapshot(doc, team1_id), _snapshot(doc, team2_id))
    return Stage(stage_name, matches)


def get_stage(store: TournamentStore, stage_name: str) -> Stage:
    _check_stage(stage_name)
    return store.load().stages[stage_name]


def set_stage(store: TournamentStore, stage_name: str, requested: RequestedIds) -> Stage:
    _check_stage(stage_name)
    with store.locked():
        doc = store.load()
        stage = build_stage(doc, stage_name, requested)
        doc.stages[stage_name] = stage
        store.save(doc)
    return stage


def reset_stage(store: TournamentStore, stage_name: str) -> Stage:
    _check_stage(stage_name)
    with store.locked():
        doc = store.load()
        stage = Stage.empty(stage_name)
        doc.stages[stage_name] = stage
        store.save(doc)
    return stage
