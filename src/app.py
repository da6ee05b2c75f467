"""
Flask web application for the tournament bracket API.
"""
import os
from functools import wraps

import yaml
from flask import Flask, request, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from core.bracket import get_stage, set_stage, reset_stage, requested_ids_from_payload
from core.errors import InvalidInput, NotFound, StorageUnavailable
from core.images import MAX_IMAGE_SIZE, discard, spool_upload, validate_image_type
from core.store import TournamentStore
from core.teams import get_teams, set_points, set_name, set_image, reset_all_points

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DATA_FILE = os.environ.get('TOURNAMENT_DATA_FILE', os.path.join(BASE_DIR, 'tournament-data.json'))
UPLOADS_DIR = os.environ.get('TOURNAMENT_UPLOADS_DIR', os.path.join(BASE_DIR, 'uploads'))
SETTINGS_FILE = os.environ.get('TOURNAMENT_SETTINGS_FILE', os.path.join(BASE_DIR, 'settings.yaml'))

STAGE_LABELS = {
    'quarterfinals': 'Quarterfinals',
    'semifinals': 'Semifinals',
    'finals': 'Finals',
}
STAGE_ROUTE = '<any(quarterfinals, semifinals, finals):stage_name>'
# Room for the multipart envelope around a maximum-size image
MAX_REQUEST_SIZE = MAX_IMAGE_SIZE + 64 * 1024


def get_default_settings() -> dict:
    return {
        'host': '127.0.0.1',
        'port': 3000,
        'cors_origins': '*',
        'log_level': 'INFO',
        'lock_timeout': 10,
    }


def load_settings(path: str = None) -> dict:
    """Load settings from YAML file, merging with defaults."""
    defaults = get_default_settings()
    path = path or SETTINGS_FILE
    if not os.path.exists(path):
        return defaults
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        app.logger.warning(f'Failed to parse {path}: {e}')
        return defaults
    if not isinstance(data, dict):
        return defaults
    return {**defaults, **data}


def create_store(settings: dict = None) -> TournamentStore:
    settings = settings or SETTINGS
    return TournamentStore(DATA_FILE, lock_timeout=settings['lock_timeout'])


SETTINGS = load_settings()
app.logger.setLevel(str(SETTINGS['log_level']).upper())
CORS(app, origins=SETTINGS['cors_origins'])
app.config['MAX_CONTENT_LENGTH'] = MAX_REQUEST_SIZE

store = create_store()


def initialize_storage():
    """Create the default tournament document and the uploads directory if missing."""
    os.makedirs(UPLOADS_DIR, exist_ok=True)
    if store.initialize_if_absent():
        app.logger.info(f'Initialized tournament data at {store.path}')
    else:
        app.logger.info(f'Using tournament data at {store.path}')


initialize_storage()


def api_errors(failure_message: str):
    """Convert domain errors to JSON responses.

    InvalidInput and NotFound answer with their own message. Storage failures
    and anything unexpected answer 500 with ``failure_message``, which may use
    the route's URL arguments as format fields.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except (InvalidInput, NotFound) as e:
                app.logger.warning(f'{request.method} {request.path}: {e.message}')
                return jsonify({'error': e.message}), e.status_code
            except StorageUnavailable as e:
                app.logger.error(f'{request.method} {request.path}: {e.message}')
                return jsonify({'error': failure_message.format(**kwargs)}), 500
            except HTTPException:
                raise
            except Exception:
                app.logger.exception(f'{request.method} {request.path} failed')
                return jsonify({'error': failure_message.format(**kwargs)}), 500
        return decorated_function
    return decorator


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@app.errorhandler(404)
def not_found(e):
    return jsonify({'error': 'Not found'}), 404


@app.errorhandler(413)
def request_too_large(e):
    app.logger.warning(f'{request.method} {request.path}: request body too large')
    return jsonify({'error': f'Image too large (max {MAX_IMAGE_SIZE} bytes)'}), 400


@app.errorhandler(405)
def method_not_allowed(e):
    return jsonify({'error': 'Method not allowed'}), 405


@app.route('/api/tournament')
@api_errors('Failed to read tournament data')
def api_tournament():
    """Return teams and every bracket stage."""
    return jsonify(store.load().to_dict())


@app.route('/api/teams')
@api_errors('Failed to read teams data')
def api_teams():
    return jsonify([team.to_dict() for team in get_teams(store)])


@app.route('/api/team/<int:team_id>', methods=['PUT'])
@api_errors('Failed to update team points')
def api_update_points(team_id):
    """Replace a team's points."""
    team = set_points(store, team_id, _json_body().get('points'))
    app.logger.info(f'Team {team_id} points set to {team.points}')
    return jsonify({'message': 'Team points updated successfully'})


@app.route('/api/team/<int:team_id>/name', methods=['PUT'])
@api_errors('Failed to update team name')
def api_update_name(team_id):
    """Rename a team. Existing bracket snapshots keep the old name."""
    team = set_name(store, team_id, _json_body().get('name'))
    app.logger.info(f'Team {team_id} renamed to {team.name!r}')
    return jsonify({'message': 'Team name updated successfully'})


@app.route('/api/team/<int:team_id>/image', methods=['POST'])
@api_errors('Failed to upload image')
def api_upload_image(team_id):
    """Upload a team image and store it inline as a data URI.

    The upload is spooled to a temporary file under UPLOADS_DIR, which is
    removed whether or not the update succeeds.
    """
    file = request.files.get('image')
    if not file or not file.filename:
        return jsonify({'error': 'No image file provided'}), 400

    upload_path = None
    try:
        validate_image_type(file.mimetype, file.filename)
        upload_path = spool_upload(file.stream, UPLOADS_DIR, MAX_IMAGE_SIZE)
        with open(upload_path, 'rb') as f:
            image_bytes = f.read()
        image_url = set_image(store, team_id, image_bytes, file.mimetype)
    finally:
        discard(upload_path)

    app.logger.info(f'Team {team_id} image updated ({len(image_bytes)} bytes)')
    return jsonify({'message': 'Team image updated successfully', 'imageUrl': image_url})


@app.route('/api/reset', methods=['POST'])
@api_errors('Failed to reset points')
def api_reset_points():
    """Set every team's points to zero."""
    reset_all_points(store)
    app.logger.info('All team points reset')
    return jsonify({'message': 'All points reset successfully'})


@app.route(f'/api/{STAGE_ROUTE}')
@api_errors('Failed to read {stage_name} data')
def api_get_stage(stage_name):
    return jsonify(get_stage(store, stage_name).to_dict())


@app.route(f'/api/{STAGE_ROUTE}', methods=['PUT'])
@api_errors('Failed to update {stage_name}')
def api_set_stage(stage_name):
    """Assign teams to a stage's matches. Unknown team ids leave the slot empty."""
    requested = requested_ids_from_payload(stage_name, _json_body())
    stage = set_stage(store, stage_name, requested)
    app.logger.info(f'{STAGE_LABELS[stage_name]} updated: {requested}')
    return jsonify({
        'message': f'{STAGE_LABELS[stage_name]} updated successfully',
        stage_name: stage.to_dict(),
    })


@app.route(f'/api/{STAGE_ROUTE}/reset', methods=['POST'])
@api_errors('Failed to reset {stage_name}')
def api_reset_stage(stage_name):
    reset_stage(store, stage_name)
    app.logger.info(f'{STAGE_LABELS[stage_name]} reset')
    return jsonify({'message': f'{STAGE_LABELS[stage_name]} reset successfully'})


if __name__ == '__main__':
    app.logger.info(f"Tournament server running on http://{SETTINGS['host']}:{SETTINGS['port']}")
    app.run(host=SETTINGS['host'], port=int(SETTINGS['port']))
