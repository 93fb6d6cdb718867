"""
Flask web application for the single elimination Bracket Builder.
"""
import os
import logging
import yaml
from filelock import FileLock
from flask import Flask, render_template, request, jsonify
from core.entrants import DEFAULT_SAMPLE
from core.state import BracketState, DEFAULT_TITLE

app = Flask(__name__)
app.logger.setLevel(logging.INFO)


BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('BRACKET_DATA_DIR', os.path.join(BASE_DIR, 'data'))
STATE_FILE = os.path.join(DATA_DIR, 'bracket_state.yaml')
os.makedirs(DATA_DIR, exist_ok=True)
_data_lock = FileLock(os.path.join(DATA_DIR, '.lock'), timeout=10)


def load_state() -> BracketState:
    """Load the bracket document from YAML, using defaults for anything missing."""
    if not os.path.exists(STATE_FILE):
        return BracketState()
    try:
        with open(STATE_FILE, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        app.logger.warning(f'Failed to parse {STATE_FILE}: {e}')
        return BracketState()
    return BracketState.from_dict(data)


def save_state(state: BracketState):
    """Save the bracket document to YAML."""
    os.makedirs(os.path.dirname(STATE_FILE), exist_ok=True)
    with open(STATE_FILE, 'w', encoding='utf-8') as f:
        yaml.dump(state.to_dict(), f, default_flow_style=False, sort_keys=False)


def _competitor_json(competitor):
    return competitor.to_dict() if competitor else None


def serialize_state(state: BracketState) -> dict:
    """Saved blob plus the derived rounds and champion, for the front end."""
    display = state.display()
    return {
        **state.to_dict(),
        'entrant_count': len(state.entrants),
        'rounds': [[m.to_dict() for m in matches] for matches in display['rounds']],
        'round_names': display['round_names'],
        'champion': _competitor_json(display['champion']),
        'bracket_size': display['bracket_size'],
        'byes': display['byes'],
        'unresolved': display['unresolved'],
    }


def _request_data() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    if not isinstance(data, dict):
        return {}
    return data


def _parse_bool(value, default=True) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    return str(value).lower() in ('1', 'true', 'on', 'yes')


@app.route('/')
def index():
    """Bracket page: setup form and every derived round."""
    state = load_state()
    return render_template('bracket.html', state=state, display=state.display())


@app.route('/api/state', methods=['GET'])
def api_state():
    return jsonify(serialize_state(load_state()))


@app.route('/api/entrants', methods=['POST'])
def api_update_entrants():
    """AJAX endpoint for saving the entrant list and shuffle flag."""
    data = _request_data()
    with _data_lock:
        state = load_state()
        if isinstance(data.get('entrants_text'), str):
            state.entrants_text = data['entrants_text']
        if 'shuffle' in data:
            state.shuffle = _parse_bool(data.get('shuffle'))
        save_state(state)
    return jsonify({'success': True, 'entrant_count': len(state.entrants)})


@app.route('/api/sample', methods=['POST'])
def api_load_sample():
    """Fill the entrant list with the sample drinks."""
    with _data_lock:
        state = load_state()
        state.entrants_text = DEFAULT_SAMPLE
        save_state(state)
    return jsonify({'success': True, 'entrant_count': len(state.entrants)})


@app.route('/api/build', methods=['POST'])
def api_build_bracket():
    """Build a new bracket from the saved (or submitted) entrants."""
    data = _request_data()
    with _data_lock:
        state = load_state()
        if isinstance(data.get('entrants_text'), str):
            state.entrants_text = data['entrants_text']
        if 'shuffle' in data:
            state.shuffle = _parse_bool(data.get('shuffle'))
        if not state.build():
            return jsonify({'success': False, 'error': 'No entrants to build a bracket from.'})
        save_state(state)
    app.logger.info(f'Built bracket for {len(state.entrants)} entrants (shuffle={state.shuffle})')
    return jsonify({'success': True, 'state': serialize_state(state)})


@app.route('/api/pick', methods=['POST'])
def api_pick_winner():
    """Record the winner of a match. Invalid picks are ignored."""
    data = _request_data()
    try:
        round_index = int(data.get('round_index'))
        match_index = int(data.get('match_index'))
    except (TypeError, ValueError):
        return jsonify({'success': False, 'error': 'round_index and match_index are required'})
    competitor_id = data.get('competitor_id')

    with _data_lock:
        state = load_state()
        recorded = state.pick(round_index, match_index, competitor_id)
        if recorded:
            save_state(state)
    return jsonify({'success': True, 'recorded': recorded, 'state': serialize_state(state)})


@app.route('/api/title', methods=['POST'])
def api_update_title():
    data = _request_data()
    title = data.get('title')
    title = title.strip() if isinstance(title, str) else ''
    with _data_lock:
        state = load_state()
        state.title = title or DEFAULT_TITLE
        save_state(state)
    return jsonify({'success': True, 'title': state.title})


@app.route('/api/reset', methods=['POST'])
def api_reset():
    """Clear the bracket and all recorded winners."""
    with _data_lock:
        state = load_state()
        state.reset()
        save_state(state)
    app.logger.info('Bracket reset')
    return jsonify({'success': True})


if __name__ == '__main__':
    app.run(debug=True, port=5000)
