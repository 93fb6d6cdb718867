"""
Unit tests for Flask web application.
"""
import pytest
import sys
import os
import yaml

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from app import app, load_state, save_state
from core.state import BracketState, DEFAULT_TITLE


def _build(client, entrants_text, shuffle=False):
    response = client.post('/api/build', json={'entrants_text': entrants_text, 'shuffle': shuffle})
    return response.get_json()


class TestLoadSaveState:
    """Tests for the YAML document on disk."""

    def test_load_missing_file(self, temp_data_dir):
        state = load_state()
        assert state.title == DEFAULT_TITLE
        assert state.initial_matches == []

    def test_load_empty_file(self, temp_data_dir):
        (temp_data_dir / "bracket_state.yaml").write_text("")
        assert load_state().shuffle is True

    def test_load_invalid_yaml(self, temp_data_dir):
        """Test a corrupt file falls back to defaults."""
        (temp_data_dir / "bracket_state.yaml").write_text("title: [unclosed\n  - :")
        state = load_state()
        assert state.title == DEFAULT_TITLE

    def test_load_invalid_utf8(self, temp_data_dir):
        """Test undecodable bytes fall back to defaults instead of failing every request."""
        (temp_data_dir / "bracket_state.yaml").write_bytes(b"title: \xff\xfe bad\n")
        state = load_state()
        assert state.title == DEFAULT_TITLE
        assert state.initial_matches == []

    def test_save_writes_blob_keys(self, temp_data_dir):
        state = BracketState(entrants_text="A\nB", shuffle=False, title="Cup")
        state.build()
        save_state(state)

        with open(temp_data_dir / "bracket_state.yaml", encoding='utf-8') as f:
            data = yaml.safe_load(f)
        assert set(data) == {'entrants_text', 'shuffle', 'initial_matches', 'winners_map', 'title'}
        assert data['title'] == "Cup"
        assert len(data['initial_matches']) == 1

        assert load_state().initial_matches[0].player_a.name == "A"


class TestIndexRoute:
    """Tests for the bracket page."""

    def test_index_empty(self, client, temp_data_dir):
        response = client.get('/')
        assert response.status_code == 200
        assert b'Enter entrants and build your bracket' in response.data

    def test_index_shows_rounds(self, client, temp_data_dir, three_entrants):
        _build(client, three_entrants)
        response = client.get('/')
        assert response.status_code == 200
        assert b'Round 1' in response.data
        assert b'Final' in response.data
        assert b'r0-m1' in response.data
        assert b'TBD' in response.data


class TestBuildRoute:
    """Tests for building a bracket."""

    def test_build_without_entrants(self, client, temp_data_dir):
        """Test building with no entrants is a no-op."""
        data = _build(client, "  \n ")
        assert data['success'] is False
        assert load_state().initial_matches == []

    def test_build_three_entrants(self, client, temp_data_dir, three_entrants):
        data = _build(client, three_entrants)
        assert data['success'] is True
        state = data['state']
        assert state['bracket_size'] == 4
        assert state['byes'] == 1
        assert state['round_names'] == ["Round 1", "Final"]
        assert state['rounds'][1][0]['player_a']['name'] == "A"
        assert state['rounds'][1][0]['player_b'] is None
        assert state['champion'] is None

    def test_build_uses_saved_entrants(self, client, temp_data_dir, eight_entrants):
        client.post('/api/entrants', json={'entrants_text': eight_entrants, 'shuffle': False})
        data = client.post('/api/build', json={}).get_json()
        assert data['success'] is True
        assert [len(r) for r in data['state']['rounds']] == [4, 2, 1]
        assert data['state']['rounds'][0][0]['player_a']['name'] == "Team1"


class TestPickRoute:
    """Tests for recording winners."""

    def test_pick_through_to_champion(self, client, temp_data_dir, three_entrants):
        state = _build(client, three_entrants)['state']
        c = state['rounds'][0][1]['player_b']

        data = client.post('/api/pick', json={'round_index': 0, 'match_index': 1, 'competitor_id': c['id']}).get_json()
        assert data['recorded'] is True
        final = data['state']['rounds'][1][0]
        assert final['player_a']['name'] == "A"
        assert final['player_b']['name'] == "C"

        a = final['player_a']
        data = client.post('/api/pick', json={'round_index': 1, 'match_index': 0, 'competitor_id': a['id']}).get_json()
        assert data['state']['champion']['name'] == "A"
        assert data['state']['unresolved'] == 0

    def test_pick_bye_ignored(self, client, temp_data_dir, three_entrants):
        state = _build(client, three_entrants)['state']
        bye = state['rounds'][0][0]['player_b']
        data = client.post('/api/pick', json={'round_index': 0, 'match_index': 0, 'competitor_id': bye['id']}).get_json()
        assert data['success'] is True
        assert data['recorded'] is False

    def test_pick_unknown_match_ignored(self, client, temp_data_dir, three_entrants):
        _build(client, three_entrants)
        data = client.post('/api/pick', json={'round_index': 4, 'match_index': 0, 'competitor_id': 'p_x'}).get_json()
        assert data['recorded'] is False

    def test_pick_requires_indices(self, client, temp_data_dir):
        data = client.post('/api/pick', json={'competitor_id': 'p_x'}).get_json()
        assert data['success'] is False


class TestSettingsRoutes:
    """Tests for entrants, sample, title and reset."""

    def test_update_entrants(self, client, temp_data_dir):
        data = client.post('/api/entrants', json={'entrants_text': "A\n\nB\n", 'shuffle': 'false'}).get_json()
        assert data['entrant_count'] == 2
        state = load_state()
        assert state.shuffle is False
        assert state.entrants == ["A", "B"]

    def test_update_entrants_form(self, client, temp_data_dir):
        client.post('/api/entrants', data={'entrants_text': "A\nB", 'shuffle': 'on'})
        assert load_state().shuffle is True

    def test_sample(self, client, temp_data_dir):
        data = client.post('/api/sample').get_json()
        assert data['entrant_count'] == 11

    def test_title(self, client, temp_data_dir):
        client.post('/api/title', json={'title': '  Drinks Cup '})
        assert load_state().title == "Drinks Cup"
        client.post('/api/title', json={'title': ''})
        assert load_state().title == DEFAULT_TITLE

    def test_reset(self, client, temp_data_dir, three_entrants):
        """Test reset clears the bracket but keeps the entrants."""
        _build(client, three_entrants)
        assert client.post('/api/reset').get_json()['success'] is True

        state = client.get('/api/state').get_json()
        assert state['initial_matches'] == []
        assert state['winners_map'] == {}
        assert state['rounds'] == []
        assert state['entrants_text'] == three_entrants


class TestMalformedRequests:
    """Tests for request bodies of the wrong shape."""

    def test_pick_with_json_list(self, client, temp_data_dir):
        response = client.post('/api/pick', json=[1, 2])
        assert response.status_code == 200
        assert response.get_json()['success'] is False

    def test_build_with_non_string_entrants(self, client, temp_data_dir):
        """Test a non-string entrant list is ignored, leaving nothing to build."""
        response = client.post('/api/build', json={'entrants_text': ["A", "B"]})
        assert response.status_code == 200
        assert response.get_json()['success'] is False
        assert load_state().entrants_text == ""

    def test_entrants_with_non_string_text(self, client, temp_data_dir):
        client.post('/api/entrants', json={'entrants_text': "A\nB"})
        response = client.post('/api/entrants', json={'entrants_text': 42, 'shuffle': False})
        assert response.status_code == 200
        state = load_state()
        assert state.entrants == ["A", "B"]
        assert state.shuffle is False

    def test_title_with_non_string(self, client, temp_data_dir):
        response = client.post('/api/title', json={'title': ['Cup']})
        assert response.status_code == 200
        assert load_state().title == DEFAULT_TITLE


class TestEntrantsAutosave:
    """Tests for saving the setup form as it is edited."""

    def test_page_saves_entrants_on_edit(self, client, temp_data_dir):
        html = client.get('/').data
        assert b"fetch('/api/entrants'" in html
        assert b"getElementById('entrants').oninput" in html
        assert b"getElementById('shuffle').onchange" in html

    def test_page_shows_saved_entrant_count(self, client, temp_data_dir):
        client.post('/api/entrants', json={'entrants_text': "A\nB\nC"})
        html = client.get('/').data
        assert b'<strong id="entrant-count">3</strong>' in html
        assert b'<button id="build" disabled>' not in html
