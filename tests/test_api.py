import pytest

from conftest import GROUPING_PUZZLE

FRUITS = ['APPLE', 'BANANA', 'CHERRY', 'GRAPE']
COLORS = ['RED', 'BLUE', 'GREEN', 'YELLOW']
ANIMALS = ['DOG', 'CAT', 'HORSE', 'SHEEP']
PLANETS = ['MARS', 'VENUS', 'EARTH', 'SATURN']


def start_session(client, variant, puzzle_id, player_id=None):
    response = client.post('/api/sessions', json={
        'variant': variant, 'puzzle_id': puzzle_id, 'player_id': player_id
    })
    assert response.status_code == 201
    return response.get_json()['session_id']


def guess(client, session_id, **body):
    response = client.post(f'/api/sessions/{session_id}/guess', json=body)
    assert response.status_code == 200
    return response.get_json()


@pytest.fixture()
def player(client):
    response = client.post('/api/players', json={'name': 'Lizzie'})
    assert response.status_code == 201
    return response.get_json()['player']


@pytest.fixture()
def admin_headers(client):
    response = client.post('/api/admin/auth/login', json={'username': 'admin', 'password': 'letmein123'})
    assert response.status_code == 200
    return {'Authorization': f"Bearer {response.get_json()['token']}"}


def test_health_check(client):
    response = client.get('/api/health')
    assert response.status_code == 200
    data = response.get_json()
    assert data['status'] == 'healthy'
    assert data['storage_available'] is True
    assert data['active_sessions'] == 0


# Sessions

def test_create_session_returns_state(client):
    response = client.post('/api/sessions', json={'variant': 'Wordle', 'puzzle_id': 'wrd001'})
    data = response.get_json()
    assert response.status_code == 201
    assert data['state']['phase'] == 'active'
    assert data['state']['budget'] == 6
    assert data['state']['answer'] is None


def test_unknown_variant_is_a_bad_request(client):
    response = client.post('/api/sessions', json={'variant': 'sudoku', 'puzzle_id': 'wrd001'})
    assert response.status_code == 400
    assert not response.get_json()['success']


def test_request_bodies_that_are_not_objects_are_ignored(client):
    assert client.post('/api/sessions', json=['wordle', 'wrd001']).status_code == 400
    assert client.post('/api/sessions', json={'variant': 5, 'puzzle_id': 'wrd001'}).status_code == 400

    session_id = start_session(client, 'wordle', 'wrd001')
    data = guess(client, session_id)
    assert data['rejected']
    response = client.post(f'/api/sessions/{session_id}/guess', json=['CRANE'])
    assert response.status_code == 200
    assert response.get_json()['state']['guess_count'] == 0


def test_unknown_puzzle_is_not_found(client, context):
    response = client.post('/api/sessions', json={'variant': 'wordle', 'puzzle_id': 'nope'})
    assert response.status_code == 404
    assert context.games.active_session_count() == 0


def test_unknown_session_is_not_found(client):
    assert client.get('/api/sessions/missing').status_code == 404
    assert client.post('/api/sessions/missing/guess', json={'guess': 'CRANE'}).status_code == 404


def test_rejected_guess_is_reported_not_failed(client):
    session_id = start_session(client, 'wordle', 'wrd001')

    data = guess(client, session_id, guess='CRAN')
    assert data['success'] and data['rejected']
    assert data['messages'][0]['text'] == 'Word must be 5 letters'
    assert data['state']['guess_count'] == 0

    data = guess(client, session_id, guess='ZZZZZ')
    assert data['reason'] == 'Not a valid word!'


def test_guess_of_the_wrong_shape_is_rejected(client):
    session_id = start_session(client, 'wordle', 'wrd001')
    data = guess(client, session_id, words=['CRANE'])
    assert data['rejected']
    assert data['reason'] == 'Guess must be a single word'
    assert data['state']['guess_count'] == 0

    session_id = start_session(client, 'connections', 'grp001')
    for body in ({'words': 'APPLE BANANA CHERRY GRAPE'}, {'words': [1, 2, 3, 4]}, {'guess': {'a': 1}}):
        data = guess(client, session_id, **body)
        assert data['reason'] == 'Select exactly 4 words'
    assert data['state']['mistakes'] == 0


def test_wordle_win_reveals_answer(client):
    session_id = start_session(client, 'wordle', 'wrd001')
    guess(client, session_id, guess='slate')
    data = guess(client, session_id, guess='crane')

    assert data['accepted']
    assert data['state']['won']
    assert data['state']['answer'] == 'CRANE'
    assert data['messages'][0]['duration_ms'] == 2000


def test_grouping_flow_through_selection(client):
    session_id = start_session(client, 'connections', 'grp001')

    for word in FRUITS:
        response = client.post(f'/api/sessions/{session_id}/toggle', json={'word': word})
    assert sorted(response.get_json()['state']['selection']) == sorted(FRUITS)

    data = guess(client, session_id)
    assert data['accepted']
    assert data['state']['found_categories'][0]['title'] == 'Fruits'
    assert data['state']['selection'] == []

    client.post(f'/api/sessions/{session_id}/toggle', json={'word': 'RED'})
    state = client.post(f'/api/sessions/{session_id}/deselect').get_json()['state']
    assert state['selection'] == []

    state = client.post(f'/api/sessions/{session_id}/shuffle').get_json()['state']
    assert sorted(state['remaining_words']) == sorted(COLORS + ANIMALS + PLANETS)


def test_toggle_needs_a_word(client):
    session_id = start_session(client, 'connections', 'grp001')
    assert client.post(f'/api/sessions/{session_id}/toggle', json={}).status_code == 400


def test_play_again_resets_the_session(client):
    session_id = start_session(client, 'quordle', 'qrd001')
    guess(client, session_id, guess='CRANE')

    response = client.post(f'/api/sessions/{session_id}/reload')
    state = response.get_json()['state']
    assert response.status_code == 200
    assert state['guess_count'] == 0
    assert state['solved_boards'] == []


def test_close_session(client):
    session_id = start_session(client, 'wordle', 'wrd001')
    assert client.delete(f'/api/sessions/{session_id}').status_code == 200
    assert client.get(f'/api/sessions/{session_id}').status_code == 404
    assert client.delete(f'/api/sessions/{session_id}').status_code == 404


# Players

def test_player_profiles(client, player):
    assert player['name'] == 'Lizzie'

    players = client.get('/api/players').get_json()['players']
    assert [p['id'] for p in players] == [player['id']]

    assert client.get(f"/api/players/{player['id']}").get_json()['player']['name'] == 'Lizzie'
    assert client.get('/api/players/user_missing').status_code == 404


def test_player_needs_a_name(client):
    response = client.post('/api/players', json={'name': ''})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Please enter your name'


def test_session_with_unknown_player(client):
    response = client.post('/api/sessions', json={
        'variant': 'wordle', 'puzzle_id': 'wrd001', 'player_id': 'user_missing'
    })
    assert response.status_code == 404


# Stats

def test_leaderboard_and_stats_after_a_game(client, player):
    session_id = start_session(client, 'connections', 'grp001', player['id'])
    for words in (FRUITS, COLORS, ANIMALS, PLANETS):
        guess(client, session_id, words=words)

    data = client.get('/api/connections/leaderboard').get_json()
    assert data['view'] == 'fastest'
    assert data['views'] == ['fastest', 'mostWins', 'winRate']
    assert data['total_results'] == 1
    assert data['rows'][0]['userName'] == 'Lizzie'
    assert data['rows'][0]['mistakes'] == 0

    stats = client.get(f"/api/connections/stats/{player['id']}").get_json()['stats']
    assert stats['gamesPlayed'] == 1
    assert stats['winRate'] == 100
    assert stats['recentGames'][0]['gameId'] == 'grp001'


def test_anonymous_games_are_not_recorded(client):
    session_id = start_session(client, 'wordle', 'wrd001')
    guess(client, session_id, guess='CRANE')
    assert client.get('/api/wordle/leaderboard').get_json()['total_results'] == 0


def test_leaderboard_rejects_unknown_view(client):
    response = client.get('/api/quordle/leaderboard?view=fewestGuesses')
    assert response.status_code == 400


def test_stats_for_player_without_games(client, player):
    data = client.get(f"/api/quordle/stats/{player['id']}").get_json()
    assert data['success']
    assert data['stats'] is None


# Admin

def test_admin_login_failures(client):
    assert client.post('/api/admin/auth/login').status_code == 400
    response = client.post('/api/admin/auth/login', json={'username': 'admin', 'password': 'nope'})
    assert response.status_code == 401


def test_admin_verify_and_logout(client, admin_headers):
    assert client.get('/api/admin/auth/verify', headers=admin_headers).status_code == 200
    assert client.post('/api/admin/auth/logout', headers=admin_headers).status_code == 200
    assert client.get('/api/admin/auth/verify', headers=admin_headers).status_code == 401


def test_authoring_requires_admin(client):
    response = client.post('/api/admin/wordle/puzzles', json={'targetWord': 'CRANE'})
    assert response.status_code == 401


def test_authored_puzzle_is_playable(client, admin_headers):
    response = client.post('/api/admin/connections/puzzles',
                           json=GROUPING_PUZZLE.to_document(), headers=admin_headers)
    data = response.get_json()
    assert response.status_code == 201
    assert data['created_by'] == 'Rob'
    assert len(data['puzzle_id']) == 6

    session_id = start_session(client, 'connections', data['puzzle_id'])
    assert len(client.get(f'/api/sessions/{session_id}').get_json()['state']['remaining_words']) == 16


def test_authoring_validation_errors(client, admin_headers):
    response = client.post('/api/admin/quordle/puzzles',
                           json={'targetWords': ['CRANE', 'CRANE', 'SLATE', 'MOUNT']},
                           headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()['error'] == 'All 4 words must be different'


def test_word_check(client, admin_headers):
    data = client.get('/api/admin/words/crane', headers=admin_headers).get_json()
    assert data == {'success': True, 'word': 'CRANE', 'valid': True}
