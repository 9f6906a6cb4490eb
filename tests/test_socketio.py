def received(sio_client, name):
    return [event['args'][0] for event in sio_client.get_received() if event['name'] == name]


def test_watch_session_sends_current_state(client, sio_client):
    session_id = client.post('/api/sessions', json={'variant': 'wordle', 'puzzle_id': 'wrd001'}).get_json()['session_id']

    sio_client.emit('watch_session', {'session_id': session_id})
    states = received(sio_client, 'session_state')
    assert len(states) == 1
    assert states[0]['session_id'] == session_id
    assert states[0]['phase'] == 'active'


def test_guess_is_pushed_to_watchers(client, sio_client):
    session_id = client.post('/api/sessions', json={'variant': 'wordle', 'puzzle_id': 'wrd001'}).get_json()['session_id']
    sio_client.emit('watch_session', {'session_id': session_id})
    sio_client.get_received()

    client.post(f'/api/sessions/{session_id}/guess', json={'guess': 'SLATE'})
    states = received(sio_client, 'session_state')
    assert [s['guess_count'] for s in states] == [1]


def test_unwatched_session_gets_no_updates(client, sio_client):
    session_id = client.post('/api/sessions', json={'variant': 'wordle', 'puzzle_id': 'wrd001'}).get_json()['session_id']
    sio_client.emit('watch_session', {'session_id': session_id})
    sio_client.emit('unwatch_session', {'session_id': session_id})
    assert received(sio_client, 'unwatched') == [{'session_id': session_id}]

    client.post(f'/api/sessions/{session_id}/guess', json={'guess': 'SLATE'})
    assert received(sio_client, 'session_state') == []


def test_watching_unknown_session_reports_error(sio_client):
    sio_client.emit('watch_session', {'session_id': 'missing'})
    assert received(sio_client, 'error') == [{'error': 'Session not found'}]

    sio_client.emit('watch_session', {})
    assert received(sio_client, 'error') == [{'error': 'Session ID is required'}]
