import pytest

from puzzle_hub.errors import (
    LoadError, NotFoundError, PersistenceFailure, PuzzleValidationError
)
from puzzle_hub.models.game import Phase, Variant
from puzzle_hub.models.user import PlayerIdentity
from puzzle_hub.services.auth_service import AuthService
from puzzle_hub.services.game_service import GameService
from puzzle_hub.services.profile_service import ProfileService
from puzzle_hub.services.puzzle_service import PuzzleService
from puzzle_hub.services.session import PersistResult, SessionStateMachine
from puzzle_hub.services.storage import MemoryDocumentStore, ResultStore, StorageError

from conftest import GROUPING_PUZZLE, QUORDLE_PUZZLE

FRUITS = ['APPLE', 'BANANA', 'CHERRY', 'GRAPE']
COLORS = ['RED', 'BLUE', 'GREEN', 'YELLOW']
ANIMALS = ['DOG', 'CAT', 'HORSE', 'SHEEP']
PLANETS = ['MARS', 'VENUS', 'EARTH', 'SATURN']


class BrokenStore(MemoryDocumentStore):
    def append(self, collection, data):
        raise StorageError('disk full')

    def query_all(self, collection):
        raise StorageError('connection reset')


def grouping_payload():
    return GROUPING_PUZZLE.to_document()


# Profiles

def test_create_and_fetch_player(store, rng):
    profiles = ProfileService(store, rng=rng)
    player = profiles.create_player('  Lizzie ')

    assert player.name == 'Lizzie'
    assert player.id.startswith('user_') and len(player.id) == 12
    assert profiles.get_player(player.id).name == 'Lizzie'
    assert [p.id for p in profiles.list_players()] == [player.id]
    assert player.identity == PlayerIdentity(player.id, 'Lizzie')


def test_player_needs_a_name(store):
    with pytest.raises(PuzzleValidationError, match='Please enter your name'):
        ProfileService(store).create_player('   ')


def test_unknown_player_is_none(store):
    assert ProfileService(store).get_player('user_missing') is None


# Admin auth

@pytest.fixture()
def auth(store):
    service = AuthService(store, 'unit-test-secret')
    service.seed_admin('Admin', 'correct horse')
    return service


def test_login_and_verify(auth):
    login = auth.login_admin('admin', 'correct horse')
    assert login['success']
    assert login['admin'] == {'id': 'admin', 'username': 'admin'}

    verified = auth.verify_token(login['token'])
    assert verified['success']
    assert verified['admin']['id'] == 'admin'


def test_seeding_twice_keeps_the_first_password(auth):
    auth.seed_admin('admin', 'something else')
    assert auth.login_admin('admin', 'correct horse')['success']


def test_wrong_password_is_rejected(auth):
    result = auth.login_admin('admin', 'wrong')
    assert not result['success']
    assert result['error'] == 'Invalid username or password'
    assert not auth.login_admin('', '')['success']


def test_logout_ends_the_session(auth):
    token = auth.login_admin('admin', 'correct horse')['token']
    assert auth.logout_admin(token)['success']

    verified = auth.verify_token(token)
    assert not verified['success']
    assert verified['error'] == 'Session has expired or is invalid'


def test_token_must_match_the_stored_session(auth):
    token = auth.login_admin('admin', 'correct horse')['token']
    auth.store.put('admin_sessions', 'admin', {'admin_id': 'admin', 'token_hash': 'replaced'})
    assert not auth.verify_token(token)['success']

    token = auth.login_admin('admin', 'correct horse')['token']
    assert auth.verify_token(token)['success']


def test_expired_and_foreign_tokens(store):
    expired = AuthService(store, 'unit-test-secret', expiration_days=-1)
    expired.seed_admin('admin', 'pw')
    token = expired.login_admin('admin', 'pw')['token']
    assert expired.verify_token(token)['error'] == 'Token has expired'

    other = AuthService(store, 'another-secret')
    fresh = AuthService(store, 'unit-test-secret').login_admin('admin', 'pw')['token']
    assert other.verify_token(fresh)['error'] == 'Invalid token'


# Authoring

@pytest.fixture()
def authoring(puzzle_store, dictionary, rng):
    return PuzzleService(puzzle_store, dictionary, rng=rng)


def test_create_grouping_puzzle(authoring, puzzle_store):
    puzzle_id = authoring.create_puzzle(Variant.CONNECTIONS, grouping_payload(), 'Rob')
    assert len(puzzle_id) == 6 and puzzle_id.isalnum()
    assert puzzle_store.get(Variant.CONNECTIONS, puzzle_id) == GROUPING_PUZZLE


def test_grouping_words_must_be_unique(authoring):
    payload = grouping_payload()
    payload['categories'][2]['words'][0] = 'apple'
    with pytest.raises(PuzzleValidationError, match='All words must be unique'):
        authoring.create_puzzle(Variant.CONNECTIONS, payload, 'Rob')


def test_grouping_needs_titles_and_words(authoring):
    payload = grouping_payload()
    payload['categories'][1]['title'] = ' '
    with pytest.raises(PuzzleValidationError, match='Category 2 needs a title'):
        authoring.build(Variant.CONNECTIONS, payload, 'Rob')

    payload = grouping_payload()
    payload['categories'][0]['words'][2] = ''
    with pytest.raises(PuzzleValidationError, match='Category 1 is missing word 3'):
        authoring.build(Variant.CONNECTIONS, payload, 'Rob')


def test_malformed_authoring_payloads_are_validation_errors(authoring):
    payload = grouping_payload()
    payload['categories'][3] = 'Planets'
    with pytest.raises(PuzzleValidationError, match='Category 4 must be an object'):
        authoring.build(Variant.CONNECTIONS, payload, 'Rob')

    payload = grouping_payload()
    payload['categories'][0]['words'][1] = 7
    with pytest.raises(PuzzleValidationError, match='Category 1 is missing word 2'):
        authoring.build(Variant.CONNECTIONS, payload, 'Rob')

    payload = grouping_payload()
    payload['categories'][2]['words'] = 'DOG CAT HORSE SHEEP'
    with pytest.raises(PuzzleValidationError, match='Category 3 needs exactly 4 words'):
        authoring.build(Variant.CONNECTIONS, payload, 'Rob')

    with pytest.raises(PuzzleValidationError, match='exactly 4 categories'):
        authoring.build(Variant.CONNECTIONS, {'categories': {'title': 'Fruits'}}, 'Rob')
    with pytest.raises(PuzzleValidationError, match='Please enter word'):
        authoring.build_wordle({'targetWord': 12345}, 'Rob')
    with pytest.raises(PuzzleValidationError, match='exactly 4 words'):
        authoring.build_quordle({'targetWords': 'CRANESLATEMOUNTFIGHT'}, 'Lizzie')


def test_wordle_target_is_normalized_and_checked(authoring):
    assert authoring.build_wordle({'targetWord': ' crane '}, 'Rob').target_word == 'CRANE'

    with pytest.raises(PuzzleValidationError, match='must be exactly 5 letters'):
        authoring.build_wordle({'targetWord': 'CRAN'}, 'Rob')
    with pytest.raises(PuzzleValidationError, match="'ZZZZZ' is not a valid word"):
        authoring.build_wordle({'targetWord': 'ZZZZZ'}, 'Rob')


def test_quordle_words_must_differ(authoring, puzzle_store):
    with pytest.raises(PuzzleValidationError, match='All 4 words must be different'):
        authoring.build_quordle({'targetWords': ['CRANE', 'crane', 'SLATE', 'MOUNT']}, 'Lizzie')
    with pytest.raises(PuzzleValidationError, match="Word 4 'XXXXX'"):
        authoring.build_quordle({'targetWords': ['CRANE', 'SLATE', 'MOUNT', 'XXXXX']}, 'Lizzie')

    puzzle_id = authoring.create_puzzle(Variant.QUORDLE, {'targetWords': list(QUORDLE_PUZZLE.targets)}, 'Lizzie')
    assert puzzle_store.get(Variant.QUORDLE, puzzle_id) == QUORDLE_PUZZLE


# Results

def finished_record(variant, puzzle_store, dictionary, clock, guesses):
    player = PlayerIdentity('user_abc1234', 'Lizzie')
    machine = SessionStateMachine(variant, puzzle_store, dictionary=dictionary, player=player, clock=clock)
    machine.load({Variant.CONNECTIONS: 'grp001', Variant.WORDLE: 'wrd001'}[variant])
    for guess in guesses:
        turn = machine.submit(guess)
    return next(e.record for e in turn.effects if isinstance(e, PersistResult))


def test_result_records_survive_storage(store, puzzle_store, dictionary, clock):
    results = ResultStore(store)
    grouping = finished_record(Variant.CONNECTIONS, puzzle_store, dictionary, clock,
                               [['RED', 'BLUE', 'GREEN', 'DOG'], FRUITS, COLORS, ANIMALS, PLANETS])
    wordle = finished_record(Variant.WORDLE, puzzle_store, dictionary, clock, ['SLATE', 'CRANE'])

    results.append(grouping)
    results.append(wordle)

    assert results.query_all(Variant.CONNECTIONS) == [grouping]
    assert results.query_by_user(Variant.WORDLE, 'user_abc1234') == [wordle]
    assert results.query_by_user(Variant.WORDLE, 'user_other') == []


def test_result_store_maps_storage_errors(store, puzzle_store, dictionary, clock):
    record = finished_record(Variant.WORDLE, puzzle_store, dictionary, clock, ['CRANE'])
    results = ResultStore(BrokenStore())
    with pytest.raises(PersistenceFailure):
        results.append(record)
    with pytest.raises(LoadError):
        results.query_all(Variant.WORDLE)


# Game service

@pytest.fixture()
def games(store, puzzle_store, dictionary, clock, rng):
    return GameService(
        puzzle_store, ResultStore(store),
        dictionary=dictionary, profiles=ProfileService(store),
        persist_async=False, clock=clock, rng=rng,
    )


def test_session_for_unknown_puzzle_is_not_registered(games):
    with pytest.raises(NotFoundError):
        games.create_session(Variant.WORDLE, 'missing')
    assert games.active_session_count() == 0


def test_session_for_unknown_player_is_refused(games):
    with pytest.raises(NotFoundError):
        games.create_session(Variant.WORDLE, 'wrd001', player_id='user_nobody')


def test_finished_session_persists_one_result(games, store):
    player = ProfileService(store).create_player('Rob')
    session_id, _ = games.create_session(Variant.CONNECTIONS, 'grp001', player.id)
    for words in (FRUITS, COLORS, ANIMALS, PLANETS):
        games.submit(session_id, words)

    view = games.describe(session_id)
    assert view['phase'] == Phase.WON.value
    assert view['player'] == {'id': player.id, 'name': 'Rob'}
    assert len(games.results.query_all(Variant.CONNECTIONS)) == 1


def test_view_hides_the_answer_until_the_end(games):
    session_id, _ = games.create_session(Variant.WORDLE, 'wrd001')
    games.submit(session_id, 'SLATE')
    view = games.describe(session_id)
    assert view['answer'] is None
    assert view['remaining'] == 5
    assert view['keyboard']['A'] == 'correct'

    for word in ('MOUNT', 'FIGHT', 'HELLO', 'WORLD', 'ADIEU'):
        games.submit(session_id, word)
    view = games.describe(session_id)
    assert view['game_over'] and not view['won']
    assert view['answer'] == 'CRANE'


def test_grouping_view_reveals_categories_only_on_loss(games):
    session_id, _ = games.create_session(Variant.CONNECTIONS, 'grp001')
    games.submit(session_id, FRUITS)
    view = games.describe(session_id)
    assert [c['title'] for c in view['found_categories']] == ['Fruits']
    assert view['revealed_categories'] == []

    for _ in range(4):
        games.submit(session_id, ['RED', 'DOG', 'MARS', 'BLUE'])
    view = games.describe(session_id)
    assert [c['title'] for c in view['revealed_categories']] == ['Colors', 'Animals', 'Planets']


def test_listeners_receive_new_views(games):
    seen = []
    games.add_listener(lambda session_id, view: seen.append((session_id, view['guess_count'])))
    session_id, _ = games.create_session(Variant.WORDLE, 'wrd001')

    games.submit(session_id, 'SLATE')
    games.submit(session_id, 'XX')
    assert seen == [(session_id, 1)]


def test_persistence_failure_does_not_break_the_session(puzzle_store, dictionary, clock, store):
    games = GameService(puzzle_store, ResultStore(BrokenStore()), dictionary=dictionary,
                        profiles=ProfileService(store), persist_async=False, clock=clock)
    player = ProfileService(store).create_player('Rob')
    session_id, _ = games.create_session(Variant.WORDLE, 'wrd001', player.id)

    turn = games.submit(session_id, 'CRANE')
    assert turn.accepted
    assert games.describe(session_id)['won']


def test_closed_session_is_gone(games):
    session_id, _ = games.create_session(Variant.QUORDLE, 'qrd001')
    assert games.close_session(session_id)
    assert not games.close_session(session_id)
    with pytest.raises(NotFoundError):
        games.describe(session_id)


def test_idle_sessions_are_evicted(store, puzzle_store, dictionary, clock):
    games = GameService(puzzle_store, ResultStore(store), dictionary=dictionary,
                        persist_async=False, clock=clock, session_idle_seconds=600)
    abandoned, _ = games.create_session(Variant.WORDLE, 'wrd001')
    finished, _ = games.create_session(Variant.WORDLE, 'wrd001')
    games.submit(finished, 'CRANE')
    clock.advance(300)
    playing, _ = games.create_session(Variant.CONNECTIONS, 'grp001')

    clock.advance(400)
    games.submit(playing, FRUITS)
    assert games.prune_idle_sessions() == 2
    with pytest.raises(NotFoundError):
        games.describe(abandoned)
    with pytest.raises(NotFoundError):
        games.submit(finished, 'SLATE')
    assert games.describe(playing)['found_categories'][0]['title'] == 'Fruits'

    clock.advance(601)
    games.create_session(Variant.QUORDLE, 'qrd001')
    assert games.active_session_count() == 1


def test_sessions_never_expire_without_a_timeout(games, clock):
    session_id, _ = games.create_session(Variant.WORDLE, 'wrd001')
    clock.advance(30 * 24 * 3600)
    assert games.prune_idle_sessions() == 0
    assert games.describe(session_id)['phase'] == Phase.ACTIVE.value
