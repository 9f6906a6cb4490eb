import random

import pytest
import requests

from puzzle_hub import create_app
from puzzle_hub.config import TestingConfig
from puzzle_hub.context import build_context
from puzzle_hub.models.game import (
    Category, Difficulty, GroupingPuzzle, QuordlePuzzle, Variant, WordlePuzzle
)
from puzzle_hub.services.dictionary_service import DictionaryService
from puzzle_hub.services.storage import MemoryDocumentStore, PuzzleStore

DICTIONARY_WORDS = {
    'CRANE', 'SLATE', 'MOUNT', 'FIGHT', 'HELLO', 'WORLD', 'ADIEU', 'TRACE',
    'PIOUS', 'BOXER', 'SPEED', 'ABIDE', 'CRATE', 'STARE', 'LIGHT', 'MIGHT',
}

GROUPING_PUZZLE = GroupingPuzzle(
    categories=(
        Category('Fruits', ('APPLE', 'BANANA', 'CHERRY', 'GRAPE'), Difficulty.EASY),
        Category('Colors', ('RED', 'BLUE', 'GREEN', 'YELLOW'), Difficulty.MEDIUM),
        Category('Animals', ('DOG', 'CAT', 'HORSE', 'SHEEP'), Difficulty.HARD),
        Category('Planets', ('MARS', 'VENUS', 'EARTH', 'SATURN'), Difficulty.TRICKY),
    ),
    created_by='Rob',
)
WORDLE_PUZZLE = WordlePuzzle(target_word='CRANE', created_by='Rob')
QUORDLE_PUZZLE = QuordlePuzzle(target_words=('CRANE', 'SLATE', 'MOUNT', 'FIGHT'), created_by='Lizzie')


class FakeResponse:
    def __init__(self, status_code):
        self.status_code = status_code

    @property
    def ok(self):
        return self.status_code < 400


class FakeDictionaryHttp:
    """Stands in for requests.Session; answers from a fixed word list."""

    def __init__(self, words=DICTIONARY_WORDS):
        self.words = set(words)
        self.calls = []
        self.fail_with = None
        self.status_override = None

    def get(self, url, timeout=None):
        word = url.rstrip('/').rsplit('/', 1)[-1].upper()
        self.calls.append(word)
        if self.fail_with is not None:
            raise self.fail_with
        if self.status_override is not None:
            return FakeResponse(self.status_override)
        return FakeResponse(200 if word in self.words else 404)


class FakeClock:
    """Millisecond clock the tests move by hand."""

    def __init__(self, start=1_700_000_000_000):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += int(seconds * 1000)


def seed_puzzles(puzzles: PuzzleStore):
    puzzles.put(Variant.CONNECTIONS, 'grp001', GROUPING_PUZZLE)
    puzzles.put(Variant.WORDLE, 'wrd001', WORDLE_PUZZLE)
    puzzles.put(Variant.QUORDLE, 'qrd001', QUORDLE_PUZZLE)


@pytest.fixture()
def http():
    return FakeDictionaryHttp()


@pytest.fixture()
def dictionary(http):
    return DictionaryService(TestingConfig.DICTIONARY_API_URL, http=http)


@pytest.fixture()
def store():
    return MemoryDocumentStore()


@pytest.fixture()
def puzzle_store(store):
    puzzles = PuzzleStore(store)
    seed_puzzles(puzzles)
    return puzzles


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def rng():
    return random.Random(7)


@pytest.fixture()
def context(store, dictionary):
    ctx = build_context(TestingConfig, store=store, dictionary=dictionary)
    seed_puzzles(ctx.puzzles)
    return ctx


@pytest.fixture()
def app_and_socketio(context):
    return create_app(TestingConfig, context)


@pytest.fixture()
def flask_app(app_and_socketio):
    application, _ = app_and_socketio
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(app_and_socketio, flask_app):
    _, socketio = app_and_socketio
    test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
    yield test_client
    if test_client.is_connected():
        test_client.disconnect()


@pytest.fixture()
def network_down(http):
    http.fail_with = requests.ConnectionError('network unreachable')
    return http
