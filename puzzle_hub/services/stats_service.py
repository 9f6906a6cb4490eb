"""
Stats Aggregator

Reduces a batch of ResultRecords into leaderboard rankings and personal
statistics. Nothing here touches storage; callers fetch the records first.

Percentages are floored and averages use one decimal rounded half-up, the
same numbers the browser client always displayed.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..config.game_settings import (
    BOARD_COUNT, LEADERBOARD_SIZE, MIN_GAMES_FOR_RATE, RECENT_GAMES, WORDLE_MAX_GUESSES
)
from ..models.game import Variant
from ..models.result import ResultRecord


def one_decimal(total: float, count: int) -> Optional[float]:
    """Mean rounded to one decimal place, half away from zero."""
    if count <= 0:
        return None
    mean = Decimal(total) / Decimal(count)
    return float(mean.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int) -> int:
    return (part * 100) // whole if whole > 0 else 0


def calculate_streaks(results: Sequence[ResultRecord]) -> Tuple[int, int]:
    """
    (current, max) win streaks.

    Records are ordered oldest to newest; the current streak counts the
    trailing run of wins.
    """
    ordered = sorted(results, key=lambda r: r.completed_datetime)

    max_streak = 0
    run = 0
    for record in ordered:
        if record.won:
            run += 1
            max_streak = max(max_streak, run)
        else:
            run = 0

    current = 0
    for record in reversed(ordered):
        if not record.won:
            break
        current += 1

    return current, max_streak


def guess_distribution(won_games: Sequence[ResultRecord]) -> Dict[int, int]:
    distribution = {n: 0 for n in range(1, WORDLE_MAX_GUESSES + 1)}
    for record in won_games:
        if record.guess_count in distribution:
            distribution[record.guess_count] += 1
    return distribution


def solve_distribution(results: Sequence[ResultRecord]) -> Dict[int, int]:
    distribution = {n: 0 for n in range(BOARD_COUNT + 1)}
    for record in results:
        solved = record.solved_count or 0
        if solved in distribution:
            distribution[solved] += 1
    return distribution


@dataclass
class PlayerSummary:
    """Running totals for one player across a batch of records."""
    user_id: str
    user_name: str
    games_played: int = 0
    games_won: int = 0
    total_time: int = 0
    best_time: Optional[int] = None
    won_guesses: int = 0
    total_mistakes: int = 0
    total_boards: int = 0

    def add(self, record: ResultRecord) -> None:
        self.games_played += 1
        self.total_mistakes += record.mistakes or 0
        self.total_boards += record.solved_count or 0
        if record.is_perfect:
            self.games_won += 1
            self.total_time += record.time_seconds
            self.won_guesses += record.guess_count or 0
            if self.best_time is None or record.time_seconds < self.best_time:
                self.best_time = record.time_seconds

    @property
    def win_rate(self) -> int:
        return percentage(self.games_won, self.games_played)

    @property
    def avg_time(self) -> Optional[int]:
        return self.total_time // self.games_won if self.games_won else None

    @property
    def avg_guesses(self) -> Optional[float]:
        return one_decimal(self.won_guesses, self.games_won)

    @property
    def avg_mistakes(self) -> Optional[float]:
        return one_decimal(self.total_mistakes, self.games_played)

    @property
    def avg_boards_solved(self) -> Optional[float]:
        return one_decimal(self.total_boards, self.games_played)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'userId': self.user_id,
            'userName': self.user_name,
            'gamesPlayed': self.games_played,
            'gamesWon': self.games_won,
            'winRate': self.win_rate,
            'bestTime': self.best_time,
            'avgTime': self.avg_time,
            'avgGuesses': self.avg_guesses,
            'avgMistakes': self.avg_mistakes,
            'avgBoardsSolved': self.avg_boards_solved,
        }


def game_row(record: ResultRecord) -> Dict[str, Any]:
    """Leaderboard row for a single game."""
    row = {
        'gameId': record.game_id,
        'userId': record.user_id,
        'userName': record.user_name,
        'timeSeconds': record.time_seconds,
        'completedAt': record.completed_at,
        'won': record.won,
    }
    if record.variant is Variant.CONNECTIONS:
        row['mistakes'] = record.mistakes
    else:
        row['guessCount'] = record.guess_count
    if record.variant is Variant.QUORDLE:
        row['solvedCount'] = record.solved_count
    return row


class StatsAggregator:
    """
    Rankings and personal statistics for one variant.

    All rankings are capped at LEADERBOARD_SIZE rows unless show_all is set.
    Python's sort is stable, so rows that tie keep the order the records
    arrived in.
    """

    def __init__(self, variant: Variant, results: Sequence[ResultRecord], show_all: bool = False):
        self.variant = variant
        self.results = list(results)
        self.show_all = show_all

    def _cap(self, rows: List[Any]) -> List[Any]:
        return rows if self.show_all else rows[:LEADERBOARD_SIZE]

    def _won_games(self) -> List[ResultRecord]:
        return [r for r in self.results if r.is_perfect]

    # Per-game rankings

    def top_by_fastest_times(self) -> List[ResultRecord]:
        """Won games (perfect games for Quordle), quickest first."""
        return self._cap(sorted(self._won_games(), key=lambda r: r.time_seconds))

    def top_by_fewest_guesses(self) -> List[ResultRecord]:
        """Won games by guess count, then time."""
        return self._cap(sorted(self._won_games(), key=lambda r: (r.guess_count or 0, r.time_seconds)))

    # Per-player rankings

    def player_stats(self) -> List[PlayerSummary]:
        players: Dict[str, PlayerSummary] = {}
        for record in self.results:
            if record.user_id not in players:
                players[record.user_id] = PlayerSummary(record.user_id, record.user_name)
            players[record.user_id].add(record)
        return list(players.values())

    def _eligible_players(self) -> List[PlayerSummary]:
        return [p for p in self.player_stats() if p.games_played >= MIN_GAMES_FOR_RATE]

    def top_by_most_wins(self) -> List[PlayerSummary]:
        return self._cap(sorted(self.player_stats(), key=lambda p: -p.games_won))

    def top_by_win_rate(self) -> List[PlayerSummary]:
        """
        Players with enough games, best rate first.

        Grouping and Wordle break ties on raw wins; Quordle's perfect rate
        has no tie-break.
        """
        players = self._eligible_players()
        if self.variant is Variant.QUORDLE:
            key: Callable[[PlayerSummary], Any] = lambda p: -p.win_rate
        else:
            key = lambda p: (-p.win_rate, -p.games_won)
        return self._cap(sorted(players, key=key))

    def top_by_boards_solved(self) -> List[PlayerSummary]:
        """Average boards solved (as displayed, one decimal), then perfect games."""
        players = self._eligible_players()
        return self._cap(sorted(players, key=lambda p: (-(p.avg_boards_solved or 0), -p.games_won)))

    def leaderboard(self, view: str) -> List[Dict[str, Any]]:
        """Rows for one named leaderboard view of this variant."""
        views = LEADERBOARD_VIEWS[self.variant]
        if view not in views:
            raise ValueError(f"Unknown leaderboard view: {view}")
        rows = getattr(self, views[view])()
        return [game_row(r) if isinstance(r, ResultRecord) else r.to_dict() for r in rows]

    # Personal stats

    def personal_stats(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Stats for one player, or None when they have no games."""
        mine = [r for r in self.results if r.user_id == user_id]
        if not mine:
            return None

        newest_first = sorted(mine, key=lambda r: r.completed_datetime, reverse=True)
        summary = PlayerSummary(user_id, newest_first[0].user_name)
        for record in mine:
            summary.add(record)

        stats: Dict[str, Any] = {
            'userId': user_id,
            'userName': summary.user_name,
            'gamesPlayed': summary.games_played,
            'bestTime': summary.best_time,
            'avgTime': summary.avg_time,
        }

        if self.variant is Variant.CONNECTIONS:
            stats['gamesWon'] = summary.games_won
            stats['winRate'] = summary.win_rate
            stats['avgMistakes'] = summary.avg_mistakes
        elif self.variant is Variant.WORDLE:
            current, longest = calculate_streaks(mine)
            stats['gamesWon'] = summary.games_won
            stats['winRate'] = summary.win_rate
            stats['avgGuesses'] = summary.avg_guesses
            stats['currentStreak'] = current
            stats['maxStreak'] = longest
            stats['guessDistribution'] = guess_distribution([r for r in mine if r.won])
        else:
            stats['perfectGames'] = summary.games_won
            stats['perfectRate'] = summary.win_rate
            stats['avgGuesses'] = summary.avg_guesses
            stats['avgBoardsSolved'] = summary.avg_boards_solved
            stats['solveDistribution'] = solve_distribution(mine)

        stats['recentGames'] = [game_row(r) for r in newest_first[:RECENT_GAMES]]
        return stats


LEADERBOARD_VIEWS: Dict[Variant, Dict[str, str]] = {
    Variant.CONNECTIONS: {
        'fastest': 'top_by_fastest_times',
        'mostWins': 'top_by_most_wins',
        'winRate': 'top_by_win_rate',
    },
    Variant.WORDLE: {
        'fewestGuesses': 'top_by_fewest_guesses',
        'fastest': 'top_by_fastest_times',
        'mostWins': 'top_by_most_wins',
        'winRate': 'top_by_win_rate',
    },
    Variant.QUORDLE: {
        'perfectGames': 'top_by_fewest_guesses',
        'fastestPerfect': 'top_by_fastest_times',
        'mostBoards': 'top_by_boards_solved',
        'winRate': 'top_by_win_rate',
    },
}

DEFAULT_VIEW: Dict[Variant, str] = {
    Variant.CONNECTIONS: 'fastest',
    Variant.WORDLE: 'fewestGuesses',
    Variant.QUORDLE: 'perfectGames',
}
