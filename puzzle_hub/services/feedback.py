"""
Feedback Engine

Pure scoring functions shared by the three games:
- classify: the Wordle/Quordle two-pass letter evaluation
- match_category / is_one_away: the Connections set-equality evaluator
- update_keyboard: best-ever letter state tracking across one or many boards
"""

from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..models.game import Category, Feedback


def classify(guess: str, target: str) -> Tuple[Feedback, ...]:
    """
    Implements the authentic Wordle letter evaluation algorithm.

    Pass one marks exact position matches and consumes both letters. Pass two
    walks the remaining guess letters left to right; each one consumes a single
    unconsumed occurrence in the target, so a letter is never reported
    present more often than the target can still supply it.
    """
    if len(guess) != len(target):
        raise ValueError("Guess and target length must match")

    target_chars: List[Optional[str]] = list(target)
    result: List[Optional[Feedback]] = [None] * len(guess)

    # First pass: exact position matches
    for i, letter in enumerate(guess):
        if letter == target_chars[i]:
            result[i] = Feedback.CORRECT
            target_chars[i] = None

    # Second pass: present letters and misses
    for i, letter in enumerate(guess):
        if result[i] is not None:
            continue
        if letter in target_chars:
            result[i] = Feedback.PRESENT
            # Remove first occurrence to prevent double-counting
            target_chars[target_chars.index(letter)] = None
        else:
            result[i] = Feedback.ABSENT

    return tuple(result)  # type: ignore[arg-type]


def is_solved(feedback: Sequence[Feedback]) -> bool:
    return all(f is Feedback.CORRECT for f in feedback)


def match_category(selection: Sequence[str], categories: Sequence[Category]) -> Optional[int]:
    """Index of the category whose words equal the selection, order-independent."""
    selected = sorted(selection)
    for index, category in enumerate(categories):
        if sorted(category.words) == selected:
            return index
    return None


def is_one_away(selection: Sequence[str],
                categories: Sequence[Category],
                found: Iterable[int]) -> bool:
    """True when exactly 3 selected words belong to some category not yet found."""
    found_set = set(found)
    for index, category in enumerate(categories):
        if index in found_set:
            continue
        if sum(1 for word in selection if word in category.words) == 3:
            return True
    return False


def best_feedback(rows: Sequence[Sequence[Feedback]], position: int) -> Feedback:
    """Highest-priority state at one position across several boards."""
    best = Feedback.ABSENT
    for row in rows:
        if row[position].priority > best.priority:
            best = row[position]
    return best


def update_keyboard(keyboard: Dict[str, Feedback],
                    word: str,
                    rows: Sequence[Sequence[Feedback]]) -> Dict[str, Feedback]:
    """
    Returns a new keyboard with the guess folded in.

    Status can only progress in priority order; with several boards the best
    state across all of them is taken first.
    """
    updated = dict(keyboard)
    for i, letter in enumerate(word):
        new_status = best_feedback(rows, i)
        current = updated.get(letter, Feedback.UNUSED)
        if new_status.priority > current.priority:
            updated[letter] = new_status
    return updated
