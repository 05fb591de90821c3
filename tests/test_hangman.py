from datetime import datetime

import pytest

from wortspiel.hangman import (
    IN_PROGRESS, LOST, WON, GuessError, HangmanRound, HangmanService, calculate_score,
    format_share_text,
)
from wortspiel.schema import GuessRecord
from wortspiel.seed import seed_number
from wortspiel.words import Difficulty


def _guesses(correct, wrong):
    return ([GuessRecord(letter=c, correct=True, timestamp=0) for c in correct]
            + [GuessRecord(letter=c, correct=False, timestamp=0) for c in wrong])


def test_round_is_won_when_all_letters_found():
    rnd = HangmanRound("apfel")
    for letter in "apfe":
        assert rnd.guess(letter).correct
        assert rnd.status == IN_PROGRESS
    assert rnd.masked() == "apfe_"
    rnd.guess("L")
    assert rnd.status == WON


def test_round_is_lost_after_six_misses():
    rnd = HangmanRound("apfel")
    for letter in "xyzqwv":
        assert not rnd.guess(letter).correct
    assert rnd.incorrect == 6
    assert rnd.status == LOST
    with pytest.raises(GuessError):
        rnd.guess("a")


def test_round_rejects_repeats_and_non_letters():
    rnd = HangmanRound("straße")
    rnd.guess("ß")
    with pytest.raises(GuessError):
        rnd.guess("ß")
    with pytest.raises(GuessError):
        rnd.guess("ab")
    with pytest.raises(GuessError):
        rnd.guess("1")


def test_round_ignores_hyphens():
    rnd = HangmanRound("e-mail")
    for letter in "emai":
        rnd.guess(letter)
    rnd.guess("l")
    assert rnd.status == WON
    assert rnd.masked() == "e-mail"


def test_score_perfect_win():
    assert calculate_score("apfel", _guesses("apfel", ""), True, 20000) == (290, True)


def test_score_win_with_misses_and_slow_time():
    # 100 + 15*4 + 15 (75s) + 50
    assert calculate_score("apfel", _guesses("apfel", "xy"), True, 75000) == (225, False)


@pytest.mark.parametrize("seconds,bonus", [(29.9, 50), (30, 30), (59, 30), (60, 15), (89, 15), (90, 0)])
def test_time_bonus_bands(seconds, bonus):
    score, _ = calculate_score("apfel", _guesses("apfel", ""), True, int(seconds * 1000))
    assert score == 100 + 90 + bonus + 50


def test_score_loss_is_partial():
    assert calculate_score("apfel", _guesses("apf", "xyzqwv"), False, 40000) == (30, False)


def test_share_text():
    win = format_share_text("apfel", _guesses("apfel", "x"), True, 21500, day="2024-01-01")
    assert win == 'Deutsch Hangman 2024-01-01\n✅ I guessed "apfel" with 1 wrong guesses in 21s!\n❌⬜⬜⬜⬜⬜'
    loss = format_share_text("apfel", _guesses("a", "xyzqwv"), False, 60000, day="2024-01-01")
    assert loss.splitlines()[1] == '❌ Failed to guess "apfel" (0/6 attempts remaining)'
    assert loss.splitlines()[2] == "❌" * 6


async def test_daily_game_is_deterministic_and_cached(storage, pool):
    for w in ("schule", "fenster", "gabeln"):
        await pool.add_word(w, f"hint {w}")
    day = datetime(2024, 5, 1)
    service = HangmanService(storage, pool)
    game = await service.create_daily_game(day, "de", Difficulty.MEDIUM)
    seed = "2024-05-01:de:hangman"
    words = await pool.get_words(Difficulty.MEDIUM)
    assert game.id == seed
    assert game.word == words[seed_number(seed) % len(words)].word
    assert game.max_attempts == 6

    await pool.add_word("zeitung", "newspaper")
    again = await service.create_daily_game(day, "de", Difficulty.MEDIUM)
    assert again == game
    assert await storage.get_hangman_game(seed) == game


async def test_practice_game_is_not_stored(storage, pool):
    await pool.add_word("baum", "tree")
    game = await HangmanService(storage, pool).create_practice_game("de", Difficulty.EASY)
    assert ":hangman:practice:" in game.id
    assert game.word == "baum"
    assert await storage.get_hangman_game(game.id) is None


def test_round_needs_letters_to_guess():
    with pytest.raises(GuessError):
        HangmanRound("123")
