"""Wortspiel: German vocabulary game backend (word-match and hangman)."""
