# wortspiel/models.py
from __future__ import annotations
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text
from .db import Base

# Plain string keys: user:{id}:streak, wm:puzzle:{seed}, hangman:game:{seed}, ...
class KVEntry(Base):
    __tablename__ = "kv_entry"
    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text)

# Hash keys: german_words:{tier} -> {word: hint}
class KVHashField(Base):
    __tablename__ = "kv_hash_field"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    field: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text)
