from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Position(BaseModel):
    """Zero-based line/character position inside a document."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=0)
    character: int = Field(ge=0)

    def as_tuple(self) -> tuple[int, int]:
        return (self.line, self.character)


class Range(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: Position
    end: Position

    @model_validator(mode="after")
    def validate_order(self) -> Range:
        if self.end.as_tuple() < self.start.as_tuple():
            raise ValueError("range end precedes start")
        return self

    @classmethod
    def empty(cls, line: int = 0, character: int = 0) -> Range:
        pos = Position(line=line, character=character)
        return cls(start=pos, end=pos)

    @classmethod
    def of(cls, start_line: int, start_char: int, end_line: int, end_char: int) -> Range:
        return cls(
            start=Position(line=start_line, character=start_char),
            end=Position(line=end_line, character=end_char),
        )

    @property
    def is_empty(self) -> bool:
        return self.start == self.end


class TextEdit(BaseModel):
    """Replace ``range`` with ``new_text``. Pure deletion uses ``new_text=""``."""

    model_config = ConfigDict(frozen=True)

    range: Range
    new_text: str = ""

    @classmethod
    def delete(cls, range: Range) -> TextEdit:
        return cls(range=range, new_text="")

    @classmethod
    def insert(cls, position: Position, text: str) -> TextEdit:
        return cls(range=Range(start=position, end=position), new_text=text)


class QuickFix(BaseModel):
    """A code action offered for a selected identifier."""

    title: str
    package: str
