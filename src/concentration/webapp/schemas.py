"""Request bodies accepted by the JSON API."""

from pydantic import BaseModel, ConfigDict, Field

from concentration.opponents.base import Difficulty


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class NewGameRequest(_Request):
    rows: int = Field(strict=True)
    cols: int = Field(strict=True)
    game_id: str | None = Field(default=None, alias="gameId")


class MatchRequest(_Request):
    game_id: str = Field(alias="gameId", min_length=1)


class FlipRequest(MatchRequest):
    row: int = Field(strict=True)
    col: int = Field(strict=True)


class AIMoveRequest(MatchRequest):
    difficulty: Difficulty = Difficulty.EASY
