from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt


class RatingCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    answer_id: int = Field(alias="answerId")
    # JSON numbers only; true or "4.5" are rejected, not coerced.
    rating: StrictFloat | StrictInt


class RatingResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    average_rating: float = Field(serialization_alias="averageRating")
    rating_count: int = Field(serialization_alias="ratingCount")


class UserRatingResponse(BaseModel):
    rating: float
