from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class AnswerCreate(BaseModel):
    questionid: str
    answer: str


class AnswerCreated(BaseModel):
    message: str = "Answer posted"
    answerid: int


class AnswerResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    answerid: int
    questionid: str
    userid: int
    username: str
    answer: str
    created_at: datetime
    updated_at: datetime
    average_rating: float = Field(alias="averageRating")
    rating_count: int = Field(alias="ratingCount")


class AnswerListResponse(BaseModel):
    answers: list[AnswerResponse]
