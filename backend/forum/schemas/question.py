from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class QuestionCreate(BaseModel):
    title: str
    description: str
    tag: str | None = None
    category: str | None = None


class QuestionCreated(BaseModel):
    message: str = "Question posted"
    questionid: str


class QuestionResponse(BaseModel):
    id: int
    questionid: str
    userid: int
    username: str
    title: str
    description: str
    tag: str | None
    category: str | None
    created_at: datetime
    updated_at: datetime


class QuestionPageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    questions: list[QuestionResponse]
    total_pages: int = Field(serialization_alias="totalPages")
