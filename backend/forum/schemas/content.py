from pydantic import BaseModel


class ContentEdit(BaseModel):
    # Validated against ContentType by the service, before any query.
    type: str | None = None
    title: str | None = None
    description: str | None = None
    tag: str | None = None
    answer: str | None = None

    def fields(self) -> dict:
        return self.model_dump(exclude={"type"})


class ContentEditResponse(BaseModel):
    success: bool = True
    type: str
    id: str


class ContentDeleteResponse(BaseModel):
    message: str
