from pydantic import BaseModel, ConfigDict, Field


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token: str
    new_password: str = Field(alias="newPassword")


class MessageResponse(BaseModel):
    message: str
