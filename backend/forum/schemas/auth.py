from pydantic import BaseModel


class UserCreate(BaseModel):
    username: str
    firstname: str
    lastname: str
    email: str
    password: str


class RegisterResponse(BaseModel):
    message: str = "Registration successful!"
    userid: int


class LoginRequest(BaseModel):
    email: str
    password: str


class TokenResponse(BaseModel):
    token: str
    token_type: str = "bearer"
    message: str = "Logged in successfully"


class MeResponse(BaseModel):
    userid: int
    username: str
    firstname: str
    email: str
