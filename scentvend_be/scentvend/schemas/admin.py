from pydantic import BaseModel


class LoginSchema(BaseModel):
    username: str
    password: str = ""


class LoginOut(BaseModel):
    token: str
    token_type: str = "bearer"
    expiresAt: str
