from pydantic import BaseModel, EmailStr, Field, model_validator
from typing import Optional


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    username: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=6)
    confirm_password: str

    @model_validator(mode="after")
    def check_passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        if not self.username.strip():
            raise ValueError("Username is required")
        return self


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    needs_confirmation: bool
    message: str
    access_token: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    new_password: str = Field(min_length=6)
    confirm_password: str

    @model_validator(mode="after")
    def check_passwords_match(self):
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class OAuthUrlResponse(BaseModel):
    provider: str
    url: str
