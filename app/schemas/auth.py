from pydantic import BaseModel, EmailStr, field_validator


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    display_name: str = ""

    @field_validator("password")
    @classmethod
    def password_min_length(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters.")
        return v


class UserResponse(BaseModel):
    id: int
    email: str
    display_name: str | None = None


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
