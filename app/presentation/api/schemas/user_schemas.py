from pydantic import BaseModel


class UserResponse(BaseModel):
    id: int
    fullname: str
    email: str
    status: str
    role: str
    created_at: str
    updated_at: str
