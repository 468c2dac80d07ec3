import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

_PHONE = re.compile(r"^[0-9]{10}$")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class AdminOut(BaseModel):
    username: str
    name: str = ""
    email: str = ""
    id: str = ""


class LoginOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expiresAt: str
    admin: AdminOut


class _Account(BaseModel):
    name: str = Field(min_length=3)
    email: str
    mobileNumber: str
    username: str = Field(min_length=3)
    password: str = Field(min_length=6)
    confirmPassword: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        if not _EMAIL.match(v.strip()):
            raise ValueError("Invalid email address")
        return v.strip()

    @field_validator("mobileNumber")
    @classmethod
    def check_mobile(cls, v: str) -> str:
        if not _PHONE.match(v.strip()):
            raise ValueError("Mobile number must be 10 digits")
        return v.strip()

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirmPassword:
            raise ValueError("Passwords don't match")
        return self

    def to_backend(self) -> dict:
        return self.model_dump(exclude={"confirmPassword"})


class AdminAccountIn(_Account):
    pass


class EmployeeIn(_Account):
    address: str = Field(min_length=5)
    totalAmountToBePaid: int = Field(default=0, ge=0)
    totalAmountPaidInAdvance: int = Field(default=0, ge=0)

    def to_backend(self) -> dict:
        return {**super().to_backend(), "isEmployee": True}


class PaymentIn(BaseModel):
    amountPaid: int = Field(gt=0)
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$", description="YYYY-MM-DD")
    note: Optional[str] = None
