"""
Account data models.

User records, stored credentials, and the login/registration input rules.
"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

NAME_PATTERN = re.compile(r'[a-zA-Z\s]+', re.ASCII)
PHONE_PATTERN = re.compile(r'\+?[1-9][0-9]{1,14}')
PASSWORD_PATTERN = re.compile(r'(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])')

WELCOME_POINTS = 100
WELCOME_BADGE = "First Steps"


def today_string(now: Optional[datetime] = None) -> str:
    """Calendar-day string used for last_login_date"""
    return (now or datetime.now()).date().isoformat()


class User(BaseModel):
    """Durable account state: profile plus engagement counters"""
    id: str
    first_name: str = ""
    last_name: str = ""
    email: str
    phone: str = ""
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())
    login_streak: int = Field(default=0, ge=0)
    total_logins: int = Field(default=0, ge=0)
    last_login_date: str = ""
    points: int = Field(default=0, ge=0)
    badges: List[str] = Field(default_factory=list)
    joined_friends: int = Field(default=0, ge=0)

    @field_validator('badges', mode='before')
    @classmethod
    def dedupe_badges(cls, value):
        if value is None:
            return []
        seen = []
        for badge in value:
            if badge not in seen:
                seen.append(badge)
        return seen

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def has_badge(self, badge: str) -> bool:
        return badge in self.badges


class Credentials(BaseModel):
    """Stored (email, password) pair. Plaintext; see SecretStore."""
    email: str
    password: str


class LoginForm(BaseModel):
    email: EmailStr
    password: str

    @field_validator('email', 'password', mode='before')
    @classmethod
    def strip_whitespace(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator('password')
    @classmethod
    def password_required(cls, value: str) -> str:
        if not value:
            raise ValueError('Password is required')
        return value


class RegistrationForm(BaseModel):
    first_name: str
    last_name: str
    email: EmailStr
    password: str
    phone: str

    @field_validator('first_name', 'last_name')
    @classmethod
    def letters_only(cls, value: str) -> str:
        if not value:
            raise ValueError('Name is required')
        if not NAME_PATTERN.fullmatch(value):
            raise ValueError('Name can only contain letters')
        return value

    @field_validator('password')
    @classmethod
    def strong_password(cls, value: str) -> str:
        if len(value) < 8:
            raise ValueError('Password must be at least 8 characters')
        if not PASSWORD_PATTERN.search(value):
            raise ValueError(
                'Password must contain at least one lowercase, one uppercase, and one number'
            )
        return value

    @field_validator('phone')
    @classmethod
    def international_phone(cls, value: str) -> str:
        if not PHONE_PATTERN.fullmatch(value):
            raise ValueError('Invalid phone number format')
        return value


class PartialRegistration(BaseModel):
    """Registration wizard progress. Fields are unvalidated until submit.

    Drafts live in the general store and never hold the password.
    """
    step: int = Field(default=0, ge=0)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


def build_new_user(form: RegistrationForm, now: Optional[datetime] = None) -> User:
    """Seed a user record for a freshly registered account."""
    now = now or datetime.now()
    return User(
        id=form.email,
        first_name=form.first_name,
        last_name=form.last_name,
        email=form.email,
        phone=form.phone,
        created_at=now.isoformat(),
        login_streak=1,
        total_logins=1,
        last_login_date=today_string(now),
        points=WELCOME_POINTS,
        badges=[WELCOME_BADGE],
        joined_friends=0,
    )
