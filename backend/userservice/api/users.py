# userservice/api/users.py

import json
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException

from userservice.core.user import create_user, list_users
from userservice.exceptions import InvalidUserError
from userservice.infra.postgres import get_db

router = APIRouter(prefix="/api")

USER_FIELDS = ("name", "email", "age")

class UserSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    age: int

class CreateUserSchema(BaseModel):
    # Echo of what the client sent; form posts carry age as a string
    name: Optional[Any] = None
    email: Optional[Any] = None
    age: Optional[Any] = None


async def read_user_payload(request: Request) -> Dict[str, Any]:
    """
    Pull name/email/age out of a JSON or form-encoded body.

    Anything unreadable becomes an INVALID_USER error rather than a 422,
    matching how constraint failures are reported.
    """
    content_type = request.headers.get("content-type", "").lower()

    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidUserError("request body is not valid JSON") from e
        if not isinstance(body, dict):
            raise InvalidUserError("request body must be an object")
    else:
        try:
            form = await request.form()
        except HTTPException as e:
            raise InvalidUserError("request body is not a valid form") from e
        body = dict(form)

    return {field: body.get(field) for field in USER_FIELDS}


@router.get("", response_class=PlainTextResponse)
def hello():
    return "Hello World!"


@router.get("/all", response_model=List[UserSchema])
def get_all_users(db: Session = Depends(get_db)):
    return list_users(db)


@router.post("/form", response_model=CreateUserSchema)
def create_user_endpoint(
    payload: Dict[str, Any] = Depends(read_user_payload),
    db: Session = Depends(get_db),
):
    create_user(db, payload["name"], payload["email"], payload["age"])
    return payload
