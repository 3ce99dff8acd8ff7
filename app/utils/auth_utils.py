# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Focus Tracker - Habit Analytics project.
# Licensed under the MIT License - see the LICENSE file for details.


from fastapi import HTTPException, Header
from typing import Union
from app.utils.jwt_utils import verify_access_token


# ✅ Token-user matching guard
def ensure_token_user_match(token_sub: str, input_id: Union[str, int, None]):
    if input_id is None or str(token_sub) != str(input_id):
        raise HTTPException(status_code=401, detail="Token/user mismatch")


# ✅ Dependency to extract token payload
def require_token(authorization: str = Header(None)):
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization format")
    token = authorization.replace("Bearer ", "", 1)
    return verify_access_token(token)
