from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any


class LoginRequest(BaseModel):
    # Both optional so a missing field is reported as 400, not a schema error
    email: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    student: Dict[str, Any]
    access_token: str = Field(..., serialization_alias="accessToken")
    token_type: str = Field("bearer", serialization_alias="tokenType")
    expires_in: int = Field(..., serialization_alias="expiresIn")
