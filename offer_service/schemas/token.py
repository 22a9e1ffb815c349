# offer_service/schemas/token.py
from pydantic import BaseModel


class TokenPayload(BaseModel):
    sub: str  # "sub" is the standard claim for subject (user ID)
    exp: int  # Standard claim for expiration time

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }
