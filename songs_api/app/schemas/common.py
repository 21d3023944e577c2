"""Response envelopes shared by several domains."""

from pydantic import BaseModel


class MessagePayload(BaseModel):
    message: str


class DeletedResponse(BaseModel):
    code: int = 200
    ok: bool = True
    payload: MessagePayload
