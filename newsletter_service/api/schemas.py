from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


# --- Newsletters ---
class NewsletterContent(BaseModel):
    html: str
    text: str

    @model_validator(mode="after")
    def require_body(self) -> NewsletterContent:
        if not self.html and not self.text:
            raise ValueError("content needs a non-empty html or text body")
        return self


class PublishNewsletterRequest(BaseModel):
    title: str = Field(..., min_length=1)
    content: NewsletterContent


# --- Errors ---
class ErrorResponse(BaseModel):
    detail: str
