from typing import Optional
from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Identity of the HR user making the request, taken from verified token claims."""
    id: str
    email: Optional[str] = None
    role: str

    @property
    def display(self) -> str:
        return self.email or self.id
