"""Engineer records held by the backing store."""

from typing import Optional

from pydantic import BaseModel


class Engineer(BaseModel):
    """An engineer whose availability can be queried."""
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    active: bool = True

    def matches(self, name_or_id: str) -> bool:
        """Case-insensitive name match, or exact id match."""
        return self.name.lower() == name_or_id.lower() or self.id == name_or_id
