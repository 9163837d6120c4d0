from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional

class CaregiverRef(BaseModel):
    """Proyección de solo lectura de un cuidador, nunca se persiste."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: Optional[str] = None
    name: str = "Caregiver"
    avatar: Optional[str] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    hourly_rate: Optional[float] = None
