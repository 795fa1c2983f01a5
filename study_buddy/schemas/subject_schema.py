from pydantic import BaseModel
from typing import List


class SubjectResponse(BaseModel):
    id: int
    name: str
    color: str
    icon: str

    class Config:
        from_attributes = True


class SubjectList(BaseModel):
    subjects: List[SubjectResponse]


class HealthResponse(BaseModel):
    status: str
    database: str
    openRouterConfigured: bool
    uptime: float
