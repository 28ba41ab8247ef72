from pydantic import BaseModel


class MusicStyle(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    prompt: str  # fragment appended to the remix instruction
    tags: list[str]
