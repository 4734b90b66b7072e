from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

class Student(BaseModel):
    id: int                                  # 학생 ID (PK)
    student_number: str                      # 학번
    first_name: str                          # 이름
    last_name: str                           # 성
    email: Optional[str] = None              # 이메일

    model_config = ConfigDict(from_attributes=True)


class StudentCreate(BaseModel):
    student_number: str = Field(..., min_length=1, max_length=30)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = None
