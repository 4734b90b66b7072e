from datetime import date

from pydantic import BaseModel, ConfigDict, Field, model_validator

class Semester(BaseModel):
    id: int                                  # 학기 ID (PK)
    name: str                                # 학기명
    start_date: date                         # 시작일
    end_date: date                           # 종료일

    model_config = ConfigDict(from_attributes=True)


class SemesterCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self
