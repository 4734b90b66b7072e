from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

class Room(BaseModel):
    id: int                                  # 강의실 ID (PK)
    code: str                                # 강의실 코드
    name: str                                # 강의실 이름
    building: Optional[str] = None           # 건물
    capacity: int                            # 수용 인원
    is_active: bool                          # 사용 가능 여부

    model_config = ConfigDict(from_attributes=True)


class RoomCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=100)
    building: Optional[str] = None
    capacity: int = Field(30, gt=0)
    is_active: bool = True


# ✅ 부분 수정용 (보낸 필드만 반영)
class RoomUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    building: Optional[str] = None
    capacity: Optional[int] = Field(default=None, gt=0)
    is_active: Optional[bool] = None
