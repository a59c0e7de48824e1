"""
Quote data model for the quote store.
Immutable pydantic model shared by the store, the query engine and the API.
"""

from typing import Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Quote(BaseModel):
    """语录记录（加载后不可变）"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, validation_alias=AliasChoices("id", "_id"),
                    description="语录ID")
    content: str = Field(..., description="语录正文")
    author: str = Field(..., description="作者")
    tags: Tuple[str, ...] = Field(default=(), description="标签")
    length: int = Field(..., ge=0, description="正文字符数（预先计算）")
    date_added: str = Field(..., alias="dateAdded",
                            validation_alias=AliasChoices("dateAdded", "date_added"),
                            description="添加日期")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        # 数据源中的数字ID按字符串处理
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def length_consistent(self) -> bool:
        """预存长度与正文字符数是否一致"""
        return self.length == len(self.content)

    def has_tag(self, tag: str) -> bool:
        """大小写不敏感的精确标签匹配"""
        needle = tag.lower()
        return any(t.lower() == needle for t in self.tags)

    def to_dict(self) -> dict:
        """按对外JSON格式输出"""
        return self.model_dump(by_alias=True, mode="json")
