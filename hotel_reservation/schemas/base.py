"""
Base schema classes with common configuration.
"""

from pydantic import BaseModel, ConfigDict

__all__ = ["BaseSchema"]


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.

    Read schemas are built from ORM rows (``from_attributes``) inside the
    session that loaded them, so nothing handed to callers is bound to a
    database session.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=False,
        str_strip_whitespace=True,
    )
