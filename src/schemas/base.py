from pydantic import BaseModel, ConfigDict  # type: ignore
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema class that inherits from Pydantic BaseModel.

    This class provides common configuration for all schema classes including
    camelCase alias generation, population by field name, and attribute mapping.
    """

    model_config: ConfigDict = ConfigDict(  # type: ignore
        alias_generator=to_camel,  # Convert field names to camelCase
        populate_by_name=True,
        from_attributes=True,  # Build straight from ORM rows
        arbitrary_types_allowed=False,
        validate_assignment=True,  # Validate changes after creation
        str_strip_whitespace=True,  # Strip whitespace from strings
        frozen=True,  # Make instances immutable
        use_enum_values=True,  # Serialize enums as their values
    )
