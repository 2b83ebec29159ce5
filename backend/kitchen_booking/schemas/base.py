# backend/kitchen_booking/schemas/base.py

from pydantic.alias_generators import to_camel

# snake_case inside, camelCase on the wire
CAMEL_CONFIG = {
    "from_attributes": True,
    "alias_generator": to_camel,
    "populate_by_name": True,
}

TIME_PATTERN = r"^([01]\d|2[0-4]):[0-5]\d$"
