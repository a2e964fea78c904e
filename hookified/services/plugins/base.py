"""Base types for the statically registered trigger and action kinds."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel

from hookified.enums import ActionType, TriggerType

ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")

FieldType = Literal["text", "textarea", "number", "select", "checkbox", "password"]


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: List[str], warnings: List[str] | None = None):
        return cls(is_valid=not errors, errors=list(errors), warnings=list(warnings or []))

    def to_dict(self) -> dict:
        return {"isValid": self.is_valid, "errors": self.errors, "warnings": self.warnings}


class SelectOption(BaseModel):
    value: Union[str, int]
    label: str


class FieldValidation(BaseModel):
    pattern: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None


class FormField(BaseModel):
    name: str
    label: str
    type: FieldType
    placeholder: Optional[str] = None
    description: Optional[str] = None
    required: bool = False
    validation: Optional[FieldValidation] = None
    options: Optional[List[SelectOption]] = None
    default: Any = None


class FormSchema(BaseModel):
    fields: List[FormField]


class PluginDefinition(ABC):
    name: str
    description: str
    icon: str

    @abstractmethod
    def validate_config(self, config: dict) -> ValidationResult: ...

    @abstractmethod
    def get_config_schema(self) -> FormSchema: ...

    def describe(self) -> dict:
        return {
            "type": self.type.value,
            "name": self.name,
            "description": self.description,
            "icon": self.icon,
            "configSchema": self.get_config_schema().model_dump(exclude_none=True),
        }


class TriggerDefinition(PluginDefinition):
    type: TriggerType


class ActionDefinition(PluginDefinition):
    type: ActionType


def is_address(value: Any) -> bool:
    return isinstance(value, str) and bool(ADDRESS_PATTERN.match(value))


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
