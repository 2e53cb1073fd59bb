"""Validation engine: per-entity field rules producing structured errors.

Validation is a pure function of its input: it never reads the store.
Identifier fields are checked for format only; whether the referenced
document exists is not verified.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping

from flowquest.errors import ValidationError
from flowquest.identifiers import is_valid_identifier
from flowquest.models.activity import ACTIVITY_STATUSES

NAME_MAX_LENGTH = 100
TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000
CONTENT_MAX_LENGTH = 2000
PERSONA_FIELD_MAX_LENGTH = 500
TURNS_RANGE = (1, 100)
ORDER_RANGE = (1, 1000)
DIFFICULTY_RANGE = (1, 5)
MAX_TAGS_PER_MEMORY = 10
MAX_UNITS_PER_PACKAGE = 50
KEYWORDS_PER_CONDITION = (1, 20)

MEMORY_TYPES = ("hot", "cold")
PASS_CONDITION_TYPES = ("keyword", "llm")
PERSONA_FIELDS = ("tone", "background", "voice")


class EntityKind(str, Enum):
    AGENT_PROFILE = "agent_profile"
    COURSE_PACKAGE = "course_package"
    UNIT = "unit"
    ACTIVITY = "activity"


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _require_text(
    errors: list,
    data: Mapping,
    field: str,
    label: str,
    max_length: int | None = None,
    path: str | None = None,
) -> None:
    """Check ``data[field]`` is non-blank text; errors are reported under ``path`` (default ``field``)."""
    value = data.get(field)
    path = path or field
    if _blank(value):
        errors.append(FieldError(path, f"{label} is required"))
    elif not isinstance(value, str):
        errors.append(FieldError(path, f"{label} must be a string"))
    elif max_length is not None and len(value) > max_length:
        errors.append(FieldError(path, f"{label} must be at most {max_length} characters"))


def _check_identifier(errors: list, value: Any, field: str, label: str) -> None:
    if value is not None and not is_valid_identifier(value):
        errors.append(FieldError(field, f"{label} is not a valid identifier"))


def _check_range(errors: list, value: Any, field: str, label: str, bounds: tuple[int, int]) -> None:
    if value is None:
        return
    low, high = bounds
    if isinstance(value, bool) or not isinstance(value, int):
        errors.append(FieldError(field, f"{label} must be an integer"))
    elif value < low:
        errors.append(FieldError(field, f"{label} must be at least {low}"))
    elif value > high:
        errors.append(FieldError(field, f"{label} must be at most {high}"))


def _validate_memories(errors: list, memories: Any) -> None:
    if memories is None:
        return
    if not isinstance(memories, list):
        errors.append(FieldError("memories", "memories must be a list"))
        return
    for index, memory in enumerate(memories):
        prefix = f"memories[{index}]"
        label = f"Memory #{index + 1}"
        if not isinstance(memory, Mapping):
            errors.append(FieldError(prefix, f"{label} must be an object"))
            continue
        _check_identifier(errors, memory.get("_id"), f"{prefix}._id", f"{label} id")
        _check_identifier(errors, memory.get("agent_id"), f"{prefix}.agent_id", f"{label} agent_id")
        _check_identifier(
            errors, memory.get("created_by_user_id"), f"{prefix}.created_by_user_id", f"{label} created_by_user_id",
        )
        # type is optional, but must be a known kind when given
        if memory.get("type") is not None and memory["type"] not in MEMORY_TYPES:
            errors.append(FieldError(f"{prefix}.type", f"{label} type must be one of: {', '.join(MEMORY_TYPES)}"))
        _require_text(errors, memory, "content", f"{label} content", CONTENT_MAX_LENGTH, path=f"{prefix}.content")
        tags = memory.get("tags") or []
        if len(tags) > MAX_TAGS_PER_MEMORY:
            errors.append(FieldError(f"{prefix}.tags", f"{label} can have at most {MAX_TAGS_PER_MEMORY} tags"))
        for tag_index, tag in enumerate(tags):
            if _blank(tag):
                errors.append(FieldError(f"{prefix}.tags[{tag_index}]", f"{label} tag #{tag_index + 1} must not be empty"))


def validate_agent_profile(data: Mapping) -> list[FieldError]:
    errors: list[FieldError] = []
    _require_text(errors, data, "name", "Agent name", NAME_MAX_LENGTH)

    persona = data.get("persona")
    if persona is not None:
        if not isinstance(persona, Mapping):
            errors.append(FieldError("persona", "persona must be an object"))
        else:
            for option, value in persona.items():
                if option not in PERSONA_FIELDS:
                    errors.append(FieldError(f"persona.{option}", f"Unknown persona option '{option}'"))
                elif value is not None and not isinstance(value, str):
                    errors.append(FieldError(f"persona.{option}", f"persona.{option} must be a string"))
                elif value is not None and len(value) > PERSONA_FIELD_MAX_LENGTH:
                    errors.append(FieldError(
                        f"persona.{option}",
                        f"persona.{option} must be at most {PERSONA_FIELD_MAX_LENGTH} characters",
                    ))

    _validate_memories(errors, data.get("memories"))
    return errors


def _validate_pass_condition(errors: list, condition: Any, field: str = "pass_condition") -> None:
    if condition is None:
        return
    if condition.get("type") not in PASS_CONDITION_TYPES:
        errors.append(FieldError(f"{field}.type", f"Pass condition type must be one of: {', '.join(PASS_CONDITION_TYPES)}"))
    values = condition.get("value") or []
    low, high = KEYWORDS_PER_CONDITION
    if len(values) < low:
        errors.append(FieldError(f"{field}.value", "Pass condition value is required"))
    elif len(values) > high:
        errors.append(FieldError(f"{field}.value", f"Pass condition can have at most {high} values"))


def validate_unit(data: Mapping) -> list[FieldError]:
    errors: list[FieldError] = []
    _require_text(errors, data, "title", "Unit title", TITLE_MAX_LENGTH)
    if _blank(data.get("course_package_id")):
        errors.append(FieldError("course_package_id", "course_package_id is required"))
    else:
        _check_identifier(errors, data.get("course_package_id"), "course_package_id", "course_package_id")
    _require_text(errors, data, "agent_role", "agent_role", TITLE_MAX_LENGTH)
    _require_text(errors, data, "user_role", "user_role", TITLE_MAX_LENGTH)
    _check_range(errors, data.get("max_turns"), "max_turns", "max_turns", TURNS_RANGE)
    _check_range(errors, data.get("order"), "order", "order", ORDER_RANGE)
    _check_range(errors, data.get("difficulty_level"), "difficulty_level", "difficulty_level", DIFFICULTY_RANGE)
    _validate_pass_condition(errors, data.get("pass_condition"))
    return errors


def validate_course_package(data: Mapping) -> list[FieldError]:
    errors: list[FieldError] = []
    _require_text(errors, data, "title", "Course package title", TITLE_MAX_LENGTH)
    _require_text(errors, data, "description", "Course package description", DESCRIPTION_MAX_LENGTH)

    units = data.get("units") or []
    if len(units) > MAX_UNITS_PER_PACKAGE:
        errors.append(FieldError("units", f"A course package can have at most {MAX_UNITS_PER_PACKAGE} units"))
    for index, unit in enumerate(units):
        prefix = f"units[{index}]"
        label = f"Unit #{index + 1}"
        if _blank(unit.get("title")):
            errors.append(FieldError(f"{prefix}.title", f"{label} title is required"))
        _check_identifier(errors, unit.get("_id"), f"{prefix}._id", f"{label} id")
        _check_range(errors, unit.get("order"), f"{prefix}.order", f"{label} order", ORDER_RANGE)
        _check_range(errors, unit.get("max_turns"), f"{prefix}.max_turns", f"{label} max_turns", TURNS_RANGE)
        _validate_pass_condition(errors, unit.get("pass_condition"), f"{prefix}.pass_condition")
    return errors


def validate_activity(data: Mapping) -> list[FieldError]:
    errors: list[FieldError] = []
    _require_text(errors, data, "name", "Activity name", TITLE_MAX_LENGTH)
    for field in ("course_package_id", "agent_profile_id"):
        if _blank(data.get(field)):
            errors.append(FieldError(field, f"{field} is required"))
        else:
            _check_identifier(errors, data.get(field), field, field)
    # current_unit_id is optional; an empty string counts as absent
    if not _blank(data.get("current_unit_id")):
        _check_identifier(errors, data.get("current_unit_id"), "current_unit_id", "current_unit_id")
    status = data.get("status")
    if status is not None and status not in ACTIVITY_STATUSES:
        errors.append(FieldError("status", f"status must be one of: {', '.join(ACTIVITY_STATUSES)}"))
    for index, memory_id in enumerate(data.get("memory_ids") or []):
        _check_identifier(errors, memory_id, f"memory_ids[{index}]", f"Memory id #{index + 1}")
    return errors


_VALIDATORS: dict[EntityKind, Callable[[Mapping], list[FieldError]]] = {
    EntityKind.AGENT_PROFILE: validate_agent_profile,
    EntityKind.COURSE_PACKAGE: validate_course_package,
    EntityKind.UNIT: validate_unit,
    EntityKind.ACTIVITY: validate_activity,
}


def validate(kind: EntityKind, data: Mapping) -> list[FieldError]:
    return _VALIDATORS[kind](data)


def format_errors(errors: list[FieldError]) -> str:
    """Join field errors into one human-readable message."""
    if not errors:
        return ""
    if len(errors) == 1:
        return errors[0].message
    return "\n".join(f"{index}. {error.message}" for index, error in enumerate(errors, start=1))


def ensure_valid(kind: EntityKind, data: Mapping) -> None:
    """Raise ValidationError when ``data`` breaks any rule for ``kind``."""
    errors = validate(kind, data)
    if errors:
        raise ValidationError(errors)
