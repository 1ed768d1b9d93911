from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from pandas import Series

from periodic.core.boundaries import _BoundaryAccessor
from periodic.core.exceptions import ErrorMessages, InvalidSchemaError
from periodic.core.resolution import DEFAULT_PRECISION, TemporalResolution
from periodic.core.types import GroupKey, NativeBoundary


@dataclass(frozen=True)
class TimelineSchema:
    """
    Describes how records of one timeline are laid out.

    A timeline is the set of records sharing the same values in
    ``group_fields``; no two periods of a timeline may overlap. The temporal
    resolution is fixed here, once, for the whole timeline. Leave it unset to
    infer it from each record's own bounds (dates step by a day, datetimes by
    one unit of the given sub-second precision).
    """

    start_field: str = "start_at"
    end_field: str = "end_at"
    group_fields: Tuple[str, ...] = field(default_factory=tuple)
    key_field: str = "id"
    resolution: Optional[TemporalResolution] = None

    def __post_init__(self):
        # accept any sequence of names, store a tuple so the schema stays hashable
        if isinstance(self.group_fields, str):
            object.__setattr__(self, "group_fields", (self.group_fields,))
        else:
            object.__setattr__(self, "group_fields", tuple(self.group_fields))

        names = [self.start_field, self.end_field, self.key_field, *self.group_fields]
        if len(set(names)) != len(names):
            raise InvalidSchemaError(ErrorMessages.DUPLICATE_FIELDS.format(names))
        if not all(isinstance(name, str) for name in names):
            raise InvalidSchemaError("All timeline fields must be strings")

    @property
    def boundary_accessor(self) -> _BoundaryAccessor:
        return _BoundaryAccessor(self.start_field, self.end_field)

    @property
    def structural_fields(self) -> Sequence[str]:
        return [self.key_field, self.start_field, self.end_field, *self.group_fields]

    def group_key(self, data: Series) -> GroupKey:
        missing = [name for name in self.group_fields if name not in data.index]
        if missing:
            raise InvalidSchemaError(ErrorMessages.MISSING_FIELD.format(", ".join(missing)))
        return tuple(data[name] for name in self.group_fields)

    def resolution_for(
            self,
            start: Optional[NativeBoundary],
            end: Optional[NativeBoundary],
            precision: int = DEFAULT_PRECISION,
    ) -> TemporalResolution:
        if self.resolution is not None:
            return self.resolution
        return TemporalResolution.infer(start, end, precision)
