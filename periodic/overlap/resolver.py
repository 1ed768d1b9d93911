import logging
from typing import Callable, Iterable, Optional

from periodic.core.exceptions import ErrorMessages, InvalidSchemaError, PeriodValidationError
from periodic.core.period import Period
from periodic.core.resolution import DEFAULT_PRECISION
from periodic.core.schema import TimelineSchema
from periodic.core.validation import PeriodValidator
from periodic.overlap.resolution import ResolutionResult
from periodic.overlap.transformer import SiblingTransformer

logger = logging.getLogger(__name__)


class OverlapResolver:
    """
    Computes the sibling rewrites that make room for a candidate period.

    Every sibling is rewritten relative to the candidate alone, never relative
    to another sibling, so the siblings may be supplied in any order. The
    candidate itself is never part of the output. A timeline holds either
    dates or datetimes; a sibling of the other kind is refused.
    """

    def __init__(
            self,
            schema: Optional[TimelineSchema] = None,
            validator: Optional[PeriodValidator] = None,
            precision: int = DEFAULT_PRECISION,
            duplicate: Optional[Callable[[Period], Period]] = None,
    ):
        self.schema = schema or TimelineSchema()
        self.validator = validator or PeriodValidator()
        self.precision = precision
        self.duplicate = duplicate

    def resolve(self, candidate: Period, siblings: Iterable[Period]) -> ResolutionResult:
        validation = self.validator.validate(candidate)
        if not validation.is_valid:
            raise PeriodValidationError(
                validation.errors, ErrorMessages.INVALID_CANDIDATE.format(validation.message)
            )

        # the step is fixed by the candidate, once, for all of its siblings
        resolution = self.schema.resolution_for(candidate.start, candidate.end, self.precision)
        step = resolution.step

        mutations = []
        warnings = []
        for sibling in siblings:
            if candidate.key is not None and sibling.key == candidate.key:
                continue
            if sibling.is_complete and not sibling.has_same_temporal_type(candidate):
                raise InvalidSchemaError(ErrorMessages.MIXED_SIBLING.format(sibling, candidate))

            mutation = SiblingTransformer(candidate, sibling, step, self.duplicate).resolve_overlap()
            if mutation is None:
                logger.debug(f"Skipping {sibling}: does not intersect {candidate}")
                continue

            logger.debug(f"{mutation.type.name} {sibling} for {candidate}")
            if mutation.is_degenerate:
                for period in mutation.replacements:
                    if period.is_degenerate:
                        message = ErrorMessages.DEGENERATE.format(
                            mutation.type.name, sibling.key, period.start, period.end
                        )
                        logger.warning(message)
                        warnings.append(message)
            mutations.append(mutation)

        return ResolutionResult(
            mutations,
            metadata={"step": step, "granularity": resolution.granularity.value},
            warnings=warnings,
        )
