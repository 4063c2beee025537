from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from strawberry import UNSET
from strawberry.types.base import StrawberryList, StrawberryOptional

from .inputs import get_input_binding

if TYPE_CHECKING:
    from strawberry.types import Info
    from strawberry.types.base import StrawberryType

    from .validators import Validator

logger = logging.getLogger(__name__)

__all__ = ["ArgumentResolver"]


class ArgumentResolver:
    """Convert argument values into what the mapped method expects.

    Lists are walked and instances of generated input types are built into
    domain objects by their binding, then validated.
    """

    def __init__(self, validator: Optional[Validator] = None):
        self.validator = validator

    def resolve(
        self,
        source: Any,
        value: Any,
        context: Any,
        info: Optional[Info],
        type_: StrawberryType | type,
    ) -> Any:
        if value is None or value is UNSET:
            return value

        if isinstance(type_, StrawberryOptional):
            return self.resolve(source, value, context, info, type_.of_type)

        if isinstance(type_, StrawberryList):
            return [
                self.resolve(source, v, context, info, type_.of_type) for v in value
            ]

        binding = get_input_binding(type_)
        if binding is None:
            return value

        obj = binding.build(value, context, info)
        if self.validator is not None and self.validator.is_enabled():
            logger.debug("Validating %r built from %r", obj, binding)
            self.validator.validate(obj)
        return obj
