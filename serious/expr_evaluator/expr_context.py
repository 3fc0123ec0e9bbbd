"""
The variable table an expression is evaluated against.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from serious.system.models import FiniteFloat, IdentifierName

logger = logging.getLogger(__name__)


class Context(BaseModel):
    """
    Immutable mapping from single-letter identifiers to finite floats.

    Supplied by the caller before evaluation and only ever read by the
    evaluator. Use `extend` to derive a context with more bindings.
    """
    model_config = ConfigDict(frozen=True)

    bindings: Dict[IdentifierName, FiniteFloat] = Field(default_factory=dict)

    @classmethod
    def coerce(cls, value: Any) -> 'Context':
        """
        Accepts None, a Context, or any mapping of letters to numbers.

        Raises:
            TypeError: If `value` is none of those.
            pydantic.ValidationError: If a key is not a single ASCII letter
                or a value is not a finite number.
        """
        if value is None:
            return cls()
        if isinstance(value, Context):
            return value
        if isinstance(value, Mapping):
            return cls(bindings=dict(value))
        raise TypeError(f"Context must be a mapping of identifiers to numbers, got {type(value).__name__}.")

    def lookup(self, name: str) -> float:
        """
        Looks up the value bound to `name`.

        Raises:
            NameError: If `name` is not bound. The evaluator turns this into
                an UnboundIdentifier error located at the identifier.
        """
        if name in self.bindings:
            return self.bindings[name]
        raise NameError(f"identifier {name} is not bound")

    def get(self, name: str, default: Optional[float] = None) -> Optional[float]:
        return self.bindings.get(name, default)

    def names(self) -> List[str]:
        return sorted(self.bindings)

    def extend(self, bindings: Mapping[str, float]) -> 'Context':
        """
        Returns a new Context holding these bindings plus `bindings`,
        which take precedence. This context is left unchanged.
        """
        merged = dict(self.bindings)
        merged.update(bindings)
        logger.debug(f"Extending context {self.names()} with {sorted(bindings)}")
        return Context(bindings=merged)

    def get_local_bindings(self) -> Dict[str, float]:
        """Returns a copy of the bindings."""
        return dict(self.bindings)

    def __contains__(self, name: object) -> bool:
        return name in self.bindings

    def __len__(self) -> int:
        return len(self.bindings)


def create_context(pairs: Iterable[Tuple[str, float]] = (), **bindings: float) -> Context:
    """
    Builds a Context from (identifier, value) pairs and/or keyword arguments.

        create_context([('x', 12.34), ('y', 9999.0)])
        create_context(x=12.34, y=9999.0)

    Keyword arguments override pairs with the same identifier.
    """
    merged: Dict[str, float] = dict(pairs)
    merged.update(bindings)
    return Context(bindings=merged)
