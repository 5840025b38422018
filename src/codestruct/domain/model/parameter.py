"""Function parameter value object."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Parameter:
    """Parameter of a cataloged function.

    Attributes:
        name: Parameter name
        data_type: Declared type as written by the author
        default_value: Default as source text, None if no default
        is_required: Caller must pass it
        description: Free-form note
    """

    name: str
    data_type: str = "any"
    default_value: str | None = None
    is_required: bool = True
    description: str = ""

    def __post_init__(self) -> None:
        """Validate invariants. FAIL-FIRST."""
        if not self.name:
            raise ValueError("parameter name must not be empty")

        if not self.data_type:
            raise ValueError(f"parameter '{self.name}' data_type must not be empty")
