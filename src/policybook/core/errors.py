"""Domain exceptions raised by the policy bookkeeping operations."""


class PolicyBookError(ValueError):
    """Base exception for rejected bookkeeping operations."""

    pass


class InvalidArgumentError(PolicyBookError):
    """Raised when a required argument is missing or has the wrong type."""

    pass


class RiskNotFoundError(PolicyBookError):
    """Raised when a referenced risk is not in the catalog or not covered by a policy."""

    pass


class RiskInUseError(PolicyBookError):
    """Raised when a catalog change would drop a risk that an issued policy still insures."""

    pass


class InvalidPolicyDateError(PolicyBookError):
    """Raised for non-positive durations, past dates, or dates outside a policy window."""

    pass


class EmptyPolicyError(PolicyBookError):
    """Raised when a policy is sold without any risks."""

    pass


class PolicyExistsError(PolicyBookError):
    """Raised when a new policy window overlaps an existing one for the same object."""

    pass


class PolicyNotFoundError(PolicyBookError):
    """Raised when no policy exists for the insured object being amended."""

    pass
