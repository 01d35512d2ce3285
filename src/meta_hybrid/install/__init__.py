"""Install-time layout handling."""

from .relocator import RelocationError, RelocationResult, relocate

__all__ = ["RelocationError", "RelocationResult", "relocate"]
