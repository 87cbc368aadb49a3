"""Provider adapter implementations.

Importing this package registers every adapter with
:data:`promptframe.core.provider_adapters.provider_registry`.  Registration
order is the order providers are listed in the option catalogue.
"""

from .fal import FalAdapter
from .huggingface import HuggingFaceAdapter

__all__ = ["FalAdapter", "HuggingFaceAdapter"]
