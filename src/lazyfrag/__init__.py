"""lazyfrag — signed placeholders for deferred fragment rendering."""

from __future__ import annotations

__version__ = "0.4.0"

from lazyfrag.domain.descriptors import (
    Collection,
    EntityDescriptor,
    ExplicitPartial,
    PartialDescriptor,
    Relation,
    SingleObject,
)
from lazyfrag.domain.errors import (
    ConfigurationError,
    DescriptorBuildError,
    InvalidSignatureError,
    LazyfragError,
    UnidentifiableObjectError,
)
from lazyfrag.domain.references import EntityReference, LookupNotFound
from lazyfrag.infrastructure.kit import RenderKit

__all__ = [
    "Collection",
    "ConfigurationError",
    "DescriptorBuildError",
    "EntityDescriptor",
    "EntityReference",
    "ExplicitPartial",
    "InvalidSignatureError",
    "LazyfragError",
    "LookupNotFound",
    "PartialDescriptor",
    "Relation",
    "RenderKit",
    "SingleObject",
    "UnidentifiableObjectError",
    "__version__",
]
