"""Declarative table of the catalog resource types and their hierarchy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping
from urllib.parse import quote

from .errors import UnknownResourceError

API_PREFIX = "/api/rest/v1"


def is_missing_key(value: object) -> bool:
    """Return ``True`` for an unset or empty foreign key value."""

    return value is None or value == ""


@dataclass(frozen=True, slots=True)
class ChildLink:
    """Edge from a parent resource type to one of its dependent collections."""

    resource: str
    # Field on the child record holding the parent's identity.
    parent_field: str
    # Parent ``type`` values for which the child collection exists; empty means always.
    parent_types: frozenset[str] = frozenset()

    def applies_to(self, parent: Mapping[str, object]) -> bool:
        if not self.parent_types:
            return True
        return parent.get("type") in self.parent_types


@dataclass(frozen=True, slots=True)
class ResourceType:
    """Static description of one remote collection and its mirror file."""

    name: str
    endpoint: str
    filename: str
    parent_keys: tuple[str, ...] = ()
    children: tuple[ChildLink, ...] = ()
    importable: bool = True
    optional: bool = False
    strip_parent_keys: bool = True
    identity_field: str = "code"

    @property
    def nested(self) -> bool:
        return bool(self.parent_keys)

    def path(self, scope: Mapping[str, object] | None = None) -> str:
        """Return the endpoint with every parent key filled in from ``scope``."""

        scope = scope or {}
        missing = [key for key in self.parent_keys if is_missing_key(scope.get(key))]
        if missing:
            raise ValueError(f"{self.name} endpoint requires {', '.join(missing)}")
        values = {key: quote(str(scope[key]), safe="") for key in self.parent_keys}
        return self.endpoint.format(**values)


def _api(path: str) -> str:
    return f"{API_PREFIX}{path}"


DEFAULT_RESOURCES: tuple[ResourceType, ...] = (
    ResourceType("channels", _api("/channels"), "channels.json"),
    ResourceType("locales", _api("/locales"), "locales.json", importable=False),
    ResourceType("currencies", _api("/currencies"), "currencies.json", importable=False),
    ResourceType(
        "measure_families", _api("/measure-families"), "measureFamilies.json", importable=False
    ),
    ResourceType(
        "attributes",
        _api("/attributes"),
        "attributes.json",
        children=(
            ChildLink(
                "attribute_options",
                "attribute",
                frozenset({"pim_catalog_simpleselect", "pim_catalog_multiselect"}),
            ),
        ),
    ),
    ResourceType(
        "attribute_options",
        _api("/attributes/{attribute}/options"),
        "attributeOptions.json",
        parent_keys=("attribute",),
        optional=True,
        # Option payloads carry their attribute code on the wire.
        strip_parent_keys=False,
    ),
    ResourceType("attribute_groups", _api("/attribute-groups"), "attributeGroups.json"),
    ResourceType("association_types", _api("/association-types"), "associationTypes.json"),
    ResourceType("categories", _api("/categories"), "categories.json"),
    ResourceType(
        "families",
        _api("/families"),
        "families.json",
        children=(ChildLink("family_variants", "family"),),
    ),
    ResourceType(
        "family_variants",
        _api("/families/{family}/variants"),
        "familyVariants.json",
        parent_keys=("family",),
    ),
    ResourceType("products", _api("/products"), "products.json"),
    ResourceType("product_models", _api("/product-models"), "productModels.json"),
    ResourceType(
        "reference_entities",
        _api("/reference-entities"),
        "referenceEntities.json",
        children=(
            ChildLink("reference_entity_attributes", "reference_entity_code"),
            ChildLink("reference_entity_records", "reference_entity_code"),
        ),
    ),
    ResourceType(
        "reference_entity_attributes",
        _api("/reference-entities/{reference_entity_code}/attributes"),
        "referenceEntityAttributes.json",
        parent_keys=("reference_entity_code",),
        children=(
            ChildLink(
                "reference_entity_attribute_options",
                "attribute_code",
                frozenset({"single_option", "multiple_options"}),
            ),
        ),
    ),
    ResourceType(
        "reference_entity_attribute_options",
        _api("/reference-entities/{reference_entity_code}/attributes/{attribute_code}/options"),
        "referenceEntityAttributeOptions.json",
        parent_keys=("reference_entity_code", "attribute_code"),
        optional=True,
    ),
    ResourceType(
        "reference_entity_records",
        _api("/reference-entities/{reference_entity_code}/records"),
        "referenceEntityRecords.json",
        parent_keys=("reference_entity_code",),
    ),
)


class ResourceRegistry:
    """Name-indexed view over a forest of resource types."""

    def __init__(self, resources: Iterable[ResourceType] = DEFAULT_RESOURCES) -> None:
        self._resources: dict[str, ResourceType] = {}
        for resource in resources:
            if resource.name in self._resources:
                raise ValueError(f"Duplicate resource type: {resource.name}")
            self._resources[resource.name] = resource
        for resource in self._resources.values():
            for link in resource.children:
                if link.resource not in self._resources:
                    raise ValueError(f"{resource.name} links to unknown child {link.resource}")

    def __contains__(self, name: object) -> bool:
        return name in self._resources

    def __iter__(self) -> Iterator[ResourceType]:
        return iter(self._resources.values())

    def names(self) -> list[str]:
        return list(self._resources)

    def get(self, name: str) -> ResourceType:
        try:
            return self._resources[name]
        except KeyError:
            raise UnknownResourceError(f"Unknown resource type: {name}") from None

    def children_of(self, resource: ResourceType) -> list[tuple[ChildLink, ResourceType]]:
        return [(link, self.get(link.resource)) for link in resource.children]

    def descendants(self, resource: ResourceType) -> list[ResourceType]:
        """Every resource type populated as a side effect of exporting ``resource``."""

        found: list[ResourceType] = []
        for _, child in self.children_of(resource):
            found.append(child)
            found.extend(self.descendants(child))
        return found

    def roots(self) -> list[ResourceType]:
        return [resource for resource in self if not resource.nested]


__all__ = [
    "API_PREFIX",
    "ChildLink",
    "DEFAULT_RESOURCES",
    "ResourceRegistry",
    "ResourceType",
    "is_missing_key",
]
