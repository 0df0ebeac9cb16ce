"""
Typed models for App Store Connect request and response documents.

App Store Connect speaks JSON:API.  Every successful response is either
a single-resource document (``{"data": {...}, "links": {...}}``) or a
page of resources (``{"data": [...], "links": {...}, "meta": {...}}``),
and every failure carries an ``errors`` array.  Each endpoint family
gets its own response class (``DevicesResponse``, ``ProfileResponse``
and so on) so that a response is validated against the shape of the
resource it claims to contain.

Response attributes are deliberately lenient: unknown keys are ignored
and most attributes are optional, because Apple omits attributes that
were not requested with ``fields[...]`` and adds new ones over time.
Request bodies and query builders are strict.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Literal, Optional, Sequence, Tuple, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    """Base for documents exchanged with the API (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_body(self) -> Dict[str, Any]:
        """Serialise to the JSON object sent as a request body."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ----------------------------------------------------------------------
# Enumerations
# ----------------------------------------------------------------------
class BundleIdPlatform(str, Enum):
    IOS = "IOS"
    MAC_OS = "MAC_OS"
    UNIVERSAL = "UNIVERSAL"


class DeviceStatus(str, Enum):
    ENABLED = "ENABLED"
    DISABLED = "DISABLED"
    PROCESSING = "PROCESSING"
    INELIGIBLE = "INELIGIBLE"


class CertificateType(str, Enum):
    IOS_DEVELOPMENT = "IOS_DEVELOPMENT"
    IOS_DISTRIBUTION = "IOS_DISTRIBUTION"
    MAC_APP_DISTRIBUTION = "MAC_APP_DISTRIBUTION"
    MAC_INSTALLER_DISTRIBUTION = "MAC_INSTALLER_DISTRIBUTION"
    MAC_APP_DEVELOPMENT = "MAC_APP_DEVELOPMENT"
    DEVELOPER_ID_KEXT = "DEVELOPER_ID_KEXT"
    DEVELOPER_ID_APPLICATION = "DEVELOPER_ID_APPLICATION"
    DEVELOPMENT = "DEVELOPMENT"
    DISTRIBUTION = "DISTRIBUTION"
    PASS_TYPE_ID = "PASS_TYPE_ID"
    PASS_TYPE_ID_WITH_NFC = "PASS_TYPE_ID_WITH_NFC"


class ProfileState(str, Enum):
    ACTIVE = "ACTIVE"
    INVALID = "INVALID"


class ProfileType(str, Enum):
    IOS_APP_DEVELOPMENT = "IOS_APP_DEVELOPMENT"
    IOS_APP_STORE = "IOS_APP_STORE"
    IOS_APP_ADHOC = "IOS_APP_ADHOC"
    IOS_APP_INHOUSE = "IOS_APP_INHOUSE"
    MAC_APP_DEVELOPMENT = "MAC_APP_DEVELOPMENT"
    MAC_APP_STORE = "MAC_APP_STORE"
    MAC_APP_DIRECT = "MAC_APP_DIRECT"
    TVOS_APP_DEVELOPMENT = "TVOS_APP_DEVELOPMENT"
    TVOS_APP_STORE = "TVOS_APP_STORE"
    TVOS_APP_ADHOC = "TVOS_APP_ADHOC"
    TVOS_APP_INHOUSE = "TVOS_APP_INHOUSE"
    MAC_CATALYST_APP_DEVELOPMENT = "MAC_CATALYST_APP_DEVELOPMENT"
    MAC_CATALYST_APP_STORE = "MAC_CATALYST_APP_STORE"
    MAC_CATALYST_APP_DIRECT = "MAC_CATALYST_APP_DIRECT"


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    FINANCE = "FINANCE"
    ACCOUNT_HOLDER = "ACCOUNT_HOLDER"
    SALES = "SALES"
    MARKETING = "MARKETING"
    APP_MANAGER = "APP_MANAGER"
    DEVELOPER = "DEVELOPER"
    ACCESS_TO_REPORTS = "ACCESS_TO_REPORTS"
    CUSTOMER_SUPPORT = "CUSTOMER_SUPPORT"
    CREATE_APPS = "CREATE_APPS"
    CLOUD_MANAGED_DEVELOPER_ID = "CLOUD_MANAGED_DEVELOPER_ID"
    CLOUD_MANAGED_APP_DISTRIBUTION = "CLOUD_MANAGED_APP_DISTRIBUTION"


# Sort keys; a leading "-" sorts descending.
class AppSort(str, Enum):
    BUNDLE_ID = "bundleId"
    BUNDLE_ID_DESC = "-bundleId"
    NAME = "name"
    NAME_DESC = "-name"
    SKU = "sku"
    SKU_DESC = "-sku"


class BundleIdSort(str, Enum):
    ID = "id"
    ID_DESC = "-id"
    IDENTIFIER = "identifier"
    IDENTIFIER_DESC = "-identifier"
    NAME = "name"
    NAME_DESC = "-name"
    PLATFORM = "platform"
    PLATFORM_DESC = "-platform"
    SEED_ID = "seedId"
    SEED_ID_DESC = "-seedId"


class CertificateSort(str, Enum):
    ID = "id"
    ID_DESC = "-id"
    CERTIFICATE_TYPE = "certificateType"
    CERTIFICATE_TYPE_DESC = "-certificateType"
    DISPLAY_NAME = "displayName"
    DISPLAY_NAME_DESC = "-displayName"
    SERIAL_NUMBER = "serialNumber"
    SERIAL_NUMBER_DESC = "-serialNumber"


class ProfileSort(str, Enum):
    ID = "id"
    ID_DESC = "-id"
    NAME = "name"
    NAME_DESC = "-name"
    PROFILE_STATE = "profileState"
    PROFILE_STATE_DESC = "-profileState"
    PROFILE_TYPE = "profileType"
    PROFILE_TYPE_DESC = "-profileType"


class DeviceSort(str, Enum):
    ID = "id"
    ID_DESC = "-id"
    NAME = "name"
    NAME_DESC = "-name"
    PLATFORM = "platform"
    PLATFORM_DESC = "-platform"
    STATUS = "status"
    STATUS_DESC = "-status"
    UDID = "udid"
    UDID_DESC = "-udid"


class UserSort(str, Enum):
    LAST_NAME = "lastName"
    LAST_NAME_DESC = "-lastName"
    USERNAME = "username"
    USERNAME_DESC = "-username"


# ----------------------------------------------------------------------
# Document envelopes
# ----------------------------------------------------------------------
class ResourceLinks(ApiModel):
    self_link: Optional[str] = Field(default=None, alias="self")


class RelationshipLinks(ApiModel):
    self_link: Optional[str] = Field(default=None, alias="self")
    related: Optional[str] = None


class PageLinks(ApiModel):
    self_link: Optional[str] = Field(default=None, alias="self")
    first: Optional[str] = None
    next: Optional[str] = None


class Paging(ApiModel):
    total: Optional[int] = None
    limit: Optional[int] = None


class PagingInformation(ApiModel):
    paging: Optional[Paging] = None


class ResourceIdentifier(ApiModel):
    type: str
    id: str


class Relationship(ApiModel):
    """A relationship entry as returned inside a resource."""

    links: Optional[RelationshipLinks] = None
    meta: Optional[PagingInformation] = None
    data: Optional[Union[ResourceIdentifier, List[ResourceIdentifier]]] = None


class Resource(ApiModel):
    type: str
    id: str
    relationships: Optional[Dict[str, Relationship]] = None
    links: Optional[ResourceLinks] = None


class EntityResponse(ApiModel, Generic[T]):
    """A document holding a single resource."""

    data: T
    links: Optional[ResourceLinks] = None


class PageResponse(ApiModel, Generic[T]):
    """One page of a resource collection.

    The client never follows ``links.next`` on its own; pass the page to
    ``next_page`` on a client to fetch the following one.
    """

    data: List[T]
    links: PageLinks
    meta: Optional[PagingInformation] = None

    @property
    def next_url(self) -> Optional[str]:
        return self.links.next

    @property
    def total(self) -> Optional[int]:
        if self.meta is None or self.meta.paging is None:
            return None
        return self.meta.paging.total


class ServerError(ApiModel):
    """One entry of the ``errors`` array of a failed response."""

    id: Optional[str] = None
    status: Optional[str] = None
    code: str
    title: str
    detail: Optional[str] = None
    source: Optional[Dict[str, Any]] = None


class ErrorResponse(ApiModel):
    errors: List[ServerError] = Field(min_length=1)


# ----------------------------------------------------------------------
# Resources
# ----------------------------------------------------------------------
class AppAttributes(ApiModel):
    name: Optional[str] = None
    bundle_id: Optional[str] = None
    sku: Optional[str] = None
    primary_locale: Optional[str] = None


class App(Resource):
    type: Literal["apps"]
    attributes: Optional[AppAttributes] = None


class BundleIdAttributes(ApiModel):
    name: Optional[str] = None
    identifier: Optional[str] = None
    platform: Optional[str] = None
    seed_id: Optional[str] = None


class BundleId(Resource):
    type: Literal["bundleIds"]
    attributes: Optional[BundleIdAttributes] = None


class BundleIdCapabilityAttributes(ApiModel):
    capability_type: Optional[str] = None
    settings: Optional[List[Dict[str, Any]]] = None


class BundleIdCapability(Resource):
    type: Literal["bundleIdCapabilities"]
    attributes: Optional[BundleIdCapabilityAttributes] = None


class CertificateAttributes(ApiModel):
    name: Optional[str] = None
    display_name: Optional[str] = None
    serial_number: Optional[str] = None
    certificate_type: Optional[str] = None
    certificate_content: Optional[str] = None
    csr_content: Optional[str] = None
    platform: Optional[str] = None
    expiration_date: Optional[datetime] = None


class Certificate(Resource):
    type: Literal["certificates"]
    attributes: Optional[CertificateAttributes] = None


class ProfileAttributes(ApiModel):
    name: Optional[str] = None
    platform: Optional[str] = None
    profile_type: Optional[str] = None
    profile_state: Optional[str] = None
    profile_content: Optional[str] = None
    uuid: Optional[str] = None
    created_date: Optional[datetime] = None
    expiration_date: Optional[datetime] = None


class Profile(Resource):
    type: Literal["profiles"]
    attributes: Optional[ProfileAttributes] = None


class DeviceAttributes(ApiModel):
    name: Optional[str] = None
    udid: Optional[str] = None
    platform: Optional[str] = None
    status: Optional[str] = None
    device_class: Optional[str] = None
    model: Optional[str] = None
    added_date: Optional[datetime] = None


class Device(Resource):
    type: Literal["devices"]
    attributes: Optional[DeviceAttributes] = None


class UserAttributes(ApiModel):
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    roles: Optional[List[str]] = None
    all_apps_visible: Optional[bool] = None
    provisioning_allowed: Optional[bool] = None


class User(Resource):
    type: Literal["users"]
    attributes: Optional[UserAttributes] = None


# One response class per endpoint family
class AppsResponse(PageResponse[App]):
    pass


class BundleIdsResponse(PageResponse[BundleId]):
    pass


class BundleIdResponse(EntityResponse[BundleId]):
    pass


class BundleIdCapabilitiesResponse(PageResponse[BundleIdCapability]):
    pass


class CertificatesResponse(PageResponse[Certificate]):
    pass


class CertificateResponse(EntityResponse[Certificate]):
    pass


class ProfilesResponse(PageResponse[Profile]):
    pass


class ProfileResponse(EntityResponse[Profile]):
    pass


class DevicesResponse(PageResponse[Device]):
    pass


class DeviceResponse(EntityResponse[Device]):
    pass


class UsersResponse(PageResponse[User]):
    pass


class UserResponse(EntityResponse[User]):
    pass


# ----------------------------------------------------------------------
# Request bodies
# ----------------------------------------------------------------------
class RequestModel(ApiModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class ToOne(RequestModel):
    data: ResourceIdentifier


class ToMany(RequestModel):
    data: List[ResourceIdentifier]


def _identifiers(kind: str, ids: Sequence[str]) -> ToMany:
    return ToMany(data=[ResourceIdentifier(type=kind, id=value) for value in ids])


class DeviceCreateAttributes(RequestModel):
    name: str
    platform: BundleIdPlatform
    udid: str


class DeviceCreateData(RequestModel):
    type: Literal["devices"] = "devices"
    attributes: DeviceCreateAttributes


class DeviceCreateRequest(RequestModel):
    data: DeviceCreateData

    @classmethod
    def build(cls, name: str, udid: str, platform: BundleIdPlatform) -> "DeviceCreateRequest":
        return cls(
            data=DeviceCreateData(
                attributes=DeviceCreateAttributes(name=name, udid=udid, platform=platform)
            )
        )


class BundleIdCreateAttributes(RequestModel):
    identifier: str
    name: str
    platform: BundleIdPlatform
    seed_id: Optional[str] = None


class BundleIdCreateData(RequestModel):
    type: Literal["bundleIds"] = "bundleIds"
    attributes: BundleIdCreateAttributes


class BundleIdCreateRequest(RequestModel):
    data: BundleIdCreateData

    @classmethod
    def build(
        cls,
        identifier: str,
        name: str,
        platform: BundleIdPlatform,
        seed_id: Optional[str] = None,
    ) -> "BundleIdCreateRequest":
        return cls(
            data=BundleIdCreateData(
                attributes=BundleIdCreateAttributes(
                    identifier=identifier, name=name, platform=platform, seed_id=seed_id
                )
            )
        )


class CertificateCreateAttributes(RequestModel):
    certificate_type: CertificateType
    csr_content: str


class CertificateCreateData(RequestModel):
    type: Literal["certificates"] = "certificates"
    attributes: CertificateCreateAttributes


class CertificateCreateRequest(RequestModel):
    data: CertificateCreateData

    @classmethod
    def build(cls, certificate_type: CertificateType, csr_content: str) -> "CertificateCreateRequest":
        return cls(
            data=CertificateCreateData(
                attributes=CertificateCreateAttributes(
                    certificate_type=certificate_type, csr_content=csr_content
                )
            )
        )


class ProfileCreateAttributes(RequestModel):
    name: str
    profile_type: ProfileType


class ProfileCreateRelationships(RequestModel):
    bundle_id: ToOne
    certificates: ToMany
    devices: Optional[ToMany] = None


class ProfileCreateData(RequestModel):
    type: Literal["profiles"] = "profiles"
    attributes: ProfileCreateAttributes
    relationships: ProfileCreateRelationships


class ProfileCreateRequest(RequestModel):
    data: ProfileCreateData

    @classmethod
    def build(
        cls,
        name: str,
        profile_type: ProfileType,
        bundle_id: str,
        certificate_ids: Sequence[str],
        device_ids: Optional[Sequence[str]] = None,
    ) -> "ProfileCreateRequest":
        """Build a profile request from resource ids.

        ``device_ids`` is required by Apple for development and ad hoc
        profiles and must be omitted for App Store profiles.
        """
        if not certificate_ids:
            raise ValueError("at least one certificate id is required")
        return cls(
            data=ProfileCreateData(
                attributes=ProfileCreateAttributes(name=name, profile_type=profile_type),
                relationships=ProfileCreateRelationships(
                    bundle_id=ToOne(data=ResourceIdentifier(type="bundleIds", id=bundle_id)),
                    certificates=_identifiers("certificates", certificate_ids),
                    devices=_identifiers("devices", device_ids) if device_ids else None,
                ),
            )
        )


class UserUpdateAttributes(RequestModel):
    roles: Optional[List[UserRole]] = None
    all_apps_visible: Optional[bool] = None
    provisioning_allowed: Optional[bool] = None


class UserUpdateRelationships(RequestModel):
    visible_apps: Optional[ToMany] = None


class UserUpdateData(RequestModel):
    type: Literal["users"] = "users"
    id: str
    attributes: Optional[UserUpdateAttributes] = None
    relationships: Optional[UserUpdateRelationships] = None


class UserUpdateRequest(RequestModel):
    data: UserUpdateData

    @classmethod
    def build(
        cls,
        user_id: str,
        *,
        roles: Optional[Sequence[UserRole]] = None,
        all_apps_visible: Optional[bool] = None,
        provisioning_allowed: Optional[bool] = None,
        visible_app_ids: Optional[Sequence[str]] = None,
    ) -> "UserUpdateRequest":
        attributes = UserUpdateAttributes(
            roles=list(roles) if roles is not None else None,
            all_apps_visible=all_apps_visible,
            provisioning_allowed=provisioning_allowed,
        )
        relationships = None
        if visible_app_ids is not None:
            relationships = UserUpdateRelationships(
                visible_apps=_identifiers("apps", visible_app_ids)
            )
        return cls(
            data=UserUpdateData(id=user_id, attributes=attributes, relationships=relationships)
        )


# ----------------------------------------------------------------------
# Query builders
# ----------------------------------------------------------------------
def format_query_value(value: Any) -> str:
    """Render one query value the way the API expects it."""
    if isinstance(value, (list, tuple)):
        return ",".join(format_query_value(item) for item in value)
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Query(BaseModel):
    """Base for query builders.

    Fields are declared with their wire name as alias (``filter[name]``,
    ``fields[devices]`` ...).  :meth:`to_query` emits the fields that are
    set, in declaration order.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    def to_query(self) -> List[Tuple[str, str]]:
        pairs: List[Tuple[str, str]] = []
        for name, info in type(self).model_fields.items():
            value = getattr(self, name)
            if value is None:
                continue
            pairs.append((info.alias or name, format_query_value(value)))
        return pairs


StrOrList = Optional[Union[str, List[str]]]
Limit = Optional[int]


class AppQuery(Query):
    fields_apps: StrOrList = Field(default=None, alias="fields[apps]")
    filter_bundle_id: StrOrList = Field(default=None, alias="filter[bundleId]")
    filter_id: StrOrList = Field(default=None, alias="filter[id]")
    filter_name: StrOrList = Field(default=None, alias="filter[name]")
    filter_sku: StrOrList = Field(default=None, alias="filter[sku]")
    include: StrOrList = None
    limit: Limit = Field(default=None, ge=1, le=200)
    sort: Optional[Union[AppSort, List[AppSort]]] = None


class BundleIdQuery(Query):
    fields_bundle_ids: StrOrList = Field(default=None, alias="fields[bundleIds]")
    fields_profiles: StrOrList = Field(default=None, alias="fields[profiles]")
    fields_bundle_id_capabilities: StrOrList = Field(
        default=None, alias="fields[bundleIdCapabilities]"
    )
    fields_apps: StrOrList = Field(default=None, alias="fields[apps]")
    filter_id: StrOrList = Field(default=None, alias="filter[id]")
    filter_identifier: StrOrList = Field(default=None, alias="filter[identifier]")
    filter_name: StrOrList = Field(default=None, alias="filter[name]")
    filter_platform: Optional[Union[BundleIdPlatform, List[BundleIdPlatform]]] = Field(
        default=None, alias="filter[platform]"
    )
    filter_seed_id: StrOrList = Field(default=None, alias="filter[seedId]")
    include: StrOrList = None
    limit: Limit = Field(default=None, ge=1, le=200)
    limit_profiles: Limit = Field(default=None, alias="limit[profiles]", ge=1, le=50)
    limit_bundle_id_capabilities: Limit = Field(
        default=None, alias="limit[bundleIdCapabilities]", ge=1, le=50
    )
    sort: Optional[Union[BundleIdSort, List[BundleIdSort]]] = None


class CertificateQuery(Query):
    fields_certificates: StrOrList = Field(default=None, alias="fields[certificates]")
    filter_id: StrOrList = Field(default=None, alias="filter[id]")
    filter_serial_number: StrOrList = Field(default=None, alias="filter[serialNumber]")
    filter_certificate_type: Optional[Union[CertificateType, List[CertificateType]]] = Field(
        default=None, alias="filter[certificateType]"
    )
    filter_display_name: StrOrList = Field(default=None, alias="filter[displayName]")
    limit: Limit = Field(default=None, ge=1, le=200)
    sort: Optional[Union[CertificateSort, List[CertificateSort]]] = None


class ProfileQuery(Query):
    fields_profiles: StrOrList = Field(default=None, alias="fields[profiles]")
    fields_certificates: StrOrList = Field(default=None, alias="fields[certificates]")
    fields_devices: StrOrList = Field(default=None, alias="fields[devices]")
    fields_bundle_ids: StrOrList = Field(default=None, alias="fields[bundleIds]")
    filter_id: StrOrList = Field(default=None, alias="filter[id]")
    filter_name: StrOrList = Field(default=None, alias="filter[name]")
    filter_profile_state: Optional[Union[ProfileState, List[ProfileState]]] = Field(
        default=None, alias="filter[profileState]"
    )
    filter_profile_type: Optional[Union[ProfileType, List[ProfileType]]] = Field(
        default=None, alias="filter[profileType]"
    )
    include: StrOrList = None
    limit: Limit = Field(default=None, ge=1, le=200)
    limit_certificates: Limit = Field(default=None, alias="limit[certificates]", ge=1, le=50)
    limit_devices: Limit = Field(default=None, alias="limit[devices]", ge=1, le=50)
    sort: Optional[Union[ProfileSort, List[ProfileSort]]] = None


class DeviceQuery(Query):
    fields_devices: StrOrList = Field(default=None, alias="fields[devices]")
    filter_id: StrOrList = Field(default=None, alias="filter[id]")
    filter_name: StrOrList = Field(default=None, alias="filter[name]")
    filter_platform: Optional[Union[BundleIdPlatform, List[BundleIdPlatform]]] = Field(
        default=None, alias="filter[platform]"
    )
    filter_status: Optional[Union[DeviceStatus, List[DeviceStatus]]] = Field(
        default=None, alias="filter[status]"
    )
    filter_udid: StrOrList = Field(default=None, alias="filter[udid]")
    limit: Limit = Field(default=None, ge=1, le=200)
    sort: Optional[Union[DeviceSort, List[DeviceSort]]] = None


class UserQuery(Query):
    fields_users: StrOrList = Field(default=None, alias="fields[users]")
    fields_apps: StrOrList = Field(default=None, alias="fields[apps]")
    filter_roles: Optional[Union[UserRole, List[UserRole]]] = Field(
        default=None, alias="filter[roles]"
    )
    filter_username: StrOrList = Field(default=None, alias="filter[username]")
    filter_visible_apps: StrOrList = Field(default=None, alias="filter[visibleApps]")
    include: StrOrList = None
    limit: Limit = Field(default=None, ge=1, le=200)
    limit_visible_apps: Limit = Field(default=None, alias="limit[visibleApps]", ge=1, le=50)
    sort: Optional[Union[UserSort, List[UserSort]]] = None


class UserVisibleAppsQuery(Query):
    fields_apps: StrOrList = Field(default=None, alias="fields[apps]")
    limit: Limit = Field(default=None, ge=1, le=200)
