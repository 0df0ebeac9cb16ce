"""
Python client for interacting with the App Store Connect REST API.

This package provides :class:`AppStoreConnectClient` (built on
``requests``) and :class:`AsyncAppStoreConnectClient` (built on
``aiohttp``).  Both sign their own ES256 bearer tokens from an App Store
Connect API key and make authenticated requests to API endpoints.

The clients cache the signed token for its lifetime (twenty minutes at
most) and sign a new one shortly before the current one expires.

Examples
--------

```python
from appstoreconnect_api_client import (
    AppStoreConnectClient,
    BundleIdPlatform,
    Credentials,
    DeviceCreateRequest,
)

client = AppStoreConnectClient(
    credentials=Credentials.from_p8(
        issuer_id="YOUR_ISSUER_ID",
        key_id="YOUR_KEY_ID",
        path="AuthKey_YOUR_KEY_ID.p8",
    )
)

device = client.register_device(
    DeviceCreateRequest.build(
        name="Test iPhone",
        udid="00008020-000000000000002E",
        platform=BundleIdPlatform.IOS,
    )
)
```

References
----------
Apple's "Generating Tokens for API Requests" guide describes the token
header (``alg``, ``kid``, ``typ``) and payload (``iss``, ``iat``,
``exp``, ``aud``) and the twenty minute limit on token lifetime.
"""

import logging

from .aio import AsyncAppStoreConnectClient
from .auth import AUDIENCE, Credentials, Token, TokenCache, sign_token
from .client import AppStoreConnectClient
from .exceptions import (
    ApiError,
    AppStoreConnectError,
    DecodeError,
    InvalidKeyError,
    SigningError,
    TransportError,
)
from .models import (
    AppQuery,
    AppsResponse,
    BundleIdCapabilitiesResponse,
    BundleIdCreateRequest,
    BundleIdPlatform,
    BundleIdQuery,
    BundleIdResponse,
    BundleIdsResponse,
    CertificateCreateRequest,
    CertificateQuery,
    CertificateResponse,
    CertificatesResponse,
    CertificateType,
    DeviceCreateRequest,
    DeviceQuery,
    DeviceResponse,
    DevicesResponse,
    DeviceStatus,
    ProfileCreateRequest,
    ProfileQuery,
    ProfileResponse,
    ProfilesResponse,
    ProfileState,
    ProfileType,
    ServerError,
    UserQuery,
    UserResponse,
    UserRole,
    UsersResponse,
    UserUpdateRequest,
    UserVisibleAppsQuery,
)
from .request import API_BASE_URL, Request

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "API_BASE_URL",
    "AUDIENCE",
    "ApiError",
    "AppQuery",
    "AppStoreConnectClient",
    "AppStoreConnectError",
    "AppsResponse",
    "AsyncAppStoreConnectClient",
    "BundleIdCapabilitiesResponse",
    "BundleIdCreateRequest",
    "BundleIdPlatform",
    "BundleIdQuery",
    "BundleIdResponse",
    "BundleIdsResponse",
    "CertificateCreateRequest",
    "CertificateQuery",
    "CertificateResponse",
    "CertificateType",
    "CertificatesResponse",
    "Credentials",
    "DecodeError",
    "DeviceCreateRequest",
    "DeviceQuery",
    "DeviceResponse",
    "DeviceStatus",
    "DevicesResponse",
    "InvalidKeyError",
    "ProfileCreateRequest",
    "ProfileQuery",
    "ProfileResponse",
    "ProfileState",
    "ProfileType",
    "ProfilesResponse",
    "Request",
    "ServerError",
    "SigningError",
    "Token",
    "TokenCache",
    "TransportError",
    "UserQuery",
    "UserResponse",
    "UserRole",
    "UserUpdateRequest",
    "UserVisibleAppsQuery",
    "UsersResponse",
    "sign_token",
]
