"""
Catalogue of App Store Connect operations.

Each function returns a :class:`~appstoreconnect_api_client.request.Request`
describing one call; nothing here touches the network.  Pass the
request to ``send`` on either client, or use the methods of the same
name that the clients expose.

See https://developer.apple.com/documentation/appstoreconnectapi for the
meaning of every filter and field.
"""

from __future__ import annotations

import abc
from typing import Optional

from .models import (
    AppQuery,
    AppsResponse,
    BundleIdCapabilitiesResponse,
    BundleIdCreateRequest,
    BundleIdQuery,
    BundleIdResponse,
    BundleIdsResponse,
    CertificateCreateRequest,
    CertificateQuery,
    CertificateResponse,
    CertificatesResponse,
    DeviceCreateRequest,
    DeviceQuery,
    DeviceResponse,
    DevicesResponse,
    ProfileCreateRequest,
    ProfileQuery,
    ProfileResponse,
    ProfilesResponse,
    UserQuery,
    UserResponse,
    UsersResponse,
    UserUpdateRequest,
    UserVisibleAppsQuery,
)
from .request import Request, quote_segment


# Apps

def list_apps(query: Optional[AppQuery] = None) -> Request:
    return Request("GET", "/v1/apps", query=query, result=AppsResponse)


# Bundle IDs

def list_bundle_ids(query: Optional[BundleIdQuery] = None) -> Request:
    return Request("GET", "/v1/bundleIds", query=query, result=BundleIdsResponse)


def register_bundle_id(body: BundleIdCreateRequest) -> Request:
    return Request("POST", "/v1/bundleIds", body=body, result=BundleIdResponse)


def list_bundle_id_capabilities(bundle_id: str) -> Request:
    return Request(
        "GET",
        f"/v1/bundleIds/{quote_segment(bundle_id)}/bundleIdCapabilities",
        result=BundleIdCapabilitiesResponse,
    )


# Certificates

def list_certificates(query: Optional[CertificateQuery] = None) -> Request:
    return Request("GET", "/v1/certificates", query=query, result=CertificatesResponse)


def create_certificate(body: CertificateCreateRequest) -> Request:
    return Request("POST", "/v1/certificates", body=body, result=CertificateResponse)


def revoke_certificate(certificate_id: str) -> Request:
    return Request("DELETE", f"/v1/certificates/{quote_segment(certificate_id)}")


# Profiles

def list_profiles(query: Optional[ProfileQuery] = None) -> Request:
    return Request("GET", "/v1/profiles", query=query, result=ProfilesResponse)


def create_profile(body: ProfileCreateRequest) -> Request:
    return Request("POST", "/v1/profiles", body=body, result=ProfileResponse)


def delete_profile(profile_id: str) -> Request:
    return Request("DELETE", f"/v1/profiles/{quote_segment(profile_id)}")


# Devices

def list_devices(query: Optional[DeviceQuery] = None) -> Request:
    return Request("GET", "/v1/devices", query=query, result=DevicesResponse)


def register_device(body: DeviceCreateRequest) -> Request:
    return Request("POST", "/v1/devices", body=body, result=DeviceResponse)


# Users

def list_users(query: Optional[UserQuery] = None) -> Request:
    return Request("GET", "/v1/users", query=query, result=UsersResponse)


def read_user(user_id: str) -> Request:
    return Request("GET", f"/v1/users/{quote_segment(user_id)}", result=UserResponse)


def modify_user(user_id: str, body: UserUpdateRequest) -> Request:
    if body.data.id != user_id:
        raise ValueError("the request body must target the same user id as the path")
    return Request(
        "PATCH", f"/v1/users/{quote_segment(user_id)}", body=body, result=UserResponse
    )


def remove_user(user_id: str) -> Request:
    return Request("DELETE", f"/v1/users/{quote_segment(user_id)}")


def list_user_visible_apps(
    user_id: str, query: Optional[UserVisibleAppsQuery] = None
) -> Request:
    return Request(
        "GET",
        f"/v1/users/{quote_segment(user_id)}/visibleApps",
        query=query,
        result=AppsResponse,
    )


class EndpointsMixin(abc.ABC):
    """Exposes the catalogue above as client methods.

    The host class provides ``send(request)``.  On the asynchronous
    client ``send`` is a coroutine function, so these methods return
    awaitables there.
    """

    @abc.abstractmethod
    def send(self, request: Request):
        """Perform ``request``; returns the result or an awaitable of it."""

    def list_apps(self, query: Optional[AppQuery] = None):
        return self.send(list_apps(query))

    def list_bundle_ids(self, query: Optional[BundleIdQuery] = None):
        return self.send(list_bundle_ids(query))

    def register_bundle_id(self, body: BundleIdCreateRequest):
        return self.send(register_bundle_id(body))

    def list_bundle_id_capabilities(self, bundle_id: str):
        return self.send(list_bundle_id_capabilities(bundle_id))

    def list_certificates(self, query: Optional[CertificateQuery] = None):
        return self.send(list_certificates(query))

    def create_certificate(self, body: CertificateCreateRequest):
        return self.send(create_certificate(body))

    def revoke_certificate(self, certificate_id: str):
        return self.send(revoke_certificate(certificate_id))

    def list_profiles(self, query: Optional[ProfileQuery] = None):
        return self.send(list_profiles(query))

    def create_profile(self, body: ProfileCreateRequest):
        return self.send(create_profile(body))

    def delete_profile(self, profile_id: str):
        return self.send(delete_profile(profile_id))

    def list_devices(self, query: Optional[DeviceQuery] = None):
        return self.send(list_devices(query))

    def register_device(self, body: DeviceCreateRequest):
        return self.send(register_device(body))

    def list_users(self, query: Optional[UserQuery] = None):
        return self.send(list_users(query))

    def read_user(self, user_id: str):
        return self.send(read_user(user_id))

    def modify_user(self, user_id: str, body: UserUpdateRequest):
        return self.send(modify_user(user_id, body))

    def remove_user(self, user_id: str):
        return self.send(remove_user(user_id))

    def list_user_visible_apps(
        self, user_id: str, query: Optional[UserVisibleAppsQuery] = None
    ):
        return self.send(list_user_visible_apps(user_id, query))
