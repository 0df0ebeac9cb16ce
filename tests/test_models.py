"""Tests for request body serialisation and response model decoding."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest  # type: ignore

from appstoreconnect_api_client.models import (
    BundleIdCreateRequest,
    BundleIdPlatform,
    CertificateCreateRequest,
    CertificateType,
    DeviceResponse,
    DevicesResponse,
    ProfileCreateRequest,
    ProfileResponse,
    ProfileType,
    UserResponse,
    UserRole,
    UserUpdateRequest,
)
from tests.helpers import payloads


def test_profile_create_body_matches_wire_format() -> None:
    body = ProfileCreateRequest.build(
        name="profileName",
        profile_type=ProfileType.IOS_APP_ADHOC,
        bundle_id="FJXB650000",
        certificate_ids=["87792Q0000"],
        device_ids=["25D9760000"],
    ).to_body()

    assert body == {
        "data": {
            "type": "profiles",
            "attributes": {"name": "profileName", "profileType": "IOS_APP_ADHOC"},
            "relationships": {
                "bundleId": {"data": {"type": "bundleIds", "id": "FJXB650000"}},
                "certificates": {"data": [{"type": "certificates", "id": "87792Q0000"}]},
                "devices": {"data": [{"type": "devices", "id": "25D9760000"}]},
            },
        }
    }


def test_profile_create_without_devices_omits_relationship() -> None:
    body = ProfileCreateRequest.build(
        name="store",
        profile_type=ProfileType.IOS_APP_STORE,
        bundle_id="FJXB650000",
        certificate_ids=["87792Q0000"],
    ).to_body()
    assert "devices" not in body["data"]["relationships"]


def test_profile_create_requires_a_certificate() -> None:
    with pytest.raises(ValueError):
        ProfileCreateRequest.build("p", ProfileType.IOS_APP_STORE, "B", certificate_ids=[])


def test_bundle_id_and_certificate_bodies() -> None:
    bundle = BundleIdCreateRequest.build("com.example.app", "Example", BundleIdPlatform.IOS).to_body()
    assert bundle["data"] == {
        "type": "bundleIds",
        "attributes": {"identifier": "com.example.app", "name": "Example", "platform": "IOS"},
    }

    cert = CertificateCreateRequest.build(CertificateType.MAC_APP_DEVELOPMENT, "CSR").to_body()
    assert cert["data"]["attributes"] == {
        "certificateType": "MAC_APP_DEVELOPMENT",
        "csrContent": "CSR",
    }


def test_user_update_body() -> None:
    body = UserUpdateRequest.build(
        "user-1",
        roles=[UserRole.DEVELOPER, UserRole.APP_MANAGER],
        visible_app_ids=["6447000000"],
    ).to_body()
    assert body == {
        "data": {
            "type": "users",
            "id": "user-1",
            "attributes": {"roles": ["DEVELOPER", "APP_MANAGER"]},
            "relationships": {"visibleApps": {"data": [{"type": "apps", "id": "6447000000"}]}},
        }
    }


def test_device_page_decodes_attributes_and_links() -> None:
    document = payloads.devices_page(
        payloads.device(), next_url=f"{payloads.API}/v1/devices?cursor=Mg", total=3
    )
    page = DevicesResponse.model_validate(document)

    device = page.data[0]
    assert device.id == "25D9760000"
    assert device.attributes.device_class == "IPAD"
    assert device.attributes.added_date == datetime(2022, 12, 10, 12, 2, 45, tzinfo=timezone.utc)
    assert device.links.self_link.endswith("/v1/devices/25D9760000")
    assert page.next_url == f"{payloads.API}/v1/devices?cursor=Mg"
    assert page.total == 3


def test_unknown_fields_are_ignored() -> None:
    document = {"data": dict(payloads.device(), extra={"new": True}), "links": {"self": "x"}}
    document["data"]["attributes"]["newAttribute"] = 1
    assert DeviceResponse.model_validate(document).data.attributes.name == "mini"


def test_resource_type_must_match_endpoint_family() -> None:
    with pytest.raises(ValueError):
        DeviceResponse.model_validate({"data": payloads.profile(), "links": {"self": "x"}})


def test_profile_relationships_decode() -> None:
    profile = ProfileResponse.model_validate({"data": payloads.profile()}).data
    assert profile.attributes.profile_state == "ACTIVE"
    assert profile.relationships["certificates"].meta.paging.total == 1
    assert profile.relationships["bundleId"].links.related == "y"


def test_user_decodes_camel_case_attributes() -> None:
    user = UserResponse.model_validate({"data": payloads.user()}).data
    assert user.attributes.first_name == "Li"
    assert user.attributes.provisioning_allowed is True
    assert user.attributes.roles == ["DEVELOPER"]
