"""
Caller-visible profile fields and their provider profile attribute names.
"""

from types import MappingProxyType
from typing import Any, Dict, Mapping

PROFILE_FIELD_MAP: Mapping[str, str] = MappingProxyType({
    "firstName": "firstName",
    "lastName": "lastName",
    "middleName": "middleName",
    "honorificPrefix": "honorificPrefix",
    "honorificSuffix": "honorificSuffix",
    "email": "email",
    "title": "title",
    "displayName": "displayName",
    "nickName": "nickName",
    "profileUrl": "profileUrl",
    "secondEmail": "secondEmail",
    "mobilePhone": "mobilePhone",
    "primaryPhone": "primaryPhone",
    "streetAddress": "streetAddress",
    "city": "city",
    "state": "state",
    "zipCode": "zipCode",
    "countryCode": "countryCode",
    "postalAddress": "postalAddress",
    "preferredLanguage": "preferredLanguage",
    "locale": "locale",
    "timezone": "timezone",
    "userType": "userType",
    "employeeNumber": "employeeNumber",
    "costCenter": "costCenter",
    "organization": "organization",
    "division": "division",
    "department": "department",
    "managerId": "managerId",
    "manager": "manager",
})

# Changing the login usually needs extra verification at the provider;
# it is forwarded outside the allow-list and never counts as a recognized field.
LOGIN_FIELD = "login"


def map_profile_fields(body: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy allow-listed fields into a provider profile patch.

    Unknown keys are dropped without being reported. A null value is copied
    as-is so that the caller can clear a provider attribute.
    """
    patch: Dict[str, Any] = {}
    for key, value in body.items():
        provider_field = PROFILE_FIELD_MAP.get(key)
        if provider_field is not None:
            patch[provider_field] = value
    return patch
