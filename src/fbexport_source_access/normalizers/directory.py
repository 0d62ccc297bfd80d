"""Normalizers for clients, catalog items, taxes, projects, time entries, profile and business."""

from __future__ import annotations

from typing import Any

from fbexport_source_access.models.directory import (
    BillableItemRecord,
    BusinessRecord,
    ClientRecord,
    ProfileRecord,
    ProjectRecord,
    TaxRecord,
    TimeEntryRecord,
)
from fbexport_source_access.normalizers.base import RecordNormalizer, as_dict, dig, first

# client column -> raw aliases, tried in order
CLIENT_ALIASES: dict[str, tuple[str, ...]] = {
    "currency_code": ("currency_code",),
    "email": ("email",),
    "fname": ("fname", "first_name"),
    "lname": ("lname", "last_name"),
    "mob_phone": ("mob_phone", "mobile_phone", "phone_mobile"),
    "note": ("note", "notes"),
    "organization": ("organization", "company"),
    "p_city": ("p_city", "primary_city"),
    "p_code": ("p_code", "primary_postal_code"),
    "p_country": ("p_country", "primary_country"),
    "p_province": ("p_province", "primary_province"),
    "p_street": ("p_street", "primary_street"),
    "p_street2": ("p_street2", "primary_street2"),
    "s_city": ("s_city", "secondary_city"),
    "s_code": ("s_code", "secondary_postal_code"),
    "s_country": ("s_country", "secondary_country"),
    "s_province": ("s_province", "secondary_province"),
    "s_street": ("s_street", "secondary_street"),
    "s_street2": ("s_street2", "secondary_street2"),
    "username": ("username",),
}


class ClientNormalizer(RecordNormalizer):
    resource_type = "clients"
    record_model = ClientRecord

    def build(self, item: dict[str, Any]) -> ClientRecord:
        return ClientRecord(
            **{
                column: first(*(item.get(alias) for alias in aliases))
                for column, aliases in CLIENT_ALIASES.items()
            }
        )


class BillableItemNormalizer(RecordNormalizer):
    resource_type = "billable_items"
    record_model = BillableItemRecord

    def build(self, item: dict[str, Any]) -> BillableItemRecord:
        return BillableItemRecord(
            id=first(item.get("id"), item.get("itemid")),
            name=item.get("name"),
            description=item.get("description"),
            qty=first(item.get("qty"), item.get("quantity")),
            unit_cost=item.get("unit_cost"),
            inventory=item.get("inventory"),
            sku=item.get("sku"),
            tax1=item.get("tax1"),
            tax2=item.get("tax2"),
            updated=item.get("updated"),
            vis_state=item.get("vis_state"),
        )


class TaxNormalizer(RecordNormalizer):
    resource_type = "taxes"
    record_model = TaxRecord

    def build(self, item: dict[str, Any]) -> TaxRecord:
        return TaxRecord(
            taxid=first(item.get("taxid"), item.get("id")),
            name=item.get("name"),
            amount=item.get("amount"),
            number=item.get("number"),
            compound=item.get("compound"),
            updated=item.get("updated"),
        )


class ProjectNormalizer(RecordNormalizer):
    resource_type = "projects"
    record_model = ProjectRecord

    def build(self, item: dict[str, Any]) -> ProjectRecord:
        return ProjectRecord(
            id=item.get("id"),
            title=item.get("title"),
            description=item.get("description"),
            client_id=first(item.get("client_id"), item.get("clientid")),
            project_type=item.get("project_type"),
            billing_method=item.get("billing_method"),
            fixed_price=item.get("fixed_price"),
            budget=item.get("budget"),
            due_date=item.get("due_date"),
            active=item.get("active"),
            complete=item.get("complete"),
            logged_duration=item.get("logged_duration"),
            created_at=item.get("created_at"),
            updated_at=item.get("updated_at"),
        )


class TimeEntryNormalizer(RecordNormalizer):
    resource_type = "time_entries"
    record_model = TimeEntryRecord

    def build(self, item: dict[str, Any]) -> TimeEntryRecord:
        return TimeEntryRecord(
            id=item.get("id"),
            started_at=item.get("started_at"),
            duration=item.get("duration"),
            note=item.get("note"),
            billable=item.get("billable"),
            billed=item.get("billed"),
            client_id=first(item.get("client_id"), item.get("clientid")),
            project_id=first(item.get("project_id"), item.get("projectid")),
            service_id=first(item.get("service_id"), item.get("serviceid")),
            identity_id=item.get("identity_id"),
            is_logged=item.get("is_logged"),
            created_at=item.get("created_at"),
        )


class ProfileNormalizer(RecordNormalizer):
    resource_type = "profile"
    record_model = ProfileRecord

    def build(self, item: dict[str, Any]) -> ProfileRecord:
        user = as_dict(item.get("response")) or item
        memberships = user.get("business_memberships")
        return ProfileRecord(
            id=user.get("id"),
            identity_id=user.get("identity_id"),
            first_name=user.get("first_name"),
            last_name=user.get("last_name"),
            email=user.get("email"),
            language=user.get("language"),
            confirmed_at=user.get("confirmed_at"),
            created_at=user.get("created_at"),
            business_count=len(memberships) if isinstance(memberships, list) else 0,
        )


class BusinessNormalizer(RecordNormalizer):
    resource_type = "business"
    record_model = BusinessRecord

    def build(self, item: dict[str, Any]) -> BusinessRecord:
        business = (
            as_dict(dig(item, "response", "business"))
            or as_dict(item.get("business"))
            or as_dict(item.get("response"))
            or item
        )
        return BusinessRecord(
            id=first(business.get("id"), business.get("business_id")),
            business_uuid=business.get("business_uuid"),
            account_id=first(business.get("account_id"), business.get("accounting_systemid")),
            name=business.get("name"),
            currency_code=business.get("currency_code"),
            timezone=business.get("timezone"),
            date_format=business.get("date_format"),
            country=dig(business, "address", "country"),
        )
