"""Output rows for people, catalog and workspace resources."""

from __future__ import annotations

from fbexport_source_access.models.base import Amount, NormalizedRecord, Scalar, Text


class ClientRecord(NormalizedRecord):
    currency_code: Text = None
    email: Text = None
    fname: Text = None
    lname: Text = None
    mob_phone: Text = None
    note: Text = None
    organization: Text = None
    p_city: Text = None
    p_code: Text = None
    p_country: Text = None
    p_province: Text = None
    p_street: Text = None
    p_street2: Text = None
    s_city: Text = None
    s_code: Text = None
    s_country: Text = None
    s_province: Text = None
    s_street: Text = None
    s_street2: Text = None
    username: Text = None


class BillableItemRecord(NormalizedRecord):
    id: Scalar = None
    name: Text = None
    description: Text = None
    qty: Scalar = None
    unit_cost: Amount = 0.0
    inventory: Scalar = None
    sku: Text = None
    tax1: Scalar = None
    tax2: Scalar = None
    updated: Text = None
    vis_state: Scalar = None


class TaxRecord(NormalizedRecord):
    taxid: Scalar = None
    name: Text = None
    amount: Text = None
    number: Text = None
    compound: Scalar = None
    updated: Text = None


class ProjectRecord(NormalizedRecord):
    id: Scalar = None
    title: Text = None
    description: Text = None
    client_id: Scalar = None
    project_type: Text = None
    billing_method: Text = None
    fixed_price: Amount = 0.0
    budget: Scalar = None
    due_date: Text = None
    active: Scalar = None
    complete: Scalar = None
    logged_duration: Scalar = None
    created_at: Text = None
    updated_at: Text = None


class TimeEntryRecord(NormalizedRecord):
    id: Scalar = None
    started_at: Text = None
    duration: Scalar = None
    note: Text = None
    billable: Scalar = None
    billed: Scalar = None
    client_id: Scalar = None
    project_id: Scalar = None
    service_id: Scalar = None
    identity_id: Scalar = None
    is_logged: Scalar = None
    created_at: Text = None


class ProfileRecord(NormalizedRecord):
    id: Scalar = None
    identity_id: Scalar = None
    first_name: Text = None
    last_name: Text = None
    email: Text = None
    language: Text = None
    confirmed_at: Text = None
    created_at: Text = None
    business_count: int = 0


class BusinessRecord(NormalizedRecord):
    id: Scalar = None
    business_uuid: Text = None
    account_id: Text = None
    name: Text = None
    currency_code: Text = None
    timezone: Text = None
    date_format: Text = None
    country: Text = None
