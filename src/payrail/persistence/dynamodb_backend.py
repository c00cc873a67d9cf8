"""DynamoDB backend implementing IBankProfileStore."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import boto3
from botocore.exceptions import ClientError

from payrail.core.exceptions import ProfileStoreError
from payrail.models.payout import EmployeeBankProfile

TABLE_BASE = "payrail-employee-banks"


def _decode_decimals(item: dict[str, Any]) -> dict[str, Any]:
    """Convert Decimal values in a DynamoDB item to int/float."""
    out: dict[str, Any] = {}
    for k, v in item.items():
        if isinstance(v, Decimal):
            out[k] = int(v) if v == int(v) else float(v)
        else:
            out[k] = v
    return out


class DynamoDBBankProfileStore:
    """Production IBankProfileStore backed by DynamoDB.

    Items live under PK ``EMPLOYEE#<id>``, SK ``BANK`` with camelCase
    attributes matching the profile fields.
    """

    def __init__(self, table_suffix: str = "", region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._table_suffix = table_suffix
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._ddb = boto3.resource("dynamodb", **kwargs)

    def _table(self):
        return self._ddb.Table(f"{TABLE_BASE}{self._table_suffix}")

    def get_employee_bank(self, employee_id: int) -> EmployeeBankProfile | None:
        try:
            resp = self._table().get_item(Key={"PK": f"EMPLOYEE#{employee_id}", "SK": "BANK"})
        except ClientError as exc:
            raise ProfileStoreError(f"DynamoDB lookup failed for employee #{employee_id}: {exc}") from exc
        item = resp.get("Item")
        if not item:
            return None
        item = _decode_decimals(item)
        return EmployeeBankProfile(
            employee_id=item.get("employeeId", employee_id),
            name=item.get("name", ""),
            individual_id=item.get("individualId", ""),
            routing_number=str(item.get("routingNumber", "")),
            account_number=str(item.get("accountNumber", "")),
            account_type=item.get("accountType", "CHECKING"),
            pay_preference=item.get("payPreference", "ACH"),
        )

    def upsert_employee_bank(self, profile: EmployeeBankProfile) -> None:
        try:
            self._table().put_item(Item={
                "PK": f"EMPLOYEE#{profile.employee_id}",
                "SK": "BANK",
                "employeeId": profile.employee_id,
                "name": profile.name,
                "individualId": profile.individual_id,
                "routingNumber": profile.routing_number,
                "accountNumber": profile.account_number,
                "accountType": str(profile.account_type),
                "payPreference": str(profile.pay_preference),
            })
        except ClientError as exc:
            raise ProfileStoreError(
                f"DynamoDB write failed for employee #{profile.employee_id}: {exc}"
            ) from exc
