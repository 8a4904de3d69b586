"""Pydantic models representing the offence lookup response."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

SUCCESS_STATUS = "success"


class PendingOffence(BaseModel):
    """Unpaid traffic offence ticket."""

    model_config = ConfigDict(extra="ignore")

    reference: str = ""
    issued_date: str = ""
    operator: str = ""
    vehicle: str = ""
    licence: str = ""
    location: str = ""
    offence: str = ""
    charge: str = ""
    penalty: str = ""
    status: str = ""
    receipt: Optional[str] = None
    paydate: Optional[str] = None
    pendate: Optional[str] = None

    @field_validator(
        "reference",
        "issued_date",
        "operator",
        "vehicle",
        "licence",
        "location",
        "offence",
        "charge",
        "penalty",
        "status",
        mode="before",
    )
    @classmethod
    def blank_if_missing(cls, value: Any) -> Any:
        """Treat null text fields as empty strings."""
        return "" if value is None else str(value)


class InspectionRecord(BaseModel):
    """Vehicle inspection report entry."""

    model_config = ConfigDict(extra="ignore")

    id: int = 0
    vir_no: str = ""
    finalresult: str = ""
    inspector: str = ""
    region: str = ""
    district: str = ""
    prohibition_on_use: str = ""
    weight: str = ""
    licence: str = ""
    driver_name: str = ""
    vehicle_passed_for: str = ""
    inspection_date: str = ""
    valid_untill: str = ""
    noplate: str = ""
    reason_en: str = ""
    remarks: str = ""

    @field_validator(
        "vir_no",
        "finalresult",
        "inspector",
        "region",
        "district",
        "prohibition_on_use",
        "weight",
        "licence",
        "driver_name",
        "vehicle_passed_for",
        "inspection_date",
        "valid_untill",
        "noplate",
        "reason_en",
        "remarks",
        mode="before",
    )
    @classmethod
    def blank_if_missing(cls, value: Any) -> Any:
        """Treat null text fields as empty strings."""
        return "" if value is None else str(value)

    @field_validator("id", mode="before")
    @classmethod
    def zero_if_missing(cls, value: Any) -> Any:
        """Treat a null id as 0."""
        return 0 if value is None else value

    @property
    def inspected_on(self) -> str:
        """Inspection date without its time component."""
        return self.inspection_date[:10]

    @property
    def valid_until_on(self) -> str:
        """Expiry date without its time component."""
        return self.valid_untill[:10]


class OffenceQueryResult(BaseModel):
    """Decoded outcome of a single vehicle lookup."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status: str = ""
    total_pending_amount: Optional[str] = Field(default=None, alias="totalPendingAmount")
    pending_transactions: List[PendingOffence] = Field(default_factory=list)
    inspection_data: List[InspectionRecord] = Field(default_factory=list)

    @field_validator("pending_transactions", "inspection_data", mode="before")
    @classmethod
    def empty_if_null(cls, value: Any) -> Any:
        """Decode a null collection as an empty list."""
        return [] if value is None else value

    @field_validator("total_pending_amount", mode="before")
    @classmethod
    def amount_as_text(cls, value: Any) -> Any:
        """Keep the total as display text even if upstream sends a number."""
        return value if value is None else str(value)

    @property
    def is_success(self) -> bool:
        """Whether upstream reported a successful lookup."""
        return self.status == SUCCESS_STATUS
