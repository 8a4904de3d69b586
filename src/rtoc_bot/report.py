"""Telegram report rendering for offence lookups."""

from __future__ import annotations

from .models import InspectionRecord, OffenceQueryResult, PendingOffence

RULE = "━━━━━━━━━━━━━━━━━━━━━"
NO_RESULTS = "❌ No results found."
NO_PENDING = "✅ No pending offences."
AMOUNT_PLACEHOLDER = "N/A"


def format_report(vehicle: str, result: OffenceQueryResult) -> str:
    """Build the Markdown report sent to the operator for one vehicle."""
    lines: list[str] = [
        f"🚗 *RTOC Report for {vehicle}*",
        RULE,
    ]

    if not result.is_success:
        lines.append(NO_RESULTS)
        return "\n".join(lines)

    if result.pending_transactions:
        total = result.total_pending_amount if result.total_pending_amount is not None else AMOUNT_PLACEHOLDER
        lines.append(f"⚠️ *Pending Offences: {len(result.pending_transactions)}* (Total: {total} TZS)")
        lines.append("")
        for index, offence in enumerate(result.pending_transactions, start=1):
            lines.extend(format_offence(index, offence))
            lines.append("")
    else:
        lines.append(NO_PENDING)
        lines.append("")

    if result.inspection_data:
        lines.append(f"🔍 *Inspection Records: {len(result.inspection_data)}*")
        lines.append("")
        for index, record in enumerate(result.inspection_data, start=1):
            lines.extend(format_inspection(index, record))
            lines.append("")

    return "\n".join(lines).rstrip("\n")


def format_offence(index: int, offence: PendingOffence) -> list[str]:
    """Numbered block for one pending offence."""
    return [
        f"*{index}.* {offence.offence}",
        f"   📍 {offence.location}",
        f"   💰 Charge: {offence.charge} | Penalty: {offence.penalty}",
        f"   🔖 Ref: {offence.reference}",
        f"   📅 Issued: {offence.issued_date}",
        f"   📋 Status: {offence.status}",
    ]


def format_inspection(index: int, record: InspectionRecord) -> list[str]:
    """Numbered block for one inspection record; remarks only when present."""
    block = [
        f"*{index}.* {record.reason_en} — *{record.finalresult}*",
        f"   📅 {record.inspected_on} → {record.valid_until_on}",
        f"   📍 {record.region}, {record.district}",
    ]
    if record.remarks:
        block.append(f"   📝 {record.remarks}")
    return block


def format_failure(vehicle: str, error: Exception) -> str:
    """Message sent when a vehicle could not be checked."""
    return f"❌ Failed to check *{vehicle}*: {error}"
