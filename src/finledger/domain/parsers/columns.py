"""CSV column mappings and header validation."""

from dataclasses import dataclass
from typing import Optional

from finledger.config import BankPreset
from finledger.domain.errors import MissingBankPreset, MissingColumns, missing_bank_preset


@dataclass(frozen=True)
class ColumnMapping:
    """Header names for the semantic fields of a provider export."""

    date: str
    description: str
    amount: str
    time: Optional[str] = None
    balance: Optional[str] = None
    transaction_id: Optional[str] = None
    name: Optional[str] = None
    category: Optional[str] = None

    @property
    def required(self) -> list[str]:
        return [self.date, self.description, self.amount]


DEFAULT_COLUMNS: dict[str, ColumnMapping] = {
    "monzo": ColumnMapping(
        date="Date",
        time="Time",
        description="Description",
        amount="Amount",
        balance="Balance",
        transaction_id="Transaction ID",
        name="Name",
        category="Category",
    ),
    "wise": ColumnMapping(
        date="Date",
        description="Description",
        amount="Amount",
        balance="Running Balance",
        transaction_id="TransferWise ID",
    ),
    "vanguard": ColumnMapping(
        date="Trade Date",
        description="Transaction Description",
        amount="Net Amount",
    ),
}


def get_column_mapping(provider: str, preset: Optional[BankPreset] = None) -> ColumnMapping:
    """Resolve column names from a bank preset, falling back to defaults.

    Args:
        provider: Provider name
        preset: ``[[banks]]`` entry for the provider, if configured

    Returns:
        ColumnMapping

    Raises:
        MissingBankPreset: If there is neither a preset nor a default
    """
    if preset is not None:
        cols = preset.columns
        return ColumnMapping(
            date=cols.date,
            time=cols.time,
            description=cols.description,
            amount=cols.amount,
            balance=cols.balance,
            transaction_id=cols.transaction_id,
            name=cols.name,
            category=cols.category,
        )

    defaults = DEFAULT_COLUMNS.get(provider)
    if defaults is None:
        raise MissingBankPreset(missing_bank_preset(provider))
    return defaults


def validate_csv_headers(provider: str, headers: list[str], columns: ColumnMapping) -> None:
    """Check that the date, description and amount columns are present.

    Raises:
        MissingColumns: Listing every missing required column
    """
    present = set(headers)
    missing = [col for col in columns.required if col not in present]
    if missing:
        raise MissingColumns(provider, missing, headers)
