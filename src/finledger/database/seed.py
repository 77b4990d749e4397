"""Chart of accounts seed data.

Asset accounts come from configuration; equity, income, expense and
liability trees are static. Every account the category mapping can return
is seeded so counter postings always satisfy the foreign key.
"""

from dataclasses import dataclass
from typing import Optional

from finledger.config import AccountConfig


@dataclass(frozen=True)
class ChartAccountSeed:
    id: str
    name: str
    account_type: str
    parent_id: Optional[str]
    is_placeholder: bool


def _seed(account_id: str, name: str, account_type: str, placeholder: bool = False) -> ChartAccountSeed:
    parent = account_id.rsplit(":", 1)[0] if ":" in account_id else None
    return ChartAccountSeed(account_id, name, account_type, parent, placeholder)


STATIC_SEEDS: list[ChartAccountSeed] = [
    # Roots
    _seed("Liabilities", "Liabilities", "liability", placeholder=True),
    _seed("Equity", "Equity", "equity", placeholder=True),
    _seed("Income", "Income", "income", placeholder=True),
    _seed("Expenses", "Expenses", "expense", placeholder=True),
    # Liabilities
    _seed("Liabilities:Business", "Business", "liability", placeholder=True),
    _seed("Liabilities:Business:CorpTaxPayable", "Corp Tax Payable", "liability"),
    _seed("Liabilities:Business:VATPayable", "VAT Payable", "liability"),
    # Equity
    _seed("Equity:OpeningBalances", "Opening Balances", "equity"),
    _seed("Equity:RetainedEarnings", "Retained Earnings", "equity"),
    _seed("Equity:Transfers", "Internal Transfers", "equity"),
    _seed("Equity:Investments", "Investments", "equity"),
    # Income
    _seed("Income:Salary", "Salary", "income"),
    _seed("Income:Dividends", "Dividends", "income"),
    _seed("Income:Interest", "Interest", "income"),
    _seed("Income:Refunds", "Refunds", "income"),
    _seed("Income:Other", "Other", "income"),
    # Food
    _seed("Expenses:Food", "Food", "expense", placeholder=True),
    _seed("Expenses:Food:Groceries", "Groceries", "expense"),
    _seed("Expenses:Food:Restaurants", "Restaurants", "expense"),
    _seed("Expenses:Food:Coffee", "Coffee", "expense"),
    _seed("Expenses:Food:Delivery", "Delivery", "expense"),
    _seed("Expenses:Food:Supplements", "Supplements", "expense"),
    # Housing
    _seed("Expenses:Housing", "Housing", "expense", placeholder=True),
    _seed("Expenses:Housing:Rent", "Rent", "expense"),
    _seed("Expenses:Housing:Utilities", "Utilities", "expense"),
    _seed("Expenses:Housing:Insurance", "Insurance", "expense"),
    _seed("Expenses:Housing:Maintenance", "Maintenance", "expense"),
    # Transport
    _seed("Expenses:Transport", "Transport", "expense", placeholder=True),
    _seed("Expenses:Transport:PublicTransport", "Public Transport", "expense"),
    _seed("Expenses:Transport:Fuel", "Fuel", "expense"),
    _seed("Expenses:Transport:Parking", "Parking", "expense"),
    _seed("Expenses:Transport:Maintenance", "Maintenance", "expense"),
    _seed("Expenses:Transport:Taxi", "Taxi", "expense"),
    _seed("Expenses:Transport:Vehicle", "Vehicle", "expense"),
    _seed("Expenses:Transport:Travel", "Travel", "expense"),
    # Business
    _seed("Expenses:Business", "Business", "expense", placeholder=True),
    _seed("Expenses:Business:Software", "Software", "expense"),
    _seed("Expenses:Business:Subscriptions", "Subscriptions", "expense"),
    _seed("Expenses:Business:Equipment", "Equipment", "expense"),
    _seed("Expenses:Business:Services", "Services", "expense"),
    _seed("Expenses:Business:Contractors", "Contractors", "expense"),
    _seed("Expenses:Business:BankFees", "Bank Fees", "expense"),
    _seed("Expenses:Business:Legal", "Legal", "expense"),
    _seed("Expenses:Business:Accounting", "Accounting", "expense"),
    _seed("Expenses:Business:Insurance", "Insurance", "expense"),
    # Entertainment
    _seed("Expenses:Entertainment", "Entertainment", "expense", placeholder=True),
    _seed("Expenses:Entertainment:Subscriptions", "Subscriptions", "expense"),
    _seed("Expenses:Entertainment:Leisure", "Leisure", "expense"),
    _seed("Expenses:Entertainment:Gaming", "Gaming", "expense"),
    # Health
    _seed("Expenses:Health", "Health", "expense", placeholder=True),
    _seed("Expenses:Health:Medical", "Medical", "expense"),
    _seed("Expenses:Health:Pharmacy", "Pharmacy", "expense"),
    _seed("Expenses:Health:Fitness", "Fitness", "expense"),
    _seed("Expenses:Health:Insurance", "Insurance", "expense"),
    # Shopping
    _seed("Expenses:Shopping", "Shopping", "expense", placeholder=True),
    _seed("Expenses:Shopping:Clothing", "Clothing", "expense"),
    _seed("Expenses:Shopping:Electronics", "Electronics", "expense"),
    _seed("Expenses:Shopping:Home", "Home", "expense"),
    _seed("Expenses:Shopping:Charity", "Charity", "expense"),
    # Personal
    _seed("Expenses:Personal", "Personal", "expense", placeholder=True),
    _seed("Expenses:Personal:Gifts", "Gifts", "expense"),
    _seed("Expenses:Personal:Education", "Education", "expense"),
    _seed("Expenses:Personal:Charity", "Charity", "expense"),
    # Taxes
    _seed("Expenses:Taxes", "Taxes", "expense", placeholder=True),
    _seed("Expenses:Taxes:IncomeTax", "Income Tax", "expense"),
    _seed("Expenses:Taxes:NationalInsurance", "National Insurance", "expense"),
    _seed("Expenses:Taxes:VAT", "VAT", "expense"),
    _seed("Expenses:Taxes:HMRC", "HMRC", "expense"),
    # Bills
    _seed("Expenses:Bills", "Bills", "expense", placeholder=True),
    _seed("Expenses:Bills:Energy", "Energy", "expense"),
    _seed("Expenses:Bills:Water", "Water", "expense"),
    _seed("Expenses:Bills:CouncilTax", "Council Tax", "expense"),
    _seed("Expenses:Bills:Internet", "Internet", "expense"),
    _seed("Expenses:Bills:Insurance", "Insurance", "expense"),
    _seed("Expenses:Bills:DirectDebits", "Direct Debits", "expense"),
    # Catch-alls
    _seed("Expenses:Other", "Other", "expense"),
    _seed("Expenses:Uncategorized", "Uncategorized", "expense"),
]

# Added by schema version 3 on databases seeded before they existed
BILL_ACCOUNT_IDS = (
    "Expenses:Bills:Energy",
    "Expenses:Bills:Water",
    "Expenses:Bills:CouncilTax",
    "Expenses:Bills:Internet",
    "Expenses:Bills:Insurance",
)


def asset_account_seeds(accounts: list[AccountConfig]) -> list[ChartAccountSeed]:
    """Build asset seeds, creating placeholder parents for each path segment.

    ``Assets:Business:Wise`` yields ``Assets`` and ``Assets:Business``
    placeholders plus the ``Assets:Business:Wise`` leaf.
    """
    seeds = [ChartAccountSeed("Assets", "Assets", "asset", None, True)]
    added = {"Assets"}

    for account in accounts:
        if account.type != "asset":
            continue
        parts = account.id.split(":")

        for i in range(1, len(parts) - 1):
            parent_id = ":".join(parts[: i + 1])
            if parent_id in added:
                continue
            grandparent_id = ":".join(parts[:i])
            seeds.append(ChartAccountSeed(parent_id, parts[i], "asset", grandparent_id, True))
            added.add(parent_id)

        if account.id in added:
            continue
        parent_id = ":".join(parts[:-1]) or None
        seeds.append(
            ChartAccountSeed(account.id, account.label or parts[-1], "asset", parent_id, False)
        )
        added.add(account.id)

    return seeds


def get_chart_of_accounts_seeds(accounts: Optional[list[AccountConfig]] = None) -> list[ChartAccountSeed]:
    """Complete seed list: configured assets followed by the static tree."""
    return asset_account_seeds(accounts or []) + STATIC_SEEDS
