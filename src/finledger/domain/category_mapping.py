"""Map transaction categories and descriptions to counter accounts.

Every non-transfer transaction is booked against an income or expense
account chosen here. Categories come from sanitization rules or the
provider export; when they are missing the description is matched against
keyword patterns.
"""

import re
from typing import Optional

TRANSFERS_ACCOUNT = "Equity:Transfers"
REFUNDS_ACCOUNT = "Income:Refunds"
DEFAULT_INCOME_ACCOUNT = "Income:Other"
UNCATEGORIZED_ACCOUNT = "Expenses:Uncategorized"

EXACT_CATEGORY_TO_ACCOUNT: dict[str, str] = {
    # Internal transfers (not income or expense)
    "transfer": TRANSFERS_ACCOUNT,
    # Income
    "salary": "Income:Salary",
    "dividends": "Income:Dividends",
    "interest": "Income:Interest",
    "refund": REFUNDS_ACCOUNT,
    # Expenses
    "food": "Expenses:Food:Groceries",
    "groceries": "Expenses:Food:Groceries",
    "restaurants": "Expenses:Food:Restaurants",
    "transport": "Expenses:Transport:PublicTransport",
    "utilities": "Expenses:Housing:Utilities",
    "rent": "Expenses:Housing:Rent",
    "subscriptions": "Expenses:Entertainment:Subscriptions",
    "businesssubs": "Expenses:Business:Subscriptions",
    "software": "Expenses:Business:Software",
    # Business
    "tax": "Expenses:Taxes:VAT",
    "government": "Expenses:Taxes:VAT",
    "hmrctax": "Expenses:Taxes:HMRC",
    "insurance": "Expenses:Business:Insurance",
    "office": "Expenses:Business:Equipment",
    "vehicle": "Expenses:Transport:Vehicle",
    "professional": "Expenses:Business:Services",
    "contractors": "Expenses:Business:Contractors",
    "services": "Expenses:Business:Services",
    # Personal
    "fitness": "Expenses:Health:Fitness",
    "healthinsurance": "Expenses:Health:Insurance",
    "supplements": "Expenses:Food:Supplements",
    "health": "Expenses:Health:Medical",
    "shopping": "Expenses:Shopping:Home",
    "entertainment": "Expenses:Entertainment:Leisure",
    "travel": "Expenses:Transport:Travel",
    "charity": "Expenses:Shopping:Charity",
    "cafe": "Expenses:Food:Restaurants",
    "parking": "Expenses:Transport:Parking",
    "fuel": "Expenses:Transport:Vehicle",
    # Bills
    "energy": "Expenses:Bills:Energy",
    "water": "Expenses:Bills:Water",
    "counciltax": "Expenses:Bills:CouncilTax",
    "internet": "Expenses:Bills:Internet",
    "broadband": "Expenses:Bills:Internet",
    "bills": "Expenses:Bills:DirectDebits",
    "directdebit": "Expenses:Bills:DirectDebits",
    # Card verification holds are zero-value, not real spending
    "cardcheck": TRANSFERS_ACCOUNT,
    "card check": TRANSFERS_ACCOUNT,
    "investment": "Equity:Investments",
    "unclear": "Expenses:Other",
    "other": "Expenses:Other",
}

_I = re.IGNORECASE

DESCRIPTION_PATTERNS: list[tuple[re.Pattern, str]] = [
    (re.compile(r"\b(pot|round.?up|savings|vault|flex|topped.?up)\b", _I), TRANSFERS_ACCOUNT),
    (
        re.compile(r"\b(tesco|sainsbury'?s?|asda|morrisons|waitrose|aldi|lidl|co-op|marks.?spencer|m&s)\b", _I),
        "Expenses:Food:Groceries",
    ),
    (
        re.compile(r"\b(uber.?eats|deliveroo|just.?eat|dominos|pizza|mcdonalds|kfc|nandos|wagamama|pret)\b", _I),
        "Expenses:Food:Delivery",
    ),
    (re.compile(r"\b(restaurant|cafe|starbucks|costa|nero|coffee)\b", _I), "Expenses:Food:Coffee"),
    (
        re.compile(r"\b(tfl|oyster|trainline|national.?rail|uber(?!.?eats)|bolt|lyft)\b", _I),
        "Expenses:Transport:PublicTransport",
    ),
    (re.compile(r"\b(shell|bp|esso|texaco|jet|petrol|diesel)\b", _I), "Expenses:Transport:Fuel"),
    (re.compile(r"\b(ncp|parking|parkopedia)\b", _I), "Expenses:Transport:Parking"),
    (
        re.compile(r"\b(spotify|netflix|youtube|disney|amazon.?prime|apple.?tv|hbo|paramount)\b", _I),
        "Expenses:Entertainment:Subscriptions",
    ),
    (re.compile(r"\b(apple\.com/bill|google.?play|app.?store)\b", _I), "Expenses:Entertainment:Subscriptions"),
    (re.compile(r"\b(aws|amazon.?web|digitalocean|linode|vultr|hetzner)\b", _I), "Expenses:Business:Software"),
    (
        re.compile(r"\b(github|gitlab|bitbucket|vercel|netlify|cloudflare|heroku)\b", _I),
        "Expenses:Business:Software",
    ),
    (
        re.compile(r"\b(notion|figma|slack|zoom|microsoft|google.?workspace|dropbox)\b", _I),
        "Expenses:Business:Software",
    ),
    (re.compile(r"\b(openai|anthropic|claude)\b", _I), "Expenses:Business:Software"),
    (
        re.compile(r"\b(british.?gas|edf|octopus|bulb|ovo|eon|thames.?water|electric|gas.?bill)\b", _I),
        "Expenses:Housing:Utilities",
    ),
    (re.compile(r"\b(council.?tax|tv.?licence)\b", _I), "Expenses:Housing:Utilities"),
    (
        re.compile(r"\b(virgin.?media|bt|sky|plusnet|ee|vodafone|three|o2)\b", _I),
        "Expenses:Housing:Utilities",
    ),
    (re.compile(r"\b(pharmacy|boots|superdrug|lloyds.?pharmacy)\b", _I), "Expenses:Health:Pharmacy"),
    (re.compile(r"\b(gym|puregym|david.?lloyd|nuffield|virgin.?active)\b", _I), "Expenses:Health:Fitness"),
    (re.compile(r"\b(nhs|doctor|dentist|hospital|clinic)\b", _I), "Expenses:Health:Medical"),
    (re.compile(r"\b(amazon(?!.?web|.?prime)|ebay|etsy|aliexpress)\b", _I), "Expenses:Shopping:Home"),
    (
        re.compile(r"\b(apple|currys|argos|john.?lewis|asos|zara|h&m|uniqlo|next)\b", _I),
        "Expenses:Shopping:Clothing",
    ),
    (re.compile(r"\b(ikea|habitat|made\.com|wayfair)\b", _I), "Expenses:Shopping:Home"),
    (
        re.compile(r"\b(bank.?fee|account.?fee|monthly.?fee|overdraft|interest.?charge)\b", _I),
        "Expenses:Business:BankFees",
    ),
    (re.compile(r"\bHMRC.*VAT\b", _I), "Expenses:Taxes:VAT"),
    (
        re.compile(r"\b(health.?insurance|private.?health|medical.?insurance)\b", _I),
        "Expenses:Health:Insurance",
    ),
    # Income
    (re.compile(r"\b(salary|payroll|wages)\b", _I), "Income:Salary"),
    (re.compile(r"\b(dividend|distribution)\b", _I), "Income:Dividends"),
    (re.compile(r"\b(interest.?paid|savings.?interest)\b", _I), "Income:Interest"),
    (re.compile(r"\b(refund|rebate|cashback)\b", _I), REFUNDS_ACCOUNT),
]

TRANSFER_PATTERN = re.compile(
    r"\b(pot|round.?up|savings|vault|flex|topped.?up|money.?transfer|internal|transfer)\b", _I
)

# Expense categories that become refunds when they appear as inflows
EXPENSE_CATEGORIES = frozenset(
    {
        "groceries",
        "shopping",
        "food",
        "transport",
        "subscriptions",
        "businesssubs",
        "software",
        "utilities",
        "health",
        "personal",
        "entertainment",
        "travel",
        "bills",
        "directdebit",
        "energy",
        "water",
        "counciltax",
        "internet",
        "broadband",
        "fitness",
        "healthinsurance",
        "supplements",
        "insurance",
        "vehicle",
        "tax",
        "government",
        "hmrctax",
        "professional",
        "contractors",
        "charity",
        "cafe",
        "parking",
        "fuel",
        "other",
    }
)


def map_to_expense_account(category: Optional[str], description: str) -> str:
    """Pick an expense (or equity) account for an outflow.

    Args:
        category: Category from rules or the provider, if any
        description: Clean or raw description

    Returns:
        Chart account id, ``Expenses:Uncategorized`` when nothing matches
    """
    if category:
        mapped = EXACT_CATEGORY_TO_ACCOUNT.get(category.lower())
        if mapped:
            return mapped

    for pattern, account_id in DESCRIPTION_PATTERNS:
        if pattern.search(description):
            return account_id

    return UNCATEGORIZED_ACCOUNT


def map_to_income_account(category: Optional[str], description: str) -> str:
    """Pick an income account for an inflow; ``Income:Other`` by default."""
    if category:
        mapped = EXACT_CATEGORY_TO_ACCOUNT.get(category.lower())
        if mapped and mapped.startswith("Income:"):
            return mapped

    for pattern, account_id in DESCRIPTION_PATTERNS:
        if account_id.startswith("Income:") and pattern.search(description):
            return account_id

    return DEFAULT_INCOME_ACCOUNT


def map_category_to_account(category: Optional[str], description: str, is_inflow: bool) -> str:
    """Choose the counter account for a non-transfer transaction.

    Transfer categories and transfer-like descriptions go to
    ``Equity:Transfers`` before any income/expense routing. Inflows carrying
    an expense category are refunds.

    Args:
        category: Category from rules or the provider, if any
        description: Clean or raw description
        is_inflow: True when the asset leg is positive

    Returns:
        Chart account id for the balancing posting
    """
    lower_category = category.lower() if category else None

    if lower_category == "transfer":
        return TRANSFERS_ACCOUNT

    if TRANSFER_PATTERN.search(description):
        return TRANSFERS_ACCOUNT

    if is_inflow and lower_category in EXPENSE_CATEGORIES:
        return REFUNDS_ACCOUNT

    if is_inflow:
        return map_to_income_account(category, description)
    return map_to_expense_account(category, description)
